"""Graph export helpers for Graphviz DOT and Mermaid flowchart outputs."""

from __future__ import annotations

import html
import re
from collections import defaultdict
from pathlib import Path, PurePosixPath
from typing import Dict, Iterable, List, Mapping, Sequence

from .clusters import cluster_path
from .models import Cluster, Edge, EdgeKind
from .tables import Cell, CssClass, Table

# Palette
BG_COLOR = "#f5fffa"
SELECTED_COLOR = "#4fe1f4"
EDGE_COLOR = "#548f9e"
CLUSTER_LABEL_BG_COLOR = "#f8f9fa"
NODE_BG_COLOR = "#f4f5f1"
SYMBOL_DEFAULT_BORDER_COLOR = "#6c757d"
INTERFACE_BG_COLOR = "#fff8dc"
MODULE_BG_COLOR = "#ffebcd"
CONSTRUCTOR_BG_COLOR = "#ffdab9"
METHOD_BG_COLOR = "#fff8c5"
FUNCTION_BG_COLOR = "#e8f5e8"
STRUCT_BG_COLOR = "#ddf4ff"

MERMAID_CLASS_DEFS = {
    CssClass.MODULE: MODULE_BG_COLOR,
    CssClass.FUNCTION: FUNCTION_BG_COLOR,
    CssClass.METHOD: METHOD_BG_COLOR,
    CssClass.CONSTRUCTOR: CONSTRUCTOR_BG_COLOR,
    CssClass.INTERFACE: INTERFACE_BG_COLOR,
    CssClass.TYPE: STRUCT_BG_COLOR,
    CssClass.HIGHLIGHT: SELECTED_COLOR,
}


# ===================================================================
# Escaping
# ===================================================================

def escape_html(text: str) -> str:
    return html.escape(text, quote=True)


def unescape_html(text: str) -> str:
    return html.unescape(text)


def escape_mermaid(text: str) -> str:
    """Backslash-escape backslashes, quotes and square brackets."""
    return re.sub(r'([\\"\[\]])', r"\\\1", text)


def unescape_mermaid(text: str) -> str:
    return re.sub(r"\\(.)", r"\1", text)


def _esc(text: str) -> str:
    return text.replace("\\", "\\\\").replace('"', '\\"')


# ===================================================================
# DOT (HTML-like tables)
# ===================================================================

def render_dot(tables: Iterable[Table], edges: Iterable[Edge], clusters: Sequence[Cluster]) -> str:
    lines = ["digraph {"]
    lines.append("    graph [")
    lines.append('        rankdir = "LR"')
    lines.append("        ranksep = 2.0")
    lines.append('        fontname = "Arial"')
    lines.append(f'        bgcolor = "{BG_COLOR}"')
    lines.append("    ];")
    lines.append("    node [")
    lines.append('        fontsize = "16"')
    lines.append('        fontname = "Arial"')
    lines.append('        shape = "plaintext"')
    lines.append('        style = "rounded, filled"')
    lines.append(f'        fillcolor = "{NODE_BG_COLOR}"')
    lines.append(f'        color = "{SYMBOL_DEFAULT_BORDER_COLOR}"')
    lines.append("    ];")
    lines.append("    edge [")
    lines.append('        label = " "')
    lines.append(f'        color = "{EDGE_COLOR}"')
    lines.append("    ];")
    lines.append("")

    for table in sorted(tables, key=lambda t: t.id):
        lines.extend(_dot_table(table))

    lines.extend(_dot_clusters(clusters, indent="    "))

    for edge in sorted(edges, key=_edge_key):
        lines.append("    " + _dot_edge(edge))

    lines.append("}")
    return "\n".join(lines) + "\n"


def _dot_table(table: Table) -> List[str]:
    href = escape_html(table.path or table.title)
    lines = [f'    "{table.id}" [id="{table.id}", label=<']
    lines.append('        <TABLE BORDER="0" CELLBORDER="1" CELLSPACING="8" CELLPADDING="4">')
    lines.append(
        f'        <TR><TD WIDTH="230" BORDER="0" CELLPADDING="6" HREF="{href}">'
        f"{escape_html(table.title)}</TD></TR>"
    )
    for cell in table.sections:
        lines.extend(_dot_cell(table.id, cell, indent="        "))
    lines.append('        <TR><TD CELLSPACING="0" HEIGHT="1" WIDTH="1" FIXEDSIZE="TRUE" STYLE="invis"></TD></TR>')
    lines.append("        </TABLE>")
    lines.append("    >];")
    return lines


def _dot_cell(table_id: int, cell: Cell, indent: str) -> List[str]:
    style = cell.style
    attrs = []
    if style.border is not None:
        attrs.append(f'BORDER="{style.border}"')
    if style.rounded:
        attrs.append('STYLE="ROUNDED"')
    highlighted = CssClass.HIGHLIGHT in style.classes
    if highlighted and not cell.children:
        attrs.append(f'BGCOLOR="{SELECTED_COLOR}"')
    attrs.append(_dot_href(cell))

    title = escape_html(cell.title)
    if style.icon:
        title = f"<B>{escape_html(style.icon)}</B>  {title}"

    anchor = f"{table_id}:{cell.port}"
    if not cell.children:
        return [f'{indent}<TR><TD PORT="{cell.port}" ID="{anchor}" {" ".join(attrs)}>{title}</TD></TR>']

    # one BGCOLOR per element; expat rejects duplicate attributes
    bgcolor = SELECTED_COLOR if highlighted else FUNCTION_BG_COLOR
    lines = [f'{indent}<TR><TD BORDER="0" CELLPADDING="0">']
    lines.append(
        f'{indent}<TABLE ID="{anchor}" CELLSPACING="8" CELLPADDING="4" CELLBORDER="1" '
        f'{" ".join(attrs)} BGCOLOR="{bgcolor}">'
    )
    lines.append(f'{indent}    <TR><TD PORT="{cell.port}" BORDER="0">{title}</TD></TR>')
    for child in cell.children:
        lines.extend(_dot_cell(table_id, child, indent + "    "))
    lines.append(f"{indent}</TABLE>")
    lines.append(f"{indent}</TD></TR>")
    return lines


def _dot_href(cell: Cell) -> str:
    if cell.symbol_kind is not None:
        return f'href="{int(cell.symbol_kind)}"'
    if cell.style.classes:
        return 'href="{}"'.format(".".join(c.value for c in cell.style.classes))
    return ""


def _dot_clusters(clusters: Sequence[Cluster], indent: str) -> List[str]:
    lines: List[str] = []
    for cluster in clusters:
        name = _esc(cluster.path)
        lines.append(f'{indent}subgraph "cluster_{name}" {{')
        lines.append(f'{indent}    label = "{name}";')
        lines.append(f'{indent}    style = "filled";')
        lines.append(f'{indent}    fillcolor = "{CLUSTER_LABEL_BG_COLOR}";')
        lines.append(f'{indent}    color = "{SYMBOL_DEFAULT_BORDER_COLOR}";')
        if cluster.node_ids:
            lines.append(f"{indent}    " + " ".join(f'"{i}"' for i in cluster.node_ids) + ";")
        lines.extend(_dot_clusters(cluster.children, indent + "    "))
        lines.append(f"{indent}}};")
    return lines


def _dot_edge(edge: Edge) -> str:
    source, target = edge.source, edge.target
    attrs = [
        f'id="{source} -> {target}"',
        f'datafrom="{source}"',
        f'datato="{target}"',
    ]
    if edge.kind == EdgeKind.IMPLEMENTS:
        attrs.append(f'class="{CssClass.IMPL.value}"')
    return (
        f'{source.file_id}:"{source.port}" -> {target.file_id}:"{target.port}" '
        f"[{', '.join(attrs)}];"
    )


def _edge_key(edge: Edge):
    return (tuple(edge.source), tuple(edge.target), edge.kind.value)


# ===================================================================
# Mermaid flowchart
# ===================================================================

def render_mermaid(
    tables: Iterable[Table],
    edges: Iterable[Edge],
    paths: Mapping[int, str],
    root: str = "",
) -> str:
    """Two-level flowchart: directory subgraphs holding file subgraphs holding cells."""
    lines = ["flowchart LR"]

    directories: Dict[str, List[Table]] = defaultdict(list)
    orphans: List[Table] = []
    for table in sorted(tables, key=lambda t: t.id):
        path = paths.get(table.id)
        if path is None:
            orphans.append(table)
        else:
            directories[str(PurePosixPath(path).parent)].append(table)

    for dir_index, directory in enumerate(sorted(directories)):
        title = cluster_path(_relative(PurePosixPath(directory), root).parts)
        lines.append(f'    subgraph dir{dir_index} ["{escape_mermaid(title)}"]')
        for file_index, table in enumerate(directories[directory]):
            file_title = str(_relative(PurePosixPath(paths[table.id]), root))
            lines.append(f'        subgraph file{dir_index}_{file_index} ["{escape_mermaid(file_title)}"]')
            for cell in table.sections:
                _mermaid_cell(table.id, cell, lines, indent="            ")
            lines.append("        end")
        lines.append("    end")

    for table in orphans:
        for cell in table.sections:
            _mermaid_cell(table.id, cell, lines, indent="    ")

    for edge in sorted(edges, key=_edge_key):
        arrow = "-.->" if edge.kind == EdgeKind.IMPLEMENTS else "-->"
        lines.append(f"    {_mermaid_id(edge.source)} {arrow} {_mermaid_id(edge.target)}")

    for css_class, color in MERMAID_CLASS_DEFS.items():
        lines.append(f"    classDef {css_class.value} fill:{color}")

    return "\n".join(lines) + "\n"


def _relative(path: PurePosixPath, root: str) -> PurePosixPath:
    if root:
        try:
            return path.relative_to(root)
        except ValueError:
            pass
    return path


def _mermaid_id(node) -> str:
    return f"{node[0]}_{node[1]}_{node[2]}"


def _mermaid_cell(table_id: int, cell: Cell, lines: List[str], indent: str) -> None:
    node_id = f"{table_id}_{cell.anchor.line}_{cell.anchor.character}"
    line = f'{indent}{node_id}["{escape_mermaid(cell.title)}"]'
    if cell.style.classes:
        css = CssClass.HIGHLIGHT if CssClass.HIGHLIGHT in cell.style.classes else cell.style.classes[0]
        line += f":::{css.value}"
    lines.append(line)
    for child in cell.children:
        _mermaid_cell(table_id, child, lines, indent)


# ===================================================================
# File export
# ===================================================================

def export_graph(source: str, output_file: Path) -> None:
    output_file.parent.mkdir(parents=True, exist_ok=True)
    output_file.write_text(source, encoding="utf-8")
