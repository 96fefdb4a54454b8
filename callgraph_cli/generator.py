"""Graph generator: the engine tying outlines, relations and renderers together.

Outlines and relations are streamed in by the host in any order; rendering is
a pull operation that rebuilds tables, resolves edges (repairing outlines on
the way) and serializes the result. Nothing derived is cached between
renders.

A generator is not thread-safe. Rendering can mutate outlines, so callers
sharing one instance across threads must serialize every call (see
:class:`callgraph_cli.session.SharedGenerator`).
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional, Set, Tuple

from .clusters import build_clusters
from .graph_export import render_dot, render_mermaid
from .graph_model import Graph, GraphBuilder, RelationKind
from .languages import Language, language_handler
from .models import (
    Cluster,
    DocumentSymbol,
    Edge,
    IncomingCall,
    Location,
    NodeId,
    Outline,
    OutgoingCall,
    Position,
    SymbolLocation,
)
from .outline_store import OutlineStore
from .relations import RelationCollector
from .tables import Table, displayed_node_ids

logger = logging.getLogger(__name__)


class GraphGenerator:
    """Collect provider data and render it as DOT, Mermaid or a structured graph."""

    def __init__(self, root: str = "", lang: str = "default") -> None:
        self.root = root.rstrip("/") if root not in ("", "/") else root
        self.language: Language = language_handler(lang)
        self.outlines = OutlineStore(exclude=self.language.should_exclude)
        self.relations = RelationCollector()
        self.highlights: Dict[int, Set[Tuple[int, int]]] = {}

    # ------------------------------------------------------------------
    # Ingest
    # ------------------------------------------------------------------

    def should_filter_out_file(self, path: str) -> bool:
        return self.language.should_exclude(path)

    def add_file(self, path: str, symbols: List[DocumentSymbol]) -> bool:
        added = self.outlines.add_file(path, symbols)
        if not added:
            logger.debug("Rejected outline for %s", path)
        return added

    def add_incoming_calls(self, path: str, position: Position, calls: Iterable[IncomingCall]) -> None:
        self.relations.add_incoming_calls(SymbolLocation(path, Position(*position)), calls)

    def add_outgoing_calls(self, path: str, position: Position, calls: Iterable[OutgoingCall]) -> None:
        self.relations.add_outgoing_calls(SymbolLocation(path, Position(*position)), calls)

    def add_interface_implementations(
        self, path: str, position: Position, locations: Iterable[Location]
    ) -> None:
        self.relations.add_implementations(
            SymbolLocation(path, Position(*position)),
            [location.symbol_location for location in locations],
        )

    def highlight(self, path: str, position: Position) -> None:
        outline = self.outlines.get(path)
        if outline is None:
            return
        self.highlights.setdefault(outline.id, set()).add((position[0], position[1]))

    def resolve(self, path: str, position: Position) -> Optional[NodeId]:
        return self.outlines.resolve(SymbolLocation(path, Position(*position)))

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def generate_dot_source(self) -> str:
        tables, edges = self._resolve_graph()
        clusters = self.clusters(tables)
        return render_dot(tables.values(), edges, clusters)

    def generate_mermaid_source(self) -> str:
        tables, edges = self._resolve_graph()
        return render_mermaid(tables.values(), edges, self.outlines.paths(), self.root)

    def clusters(self, tables: Dict[int, Table]) -> List[Cluster]:
        paths = self.outlines.paths()
        return build_clusters({file_id: paths[file_id] for file_id in tables}, self.root)

    def _table(self, outline: Outline) -> Table:
        table = self.language.file_repr(outline)
        cells = self.highlights.get(outline.id)
        if cells:
            table.highlight_cells(cells)
        return table

    def _resolve_graph(self) -> Tuple[Dict[int, Table], Set[Edge]]:
        tables = {outline.id: self._table(outline) for outline in self.outlines}
        displayed = displayed_node_ids(tables.values())

        resolution = self.relations.resolve(self.outlines, displayed)
        edges = resolution.edges

        if resolution.repaired_paths:
            for path in resolution.repaired_paths:
                outline = self.outlines.get(path)
                tables[outline.id] = self._table(outline)
            # repaired symbols hidden by the language filter leave no node
            displayed = displayed_node_ids(tables.values())
            edges = {e for e in edges if e.source in displayed and e.target in displayed}

        tables = {file_id: table for file_id, table in tables.items() if table.sections}
        logger.info(
            "Resolved %d edges across %d files (%d repaired)",
            len(edges), len(tables), len(resolution.repaired_paths),
        )
        return tables, edges

    # ------------------------------------------------------------------
    # Structured view
    # ------------------------------------------------------------------

    def generate_graph(self) -> Graph:
        builder = GraphBuilder()
        for outline in self.outlines:
            builder.add_file(outline.path, outline.symbols, file_id=outline.id)

        resolve = self.outlines.resolve
        for callee, calls in self.relations.incoming.items():
            target = resolve(callee)
            for call in calls:
                source = resolve(call.caller.location)
                if source is not None and target is not None:
                    builder.add_relation(source, target, RelationKind.CALL)
        for caller, calls in self.relations.outgoing.items():
            source = resolve(caller)
            for call in calls:
                target = resolve(call.callee.location)
                if source is not None and target is not None:
                    builder.add_relation(source, target, RelationKind.CALL)
        for interface, implementors in self.relations.implementations.items():
            target = resolve(interface)
            for location in implementors:
                source = resolve(location)
                if source is not None and target is not None:
                    builder.add_relation(source, target, RelationKind.IMPLEMENTS)
        return builder.build()
