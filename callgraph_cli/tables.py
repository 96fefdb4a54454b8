"""Render tables: the per-file node trees both renderers serialize."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Iterator, List, Optional, Set, Tuple

from .models import NodeId, Position, SymbolKind


class CssClass(str, Enum):
    MODULE = "module"
    FUNCTION = "function"
    METHOD = "method"
    CONSTRUCTOR = "constructor"
    INTERFACE = "interface"
    TYPE = "type"
    PROPERTY = "property"
    CELL = "cell"
    CLICKABLE = "clickable"
    HIGHLIGHT = "highlight"
    IMPL = "impl"


@dataclass
class CellStyle:
    rounded: bool = False
    border: Optional[int] = None
    icon: Optional[str] = None
    classes: List[CssClass] = field(default_factory=list)

    def add_class(self, css_class: CssClass) -> None:
        if css_class not in self.classes:
            self.classes.append(css_class)


@dataclass
class Cell:
    anchor: Position
    title: str
    style: CellStyle = field(default_factory=CellStyle)
    symbol_kind: Optional[SymbolKind] = None
    children: List["Cell"] = field(default_factory=list)

    @property
    def port(self) -> str:
        return f"{self.anchor.line}_{self.anchor.character}"

    def walk(self) -> Iterator["Cell"]:
        yield self
        for child in self.children:
            yield from child.walk()


@dataclass
class Table:
    """One file container: ``id`` is the file id, ``sections`` its top-level cells."""

    id: int
    title: str
    path: Optional[str] = None
    sections: List[Cell] = field(default_factory=list)

    def cells(self) -> Iterator[Cell]:
        for section in self.sections:
            yield from section.walk()

    def node_ids(self) -> Set[NodeId]:
        return {NodeId(self.id, cell.anchor.line, cell.anchor.character) for cell in self.cells()}

    def highlight_cells(self, anchors: Iterable[Tuple[int, int]]) -> None:
        wanted = {tuple(anchor) for anchor in anchors}
        for cell in self.cells():
            if tuple(cell.anchor) in wanted:
                cell.style.add_class(CssClass.HIGHLIGHT)


def displayed_node_ids(tables: Iterable[Table]) -> Set[NodeId]:
    ids: Set[NodeId] = set()
    for table in tables:
        ids |= table.node_ids()
    return ids
