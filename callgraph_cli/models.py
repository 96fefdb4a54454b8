"""Core data models shared by the outline store, relation collector and renderers.

The shapes follow the Language Server Protocol types a code-intelligence
provider hands us (document symbols, call hierarchy items, locations), plus
the identities the graph is built from (node ids, edges).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import List, NamedTuple, Optional


class Position(NamedTuple):
    """Zero-based line/character pair, ordered lexicographically."""

    line: int
    character: int


@dataclass(frozen=True)
class Range:
    start: Position
    end: Position

    def contains(self, other: "Range") -> bool:
        return self.start <= other.start and other.end <= self.end


class SymbolKind(IntEnum):
    FILE = 1
    MODULE = 2
    NAMESPACE = 3
    PACKAGE = 4
    CLASS = 5
    METHOD = 6
    PROPERTY = 7
    FIELD = 8
    CONSTRUCTOR = 9
    ENUM = 10
    INTERFACE = 11
    FUNCTION = 12
    VARIABLE = 13
    CONSTANT = 14
    STRING = 15
    NUMBER = 16
    BOOLEAN = 17
    ARRAY = 18
    OBJECT = 19
    KEY = 20
    NULL = 21
    ENUM_MEMBER = 22
    STRUCT = 23
    EVENT = 24
    OPERATOR = 25
    TYPE_PARAMETER = 26

    @classmethod
    def parse(cls, value: "int | str") -> "SymbolKind":
        """Accept either the LSP number or a name such as ``enum_member`` / ``EnumMember``."""
        if isinstance(value, int):
            return cls(value)
        if not isinstance(value, str):
            raise ValueError(f"Unknown symbol kind: {value!r}")
        text = value.strip()
        if text.isdigit():
            return cls(int(text))
        normalized = "".join(ch for ch in text if ch.isalnum()).lower()
        for member in cls:
            if member.name.replace("_", "").lower() == normalized:
                return member
        raise ValueError(f"Unknown symbol kind: {value!r}")


@dataclass
class DocumentSymbol:
    """One entry of a file outline. ``children`` are sorted by ``range.start``."""

    name: str
    kind: SymbolKind
    range: Range
    selection_range: Range
    detail: Optional[str] = None
    children: List["DocumentSymbol"] = field(default_factory=list)


@dataclass(frozen=True)
class SymbolLocation:
    """A (file path, position) reference waiting to be resolved into a node id."""

    path: str
    position: Position


class NodeId(NamedTuple):
    file_id: int
    line: int
    character: int

    @property
    def port(self) -> str:
        return f"{self.line}_{self.character}"

    def __str__(self) -> str:
        return f"{self.file_id}:{self.port}"


@dataclass
class CallHierarchyItem:
    name: str
    kind: SymbolKind
    path: str
    range: Range
    selection_range: Range
    detail: Optional[str] = None

    @property
    def location(self) -> SymbolLocation:
        return SymbolLocation(self.path, self.selection_range.start)

    def to_symbol(self) -> DocumentSymbol:
        return DocumentSymbol(
            name=self.name,
            kind=self.kind,
            range=self.range,
            selection_range=self.selection_range,
            detail=self.detail,
        )


@dataclass
class IncomingCall:
    caller: CallHierarchyItem
    from_ranges: List[Range] = field(default_factory=list)


@dataclass
class OutgoingCall:
    callee: CallHierarchyItem
    from_ranges: List[Range] = field(default_factory=list)


@dataclass
class Location:
    path: str
    range: Range

    @property
    def symbol_location(self) -> SymbolLocation:
        return SymbolLocation(self.path, self.range.start)


@dataclass
class Outline:
    """A file's symbol tree as stored by :class:`~callgraph_cli.outline_store.OutlineStore`."""

    id: int
    path: str
    symbols: List[DocumentSymbol]


class EdgeKind(str, Enum):
    PLAIN = "plain"
    IMPLEMENTS = "implements"


@dataclass(frozen=True)
class Edge:
    source: NodeId
    target: NodeId
    kind: EdgeKind = EdgeKind.PLAIN


@dataclass
class Cluster:
    """Directory grouping of file nodes.

    ``title`` is the path segment relative to the parent cluster (empty for the
    project root), ``path`` the full root-relative directory, e.g. ``/b``.
    """

    title: str
    path: str = "/"
    node_ids: List[int] = field(default_factory=list)
    children: List["Cluster"] = field(default_factory=list)
