"""Structured graph view: the same outlines and relations as plain data.

Unlike the text renderers this view performs no outline repair; it reflects
the outlines exactly as they are stored. It backs the symbol, file and kind
searches exposed by the CLI and can be dumped as JSON.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from .models import DocumentSymbol, NodeId, Range, SymbolKind


class RelationKind(str, Enum):
    CALL = "call"
    IMPLEMENTS = "implements"
    INHERIT = "inherit"


class MatchType(str, Enum):
    SYMBOL_NAME = "symbol_name"
    SYMBOL_KIND = "symbol_kind"
    FILE_PATH = "file_path"


@dataclass
class GraphSymbol:
    name: str
    kind: SymbolKind
    range: Range
    global_position: NodeId
    children: List["GraphSymbol"] = field(default_factory=list)


@dataclass
class GraphFile:
    id: int
    path: str
    symbols: List[GraphSymbol] = field(default_factory=list)


@dataclass
class Relation:
    source: NodeId
    target: NodeId
    kind: RelationKind


@dataclass
class SearchResult:
    file_id: int
    file_path: str
    symbol_name: str
    symbol_kind: SymbolKind
    global_position: NodeId
    match_type: MatchType
    range: Range


@dataclass
class FileSearchResult:
    file_id: int
    file_path: str
    match_type: MatchType = MatchType.FILE_PATH


@dataclass
class Graph:
    files: List[GraphFile] = field(default_factory=list)
    relations: List[Relation] = field(default_factory=list)

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    def search_symbols(self, query: str, case_sensitive: bool = False) -> List[SearchResult]:
        """Every symbol, nested ones included, whose name contains *query*."""
        needle = query if case_sensitive else query.lower()
        results: List[SearchResult] = []
        for graph_file in self.files:
            for symbol in _walk(graph_file.symbols):
                name = symbol.name if case_sensitive else symbol.name.lower()
                if needle in name:
                    results.append(_result(graph_file, symbol, MatchType.SYMBOL_NAME))
        return results

    def search_files(self, query: str, case_sensitive: bool = False) -> List[FileSearchResult]:
        needle = query if case_sensitive else query.lower()
        return [
            FileSearchResult(file_id=f.id, file_path=f.path)
            for f in self.files
            if needle in (f.path if case_sensitive else f.path.lower())
        ]

    def search_by_symbol_kind(self, kind: SymbolKind) -> List[SearchResult]:
        return [
            _result(graph_file, symbol, MatchType.SYMBOL_KIND)
            for graph_file in self.files
            for symbol in _walk(graph_file.symbols)
            if symbol.kind == kind
        ]

    def symbol_relations(self, position: NodeId) -> List[Relation]:
        return [r for r in self.relations if r.source == position or r.target == position]

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        return {
            "files": [
                {"id": f.id, "path": f.path, "symbols": [_symbol_dict(s) for s in f.symbols]}
                for f in self.files
            ],
            "relations": [
                {"from": _position_dict(r.source), "to": _position_dict(r.target), "kind": r.kind.value}
                for r in self.relations
            ],
        }


class GraphBuilder:
    """Accumulate files and relations into a :class:`Graph`."""

    def __init__(self) -> None:
        self._files: List[GraphFile] = []
        self._relations: List[Relation] = []
        self._seen: set = set()

    def add_file(self, path: str, symbols: List[DocumentSymbol], file_id: Optional[int] = None) -> int:
        if file_id is None:
            file_id = len(self._files) + 1
        self._files.append(GraphFile(id=file_id, path=path, symbols=_convert(file_id, symbols)))
        return file_id

    def add_relation(self, source: NodeId, target: NodeId, kind: RelationKind) -> None:
        key = (source, target)
        if key in self._seen:
            return
        self._seen.add(key)
        self._relations.append(Relation(source, target, kind))

    def build(self) -> Graph:
        return Graph(files=list(self._files), relations=list(self._relations))


def _convert(file_id: int, symbols: List[DocumentSymbol]) -> List[GraphSymbol]:
    return [
        GraphSymbol(
            name=s.name,
            kind=s.kind,
            range=s.range,
            global_position=NodeId(file_id, *s.selection_range.start),
            children=_convert(file_id, s.children),
        )
        for s in symbols
    ]


def _walk(symbols: List[GraphSymbol]):
    for symbol in symbols:
        yield symbol
        yield from _walk(symbol.children)


def _result(graph_file: GraphFile, symbol: GraphSymbol, match_type: MatchType) -> SearchResult:
    return SearchResult(
        file_id=graph_file.id,
        file_path=graph_file.path,
        symbol_name=symbol.name,
        symbol_kind=symbol.kind,
        global_position=symbol.global_position,
        match_type=match_type,
        range=symbol.range,
    )


def _position_dict(node: NodeId) -> Dict[str, int]:
    return {"fileId": node.file_id, "line": node.line, "character": node.character}


def _range_dict(rng: Range) -> Dict[str, Any]:
    return {
        "start": {"line": rng.start.line, "character": rng.start.character},
        "end": {"line": rng.end.line, "character": rng.end.character},
    }


def _symbol_dict(symbol: GraphSymbol) -> Dict[str, Any]:
    return {
        "name": symbol.name,
        "kind": int(symbol.kind),
        "range": _range_dict(symbol.range),
        "globalPosition": _position_dict(symbol.global_position),
        "children": [_symbol_dict(c) for c in symbol.children],
    }
