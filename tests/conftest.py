"""Pytest configuration and fixtures for callgraph-cli tests."""

import json
from pathlib import Path
from typing import Callable, List, Optional, Tuple

import pytest

from callgraph_cli.generator import GraphGenerator
from callgraph_cli.models import (
    CallHierarchyItem,
    DocumentSymbol,
    IncomingCall,
    OutgoingCall,
    Position,
    Range,
    SymbolKind,
)

Span = Tuple[int, int]


def _range(start: Span, end: Span) -> Range:
    return Range(Position(*start), Position(*end))


@pytest.fixture(autouse=True)
def _isolated_config(tmp_path: Path, monkeypatch):
    """Point the config directory at a temp dir so tests never touch ~/.callgraph."""
    base_dir = tmp_path / "callgraph-home"
    monkeypatch.setattr("callgraph_cli.config.BASE_DIR", base_dir)
    monkeypatch.setattr("callgraph_cli.config.CONFIG_FILE", base_dir / "config.toml")


@pytest.fixture
def make_symbol() -> Callable[..., DocumentSymbol]:
    """Build a DocumentSymbol from (line, char) spans; selection range defaults to the start."""

    def _make(
        name: str,
        kind: SymbolKind = SymbolKind.FUNCTION,
        start: Span = (0, 0),
        end: Span = (0, 10),
        children: Optional[List[DocumentSymbol]] = None,
    ) -> DocumentSymbol:
        return DocumentSymbol(
            name=name,
            kind=kind,
            range=_range(start, end),
            selection_range=_range(start, (start[0], start[1] + len(name))),
            children=children or [],
        )

    return _make


@pytest.fixture
def make_item() -> Callable[..., CallHierarchyItem]:
    def _make(
        name: str,
        path: str,
        start: Span,
        end: Span,
        kind: SymbolKind = SymbolKind.FUNCTION,
    ) -> CallHierarchyItem:
        return CallHierarchyItem(
            name=name,
            kind=kind,
            path=path,
            range=_range(start, end),
            selection_range=_range(start, (start[0], start[1] + len(name))),
        )

    return _make


@pytest.fixture
def two_function_generator(make_symbol) -> GraphGenerator:
    """One file with `caller` (lines 1-3) and `callee` (lines 5-7)."""
    generator = GraphGenerator(root="/proj", lang="default")
    generator.add_file(
        "/proj/src/main.py",
        [
            make_symbol("caller", start=(1, 0), end=(3, 0)),
            make_symbol("callee", start=(5, 0), end=(7, 0)),
        ],
    )
    return generator


@pytest.fixture
def incoming(make_item) -> Callable[..., IncomingCall]:
    def _make(name: str, path: str, start: Span, end: Span, kind=SymbolKind.FUNCTION) -> IncomingCall:
        return IncomingCall(caller=make_item(name, path, start, end, kind), from_ranges=[_range(start, end)])

    return _make


@pytest.fixture
def outgoing(make_item) -> Callable[..., OutgoingCall]:
    def _make(name: str, path: str, start: Span, end: Span, kind=SymbolKind.FUNCTION) -> OutgoingCall:
        return OutgoingCall(callee=make_item(name, path, start, end, kind), from_ranges=[])

    return _make


def _lsp_range(start: Span, end: Span) -> dict:
    return {
        "start": {"line": start[0], "character": start[1]},
        "end": {"line": end[0], "character": end[1]},
    }


@pytest.fixture
def session_document() -> dict:
    """A small LSP-shaped session: two Go files, one test file, a call and an implementation."""
    return {
        "root": "/work/shop",
        "language": "Go",
        "files": [
            {
                "path": "/work/shop/cart/cart.go",
                "symbols": [
                    {
                        "name": "Checkout",
                        "kind": 12,
                        "range": _lsp_range((10, 0), (30, 1)),
                        "selectionRange": _lsp_range((10, 5), (10, 13)),
                    },
                    {
                        "name": "Store",
                        "kind": 11,
                        "range": _lsp_range((2, 0), (6, 1)),
                        "selectionRange": _lsp_range((2, 5), (2, 10)),
                        "children": [
                            {
                                "name": "Save",
                                "kind": 6,
                                "range": _lsp_range((3, 1), (3, 20)),
                                "selectionRange": _lsp_range((3, 1), (3, 5)),
                            }
                        ],
                    },
                ],
            },
            {
                "path": "/work/shop/db/sql.go",
                "symbols": [
                    {
                        "name": "SQLStore.Save",
                        "kind": "method",
                        "range": _lsp_range((4, 0), (9, 1)),
                        "selectionRange": _lsp_range((4, 17), (4, 21)),
                    }
                ],
            },
            {"path": "/work/shop/cart/cart_test.go", "symbols": []},
        ],
        "incomingCalls": [
            {
                "path": "/work/shop/db/sql.go",
                "position": {"line": 4, "character": 17},
                "calls": [
                    {
                        "from": {
                            "name": "Checkout",
                            "kind": 12,
                            "uri": "file:///work/shop/cart/cart.go",
                            "range": _lsp_range((10, 0), (30, 1)),
                            "selectionRange": _lsp_range((10, 5), (10, 13)),
                        },
                        "fromRanges": [_lsp_range((20, 2), (20, 12))],
                    }
                ],
            },
            {"path": "/work/shop/db/sql.go", "position": {"line": 1}},
        ],
        "implementations": [
            {
                "path": "/work/shop/cart/cart.go",
                "position": {"line": 3, "character": 1},
                "locations": [
                    {"uri": "file:///work/shop/db/sql.go", "range": _lsp_range((4, 17), (4, 21))}
                ],
            }
        ],
        "highlights": [{"path": "/work/shop/cart/cart.go", "position": [10, 5]}],
    }


@pytest.fixture
def session_file(tmp_path: Path, session_document: dict) -> Path:
    path = tmp_path / "session.json"
    path.write_text(json.dumps(session_document), encoding="utf-8")
    return path
