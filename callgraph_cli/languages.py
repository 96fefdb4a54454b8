"""Per-ecosystem strategies deciding which files and symbols take part in a graph.

Each strategy answers two questions for the engine: should a file be left out
entirely (``should_exclude``), and how should a symbol look once rendered
(``presentation``). Strategies are a closed set selected once by name through
:func:`language_handler`.
"""

from __future__ import annotations

import logging
from pathlib import PurePosixPath
from typing import Dict, List, Type

from .models import DocumentSymbol, Outline, SymbolKind
from .tables import Cell, CellStyle, CssClass, Table

logger = logging.getLogger(__name__)


# ===================================================================
# Base strategy
# ===================================================================

class Language:
    """Shared behaviour; subclasses override the hooks they need."""

    name = "default"

    _HIDDEN_KINDS = {SymbolKind.CONSTANT, SymbolKind.VARIABLE, SymbolKind.ENUM_MEMBER}

    def should_exclude(self, path: str) -> bool:
        return False

    def filter_symbol(self, symbol: DocumentSymbol) -> bool:
        """Return True when *symbol* should appear as a cell."""
        return symbol.kind not in self._HIDDEN_KINDS

    def presentation(self, symbol: DocumentSymbol) -> CellStyle:
        kind = symbol.kind
        if kind == SymbolKind.MODULE:
            return CellStyle(rounded=True, border=0, classes=[CssClass.MODULE, CssClass.CELL])
        if kind == SymbolKind.FUNCTION:
            return CellStyle(rounded=True, classes=[CssClass.FUNCTION, CssClass.CLICKABLE])
        if kind == SymbolKind.METHOD:
            return CellStyle(rounded=True, classes=[CssClass.METHOD, CssClass.CLICKABLE])
        if kind == SymbolKind.CONSTRUCTOR:
            return CellStyle(rounded=True, classes=[CssClass.CONSTRUCTOR, CssClass.CLICKABLE])
        if kind == SymbolKind.INTERFACE:
            return CellStyle(border=0, classes=[CssClass.INTERFACE, CssClass.CELL])
        if kind in _TYPE_ICONS:
            return CellStyle(icon=_TYPE_ICONS[kind], classes=[CssClass.TYPE, CssClass.CELL])
        if kind in _PROPERTY_ICONS:
            return CellStyle(icon=_PROPERTY_ICONS[kind], classes=[CssClass.PROPERTY, CssClass.CELL])
        return CellStyle()

    # ------------------------------------------------------------------
    # Table construction
    # ------------------------------------------------------------------

    def file_repr(self, outline: Outline) -> Table:
        return Table(
            id=outline.id,
            title=PurePosixPath(outline.path).name,
            path=outline.path,
            sections=self._cells(outline.symbols),
        )

    def symbol_repr(self, symbol: DocumentSymbol) -> Cell:
        return Cell(
            anchor=symbol.selection_range.start,
            title=symbol.name,
            style=self.presentation(symbol),
            symbol_kind=symbol.kind,
            children=self._cells(symbol.children),
        )

    def _cells(self, symbols: List[DocumentSymbol]) -> List[Cell]:
        return [self.symbol_repr(s) for s in symbols if self.filter_symbol(s)]


_TYPE_ICONS = {
    SymbolKind.CLASS: "C",
    SymbolKind.STRUCT: "S",
    SymbolKind.ENUM: "E",
    SymbolKind.TYPE_PARAMETER: "T",
}

_PROPERTY_ICONS = {
    SymbolKind.FIELD: "f",
    SymbolKind.PROPERTY: "p",
}


# ===================================================================
# Variants
# ===================================================================

class DefaultLanguage(Language):
    name = "default"


class Go(Language):
    name = "go"

    def should_exclude(self, path: str) -> bool:
        return path.endswith("_test.go")


class Rust(Language):
    name = "rust"

    def filter_symbol(self, symbol: DocumentSymbol) -> bool:
        if symbol.kind == SymbolKind.MODULE and symbol.name == "tests":
            return False
        return super().filter_symbol(symbol)


class Jsts(Language):
    """JavaScript / TypeScript: anonymous and callback functions are noise."""

    name = "jsts"

    def filter_symbol(self, symbol: DocumentSymbol) -> bool:
        if symbol.kind == SymbolKind.FUNCTION:
            return not (symbol.name.endswith(" callback") or symbol.name == "<function>")
        return super().filter_symbol(symbol)


LANGUAGES: Dict[str, Type[Language]] = {
    "default": DefaultLanguage,
    "go": Go,
    "rust": Rust,
    "jsts": Jsts,
    "javascript": Jsts,
    "typescript": Jsts,
    "javascript jsx": Jsts,
    "typescript jsx": Jsts,
}


def language_handler(name: str) -> Language:
    """Pick the strategy for a language name; unknown names get the default."""
    cls = LANGUAGES.get((name or "").strip().lower())
    if cls is None:
        logger.debug("No language strategy for '%s', using default", name)
        cls = DefaultLanguage
    return cls()
