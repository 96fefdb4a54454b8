"""Indexed store of per-file symbol outlines.

File ids are dense, 1-based indices into an arena of outlines; a path map
points at the arena slot. Outlines are never removed, so ids never drift.
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, Iterator, List, Optional

from .models import DocumentSymbol, NodeId, Outline, Position, SymbolLocation

logger = logging.getLogger(__name__)


class OutlineStore:
    """Own one symbol tree per file path."""

    def __init__(self, exclude: Optional[Callable[[str], bool]] = None) -> None:
        self._outlines: List[Outline] = []
        self._index: Dict[str, int] = {}
        self._exclude = exclude or (lambda path: False)

    def __len__(self) -> int:
        return len(self._outlines)

    def __contains__(self, path: object) -> bool:
        return path in self._index

    def __iter__(self) -> Iterator[Outline]:
        return iter(self._outlines)

    def add_file(self, path: str, symbols: List[DocumentSymbol]) -> bool:
        if path in self._index:
            logger.debug("Outline for %s already stored, ignoring", path)
            return False
        if self._exclude(path):
            logger.debug("Outline for %s excluded by language filter", path)
            return False

        outline = Outline(id=len(self._outlines) + 1, path=path, symbols=symbols)
        self._index[path] = len(self._outlines)
        self._outlines.append(outline)
        return True

    def get(self, path: str) -> Optional[Outline]:
        slot = self._index.get(path)
        return None if slot is None else self._outlines[slot]

    def by_id(self, file_id: int) -> Optional[Outline]:
        if 1 <= file_id <= len(self._outlines):
            return self._outlines[file_id - 1]
        return None

    def paths(self) -> Dict[int, str]:
        return {outline.id: outline.path for outline in self._outlines}

    # ------------------------------------------------------------------
    # Location resolution
    # ------------------------------------------------------------------

    def node_id(self, location: SymbolLocation) -> Optional[NodeId]:
        """Map *location* to a node id by file lookup alone."""
        outline = self.get(location.path)
        if outline is None:
            return None
        return NodeId(outline.id, location.position.line, location.position.character)

    def resolve(self, location: SymbolLocation) -> Optional[NodeId]:
        """Like :meth:`node_id`, but only when a symbol in the tree is anchored there."""
        outline = self.get(location.path)
        if outline is None:
            return None
        if not _has_anchor(outline.symbols, location.position):
            return None
        return NodeId(outline.id, location.position.line, location.position.character)


def _has_anchor(symbols: List[DocumentSymbol], position: Position) -> bool:
    for symbol in symbols:
        if symbol.selection_range.start == position:
            return True
        if _has_anchor(symbol.children, position):
            return True
    return False
