"""Repair outlines that miss nested symbols referenced only by call relations.

Some language servers leave closures and nested functions out of the document
outline while still reporting them as callers in the call hierarchy. When such
a caller falls inside a function or method we know about, it is inserted into
that container's children so the edge has somewhere to start.
"""

from __future__ import annotations

import logging
from bisect import bisect_left
from typing import List

from .models import CallHierarchyItem, DocumentSymbol, SymbolKind

logger = logging.getLogger(__name__)

CONTAINER_KINDS = (SymbolKind.FUNCTION, SymbolKind.METHOD)


def try_insert_symbol(item: CallHierarchyItem, symbols: List[DocumentSymbol]) -> bool:
    """Insert *item* as a nested symbol inside *symbols*, mutating the list in place.

    Returns True only when the item was inserted below at least one
    function/method container. A top-level miss, a non-function container or
    a partial overlap with a sibling leaves the outline untouched.
    """
    start, end = item.range.start, item.range.end
    nested = False

    while True:
        starts = [symbol.range.start for symbol in symbols]
        index = bisect_left(starts, start)

        if index < len(symbols) and starts[index] == start:
            # already present at this level; nothing to insert
            return False

        if index > 0:
            previous = symbols[index - 1]
            if previous.range.end > end:
                if previous.kind not in CONTAINER_KINDS:
                    logger.debug(
                        "Not inserting %s: enclosing %s is a %s",
                        item.name, previous.name, previous.kind.name,
                    )
                    return False
                nested = True
                symbols = previous.children
                continue
            if previous.range.end > start:
                logger.debug("Not inserting %s: overlaps %s", item.name, previous.name)
                return False

        if not nested:
            return False

        adopted: List[DocumentSymbol] = []
        while index < len(symbols) and symbols[index].range.start < end:
            if not item.range.contains(symbols[index].range):
                logger.debug("Not inserting %s: overlaps %s", item.name, symbols[index].name)
                symbols[index:index] = adopted
                return False
            adopted.append(symbols.pop(index))

        symbol = item.to_symbol()
        symbol.children = adopted
        symbols.insert(index, symbol)
        logger.debug("Inserted nested symbol %s (%d adopted)", item.name, len(adopted))
        return True
