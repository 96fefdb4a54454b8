"""Relation stores and render-time edge resolution.

Relations arrive keyed by the location of the symbol they were requested
for. On every render they are resolved against the node ids currently on
display, filtered and deduplicated into an edge set. Incoming-call callers
that are missing from the outline get a chance to be repaired in; nothing else
does.

Resolution runs in three passes so outlines are never mutated while the
relation stores are being walked:

1. collect repair requests (read only),
2. apply the repairs (exclusive mutation of the affected outlines),
3. build edges against the displayed set extended with the repaired ids.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Set

from .models import (
    CallHierarchyItem,
    Edge,
    EdgeKind,
    IncomingCall,
    NodeId,
    OutgoingCall,
    SymbolLocation,
)
from .outline_store import OutlineStore
from .repair import try_insert_symbol

logger = logging.getLogger(__name__)


@dataclass
class EdgeResolution:
    edges: Set[Edge] = field(default_factory=set)
    repaired_paths: Set[str] = field(default_factory=set)
    inserted: Set[NodeId] = field(default_factory=set)


class RelationCollector:
    """Hold raw call and implementation relations until a render asks for edges."""

    def __init__(self) -> None:
        self.incoming: Dict[SymbolLocation, List[IncomingCall]] = {}
        self.outgoing: Dict[SymbolLocation, List[OutgoingCall]] = {}
        self.implementations: Dict[SymbolLocation, List[SymbolLocation]] = {}

    # ------------------------------------------------------------------
    # Ingest (last write wins per key)
    # ------------------------------------------------------------------

    def add_incoming_calls(self, callee: SymbolLocation, calls: Iterable[IncomingCall]) -> None:
        self.incoming[callee] = list(calls)

    def add_outgoing_calls(self, caller: SymbolLocation, calls: Iterable[OutgoingCall]) -> None:
        self.outgoing[caller] = list(calls)

    def add_implementations(
        self, interface: SymbolLocation, implementors: Iterable[SymbolLocation]
    ) -> None:
        self.implementations[interface] = list(implementors)

    def __len__(self) -> int:
        return len(self.incoming) + len(self.outgoing) + len(self.implementations)

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    def resolve(self, store: OutlineStore, displayed: Set[NodeId]) -> EdgeResolution:
        """Turn the stored relations into edges between displayed nodes.

        May insert nested symbols into outlines of *store*; the paths touched
        are reported in ``repaired_paths`` so their tables can be rebuilt.
        """
        result = EdgeResolution()

        requests = self._repair_requests(store, displayed)
        for node, item in requests.items():
            outline = store.get(item.path)
            if outline is None:
                continue
            if try_insert_symbol(item, outline.symbols):
                result.inserted.add(node)
                result.repaired_paths.add(item.path)
            else:
                logger.debug("Dropping caller %s at %s: repair failed", item.name, node)

        visible = displayed | result.inserted
        result.edges.update(self._incoming_edges(store, displayed, visible))
        result.edges.update(self._outgoing_edges(store, displayed))
        result.edges.update(self._implementation_edges(store, displayed))
        return result

    def _repair_requests(
        self, store: OutlineStore, displayed: Set[NodeId]
    ) -> Dict[NodeId, CallHierarchyItem]:
        requests: Dict[NodeId, CallHierarchyItem] = {}
        for callee, calls in self.incoming.items():
            target = store.node_id(callee)
            if target is None or target not in displayed:
                continue
            for call in calls:
                source = store.node_id(call.caller.location)
                if source is None or source in displayed or source in requests:
                    continue
                requests[source] = call.caller
        return requests

    def _incoming_edges(
        self, store: OutlineStore, displayed: Set[NodeId], visible: Set[NodeId]
    ) -> Iterable[Edge]:
        for callee, calls in self.incoming.items():
            target = store.node_id(callee)
            if target is None or target not in displayed:
                continue
            for call in calls:
                source = store.node_id(call.caller.location)
                if source is not None and source in visible:
                    yield Edge(source, target)

    def _outgoing_edges(self, store: OutlineStore, displayed: Set[NodeId]) -> Iterable[Edge]:
        for caller, calls in self.outgoing.items():
            source = store.node_id(caller)
            if source is None or source not in displayed:
                continue
            for call in calls:
                target = store.node_id(call.callee.location)
                if target is not None and target in displayed:
                    yield Edge(source, target)
                else:
                    logger.debug("Dropping callee %s of %s: not displayed", call.callee.name, source)

    def _implementation_edges(self, store: OutlineStore, displayed: Set[NodeId]) -> Iterable[Edge]:
        for interface, implementors in self.implementations.items():
            target = store.node_id(interface)
            if target is None or target not in displayed:
                continue
            for location in implementors:
                source = store.node_id(location)
                if source is not None and source in displayed:
                    yield Edge(source, target, EdgeKind.IMPLEMENTS)
