"""Embedding layer: load provider payloads and guard a shared generator.

A *session* document is the JSON a host (editor extension, LSP bridge, script)
dumps after querying a language server. It uses LSP field names::

    {
      "root": "/work/project",
      "language": "Go",
      "files": [{"path": "...", "symbols": [DocumentSymbol, ...]}],
      "incomingCalls": [{"path": "...", "position": {...}, "calls": [{"from": item, "fromRanges": [...]}]}],
      "outgoingCalls": [{"path": "...", "position": {...}, "calls": [{"to": item, "fromRanges": [...]}]}],
      "implementations": [{"path": "...", "position": {...}, "locations": [{"uri": "...", "range": {...}}]}],
      "highlights": [{"path": "...", "position": {...}}]
    }

Individual malformed entries are skipped with a warning; only a document that
is not a JSON object (or whose sections are not lists) raises
:class:`SessionError`.
"""

from __future__ import annotations

import json
import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple
from urllib.parse import unquote, urlparse

from . import config
from .generator import GraphGenerator
from .graph_model import Graph
from .models import (
    CallHierarchyItem,
    DocumentSymbol,
    IncomingCall,
    Location,
    OutgoingCall,
    Position,
    Range,
    SymbolKind,
)

logger = logging.getLogger(__name__)


class SessionError(ValueError):
    """The session document cannot be used at all."""


class EngineBusyError(RuntimeError):
    """A shared generator stayed locked through every retry."""


# ===================================================================
# Parsing LSP-shaped values
# ===================================================================

def parse_position(data: Any) -> Position:
    if isinstance(data, (list, tuple)):
        line, character = data
        return Position(int(line), int(character))
    return Position(int(data["line"]), int(data["character"]))


def parse_range(data: Dict[str, Any]) -> Range:
    return Range(parse_position(data["start"]), parse_position(data["end"]))


def parse_path(data: Dict[str, Any]) -> str:
    """Take ``path`` verbatim, or the path component of a ``file://`` ``uri``."""
    if "path" in data:
        return str(data["path"])
    uri = data["uri"]
    if isinstance(uri, dict):
        return str(uri["path"])
    parsed = urlparse(uri)
    if parsed.scheme == "file":
        return unquote(parsed.path)
    return str(uri)


def parse_symbol(data: Dict[str, Any]) -> DocumentSymbol:
    rng = parse_range(data["range"])
    children = [parse_symbol(child) for child in data.get("children") or []]
    children.sort(key=lambda s: s.range.start)
    return DocumentSymbol(
        name=str(data["name"]),
        kind=SymbolKind.parse(data["kind"]),
        range=rng,
        selection_range=parse_range(data["selectionRange"]) if "selectionRange" in data else rng,
        detail=data.get("detail"),
        children=children,
    )


def parse_symbols(items: List[Dict[str, Any]]) -> List[DocumentSymbol]:
    symbols = [parse_symbol(item) for item in items]
    symbols.sort(key=lambda s: s.range.start)
    return symbols


def parse_item(data: Dict[str, Any]) -> CallHierarchyItem:
    rng = parse_range(data["range"])
    return CallHierarchyItem(
        name=str(data["name"]),
        kind=SymbolKind.parse(data["kind"]),
        path=parse_path(data),
        range=rng,
        selection_range=parse_range(data["selectionRange"]) if "selectionRange" in data else rng,
        detail=data.get("detail"),
    )


def parse_incoming_call(data: Dict[str, Any]) -> IncomingCall:
    return IncomingCall(
        caller=parse_item(data["from"]),
        from_ranges=[parse_range(r) for r in data.get("fromRanges") or []],
    )


def parse_outgoing_call(data: Dict[str, Any]) -> OutgoingCall:
    return OutgoingCall(
        callee=parse_item(data["to"]),
        from_ranges=[parse_range(r) for r in data.get("fromRanges") or []],
    )


def parse_location(data: Dict[str, Any]) -> Location:
    return Location(path=parse_path(data), range=parse_range(data["range"]))


# ===================================================================
# Session documents
# ===================================================================

@dataclass
class Session:
    root: str = ""
    language: str = "default"
    files: List[Tuple[str, List[DocumentSymbol]]] = field(default_factory=list)
    incoming: List[Tuple[str, Position, List[IncomingCall]]] = field(default_factory=list)
    outgoing: List[Tuple[str, Position, List[OutgoingCall]]] = field(default_factory=list)
    implementations: List[Tuple[str, Position, List[Location]]] = field(default_factory=list)
    highlights: List[Tuple[str, Position]] = field(default_factory=list)
    skipped: int = 0


_PARSE_ERRORS = (AttributeError, KeyError, TypeError, ValueError)


def parse_session(document: Any) -> Session:
    if not isinstance(document, dict):
        raise SessionError("Session document must be a JSON object")

    session = Session(
        root=str(document.get("root") or ""),
        language=str(document.get("language") or "default"),
    )

    def entries(key: str) -> List[Any]:
        value = document.get(key) or []
        if not isinstance(value, list):
            raise SessionError(f"'{key}' must be a list")
        return value

    def each(key: str, convert: Callable[[Any], Any], sink: List[Any]) -> None:
        for index, entry in enumerate(entries(key)):
            try:
                sink.append(convert(entry))
            except _PARSE_ERRORS as exc:
                session.skipped += 1
                logger.warning("Skipping malformed %s[%d]: %r", key, index, exc)

    each("files", lambda e: (str(e["path"]), parse_symbols(e.get("symbols") or [])), session.files)
    each(
        "incomingCalls",
        lambda e: (str(e["path"]), parse_position(e["position"]), [parse_incoming_call(c) for c in e["calls"]]),
        session.incoming,
    )
    each(
        "outgoingCalls",
        lambda e: (str(e["path"]), parse_position(e["position"]), [parse_outgoing_call(c) for c in e["calls"]]),
        session.outgoing,
    )
    each(
        "implementations",
        lambda e: (str(e["path"]), parse_position(e["position"]), [parse_location(loc) for loc in e["locations"]]),
        session.implementations,
    )
    each("highlights", lambda e: (str(e["path"]), parse_position(e["position"])), session.highlights)
    return session


def load_session(path: Path) -> Session:
    try:
        document = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise SessionError(f"{path} is not valid JSON: {exc}") from exc
    return parse_session(document)


def build_generator(
    session: Session,
    lang: Optional[str] = None,
    root: Optional[str] = None,
) -> GraphGenerator:
    """Feed every part of *session* into a fresh generator.

    *lang* and *root* override the values recorded in the document.
    """
    generator = GraphGenerator(root=root if root is not None else session.root,
                               lang=lang or session.language)
    rejected = 0
    for path, symbols in session.files:
        if not generator.add_file(path, symbols):
            rejected += 1
    if rejected:
        logger.warning("%d file(s) rejected (duplicate or filtered out)", rejected)

    for path, position, calls in session.incoming:
        generator.add_incoming_calls(path, position, calls)
    for path, position, calls in session.outgoing:
        generator.add_outgoing_calls(path, position, calls)
    for path, position, locations in session.implementations:
        generator.add_interface_implementations(path, position, locations)
    for path, position in session.highlights:
        generator.highlight(path, position)
    return generator


# ===================================================================
# Shared access
# ===================================================================

class SharedGenerator:
    """Serialize access to one generator from several threads.

    Every call takes the lock with a short timeout and retries a bounded
    number of times before giving up with :class:`EngineBusyError`.
    """

    def __init__(
        self,
        generator: GraphGenerator,
        attempts: int = config.RETRY_ATTEMPTS,
        timeout: float = config.LOCK_TIMEOUT,
    ) -> None:
        self._generator = generator
        self._lock = threading.Lock()
        self.attempts = attempts
        self.timeout = timeout

    @contextmanager
    def exclusive(self, operation: str = "access") -> Iterator[GraphGenerator]:
        for attempt in range(1, self.attempts + 1):
            if self._lock.acquire(timeout=self.timeout):
                try:
                    yield self._generator
                finally:
                    self._lock.release()
                return
            logger.warning("Generator busy during %s (attempt %d/%d)", operation, attempt, self.attempts)
        raise EngineBusyError(f"Generator still busy after {self.attempts} attempts: {operation}")

    def add_file(self, path: str, symbols: List[DocumentSymbol]) -> bool:
        with self.exclusive("add_file") as generator:
            return generator.add_file(path, symbols)

    def add_incoming_calls(self, path: str, position: Position, calls: List[IncomingCall]) -> None:
        with self.exclusive("add_incoming_calls") as generator:
            generator.add_incoming_calls(path, position, calls)

    def add_outgoing_calls(self, path: str, position: Position, calls: List[OutgoingCall]) -> None:
        with self.exclusive("add_outgoing_calls") as generator:
            generator.add_outgoing_calls(path, position, calls)

    def add_interface_implementations(self, path: str, position: Position, locations: List[Location]) -> None:
        with self.exclusive("add_interface_implementations") as generator:
            generator.add_interface_implementations(path, position, locations)

    def highlight(self, path: str, position: Position) -> None:
        with self.exclusive("highlight") as generator:
            generator.highlight(path, position)

    def generate_dot_source(self) -> str:
        with self.exclusive("generate_dot_source") as generator:
            return generator.generate_dot_source()

    def generate_mermaid_source(self) -> str:
        with self.exclusive("generate_mermaid_source") as generator:
            return generator.generate_mermaid_source()

    def generate_graph(self) -> Graph:
        with self.exclusive("generate_graph") as generator:
            return generator.generate_graph()
