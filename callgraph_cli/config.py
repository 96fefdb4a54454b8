"""Configuration paths and built-in render defaults for callgraph-cli."""

from __future__ import annotations

import os
from pathlib import Path

BASE_DIR = Path(os.environ.get("CALLGRAPH_HOME", str(Path.home() / ".callgraph"))).expanduser()
CONFIG_FILE = BASE_DIR / "config.toml"

OUTPUT_FORMATS = ("dot", "mermaid", "json")

# Built-in render defaults; ~/.callgraph/config.toml [render] overrides them
DEFAULT_LANGUAGE = "default"
DEFAULT_FORMAT = "dot"
DEFAULT_ROOT = ""

# Concurrency guard used by session.SharedGenerator
RETRY_ATTEMPTS = 3
LOCK_TIMEOUT = 0.05


def ensure_base_dirs() -> None:
    """Create the base directory for local configuration if needed."""
    BASE_DIR.mkdir(parents=True, exist_ok=True)
