"""Configuration manager for callgraph-cli using TOML files."""

from __future__ import annotations

import logging
from typing import Any, Dict

import toml

from . import config

logger = logging.getLogger(__name__)

RENDER_KEYS = ("language", "format", "root")


def default_render_config() -> Dict[str, Any]:
    return {
        "language": config.DEFAULT_LANGUAGE,
        "format": config.DEFAULT_FORMAT,
        "root": config.DEFAULT_ROOT,
    }


def load_full_config() -> Dict[str, Any]:
    """Load the entire TOML config (all sections)."""
    if not config.CONFIG_FILE.exists():
        return {}
    try:
        with open(config.CONFIG_FILE, "r", encoding="utf-8") as f:
            return toml.load(f)
    except (OSError, toml.TomlDecodeError) as exc:
        logger.warning("Ignoring unreadable config %s: %s", config.CONFIG_FILE, exc)
        return {}


def load_config() -> Dict[str, Any]:
    """Load render defaults from the ``[render]`` section.

    Returns:
        Built-in defaults overlaid with whatever keys the file sets.
    """
    merged = default_render_config()
    section = load_full_config().get("render", {})
    merged.update({k: v for k, v in section.items() if k in RENDER_KEYS})
    return merged


def _save_full_config(data: Dict[str, Any]) -> bool:
    """Write entire config dict to TOML file, preserving all sections."""
    config.ensure_base_dirs()
    try:
        with open(config.CONFIG_FILE, "w", encoding="utf-8") as f:
            toml.dump(data, f)
        return True
    except OSError as exc:
        logger.warning("Could not write config %s: %s", config.CONFIG_FILE, exc)
        return False


def save_render_config(**values: Any) -> bool:
    """Save render defaults, keeping keys not given and other sections.

    Args:
        values: any of ``language``, ``format``, ``root``; ``None`` values are skipped.

    Returns:
        True if saved successfully.
    """
    unknown = set(values) - set(RENDER_KEYS)
    if unknown:
        raise ValueError(f"Unknown render setting(s): {', '.join(sorted(unknown))}")

    data = load_full_config()
    section = data.setdefault("render", {})
    section.update({k: v for k, v in values.items() if v is not None})
    return _save_full_config(data)


def clear_render_config() -> bool:
    """Remove ``[render]`` section from config, resetting to defaults."""
    data = load_full_config()
    data.pop("render", None)
    return _save_full_config(data)
