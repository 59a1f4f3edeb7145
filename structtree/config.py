"""Persistent JSON config holding user-saved ignore patterns.

All access is defensive: malformed or missing config falls back to an empty
pattern list, and write failures never abort a command.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from platformdirs import user_config_dir

logger = logging.getLogger(__name__)

APP_NAME = "structtree"
CONFIG_FILENAME = "config.json"
CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME
IGNORE_PATTERNS_KEY = "ignore_patterns"


def load_config() -> dict[str, object]:
    """Load the persisted JSON config object.

    Returns an empty dict when the file is missing, unreadable, malformed, or
    does not decode to a top-level JSON object.
    """
    try:
        data = json.loads(CONFIG_PATH.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return {}
    except (OSError, ValueError) as exc:
        logger.debug("ignoring unreadable config %s: %s", CONFIG_PATH, exc)
        return {}
    return data if isinstance(data, dict) else {}


def save_config(data: dict[str, object]) -> bool:
    """Persist config data as pretty-printed JSON; return whether it was written."""
    try:
        CONFIG_PATH.parent.mkdir(parents=True, exist_ok=True)
        CONFIG_PATH.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
    except (OSError, TypeError, ValueError) as exc:
        logger.warning("could not write config %s: %s", CONFIG_PATH, exc)
        return False
    return True


def load_ignore_patterns() -> list[str]:
    """Return saved glob patterns in insertion order.

    Non-string and blank entries are dropped.
    """
    value = load_config().get(IGNORE_PATTERNS_KEY)
    if not isinstance(value, list):
        return []
    return [item.strip() for item in value if isinstance(item, str) and item.strip()]


def _save_ignore_patterns(patterns: list[str]) -> bool:
    config = load_config()
    config[IGNORE_PATTERNS_KEY] = patterns
    return save_config(config)


def add_ignore_patterns(raw_patterns: list[str]) -> list[str]:
    """Append new patterns (comma lists allowed), skipping duplicates.

    Returns the patterns that were actually added.
    """
    patterns = load_ignore_patterns()
    added: list[str] = []
    for raw in raw_patterns:
        for piece in raw.split(","):
            piece = piece.strip()
            if not piece or piece in patterns:
                continue
            patterns.append(piece)
            added.append(piece)
    if added:
        _save_ignore_patterns(patterns)
    return added


def remove_ignore_pattern(pattern: str) -> bool:
    """Remove ``pattern`` from the saved list; return whether it was present."""
    patterns = load_ignore_patterns()
    if pattern not in patterns:
        return False
    patterns.remove(pattern)
    _save_ignore_patterns(patterns)
    return True


def clear_ignore_patterns() -> int:
    """Drop every saved pattern and return how many there were."""
    count = len(load_ignore_patterns())
    if count:
        _save_ignore_patterns([])
    return count


__all__ = [
    "APP_NAME",
    "CONFIG_PATH",
    "load_config",
    "save_config",
    "load_ignore_patterns",
    "add_ignore_patterns",
    "remove_ignore_pattern",
    "clear_ignore_patterns",
]
