"""Visibility rules: built-in deny-lists, user glob patterns, git and size gates.

``classify`` applies the rules in a fixed precedence order. The smaller
predicates are shared with the search and summary walks.
"""

from __future__ import annotations

import enum
import logging
import re
from collections.abc import Iterable

from .model import DirEntry, WalkConfig

logger = logging.getLogger(__name__)

DEFAULT_IGNORED_DIRS = frozenset(
    {
        "__pycache__",
        ".pytest_cache",
        ".mypy_cache",
        ".ruff_cache",
        ".tox",
        "dist",
        "build",
        ".coverage",
        "venv",
        ".venv",
        "env",
        ".env",
        "virtualenv",
        "node_modules",
        ".npm",
        ".yarn",
        ".git",
        ".svn",
        ".hg",
        ".vscode",
        ".idea",
        "target",
        "bin",
        "obj",
        ".next",
        ".nuxt",
        ".DS_Store",
    }
)
DEFAULT_IGNORED_DIR_SUFFIX = ".egg-info"
DEFAULT_IGNORED_FILE_EXTENSIONS = frozenset({"pyc", "pyo", "pyd", "swp", "swo"})
DEFAULT_IGNORED_FILE_NAMES = frozenset({"package-lock.json", ".DS_Store"})


class Visibility(enum.Enum):
    VISIBLE = "visible"
    IGNORED_DEFAULT = "ignored-default"
    IGNORED_PATTERN = "ignored-pattern"
    IGNORED_SIZE = "ignored-size"
    IGNORED_GIT = "ignored-git"


def compile_glob(pattern: str) -> re.Pattern[str]:
    """Translate ``*`` and ``?`` to regex and anchor on the whole name.

    Nothing else is escaped or interpreted, so regex metacharacters in
    ``pattern`` keep their regex meaning. Raises ``re.error`` when the result
    does not compile.
    """
    body = pattern.replace("*", ".*").replace("?", ".")
    return re.compile(f"^{body}$")


def compile_ignore_patterns(patterns: Iterable[str]) -> tuple[re.Pattern[str], ...]:
    """Compile comma-separated glob lists, dropping empty and invalid pieces."""
    compiled: list[re.Pattern[str]] = []
    for raw in patterns:
        for piece in raw.split(","):
            piece = piece.strip()
            if not piece:
                continue
            try:
                compiled.append(compile_glob(piece))
            except re.error as exc:
                logger.debug("dropping invalid ignore pattern %r: %s", piece, exc)
    return tuple(compiled)


def is_default_ignored_dir(name: str) -> bool:
    return name in DEFAULT_IGNORED_DIRS or name.endswith(DEFAULT_IGNORED_DIR_SUFFIX)


def is_default_ignored_file(name: str) -> bool:
    if name in DEFAULT_IGNORED_FILE_NAMES:
        return True
    _stem, dot, extension = name.rpartition(".")
    return bool(dot) and extension in DEFAULT_IGNORED_FILE_EXTENSIONS


def matches_any(name: str, patterns: Iterable[re.Pattern[str]]) -> bool:
    return any(pattern.match(name) for pattern in patterns)


def _git_visibility(entry: DirEntry, config: WalkConfig) -> Visibility:
    snapshot = config.git_paths
    assert snapshot is not None
    if entry.is_dir:
        visible = snapshot.has_descendant(entry.canonical_path)
    else:
        visible = snapshot.contains_file(entry.canonical_path)
    return Visibility.VISIBLE if visible else Visibility.IGNORED_GIT


def classify(entry: DirEntry, config: WalkConfig) -> Visibility:
    """Classify one entry; the first matching rule wins.

    Order: git snapshot, default directory names, custom patterns, default
    file names, subtree size. In git mode only the snapshot is consulted.
    """
    if config.git_mode:
        return _git_visibility(entry, config)

    if entry.is_dir and not config.ignore_defaults_disabled and is_default_ignored_dir(entry.name):
        if config.ignore_only_pattern is None or entry.name != config.ignore_only_pattern:
            return Visibility.IGNORED_DEFAULT

    if config.ignore_only_pattern is None and matches_any(entry.name, config.custom_ignore_patterns):
        return Visibility.IGNORED_PATTERN

    if not entry.is_dir and is_default_ignored_file(entry.name):
        return Visibility.IGNORED_DEFAULT

    if entry.is_dir and config.max_subtree_bytes is not None:
        if entry.subtree_bytes > config.max_subtree_bytes:
            return Visibility.IGNORED_SIZE

    return Visibility.VISIBLE


__all__ = [
    "DEFAULT_IGNORED_DIRS",
    "DEFAULT_IGNORED_DIR_SUFFIX",
    "DEFAULT_IGNORED_FILE_EXTENSIONS",
    "DEFAULT_IGNORED_FILE_NAMES",
    "Visibility",
    "compile_glob",
    "compile_ignore_patterns",
    "is_default_ignored_dir",
    "is_default_ignored_file",
    "matches_any",
    "classify",
]
