"""Turn per-entry visibility into render decisions and tree lines.

Themes are plain ANSI palettes; ``PLAIN_THEME`` yields uncolored text for
pipes and tests.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from .model import (
    DirEntry,
    EntryStyle,
    PrunedIgnored,
    PrunedOversized,
    RenderDecision,
    Shown,
    Skipped,
    WalkConfig,
)
from .rules import Visibility
from .sizes import MIB, format_size, is_executable, safe_file_size, subtree_file_count

BRANCH = "├── "
LAST_BRANCH = "└── "
PIPE_PREFIX = "│   "
SPACE_PREFIX = "    "


@dataclass(frozen=True)
class TreeTheme:
    """Semantic ANSI palette used by the tree, search, and summary output."""

    name: str
    reset: str
    root: str
    directory: str
    executable: str
    symlink: str
    note: str
    match: str
    found: str
    warning: str
    total: str
    visible: str
    types: str


DEFAULT_THEME = TreeTheme(
    name="default",
    reset="\033[0m",
    root="\033[36m",
    directory="\033[1;34m",
    executable="\033[1;32m",
    symlink="\033[36m",
    note="\033[90m",
    match="\033[1;36m",
    found="\033[32m",
    warning="\033[33m",
    total="\033[33m",
    visible="\033[32m",
    types="\033[36m",
)

PLAIN_THEME = TreeTheme(
    name="plain",
    reset="",
    root="",
    directory="",
    executable="",
    symlink="",
    note="",
    match="",
    found="",
    warning="",
    total="",
    visible="",
    types="",
)


def paint(text: str, color: str, theme: TreeTheme) -> str:
    if not color:
        return text
    return f"{color}{text}{theme.reset}"


def connector(is_last: bool) -> str:
    return LAST_BRANCH if is_last else BRANCH


def child_prefix(prefix: str, is_last: bool) -> str:
    return prefix + (SPACE_PREFIX if is_last else PIPE_PREFIX)


def _symlink_display(entry: DirEntry) -> str:
    try:
        target = os.readlink(entry.path)
    except OSError:
        return entry.name
    return f"{entry.name} -> {target}"


def _file_size_suffix(entry: DirEntry, config: WalkConfig) -> str | None:
    if not config.show_sizes:
        return None
    size = safe_file_size(entry.path)
    if size is None:
        return None
    return format_size(size)


def decide(entry: DirEntry, visibility: Visibility, config: WalkConfig) -> RenderDecision:
    """Map a classified entry to exactly one render decision."""
    if visibility is Visibility.IGNORED_GIT:
        return Skipped("git")

    if visibility in (Visibility.IGNORED_DEFAULT, Visibility.IGNORED_PATTERN):
        if not entry.is_dir:
            return Skipped(visibility.value)
        size_label = format_size(entry.subtree_bytes) if config.show_sizes else None
        return PrunedIgnored(entry.name, subtree_file_count(entry.path), size_label)

    if visibility is Visibility.IGNORED_SIZE:
        return PrunedOversized(entry.name, entry.subtree_bytes // MIB)

    if entry.is_symlink:
        return Shown(_symlink_display(entry), EntryStyle.SYMLINK, _file_size_suffix(entry, config))
    if entry.is_dir:
        return Shown(f"{entry.name}/", EntryStyle.DIRECTORY)
    style = EntryStyle.EXECUTABLE if is_executable(entry.path) else EntryStyle.FILE
    return Shown(entry.name, style, _file_size_suffix(entry, config))


def _style_color(style: EntryStyle, theme: TreeTheme) -> str:
    if style is EntryStyle.DIRECTORY:
        return theme.directory
    if style is EntryStyle.SYMLINK:
        return theme.symlink
    if style is EntryStyle.EXECUTABLE:
        return theme.executable
    return ""


def render_line(decision: RenderDecision, prefix: str, is_last: bool, theme: TreeTheme) -> str:
    """Render one tree row. ``Skipped`` decisions must be filtered out first."""
    head = f"{prefix}{connector(is_last)}"

    if isinstance(decision, PrunedIgnored):
        if decision.size_label is not None:
            note = f" ({decision.size_label}, {decision.file_count} files ignored)"
        else:
            note = f" ({decision.file_count} files ignored)"
        return f"{head}{paint(decision.name + '/', theme.directory, theme)}{paint(note, theme.note, theme)}"

    if isinstance(decision, PrunedOversized):
        note = f" ({decision.megabytes}MB, skipped)"
        return f"{head}{paint(decision.name + '/', theme.directory, theme)}{paint(note, theme.note, theme)}"

    if isinstance(decision, Shown):
        line = f"{head}{paint(decision.display_form, _style_color(decision.style, theme), theme)}"
        if decision.size_suffix is not None:
            line += paint(f" ({decision.size_suffix})", theme.note, theme)
        return line

    raise ValueError(f"cannot render {decision!r}")


__all__ = [
    "BRANCH",
    "LAST_BRANCH",
    "PIPE_PREFIX",
    "SPACE_PREFIX",
    "TreeTheme",
    "DEFAULT_THEME",
    "PLAIN_THEME",
    "paint",
    "connector",
    "child_prefix",
    "decide",
    "render_line",
]
