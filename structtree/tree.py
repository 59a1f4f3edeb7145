"""Depth-first filtered directory walk producing prefix-drawn tree lines."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from .model import DirEntry, RenderDecision, Shown, Skipped, WalkConfig
from .render import PLAIN_THEME, TreeTheme, child_prefix, decide, paint, render_line
from .rules import classify

logger = logging.getLogger(__name__)


def sort_key(name: str, is_dir: bool) -> tuple[bool, str, str]:
    """Directories first, then case-insensitive name; exact name breaks ties."""
    return (not is_dir, name.lower(), name)


def canonical_root(path: Path) -> Path:
    try:
        return path.resolve()
    except OSError:
        return path.absolute()


def list_entries(directory: Path, canonical_directory: Path) -> tuple[list[DirEntry], OSError | None]:
    """List and sort the children of ``directory``.

    Returns ``(entries, scan_error)``; ``scan_error`` is set when the
    directory cannot be listed, in which case ``entries`` is empty.
    """
    entries: list[DirEntry] = []
    try:
        with os.scandir(directory) as children:
            for child in children:
                try:
                    is_symlink = child.is_symlink()
                    is_dir = not is_symlink and child.is_dir(follow_symlinks=False)
                except OSError:
                    is_symlink = False
                    is_dir = False
                entries.append(
                    DirEntry(
                        name=child.name,
                        path=Path(child.path),
                        canonical_path=canonical_directory / child.name,
                        is_symlink=is_symlink,
                        is_dir=is_dir,
                    )
                )
    except OSError as exc:
        return [], exc

    entries.sort(key=lambda entry: sort_key(entry.name, entry.is_dir))
    return entries, None


def build_tree_lines(
    root: Path,
    config: WalkConfig,
    theme: TreeTheme = PLAIN_THEME,
    root_label: str | None = None,
) -> list[str]:
    """Render ``root`` and its filtered descendants as tree rows."""
    lines_out: list[str] = [paint(root_label if root_label is not None else str(root), theme.root, theme)]

    def walk(directory: Path, canonical_directory: Path, prefix: str, depth: int) -> None:
        if config.max_depth is not None and depth >= config.max_depth:
            return

        entries, scan_error = list_entries(directory, canonical_directory)
        if scan_error is not None:
            logger.debug("treating unreadable directory %s as empty: %s", directory, scan_error)
            return

        decided: list[tuple[DirEntry, RenderDecision]] = []
        for entry in entries:
            decision = decide(entry, classify(entry, config), config)
            if isinstance(decision, Skipped):
                continue
            decided.append((entry, decision))

        for idx, (entry, decision) in enumerate(decided):
            last = idx == len(decided) - 1
            lines_out.append(render_line(decision, prefix, last, theme))
            if isinstance(decision, Shown) and entry.is_dir and not entry.is_symlink:
                walk(entry.path, entry.canonical_path, child_prefix(prefix, last), depth + 1)

    walk(root, canonical_root(root), "", 0)
    return lines_out


def render_tree(
    root: Path,
    config: WalkConfig,
    theme: TreeTheme = PLAIN_THEME,
    root_label: str | None = None,
) -> str:
    return "\n".join(build_tree_lines(root, config, theme, root_label)) + "\n"


__all__ = [
    "sort_key",
    "canonical_root",
    "list_entries",
    "build_tree_lines",
    "render_tree",
]
