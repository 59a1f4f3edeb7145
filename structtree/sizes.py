"""Recursive byte and file accounting for directory subtrees.

Walks never follow symlinks. Unreadable directories count as empty so one bad
subtree cannot fail a whole render.
"""

from __future__ import annotations

import logging
import os
import stat
import sys
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

KIB = 1024
MIB = KIB * 1024
GIB = MIB * 1024
WINDOWS_EXECUTABLE_EXTENSIONS = frozenset({"exe", "bat", "cmd", "sh", "py", "ps1"})


@dataclass(frozen=True)
class WalkItem:
    """One entry yielded by ``iter_subtree``.

    ``size`` is the unfollowed ``st_size`` for non-directories and 0 for
    directories; byte totals only add it up for regular files.
    """

    name: str
    path: Path
    depth: int
    is_dir: bool
    is_file: bool
    size: int


@dataclass(frozen=True)
class SubtreeStats:
    dirs: int = 0
    files: int = 0
    bytes: int = 0


def iter_subtree(
    root: Path,
    *,
    descend: Callable[[WalkItem], bool] | None = None,
    max_depth: int | None = None,
) -> Iterator[WalkItem]:
    """Yield every entry below ``root`` in pre-order, never following symlinks.

    ``depth`` is 1 for direct children. ``descend`` decides whether a yielded
    directory is entered; ``max_depth`` bounds the depth of yielded entries.
    """
    stack: list[tuple[Path, int]] = [(root, 1)]
    while stack:
        directory, depth = stack.pop()
        if max_depth is not None and depth > max_depth:
            continue
        try:
            with os.scandir(directory) as entries:
                children = sorted(entries, key=lambda item: item.name)
        except OSError as exc:
            logger.debug("cannot list %s: %s", directory, exc)
            continue

        pending: list[tuple[Path, int]] = []
        for child in children:
            try:
                st = child.stat(follow_symlinks=False)
            except OSError as exc:
                logger.debug("cannot stat %s: %s", child.path, exc)
                continue
            is_dir = stat.S_ISDIR(st.st_mode)
            is_file = stat.S_ISREG(st.st_mode)
            item = WalkItem(
                name=child.name,
                path=Path(child.path),
                depth=depth,
                is_dir=is_dir,
                is_file=is_file,
                size=0 if is_dir else int(st.st_size),
            )
            yield item
            if is_dir and (descend is None or descend(item)):
                pending.append((item.path, depth + 1))
        stack.extend(reversed(pending))


def subtree_stats(root: Path) -> SubtreeStats:
    """Count every directory, regular file, and byte below ``root``."""
    dirs = files = total = 0
    for item in iter_subtree(root):
        if item.is_dir:
            dirs += 1
        elif item.is_file:
            files += 1
            total += item.size
    return SubtreeStats(dirs=dirs, files=files, bytes=total)


def subtree_bytes(root: Path) -> int:
    return sum(item.size for item in iter_subtree(root) if item.is_file)


def subtree_file_count(root: Path) -> int:
    return sum(1 for item in iter_subtree(root) if item.is_file)


def safe_file_size(path: Path) -> int | None:
    """Return ``st_size`` following links, or ``None`` on stat failure."""
    try:
        return int(path.stat().st_size)
    except OSError:
        return None


def format_size(size_bytes: int) -> str:
    """Format bytes as ``B`` or one-decimal ``K``/``M``/``G`` (binary units)."""
    if size_bytes >= GIB:
        return f"{size_bytes / GIB:.1f}G"
    if size_bytes >= MIB:
        return f"{size_bytes / MIB:.1f}M"
    if size_bytes >= KIB:
        return f"{size_bytes / KIB:.1f}K"
    return f"{size_bytes}B"


def is_executable(path: Path) -> bool:
    """Best-effort executable check: mode bits on POSIX, extension on Windows."""
    if sys.platform.startswith("win"):
        return path.suffix.lower().lstrip(".") in WINDOWS_EXECUTABLE_EXTENSIONS
    try:
        mode = path.stat().st_mode
    except OSError:
        return False
    return stat.S_ISREG(mode) and bool(mode & 0o111)


__all__ = [
    "WalkItem",
    "SubtreeStats",
    "iter_subtree",
    "subtree_stats",
    "subtree_bytes",
    "subtree_file_count",
    "safe_file_size",
    "format_size",
    "is_executable",
]
