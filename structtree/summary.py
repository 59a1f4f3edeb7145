"""Depth-0 overview: one aggregate block per top-level child.

Directories get an unfiltered pass (everything) and a filtered pass that skips
default-ignored and user-ignored names, so the block can contrast total and
visible counts. Custom patterns always apply here, whatever ``--no-ignore``
says.
"""

from __future__ import annotations

import os
import re
from collections import Counter
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from pathlib import Path

from .git import current_branch
from .model import DirEntry
from .render import PLAIN_THEME, TreeTheme, paint
from .rules import is_default_ignored_dir, is_default_ignored_file, matches_any
from .sizes import WalkItem, format_size, is_executable, iter_subtree, subtree_stats
from .tree import canonical_root, list_entries

TOP_EXTENSIONS = 10
LABEL_WIDTH = 9
IGNORED_HEADING = "── ignored (top level) ──"


@dataclass(frozen=True)
class DirectorySummary:
    """Counts for one top-level directory.

    ``total_*`` include everything; ``visible_*`` skip ignored directories and
    ignored files.
    """

    total_dirs: int
    total_files: int
    total_bytes: int
    visible_dirs: int
    visible_files: int
    visible_bytes: int
    extensions: tuple[tuple[str, int], ...]
    ignored_subdirs: tuple[tuple[str, int], ...]

    @property
    def has_ignored(self) -> bool:
        return (
            self.visible_dirs < self.total_dirs
            or self.visible_files < self.total_files
            or self.visible_bytes < self.total_bytes
        )


def _is_ignored_dir(name: str, custom_ignores: tuple[re.Pattern[str], ...]) -> bool:
    return is_default_ignored_dir(name) or matches_any(name, custom_ignores)


def _is_ignored_file(name: str, custom_ignores: tuple[re.Pattern[str], ...]) -> bool:
    return is_default_ignored_file(name) or matches_any(name, custom_ignores)


def _extension(name: str) -> str | None:
    suffix = Path(name).suffix
    if not suffix or suffix == ".":
        return None
    return suffix[1:].lower()


def summarize_directory(path: Path, custom_ignores: Iterable[re.Pattern[str]] = ()) -> DirectorySummary:
    """Run the unfiltered and filtered passes over ``path``."""
    ignores = tuple(custom_ignores)
    totals = subtree_stats(path)

    ignored_subdirs: list[tuple[str, int]] = []
    entries, _scan_error = list_entries(path, path)
    for entry in entries:
        if entry.is_dir and _is_ignored_dir(entry.name, ignores):
            count = subtree_stats(entry.path).files
            ignored_subdirs.append((entry.name, count))

    def descend(item: WalkItem) -> bool:
        return not _is_ignored_dir(item.name, ignores)

    visible_dirs = visible_files = visible_bytes = 0
    extensions: Counter[str] = Counter()
    for item in iter_subtree(path, descend=descend):
        if item.is_dir:
            if descend(item):
                visible_dirs += 1
            continue
        if not item.is_file or _is_ignored_file(item.name, ignores):
            continue
        visible_files += 1
        visible_bytes += item.size
        extension = _extension(item.name)
        if extension is not None:
            extensions[extension] += 1

    top = sorted(extensions.items(), key=lambda pair: (-pair[1], pair[0]))[:TOP_EXTENSIONS]
    return DirectorySummary(
        total_dirs=totals.dirs,
        total_files=totals.files,
        total_bytes=totals.bytes,
        visible_dirs=visible_dirs,
        visible_files=visible_files,
        visible_bytes=visible_bytes,
        extensions=tuple(top),
        ignored_subdirs=tuple(ignored_subdirs),
    )


def _label(text: str, theme: TreeTheme) -> str:
    return paint(text.ljust(LABEL_WIDTH), theme.note, theme)


def _count_parts(dirs: int, files: int, size_bytes: int, *, keep_zero: bool) -> str:
    parts: list[str] = []
    if keep_zero or dirs > 0:
        parts.append(f"{dirs} dirs")
    if keep_zero or files > 0:
        parts.append(f"{files} files")
    parts.append(format_size(size_bytes))
    return " · ".join(parts)


def _canonical(path: Path) -> str:
    try:
        return str(path.resolve())
    except OSError:
        return str(path)


def _directory_block(entry: DirEntry, summary: DirectorySummary, theme: TreeTheme) -> list[str]:
    lines = [
        paint(f"{entry.name}/", theme.directory, theme),
        f"  {paint(_canonical(entry.path), theme.note, theme)}",
    ]
    if summary.has_ignored:
        total = _count_parts(summary.total_dirs, summary.total_files, summary.total_bytes, keep_zero=True)
        visible = _count_parts(summary.visible_dirs, summary.visible_files, summary.visible_bytes, keep_zero=False)
        lines.append(f"  {_label('total:', theme)} {paint(total, theme.total, theme)}")
        lines.append(f"  {_label('visible:', theme)} {paint(visible, theme.visible, theme)}")
    else:
        total = _count_parts(summary.total_dirs, summary.total_files, summary.total_bytes, keep_zero=False)
        lines.append(f"  {_label('total:', theme)} {paint(total, theme.total, theme)}")

    if summary.extensions:
        types = " ".join(f"{ext}({count})" for ext, count in summary.extensions)
        lines.append(f"  {_label('types:', theme)} {paint(types, theme.types, theme)}")
    if summary.ignored_subdirs:
        ignored = ", ".join(f"{name}({count} files)" for name, count in summary.ignored_subdirs)
        lines.append(f"  {_label('ignored:', theme)} {paint(ignored, theme.note, theme)}")
    lines.append("")
    return lines


def _file_block(entry: DirEntry, theme: TreeTheme) -> list[str]:
    try:
        size = int(entry.path.stat().st_size)
    except OSError:
        size = 0
    color = theme.executable if is_executable(entry.path) else ""
    return [
        paint(entry.name, color, theme),
        f"  {paint(_canonical(entry.path), theme.note, theme)}",
        f"  {paint(format_size(size), theme.note, theme)}",
        "",
    ]


def build_summary_lines(
    root: Path,
    custom_ignores: Iterable[re.Pattern[str]] = (),
    theme: TreeTheme = PLAIN_THEME,
    branch_for_path: Callable[[Path], str | None] | None = None,
) -> tuple[list[str], OSError | None]:
    """Render the depth-0 summary for ``root``.

    Returns ``(lines, scan_error)``; when ``root`` cannot be listed only the
    header is rendered and the error is handed back for the caller to report.
    ``branch_for_path`` defaults to asking git for the current branch.
    """
    ignores = tuple(custom_ignores)
    resolved = canonical_root(root)
    header = str(resolved)
    branch = (branch_for_path or current_branch)(resolved)
    if branch:
        header = f"{header} {paint(f'({branch})', theme.note, theme)}"
    lines_out = [paint(header, theme.root, theme), ""]

    entries, scan_error = list_entries(root, resolved)
    if scan_error is not None:
        return lines_out, scan_error

    ignored_names: list[str] = []
    ignored_files = 0
    ignored_bytes = 0
    for entry in entries:
        if entry.is_dir:
            if _is_ignored_dir(entry.name, ignores):
                stats = subtree_stats(entry.path)
                ignored_files += stats.files
                ignored_bytes += stats.bytes
                ignored_names.append(f"{entry.name}({stats.files} files)")
                continue
            lines_out.extend(_directory_block(entry, summarize_directory(entry.path, ignores), theme))
            continue

        if _is_ignored_file(entry.name, ignores):
            try:
                size = int(os.lstat(entry.path).st_size)
            except OSError:
                size = 0
            ignored_bytes += size
            ignored_files += 1
            ignored_names.append(entry.name)
            continue
        lines_out.extend(_file_block(entry, theme))

    if ignored_files > 0:
        lines_out.append(paint(IGNORED_HEADING, theme.note, theme))
        details = " · ".join(
            [
                paint(", ".join(ignored_names), theme.note, theme),
                paint(f"{ignored_files} files", theme.note, theme),
                paint(format_size(ignored_bytes), theme.note, theme),
            ]
        )
        lines_out.append(f"  {details}")
    return lines_out, None


def render_summary(
    root: Path,
    custom_ignores: Iterable[re.Pattern[str]] = (),
    theme: TreeTheme = PLAIN_THEME,
    branch_for_path: Callable[[Path], str | None] | None = None,
) -> tuple[str, OSError | None]:
    lines, scan_error = build_summary_lines(root, custom_ignores, theme, branch_for_path)
    return "\n".join(lines) + "\n", scan_error


__all__ = [
    "DirectorySummary",
    "summarize_directory",
    "build_summary_lines",
    "render_summary",
]
