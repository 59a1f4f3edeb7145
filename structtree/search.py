"""Glob search over entry names with flat or ancestor-tree output.

The pre-pass skips descent into default-ignored and user-ignored directories
but still tests every visited name against the pattern. Tree output reruns a
restricted walk that shows only matches and their ancestors.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from .render import PLAIN_THEME, TreeTheme, child_prefix, connector, paint
from .rules import compile_glob, is_default_ignored_dir, matches_any
from .sizes import WalkItem, format_size, is_executable, iter_subtree, safe_file_size
from .tree import canonical_root, list_entries


class InvalidPatternError(ValueError):
    """Raised when a search pattern does not translate to a valid regex."""


@dataclass(frozen=True)
class SearchMatch:
    path: Path
    size: int
    is_dir: bool


@dataclass(frozen=True)
class SearchResult:
    pattern: str
    root: Path
    matches: tuple[SearchMatch, ...]


def compile_search_pattern(pattern: str) -> re.Pattern[str]:
    try:
        return compile_glob(pattern)
    except re.error as exc:
        raise InvalidPatternError(f"invalid pattern: {exc}") from exc


def search_paths(
    pattern: str,
    root: Path,
    *,
    max_depth: int | None = None,
    custom_ignores: Iterable[re.Pattern[str]] = (),
) -> SearchResult:
    """Collect entries under ``root`` whose base name matches ``pattern``."""
    regex = compile_search_pattern(pattern)
    ignores = tuple(custom_ignores)
    root = canonical_root(root)

    def descend(item: WalkItem) -> bool:
        return not (is_default_ignored_dir(item.name) or matches_any(item.name, ignores))

    matches = [
        SearchMatch(path=item.path, size=0 if item.is_dir else item.size, is_dir=item.is_dir)
        for item in iter_subtree(root, descend=descend, max_depth=max_depth)
        if regex.match(item.name)
    ]
    return SearchResult(pattern=pattern, root=root, matches=tuple(matches))


def build_keep_set(matches: Iterable[SearchMatch], root: Path) -> frozenset[Path]:
    """Return matched paths plus every ancestor strictly below ``root``."""
    keep: set[Path] = set()
    for match in matches:
        keep.add(match.path)
        for parent in match.path.parents:
            if parent == root or not parent.is_relative_to(root):
                break
            if parent in keep:
                break
            keep.add(parent)
    return frozenset(keep)


def build_search_tree_lines(root: Path, keep: frozenset[Path], theme: TreeTheme = PLAIN_THEME) -> list[str]:
    """Render only kept paths below ``root``; no ignore rules apply here."""
    lines_out: list[str] = []

    def walk(directory: Path, prefix: str) -> None:
        entries, scan_error = list_entries(directory, directory)
        if scan_error is not None:
            return
        kept = [entry for entry in entries if entry.path in keep]
        for idx, entry in enumerate(kept):
            last = idx == len(kept) - 1
            head = f"{prefix}{connector(last)}"
            if entry.is_dir:
                lines_out.append(f"{head}{paint(entry.name + '/', theme.directory, theme)}")
                walk(entry.path, child_prefix(prefix, last))
                continue
            color = theme.executable if is_executable(entry.path) else theme.match
            line = f"{head}{paint(entry.name, color, theme)}"
            size = safe_file_size(entry.path)
            if size is not None:
                line += paint(f" ({format_size(size)})", theme.note, theme)
            lines_out.append(line)

    walk(root, "")
    return lines_out


def build_flat_lines(matches: Iterable[SearchMatch], theme: TreeTheme = PLAIN_THEME) -> list[str]:
    ordered = sorted(matches, key=lambda match: match.path.parts)
    return [
        f"{paint(str(match.path), theme.root, theme)}{paint(f' ({format_size(match.size)})', theme.note, theme)}"
        for match in ordered
    ]


def render_search(
    pattern: str,
    root: Path,
    *,
    max_depth: int | None = None,
    flat: bool = False,
    custom_ignores: Iterable[re.Pattern[str]] = (),
    theme: TreeTheme = PLAIN_THEME,
) -> str:
    """Run a search and format it. Raises ``InvalidPatternError`` before walking."""
    result = search_paths(pattern, root, max_depth=max_depth, custom_ignores=custom_ignores)
    if not result.matches:
        return paint(f"no files or directories matching '{pattern}' found", theme.warning, theme) + "\n"

    lines = [
        f"{paint(f'found {len(result.matches)} item(s) matching', theme.found, theme)} {paint(pattern, theme.root, theme)}",
        "",
    ]
    if flat:
        lines.extend(build_flat_lines(result.matches, theme))
    else:
        lines.extend(build_search_tree_lines(result.root, build_keep_set(result.matches, result.root), theme))
    return "\n".join(lines) + "\n"


__all__ = [
    "InvalidPatternError",
    "SearchMatch",
    "SearchResult",
    "compile_search_pattern",
    "search_paths",
    "build_keep_set",
    "build_search_tree_lines",
    "build_flat_lines",
    "render_search",
]
