"""Domain datatypes shared by the walk, search, and summary variants.

``WalkConfig`` is built once per invocation and passed down unchanged.
Render decisions are a closed set of frozen dataclasses.
"""

from __future__ import annotations

import enum
import re
from collections.abc import Iterable
from dataclasses import dataclass
from functools import cached_property
from pathlib import Path

from .sizes import subtree_bytes


class GitRelationship(enum.Enum):
    """Which git path set restricts the walk."""

    NONE = "none"
    TRACKED = "tracked"
    UNTRACKED = "untracked"
    STAGED = "staged"
    CHANGED = "changed"
    HISTORY = "history"

    @property
    def restricts_paths(self) -> bool:
        """History and none walk the whole tree; the rest filter by a path set."""
        return self not in (GitRelationship.NONE, GitRelationship.HISTORY)


@dataclass(frozen=True)
class GitPathSnapshot:
    """Immutable set of absolute paths plus every directory above them.

    ``dirs`` lets a directory check run as one lookup instead of scanning
    ``files`` for a path prefix.
    """

    files: frozenset[Path]
    dirs: frozenset[Path]

    @classmethod
    def from_paths(cls, paths: Iterable[Path]) -> GitPathSnapshot:
        files: set[Path] = set()
        dirs: set[Path] = set()
        for path in paths:
            files.add(path)
            for parent in path.parents:
                if parent in dirs:
                    break
                dirs.add(parent)
        return cls(files=frozenset(files), dirs=frozenset(dirs))

    def contains_file(self, path: Path) -> bool:
        return path in self.files

    def has_descendant(self, directory: Path) -> bool:
        """Return whether some snapshot path lies strictly inside ``directory``."""
        return directory in self.dirs


@dataclass(frozen=True)
class WalkConfig:
    """Per-invocation traversal settings; never mutated during a walk."""

    max_depth: int | None = None
    custom_ignore_patterns: tuple[re.Pattern[str], ...] = ()
    max_subtree_bytes: int | None = None
    git_paths: GitPathSnapshot | None = None
    git_relationship: GitRelationship = GitRelationship.NONE
    show_sizes: bool = False
    ignore_defaults_disabled: bool = False
    ignore_only_pattern: str | None = None

    @property
    def git_mode(self) -> bool:
        return self.git_relationship.restricts_paths and self.git_paths is not None


@dataclass
class DirEntry:
    """One filesystem child observed during a directory listing.

    ``canonical_path`` is the resolved parent joined with ``name``; the link
    itself is never followed, so symlinks keep their own location.
    """

    name: str
    path: Path
    canonical_path: Path
    is_symlink: bool
    is_dir: bool

    @cached_property
    def subtree_bytes(self) -> int:
        if not self.is_dir:
            return 0
        return subtree_bytes(self.path)


class EntryStyle(enum.Enum):
    DIRECTORY = "directory"
    SYMLINK = "symlink"
    EXECUTABLE = "executable"
    FILE = "file"


@dataclass(frozen=True)
class Shown:
    display_form: str
    style: EntryStyle
    size_suffix: str | None = None


@dataclass(frozen=True)
class PrunedIgnored:
    name: str
    file_count: int
    size_label: str | None = None


@dataclass(frozen=True)
class PrunedOversized:
    name: str
    megabytes: int


@dataclass(frozen=True)
class Skipped:
    reason: str = ""


RenderDecision = Shown | PrunedIgnored | PrunedOversized | Skipped


__all__ = [
    "GitRelationship",
    "GitPathSnapshot",
    "WalkConfig",
    "DirEntry",
    "EntryStyle",
    "Shown",
    "PrunedIgnored",
    "PrunedOversized",
    "Skipped",
    "RenderDecision",
]
