"""Git path-set queries backing ``--git`` and its sibling flags.

Each relationship maps to one ``git`` invocation whose NUL-separated output is
turned into an immutable ``GitPathSnapshot`` of absolute paths. The snapshot is
taken once before the walk starts.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
from pathlib import Path

from .model import GitPathSnapshot, GitRelationship

logger = logging.getLogger(__name__)

GIT_TIMEOUT_SECONDS = 10.0
NOT_A_REPOSITORY_MESSAGE = "error: not a git repository"

_RELATIONSHIP_ARGS: dict[GitRelationship, list[str]] = {
    GitRelationship.TRACKED: ["ls-files", "-z"],
    GitRelationship.UNTRACKED: ["ls-files", "-z", "--others", "--exclude-standard"],
    GitRelationship.STAGED: ["diff", "--cached", "--name-only", "-z"],
    GitRelationship.CHANGED: ["diff", "--name-only", "-z"],
}


class NotInGitRepositoryError(RuntimeError):
    """Raised when a git relationship is requested outside a repository."""

    def __init__(self, path: Path) -> None:
        super().__init__(f"{NOT_A_REPOSITORY_MESSAGE}: {path}")
        self.path = path


def _run_git(cwd: Path, args: list[str]) -> subprocess.CompletedProcess[str] | None:
    if shutil.which("git") is None:
        logger.debug("git executable not found")
        return None
    try:
        return subprocess.run(
            ["git", "-C", str(cwd), *args],
            stdout=subprocess.PIPE,
            stderr=subprocess.DEVNULL,
            text=True,
            encoding="utf-8",
            errors="replace",
            check=False,
            timeout=GIT_TIMEOUT_SECONDS,
        )
    except (OSError, subprocess.SubprocessError) as exc:
        logger.debug("git %s failed in %s: %s", " ".join(args), cwd, exc)
        return None


def resolve_repo_root(path: Path) -> Path | None:
    """Return the resolved work-tree top containing ``path``, if any."""
    proc = _run_git(path, ["rev-parse", "--show-toplevel"])
    if proc is None or proc.returncode != 0:
        return None
    top_level = proc.stdout.strip()
    if not top_level:
        return None
    return Path(top_level).resolve()


def require_repo_root(path: Path) -> Path:
    """Like ``resolve_repo_root`` but raise ``NotInGitRepositoryError`` outside a work tree."""
    repo_root = resolve_repo_root(path)
    if repo_root is None:
        raise NotInGitRepositoryError(path)
    return repo_root


def current_branch(path: Path) -> str | None:
    """Return the short name of ``HEAD`` for the repository containing ``path``."""
    proc = _run_git(path, ["rev-parse", "--abbrev-ref", "HEAD"])
    if proc is None or proc.returncode != 0:
        return None
    branch = proc.stdout.strip()
    return branch or None


def _split_nul_paths(repo_root: Path, output: str) -> list[Path]:
    return [repo_root / rel for rel in output.split("\0") if rel]


def collect_git_paths(root: Path, relationship: GitRelationship) -> GitPathSnapshot | None:
    """Snapshot the paths in the repository around ``root`` with ``relationship``.

    Returns ``None`` for ``NONE`` and ``HISTORY`` (unrestricted walk) and when
    ``root`` is not inside a work tree; callers that need a repository check
    with ``require_repo_root`` first.
    """
    if relationship is GitRelationship.NONE:
        return None

    repo_root = resolve_repo_root(root)
    if repo_root is None:
        return None

    args = _RELATIONSHIP_ARGS.get(relationship)
    if args is None:
        return None

    proc = _run_git(repo_root, args)
    if proc is None or proc.returncode != 0:
        logger.debug("git query for %s returned no paths", relationship.value)
        return GitPathSnapshot.from_paths(())
    return GitPathSnapshot.from_paths(_split_nul_paths(repo_root, proc.stdout))


__all__ = [
    "NOT_A_REPOSITORY_MESSAGE",
    "NotInGitRepositoryError",
    "resolve_repo_root",
    "require_repo_root",
    "current_branch",
    "collect_git_paths",
]
