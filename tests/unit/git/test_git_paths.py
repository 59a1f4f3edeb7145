"""Tests for git path snapshots against throwaway repositories."""

from __future__ import annotations

import shutil
import subprocess
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from structtree.git import (
    NotInGitRepositoryError,
    collect_git_paths,
    current_branch,
    require_repo_root,
    resolve_repo_root,
)
from structtree.model import GitRelationship


def _git(repo: Path, *args: str) -> None:
    subprocess.run(["git", "-C", str(repo), *args], check=True, capture_output=True)


@unittest.skipIf(shutil.which("git") is None, "git executable not available")
class GitPathSnapshotTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.repo = Path(self._tmp.name).resolve() / "repo"
        self.repo.mkdir()
        _git(self.repo, "init", "-q", "-b", "main")
        _git(self.repo, "config", "user.email", "dev@example.com")
        _git(self.repo, "config", "user.name", "Dev")
        _git(self.repo, "config", "commit.gpgsign", "false")

        (self.repo / "src").mkdir()
        (self.repo / "src" / "app.py").write_text("print('v1')\n", encoding="utf-8")
        (self.repo / "README.md").write_text("# demo\n", encoding="utf-8")
        _git(self.repo, "add", ".")
        _git(self.repo, "commit", "-q", "-m", "init")

    def test_tracked_snapshot_lists_committed_files_and_ancestors(self) -> None:
        (self.repo / "scratch.txt").write_text("x\n", encoding="utf-8")

        snapshot = collect_git_paths(self.repo, GitRelationship.TRACKED)

        assert snapshot is not None
        self.assertEqual(snapshot.files, frozenset({self.repo / "src" / "app.py", self.repo / "README.md"}))
        self.assertTrue(snapshot.has_descendant(self.repo / "src"))
        self.assertFalse(snapshot.contains_file(self.repo / "scratch.txt"))

    def test_untracked_staged_and_changed_relationships(self) -> None:
        (self.repo / "new.txt").write_text("new\n", encoding="utf-8")
        (self.repo / "README.md").write_text("# changed\n", encoding="utf-8")
        (self.repo / "src" / "app.py").write_text("print('v2')\n", encoding="utf-8")
        _git(self.repo, "add", "src/app.py")

        untracked = collect_git_paths(self.repo, GitRelationship.UNTRACKED)
        staged = collect_git_paths(self.repo, GitRelationship.STAGED)
        changed = collect_git_paths(self.repo, GitRelationship.CHANGED)

        assert untracked is not None and staged is not None and changed is not None
        self.assertEqual(untracked.files, frozenset({self.repo / "new.txt"}))
        self.assertEqual(staged.files, frozenset({self.repo / "src" / "app.py"}))
        self.assertEqual(changed.files, frozenset({self.repo / "README.md"}))

    def test_history_and_none_do_not_restrict_the_walk(self) -> None:
        self.assertIsNone(collect_git_paths(self.repo, GitRelationship.HISTORY))
        self.assertIsNone(collect_git_paths(self.repo, GitRelationship.NONE))

    def test_repo_root_and_branch_from_subdirectory(self) -> None:
        self.assertEqual(resolve_repo_root(self.repo / "src"), self.repo)
        self.assertEqual(current_branch(self.repo / "src"), "main")

    def test_outside_repository_has_no_snapshot_and_require_raises(self) -> None:
        outside = Path(self._tmp.name).resolve() / "plain"
        outside.mkdir()
        with mock.patch("structtree.git.resolve_repo_root", return_value=None):
            self.assertIsNone(collect_git_paths(outside, GitRelationship.TRACKED))
            with self.assertRaises(NotInGitRepositoryError):
                require_repo_root(outside)

    def test_require_repo_root_inside_repository(self) -> None:
        self.assertEqual(require_repo_root(self.repo / "src"), self.repo)


class GitUnavailableTests(unittest.TestCase):
    def test_missing_git_binary_yields_no_repo_and_no_branch(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            with mock.patch("structtree.git.shutil.which", return_value=None):
                self.assertIsNone(resolve_repo_root(Path(tmp)))
                self.assertIsNone(current_branch(Path(tmp)))

    def test_failed_query_yields_empty_snapshot(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            with (
                mock.patch("structtree.git.resolve_repo_root", return_value=root),
                mock.patch("structtree.git._run_git", return_value=None),
            ):
                snapshot = collect_git_paths(root, GitRelationship.TRACKED)

            assert snapshot is not None
            self.assertEqual(snapshot.files, frozenset())
            self.assertFalse(snapshot.has_descendant(root))


if __name__ == "__main__":
    unittest.main()
