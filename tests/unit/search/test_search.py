"""Tests for glob search over entry names."""

from __future__ import annotations

import re
import tempfile
import unittest
from pathlib import Path

from structtree.render import PLAIN_THEME
from structtree.rules import compile_ignore_patterns
from structtree.search import (
    InvalidPatternError,
    build_keep_set,
    render_search,
    search_paths,
)


_TREE_ROW = re.compile(r"^((?:│   |    )*)(?:├── |└── )(.*)$")


def _write(path: Path, content: bytes) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(content)


def _tree_leaves(root: Path, rows: list[str]) -> set[Path]:
    """Rebuild file paths from connector-drawn rows."""
    stack: list[str] = []
    leaves: set[Path] = set()
    for row in rows:
        match = _TREE_ROW.match(row)
        assert match is not None, row
        depth = len(match.group(1)) // 4
        label = match.group(2)
        del stack[depth:]
        if label.endswith("/"):
            stack.append(label[:-1])
            continue
        leaves.add(root.joinpath(*stack, label.rsplit(" (", 1)[0]))
    return leaves


class SearchTests(unittest.TestCase):
    def _env_tree(self, root: Path) -> None:
        _write(root / ".env", b"A=1\n\n")
        _write(root / "config" / "prod.env", b"B=2")
        _write(root / "node_modules" / "pkg" / "x.env", b"C=3")
        _write(root / "README.md", b"# readme\n")

    def test_flat_output_lists_sorted_paths_with_sizes(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            self._env_tree(root)

            output = render_search("*.env", root, flat=True, theme=PLAIN_THEME)

            self.assertEqual(
                output,
                "found 2 item(s) matching *.env\n"
                "\n"
                f"{root}/.env (5B)\n"
                f"{root}/config/prod.env (3B)\n",
            )

    def test_tree_output_shows_matches_and_their_ancestors_only(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            self._env_tree(root)

            output = render_search("*.env", root, theme=PLAIN_THEME)

            self.assertEqual(
                output.splitlines(),
                [
                    "found 2 item(s) matching *.env",
                    "",
                    "├── config/",
                    "│   └── prod.env (3B)",
                    "└── .env (5B)",
                ],
            )

    def test_flat_order_compares_path_components(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            _write(root / "a-b" / "x.env", b"x")
            _write(root / "a" / "x.env", b"x")

            output = render_search("*.env", root, flat=True, theme=PLAIN_THEME)

            self.assertEqual(
                output.splitlines()[2:],
                [f"{root}/a/x.env (1B)", f"{root}/a-b/x.env (1B)"],
            )

    def test_flat_and_tree_modes_show_the_same_matches(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            _write(root / "a" / ".env", b"x")
            _write(root / "b" / "c" / ".env", b"xy")
            _write(root / "b" / "notes.md", b"x")

            flat = render_search(".env", root, flat=True, theme=PLAIN_THEME).splitlines()
            tree = render_search(".env", root, theme=PLAIN_THEME).splitlines()

            expected = {root / "a" / ".env", root / "b" / "c" / ".env"}
            self.assertEqual(flat[0], "found 2 item(s) matching .env")
            self.assertEqual({Path(line.rsplit(" (", 1)[0]) for line in flat[2:]}, expected)
            self.assertEqual(_tree_leaves(root, tree[2:]), expected)
            self.assertEqual(
                tree[2:],
                [
                    "├── a/",
                    "│   └── .env (1B)",
                    "└── b/",
                    "    └── c/",
                    "        └── .env (2B)",
                ],
            )

    def test_no_match_message(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            _write(root / "a.txt", b"x")

            output = render_search("*.rs", root, theme=PLAIN_THEME)

            self.assertEqual(output, "no files or directories matching '*.rs' found\n")

    def test_invalid_pattern_raises_before_walking(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            with self.assertRaises(InvalidPatternError):
                render_search("[", Path(tmp), theme=PLAIN_THEME)

    def test_ignored_directory_names_still_match_but_are_not_entered(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            _write(root / "node_modules" / "inner" / "node_modules" / "x.js", b"x")

            result = search_paths("node_*", root)

            self.assertEqual([match.path for match in result.matches], [root / "node_modules"])
            self.assertTrue(result.matches[0].is_dir)
            self.assertEqual(result.matches[0].size, 0)

    def test_custom_ignores_stop_descent(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            _write(root / "build_out" / "app.log", b"x")
            _write(root / "app.log", b"xy")

            result = search_paths("*.log", root, custom_ignores=compile_ignore_patterns(["build_*"]))

            self.assertEqual([match.path for match in result.matches], [root / "app.log"])

    def test_max_depth_bounds_matches(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            _write(root / "top.py", b"x")
            _write(root / "pkg" / "mod.py", b"x")

            shallow = search_paths("*.py", root, max_depth=1)
            deep = search_paths("*.py", root)

            self.assertEqual([match.path.name for match in shallow.matches], ["top.py"])
            self.assertEqual(sorted(match.path.name for match in deep.matches), ["mod.py", "top.py"])

    def test_root_itself_is_never_a_match(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve() / "match_me"
            root.mkdir()

            result = search_paths("match_*", root)

            self.assertEqual(result.matches, ())

    def test_keep_set_includes_ancestors_below_root(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            _write(root / "a" / "b" / "c.txt", b"x")

            result = search_paths("c.txt", root)
            keep = build_keep_set(result.matches, root)

            self.assertEqual(keep, frozenset({root / "a", root / "a" / "b", root / "a" / "b" / "c.txt"}))


if __name__ == "__main__":
    unittest.main()
