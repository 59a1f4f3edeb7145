"""Command-line front door for structtree.

Parses the tree options (or one of the ``search``/pattern subcommands),
resolves the walk root and git snapshot once, builds a ``WalkConfig``, and
writes the rendered output to stdout.
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path

from . import config as pattern_store
from .git import NOT_A_REPOSITORY_MESSAGE, NotInGitRepositoryError, collect_git_paths, require_repo_root
from .model import GitPathSnapshot, GitRelationship, WalkConfig
from .render import DEFAULT_THEME, PLAIN_THEME, TreeTheme
from .rules import compile_ignore_patterns
from .search import InvalidPatternError, render_search
from .sizes import MIB
from .summary import render_summary
from .tree import render_tree

PROG = "struct"
NO_IGNORE_ALL = "all"
NO_IGNORE_DEFAULTS = "defaults"
NO_IGNORE_CONFIG = "config"
PATTERN_COMMANDS = {"add", "remove", "list", "clear"}

logger = logging.getLogger(__name__)


def _nonnegative_int(value: str) -> int:
    """argparse type for integer values >= 0."""
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid integer value: {value!r}") from exc
    if parsed < 0:
        raise argparse.ArgumentTypeError("value must be >= 0")
    return parsed


def _positive_int(value: str) -> int:
    """argparse type for positive integer values."""
    parsed = _nonnegative_int(value)
    if parsed == 0:
        raise argparse.ArgumentTypeError("value must be >= 1")
    return parsed


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def select_theme(no_color: bool) -> TreeTheme:
    """Use colors only on a TTY, and never with ``--no-color`` or ``NO_COLOR``."""
    if no_color or os.environ.get("NO_COLOR") or not sys.stdout.isatty():
        return PLAIN_THEME
    return DEFAULT_THEME


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=PROG,
        description="A smarter tree command with intelligent defaults.",
        epilog="Subcommands: search PATTERN [--depth N] [--flat] [PATH]; add/remove/list/clear saved ignore patterns.",
    )
    parser.add_argument(
        "depth",
        nargs="?",
        type=_nonnegative_int,
        default=None,
        help="Directory levels to expand (default: unbounded; 0 shows a summary).",
    )
    parser.add_argument("-p", "--path", default=".", help="Starting directory (default: current directory).")

    git = parser.add_argument_group("git")
    git.add_argument("-g", "--git", dest="git_tracked", action="store_true", help="Show git-tracked files only.")
    git.add_argument("--gu", dest="git_untracked", action="store_true", help="Show untracked files only.")
    git.add_argument("--gs", dest="git_staged", action="store_true", help="Show staged files only.")
    git.add_argument("--gc", dest="git_changed", action="store_true", help="Show changed (unstaged) files only.")
    git.add_argument("--gh", dest="git_history", action="store_true", help="History mode (no path restriction).")
    git.add_argument("--gr", dest="git_tracked_root", action="store_true", help="Like --git, from the repository root.")
    git.add_argument("--gur", dest="git_untracked_root", action="store_true", help="Like --gu, from the repository root.")
    git.add_argument("--gsr", dest="git_staged_root", action="store_true", help="Like --gs, from the repository root.")
    git.add_argument("--gcr", dest="git_changed_root", action="store_true", help="Like --gc, from the repository root.")
    git.add_argument("--ghr", dest="git_history_root", action="store_true", help="Like --gh, from the repository root.")

    parser.add_argument("-i", "--ignore", default=None, help='Extra ignore patterns, comma-separated (e.g. "*.log,tmp*").')
    parser.add_argument(
        "-s",
        "--skip-large",
        type=_nonnegative_int,
        default=None,
        metavar="MB",
        help="Skip directories larger than MB megabytes.",
    )
    parser.add_argument("-z", "--size", action="store_true", help="Show file sizes.")
    parser.add_argument(
        "-n",
        "--no-ignore",
        default=None,
        metavar="{all,defaults,config,PATTERN}",
        help="Disable ignores: all, defaults, config patterns, or un-ignore one default name.",
    )
    parser.add_argument("--no-color", action="store_true", help="Disable color output even on TTY.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log skipped paths and git queries to stderr.")
    return parser


def build_search_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog=f"{PROG} search", description="Find files and directories by name.")
    parser.add_argument("pattern", help='Glob pattern matched against names ("*" any run, "?" one character).')
    parser.add_argument("path", nargs="?", default=".", help="Directory to search (default: current directory).")
    parser.add_argument("--depth", type=_positive_int, default=None, help="Maximum search depth (default: unbounded).")
    parser.add_argument("--flat", action="store_true", help="Print full paths instead of a tree.")
    parser.add_argument("--no-color", action="store_true", help="Disable color output even on TTY.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log skipped paths to stderr.")
    return parser


def build_patterns_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog=PROG, description="Manage saved ignore patterns.")
    commands = parser.add_subparsers(dest="command", required=True)
    add = commands.add_parser("add", help="Save ignore patterns.")
    add.add_argument("patterns", nargs="+", help="Glob patterns (comma-separated lists allowed).")
    remove = commands.add_parser("remove", help="Remove a saved ignore pattern.")
    remove.add_argument("pattern")
    commands.add_parser("list", help="List saved ignore patterns.")
    commands.add_parser("clear", help="Remove every saved ignore pattern.")
    return parser


def resolve_git_selection(args: argparse.Namespace) -> tuple[GitRelationship, bool]:
    """Pick one relationship (changed > staged > untracked > tracked > history).

    The second value tells whether any repository-root flag was given.
    """
    ordered = (
        (GitRelationship.CHANGED, args.git_changed, args.git_changed_root),
        (GitRelationship.STAGED, args.git_staged, args.git_staged_root),
        (GitRelationship.UNTRACKED, args.git_untracked, args.git_untracked_root),
        (GitRelationship.TRACKED, args.git_tracked, args.git_tracked_root),
        (GitRelationship.HISTORY, args.git_history, args.git_history_root),
    )
    at_repo_root = any(root_flag for _relationship, _flag, root_flag in ordered)
    for relationship, flag, root_flag in ordered:
        if flag or root_flag:
            return relationship, at_repo_root
    return GitRelationship.NONE, False


def _raw_patterns(ignore_arg: str | None) -> list[str]:
    patterns = pattern_store.load_ignore_patterns()
    if ignore_arg:
        patterns.append(ignore_arg)
    return patterns


def build_walk_config(
    args: argparse.Namespace,
    relationship: GitRelationship,
    git_paths: GitPathSnapshot | None,
) -> WalkConfig:
    """Translate parsed options into the immutable walk configuration.

    Any ``--no-ignore`` value drops saved and ``--ignore`` patterns for the
    tree walk.
    """
    no_ignore = args.no_ignore
    if no_ignore is None:
        custom = compile_ignore_patterns(_raw_patterns(args.ignore))
    else:
        custom = ()
    only_pattern = None
    if no_ignore is not None and no_ignore not in (NO_IGNORE_ALL, NO_IGNORE_DEFAULTS, NO_IGNORE_CONFIG):
        only_pattern = no_ignore
    return WalkConfig(
        max_depth=args.depth,
        custom_ignore_patterns=custom,
        max_subtree_bytes=args.skip_large * MIB if args.skip_large is not None else None,
        git_paths=git_paths,
        git_relationship=relationship,
        show_sizes=args.size,
        ignore_defaults_disabled=no_ignore in (NO_IGNORE_ALL, NO_IGNORE_DEFAULTS),
        ignore_only_pattern=only_pattern,
    )


def run_tree(argv: list[str]) -> None:
    args = build_parser().parse_args(argv)
    _configure_logging(args.verbose)
    theme = select_theme(args.no_color)

    path = Path(args.path)
    if not path.is_dir():
        raise SystemExit(f"Path not found: {path}")

    relationship, at_repo_root = resolve_git_selection(args)
    walk_root = path
    root_label = args.path
    git_paths = None
    if relationship is not GitRelationship.NONE:
        try:
            repo_root = require_repo_root(path)
        except NotInGitRepositoryError as exc:
            raise SystemExit(NOT_A_REPOSITORY_MESSAGE) from exc
        if at_repo_root:
            walk_root = repo_root
            root_label = str(repo_root)
        git_paths = collect_git_paths(walk_root, relationship)

    if args.depth == 0:
        custom = compile_ignore_patterns(_raw_patterns(args.ignore))
        output, scan_error = render_summary(walk_root, custom, theme)
        sys.stdout.write(output)
        if scan_error is not None:
            sys.stderr.write(f"failed to read directory: {scan_error}\n")
        return

    walk_config = build_walk_config(args, relationship, git_paths)
    logger.debug("walking %s with %s", walk_root, walk_config)
    sys.stdout.write(render_tree(walk_root, walk_config, theme, root_label))


def run_search(argv: list[str]) -> None:
    args = build_search_parser().parse_args(argv)
    _configure_logging(args.verbose)
    theme = select_theme(args.no_color)

    root = Path(args.path)
    if not root.is_dir():
        raise SystemExit(f"Path not found: {root}")
    custom = compile_ignore_patterns(pattern_store.load_ignore_patterns())
    try:
        output = render_search(args.pattern, root, max_depth=args.depth, flat=args.flat, custom_ignores=custom, theme=theme)
    except InvalidPatternError as exc:
        sys.stderr.write(f"{exc}\n")
        return
    sys.stdout.write(output)


def run_patterns(argv: list[str]) -> None:
    args = build_patterns_parser().parse_args(argv)
    _configure_logging(False)

    if args.command == "add":
        added = pattern_store.add_ignore_patterns(args.patterns)
        if added:
            sys.stdout.write(f"added: {', '.join(added)}\n")
        else:
            sys.stdout.write("nothing to add (patterns already saved)\n")
        return

    if args.command == "remove":
        if pattern_store.remove_ignore_pattern(args.pattern):
            sys.stdout.write(f"removed: {args.pattern}\n")
        else:
            sys.stdout.write(f"pattern not found: {args.pattern}\n")
        return

    if args.command == "list":
        patterns = pattern_store.load_ignore_patterns()
        if not patterns:
            sys.stdout.write("no saved ignore patterns\n")
            return
        sys.stdout.write("".join(f"{pattern}\n" for pattern in patterns))
        return

    cleared = pattern_store.clear_ignore_patterns()
    sys.stdout.write(f"cleared {cleared} pattern(s)\n")


def main(argv: list[str] | None = None) -> None:
    """Dispatch to the tree view, ``search``, or saved-pattern commands."""
    if argv is None:
        argv = sys.argv[1:]
    if argv and argv[0] == "search":
        run_search(argv[1:])
        return
    if argv and argv[0] in PATTERN_COMMANDS:
        run_patterns(argv)
        return
    run_tree(argv)


if __name__ == "__main__":
    main()
