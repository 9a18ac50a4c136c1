"""Detect merged git worktrees.

Finds main repositories under a search root and reports linked worktrees
whose branch is already merged into ``main`` (or ``master``). Those are
safe to remove with ``git worktree remove``.

Detection flow:
    1. Walk directories to find ``.git`` directories (main repos).
    2. For each repo, run ``git worktree list --porcelain``.
    3. Parse the output into worktree paths and branches.
    4. Run ``git branch --merged <main>`` to get merged branches.
    5. Keep clean, non-bare worktrees on merged branches.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from diskclean.core.process import CommandResult, CommandRunner
from diskclean.core.walker import PERMANENT_SKIP
from diskclean.models.project import WorktreeInfo
from diskclean.utils import dir_size

log = logging.getLogger(__name__)

_PREFIX_WORKTREE = "worktree "
_PREFIX_BRANCH = "branch refs/heads/"

# Artifact directories that never hold a top-level .git directory.
REPO_SEARCH_SKIP: frozenset[str] = frozenset(
    {"node_modules", "target", ".build", "build", "vendor", ".venv", "venv"}
)

MAIN_BRANCH_CANDIDATES = ("main", "master")


@dataclass(slots=True)
class ParsedWorktree:
    """One record of ``git worktree list --porcelain``."""

    path: str
    branch: str = ""
    """Short branch name; empty for a detached HEAD or a bare repo."""
    is_bare: bool = False


def parse_worktree_list(output: str) -> list[ParsedWorktree]:
    """Parse ``git worktree list --porcelain`` output.

    Format::

        worktree /path/to/wt
        HEAD abc123
        branch refs/heads/feature/xxx
        <blank line>

    The last record is kept even without a trailing blank line.
    """
    worktrees: list[ParsedWorktree] = []
    current: ParsedWorktree | None = None

    for line in output.splitlines():
        if line.startswith(_PREFIX_WORKTREE):
            if current is not None:
                worktrees.append(current)
            current = ParsedWorktree(path=line[len(_PREFIX_WORKTREE):])
        elif current is None:
            continue
        elif line.startswith(_PREFIX_BRANCH):
            current.branch = line[len(_PREFIX_BRANCH):]
        elif line.strip() == "bare":
            current.is_bare = True
        elif not line.strip():
            worktrees.append(current)
            current = None

    if current is not None:
        worktrees.append(current)
    return worktrees


def find_git_repos(root: Path | str) -> list[Path]:
    """Find main git repositories under *root*.

    A main repo has a ``.git`` *directory*.  Linked worktrees carry a
    ``.git`` file instead and are left out; their details come from the
    main repo's worktree list.  Symlinked directories are not followed.
    """
    root = os.path.abspath(root)
    if not os.path.isdir(root):
        return []

    skip = PERMANENT_SKIP | REPO_SEARCH_SKIP
    repos: list[Path] = []
    stack: list[str] = [root]

    while stack:
        current = stack.pop()
        try:
            with os.scandir(current) as it:
                entries = list(it)
        except OSError:
            log.debug("Cannot read directory: %s", current)
            continue

        has_git_dir = False
        for entry in entries:
            try:
                if not entry.is_dir(follow_symlinks=False):
                    continue
            except OSError:
                continue
            if entry.name == ".git":
                has_git_dir = True
            elif entry.name not in skip:
                stack.append(entry.path)

        if has_git_dir:
            repos.append(Path(current))

    return repos


def _git(runner: CommandRunner, repo: Path | str, *args: str) -> CommandResult | None:
    return runner.run("git", ["-C", str(repo), *args])


def detect_main_branch(runner: CommandRunner, repo: Path | str) -> str | None:
    """Return ``main`` or ``master``, whichever exists first, else None."""
    for candidate in MAIN_BRANCH_CANDIDATES:
        result = _git(runner, repo, "rev-parse", "--verify", "--quiet", candidate)
        if result is not None and result.ok:
            return candidate
    return None


def merged_branches(runner: CommandRunner, repo: Path | str, main_branch: str) -> set[str]:
    """Branches merged into *main_branch*, excluding *main_branch* itself."""
    result = _git(runner, repo, "branch", "--merged", main_branch)
    if result is None or not result.ok:
        return set()

    merged: set[str] = set()
    for line in result.output.splitlines():
        # "  name", "* name" (current), "+ name" (checked out elsewhere)
        if len(line) < 3:
            continue
        name = line[2:].strip()
        if name and name != main_branch:
            merged.add(name)
    return merged


def is_dirty(runner: CommandRunner, worktree_path: Path | str) -> bool:
    """Check for uncommitted changes. A failed status check counts as dirty."""
    result = _git(runner, worktree_path, "status", "--porcelain")
    return result is None or not result.ok or bool(result.output.strip())


def _same_path(a: Path | str, b: Path | str) -> bool:
    return os.path.realpath(a) == os.path.realpath(b)


def scan_worktrees(
    root: Path | str,
    compute_size: bool = False,
    runner: CommandRunner | None = None,
) -> list[WorktreeInfo]:
    """Find merged, clean worktrees of every main repo under *root*.

    Returns an empty list when git is not installed.
    """
    runner = runner or CommandRunner()
    if runner.which("git") is None:
        log.info("git not found, skipping worktree scan")
        return []

    found: list[WorktreeInfo] = []
    for repo in find_git_repos(root):
        main_branch = detect_main_branch(runner, repo)
        if main_branch is None:
            log.debug("No main/master branch in %s, skipping", repo)
            continue

        listing = _git(runner, repo, "worktree", "list", "--porcelain")
        if listing is None or not listing.ok:
            continue

        worktrees = parse_worktree_list(listing.output)
        if len(worktrees) <= 1:
            continue

        merged = merged_branches(runner, repo, main_branch)
        if not merged:
            continue

        for wt in worktrees:
            if wt.is_bare or not wt.branch:
                continue
            if _same_path(wt.path, repo):
                continue
            if wt.branch not in merged:
                continue

            path = Path(wt.path)
            exists = os.path.isdir(path)
            if exists and is_dirty(runner, path):
                log.info("Skipping dirty worktree %s [%s]", path, wt.branch)
                continue

            size = dir_size(path) if compute_size and exists else None
            found.append(WorktreeInfo(path=path, branch=wt.branch, main_repo=repo, size=size))

    return found
