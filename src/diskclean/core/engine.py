"""Cleaning orchestration engine.

Projects are cleaned with a two-tier strategy:

1. **Tool**: run the project's native clean command (``cargo clean``,
   ``flutter clean``) when its binary is on PATH.
2. **Fallback removal**: delete the target directories directly.  This
   tier is off unless the engine is created with ``allow_remove=True``,
   since it authorizes recursive deletion.  Even then, a target that is a
   symlink or contains one is refused.

Merged git worktrees are removed with ``git worktree remove`` run from
their main repository.

Every public method returns result values; nothing here raises for a
failed clean.
"""

from __future__ import annotations

import logging
import os
import shlex
import shutil
import stat
from pathlib import Path
from typing import Callable, Iterable

from diskclean.core.process import CommandRunner
from diskclean.models.clean_result import CleanMethod, CleanResult, Error, Skipped, Success
from diskclean.models.project import Project, WorktreeInfo
from diskclean.utils import dir_size

log = logging.getLogger(__name__)

CleanResultCallback = Callable[[CleanResult], None]

NO_TOOL_REASON = "no clean tool available (directory removal is disabled)"


def _find_symlink(directory: Path | str) -> str | None:
    """Return the first symlink found anywhere inside *directory*, or None."""
    stack: list[Path | str] = [directory]
    while stack:
        current = stack.pop()
        try:
            with os.scandir(current) as it:
                for entry in it:
                    if entry.is_symlink():
                        return entry.path
                    if entry.is_dir(follow_symlinks=False):
                        stack.append(entry.path)
        except OSError:
            log.debug("Cannot read directory: %s", current)
    return None


def _target_size(project: Project) -> int:
    """Size of a project's targets, reusing the scan-time size if present."""
    if project.size is not None:
        return project.size
    return sum(dir_size(t) for t in project.targets)


class CleanEngine:
    """Cleans scanned projects and merged worktrees."""

    def __init__(self, allow_remove: bool = False, runner: CommandRunner | None = None) -> None:
        self.allow_remove = allow_remove
        self.runner = runner or CommandRunner()
        if allow_remove:
            log.warning("Fallback removal enabled: target directories may be deleted recursively")

    # ── projects ─────────────────────────────────────────────────────────

    def clean_project(self, project: Project, dry_run: bool = False) -> CleanResult:
        """Clean a single project.

        With ``dry_run`` the result reports what would be freed without
        touching the filesystem.
        """
        if not project.targets:
            return Skipped(project, "no targets")

        rule = project.rule
        if rule.has_tool and self.runner.which(rule.tool_bin):
            size = _target_size(project)
            if dry_run:
                return Success(project, CleanMethod.TOOL, size)
            if self._run_tool(project):
                return Success(project, CleanMethod.TOOL, size)

        if not self.allow_remove:
            return Skipped(project, NO_TOOL_REASON)

        if dry_run:
            return Success(project, CleanMethod.FALLBACK_REMOVE, _target_size(project))

        return self._remove_targets(project)

    def _run_tool(self, project: Project) -> bool:
        """Run the rule's clean command in the project root."""
        rule = project.rule
        args = shlex.split(rule.tool)[1:]
        log.info("Running '%s' in %s", rule.tool, project.root)
        result = self.runner.run(rule.tool_bin, args, cwd=project.root)
        if result is None:
            log.warning("Could not start '%s' in %s", rule.tool, project.root)
            return False
        if not result.ok:
            log.warning(
                "'%s' failed in %s (exit %d): %s",
                rule.tool,
                project.root,
                result.returncode,
                result.output.strip(),
            )
            return False
        return True

    def _remove_targets(self, project: Project) -> CleanResult:
        """Delete each target directory, refusing anything involving symlinks.

        Stops at the first refusal or failure.  Targets removed before that
        point stay removed.  On full success the freed total is the
        scan-time size when one was recorded, as in a dry run.
        """
        freed = 0
        for target in project.targets:
            try:
                st = os.lstat(target)
            except FileNotFoundError:
                continue
            except OSError as e:
                log.warning("Cannot access %s: %s", target, e)
                return Error(project, str(e))
            if stat.S_ISLNK(st.st_mode):
                log.warning("Refusing to remove symlink: %s", target)
                return Error(project, f"refusing to remove symlink: {target}")
            if not stat.S_ISDIR(st.st_mode):
                continue
            link = _find_symlink(target)
            if link is not None:
                log.warning("Refusing to remove %s: contains symlink %s", target, link)
                return Error(project, f"refusing to remove: contains symlink(s): {link}")
            try:
                size = dir_size(target)
                shutil.rmtree(target)
            except OSError as e:
                log.warning("Failed to remove %s: %s", target, e)
                return Error(project, str(e))
            log.info("Removed %s", target)
            freed += size
        if project.size is not None:
            freed = project.size
        return Success(project, CleanMethod.FALLBACK_REMOVE, freed)

    def clean_all(
        self,
        projects: Iterable[Project],
        dry_run: bool = False,
        on_result: CleanResultCallback | None = None,
    ) -> list[CleanResult]:
        """Clean projects one after another.

        One project's failure never prevents the next from being tried.
        """
        results: list[CleanResult] = []
        for project in projects:
            try:
                result = self.clean_project(project, dry_run)
            except Exception:
                log.exception("Unexpected failure cleaning %s", project.root)
                result = Error(project, "crashed during cleaning")
            results.append(result)
            if on_result:
                on_result(result)
        return results

    # ── worktrees ────────────────────────────────────────────────────────

    def clean_worktree(self, worktree: WorktreeInfo, dry_run: bool = False) -> CleanResult:
        """Remove one merged worktree via ``git worktree remove``."""
        if not os.path.isdir(worktree.path):
            return Skipped(worktree, f"worktree path does not exist: {worktree.path}")

        size = worktree.size if worktree.size is not None else dir_size(worktree.path)
        if dry_run:
            return Success(worktree, CleanMethod.WORKTREE_REMOVE, size)

        result = self.runner.run(
            "git",
            ["-C", str(worktree.main_repo), "worktree", "remove", str(worktree.path)],
        )
        if result is None:
            return Error(worktree, "git not found")
        if result.ok:
            log.info("Removed worktree %s [%s]", worktree.path, worktree.branch)
            return Success(worktree, CleanMethod.WORKTREE_REMOVE, size)

        detail = result.output.strip()
        if detail:
            message = f"git worktree remove: {detail}"
        else:
            message = f"git worktree remove failed (exit {result.returncode})"
        return Error(worktree, message)

    def clean_worktrees(
        self,
        worktrees: Iterable[WorktreeInfo],
        dry_run: bool = False,
        on_result: CleanResultCallback | None = None,
    ) -> list[CleanResult]:
        """Remove merged worktrees one after another.

        If git is not installed every worktree is reported as an error and
        no command is run.
        """
        git_available = self.runner.which("git") is not None
        results: list[CleanResult] = []
        for worktree in worktrees:
            if not git_available:
                result: CleanResult = Error(worktree, "git not found")
            else:
                try:
                    result = self.clean_worktree(worktree, dry_run)
                except Exception:
                    log.exception("Unexpected failure removing worktree %s", worktree.path)
                    result = Error(worktree, "crashed during cleaning")
            results.append(result)
            if on_result:
                on_result(result)
        return results
