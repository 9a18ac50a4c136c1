"""Terminal and JSON rendering of scan and clean results."""

from __future__ import annotations

from typing import Any

import click

from diskclean.models.clean_result import CleanMethod, CleanResult, Error, Skipped, Success
from diskclean.models.project import Project, WorktreeInfo
from diskclean.rules import WORKTREE_RULE
from diskclean.utils import bytes_to_human


def _size(size_bytes: int) -> str:
    return click.style(bytes_to_human(size_bytes), fg="green", bold=True)


def _label(subject: Project | WorktreeInfo) -> tuple[str, str]:
    """Icon and display label for a result subject."""
    if isinstance(subject, WorktreeInfo):
        return WORKTREE_RULE.icon, f"{subject.path}  [{subject.branch}]"
    return subject.rule.icon, str(subject.root)


def _method_label(result: Success) -> str:
    if result.method is CleanMethod.TOOL and isinstance(result.subject, Project):
        return result.subject.rule.tool
    return result.method.value


# ── scan ─────────────────────────────────────────────────────────────────

def report_scan(projects: list[Project]) -> None:
    """Print one line per project and a reclaimable total."""
    if not projects:
        click.echo("No cleanable projects found.")
        return

    total = 0
    has_size = False
    for project in projects:
        if project.size is not None:
            has_size = True
            total += project.size
            detail = _size(project.size)
        else:
            count = len(project.targets)
            detail = click.style(f"({count} dir{'s' if count != 1 else ''})", fg="bright_black")
        click.echo(f"  {project.rule.icon}  {project.root}  {detail}")

    click.echo()
    if has_size:
        click.echo(f"Total reclaimable: ~{_size(total)} across {len(projects)} projects")
    else:
        click.echo(f"{len(projects)} projects found")


def report_worktree_scan(worktrees: list[WorktreeInfo]) -> None:
    """Print merged worktree candidates."""
    if not worktrees:
        click.echo("No merged worktrees found.")
        return

    total = 0
    has_size = False
    for wt in worktrees:
        line = f"  {WORKTREE_RULE.icon}  {wt.path}  [{click.style(wt.branch, fg='cyan')}]"
        if wt.size is not None:
            has_size = True
            total += wt.size
            line += f"  {_size(wt.size)}"
        click.echo(line)

    click.echo()
    if has_size:
        click.echo(f"Merged worktrees: {_size(total)} across {len(worktrees)} worktrees")
    else:
        click.echo(f"{len(worktrees)} merged worktrees found")


# ── clean ────────────────────────────────────────────────────────────────

def report_clean(results: list[CleanResult]) -> None:
    """Print each result, then error/skip counts and the freed total."""
    freed = 0
    errors = 0
    skipped = 0

    for result in results:
        icon, label = _label(result.subject)
        match result:
            case Success(freed_bytes=freed_bytes):
                line = f"  {click.style('✓', fg='green')} {icon}  {label}"
                if freed_bytes > 0:
                    line += f"  ~{_size(freed_bytes)}"
                line += click.style(f"  [{_method_label(result)}]", fg="bright_black")
                click.echo(line)
                freed += freed_bytes
            case Skipped(reason=reason):
                click.echo(
                    f"  {click.style('-', fg='bright_black')} {icon}  {label}  "
                    f"{click.style(f'[skip: {reason}]', fg='bright_black')}"
                )
                skipped += 1
            case Error(message=message):
                click.echo(f"  {click.style('✗', fg='red')} {icon}  {label}  {click.style(message, fg='red')}")
                errors += 1

    click.echo()
    if errors:
        click.echo(click.style(f"{errors} error(s)", fg="red"))
    if skipped:
        click.echo(f"{skipped} skipped")
    click.echo(f"Freed: ~{_size(freed)}")


# ── JSON ─────────────────────────────────────────────────────────────────

def project_to_dict(project: Project) -> dict[str, Any]:
    return {
        "type": project.rule.name,
        "root": str(project.root),
        "targets": [str(t) for t in project.targets],
        "size_bytes": project.size,
    }


def worktree_to_dict(worktree: WorktreeInfo) -> dict[str, Any]:
    return {
        "path": str(worktree.path),
        "branch": worktree.branch,
        "main_repo": str(worktree.main_repo),
        "size_bytes": worktree.size,
    }


def result_to_dict(result: CleanResult) -> dict[str, Any]:
    """Serialize a clean result, tagged by its ``status``."""
    if isinstance(result.subject, WorktreeInfo):
        data: dict[str, Any] = {"worktree": worktree_to_dict(result.subject)}
    else:
        data = {"project": project_to_dict(result.subject)}

    match result:
        case Success(method=method, freed_bytes=freed_bytes):
            data.update(status="success", method=method.value, freed_bytes=freed_bytes)
        case Skipped(reason=reason):
            data.update(status="skipped", reason=reason)
        case Error(message=message):
            data.update(status="error", error=message)
    return data
