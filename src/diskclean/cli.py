"""CLI interface for diskclean."""

from __future__ import annotations

import json
import logging
import sys
import time
from pathlib import Path
from typing import Callable

import click

from diskclean.core.engine import CleanEngine
from diskclean.core.process import CommandRunner
from diskclean.core.registry import RuleRegistry, UnknownRuleError
from diskclean.core.scanner import filter_excluded, scan_all
from diskclean.core.worktree import scan_worktrees
from diskclean.models.clean_result import Error
from diskclean.models.project import Project, WorktreeInfo
from diskclean.models.rule import Rule
from diskclean.report import (
    project_to_dict,
    report_clean,
    report_scan,
    report_worktree_scan,
    result_to_dict,
    worktree_to_dict,
)
from diskclean.rules import BUILTIN_RULES
from diskclean.utils import format_elapsed

log = logging.getLogger(__name__)


def _setup_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")


def _build_registry() -> RuleRegistry:
    return RuleRegistry(BUILTIN_RULES)


def _parse_only(ctx: click.Context, param: click.Parameter, value: str | None) -> list[Rule]:
    registry = _build_registry()
    if not value:
        return registry.get_all()
    try:
        return registry.select(value)
    except UnknownRuleError as exc:
        raise click.BadParameter(str(exc), ctx=ctx, param=param) from exc


_SCAN_OPTIONS = (
    click.argument(
        "path",
        required=False,
        default=".",
        type=click.Path(exists=True, file_okay=False, path_type=Path),
    ),
    click.option("--size", "with_size", is_flag=True, help="Calculate directory sizes (slower)"),
    click.option(
        "--only",
        "rules",
        callback=_parse_only,
        metavar="TYPE[,TYPE]",
        help="Only these project types (comma-separated)",
    ),
    click.option(
        "--exclude",
        "excludes",
        multiple=True,
        metavar="NAME",
        help="Skip projects with this path segment (repeatable)",
    ),
    click.option("--worktrees", is_flag=True, help="Also look for merged git worktrees"),
    click.option("--json", "as_json", is_flag=True, help="Output as JSON"),
)


def _scan_options(func: Callable) -> Callable:
    """Attach the options shared by ``scan`` and ``clean``."""
    for decorator in reversed(_SCAN_OPTIONS):
        func = decorator(func)
    return func


def _scan(
    path: Path,
    rules: list[Rule],
    excludes: tuple[str, ...],
    with_size: bool,
    worktrees: bool,
    runner: CommandRunner,
) -> tuple[list[Project], list[WorktreeInfo]]:
    root = path.resolve()
    projects = filter_excluded(scan_all(rules, root, compute_size=with_size), excludes)
    found_worktrees: list[WorktreeInfo] = []
    if worktrees:
        found_worktrees = scan_worktrees(root, compute_size=with_size, runner=runner)
    return projects, found_worktrees


@click.group()
@click.version_option(package_name="diskclean")
@click.option("-v", "--verbose", count=True, help="Increase verbosity (-v info, -vv debug)")
def main(verbose: int) -> None:
    """Reclaim disk space from development build artifacts."""
    _setup_logging(verbose)


# ── list ─────────────────────────────────────────────────────────────────

@main.command("list")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def list_cmd(as_json: bool) -> None:
    """List supported project types."""
    rules = _build_registry().get_all()

    if as_json:
        data = [
            {
                "name": r.name,
                "markers": list(r.markers),
                "targets": list(r.targets),
                "tool": r.tool or None,
            }
            for r in rules
        ]
        click.echo(json.dumps(data, indent=2))
        return

    click.echo("Supported project types:\n")
    for rule in rules:
        line = f"  {rule.icon}  {click.style(f'{rule.name:12s}', fg='cyan', bold=True)}{', '.join(rule.markers):32s}"
        if rule.targets:
            line += f"→ {', '.join(rule.targets)}"
        if rule.tool:
            line += click.style(f"  [{rule.tool}]", fg="bright_black")
        click.echo(line)


# ── scan ─────────────────────────────────────────────────────────────────

@main.command()
@_scan_options
def scan(
    path: Path,
    with_size: bool,
    rules: list[Rule],
    excludes: tuple[str, ...],
    worktrees: bool,
    as_json: bool,
) -> None:
    """Scan for cleanable projects (preview only, never deletes)."""
    if not as_json:
        click.echo(f"\n{click.style('🔍', bold=True)} Scanning {path.resolve()}...\n")

    start = time.monotonic()
    projects, found_worktrees = _scan(path, rules, excludes, with_size, worktrees, CommandRunner())
    elapsed = time.monotonic() - start

    if as_json:
        data: dict = {"projects": [project_to_dict(p) for p in projects]}
        if worktrees:
            data["worktrees"] = [worktree_to_dict(w) for w in found_worktrees]
        click.echo(json.dumps(data, indent=2))
        return

    report_scan(projects)
    if worktrees:
        click.echo()
        report_worktree_scan(found_worktrees)
    click.echo(click.style(f"\nScanned in {format_elapsed(elapsed)}\n", fg="bright_black"))


# ── clean ────────────────────────────────────────────────────────────────

@main.command()
@_scan_options
@click.option("--dry-run", is_flag=True, help="Show what would be cleaned without doing it")
@click.option(
    "--allow-rm",
    is_flag=True,
    envvar="DISKCLEAN_ALLOW_RM",
    help="Delete target directories directly when no clean tool is available",
)
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation")
def clean(
    path: Path,
    with_size: bool,
    rules: list[Rule],
    excludes: tuple[str, ...],
    worktrees: bool,
    as_json: bool,
    dry_run: bool,
    allow_rm: bool,
    yes: bool,
) -> None:
    """Scan and clean the projects found."""
    runner = CommandRunner()

    if not as_json:
        click.echo(f"\n{click.style('🔍', bold=True)} Scanning {path.resolve()}...\n")

    projects, found_worktrees = _scan(path, rules, excludes, with_size, worktrees, runner)

    if not projects and not found_worktrees:
        if as_json:
            click.echo(json.dumps({"status": "nothing_to_clean", "results": []}))
        else:
            click.echo("Nothing to clean.")
        return

    if not as_json:
        report_scan(projects)
        if worktrees:
            click.echo()
            report_worktree_scan(found_worktrees)
        click.echo()

    if allow_rm and not as_json:
        click.echo(
            click.style("Warning:", fg="yellow", bold=True)
            + " --allow-rm lets diskclean delete target directories recursively.\n"
        )

    if not (yes or dry_run or as_json):
        if not click.confirm("Clean all?", default=False):
            click.echo("Aborted.")
            return

    if not as_json:
        banner = "--- Dry Run ---" if dry_run else "--- Cleaning ---"
        click.echo(f"\n{click.style(banner, bold=True)}\n")

    engine = CleanEngine(allow_remove=allow_rm, runner=runner)
    results = engine.clean_all(projects, dry_run=dry_run)
    results.extend(engine.clean_worktrees(found_worktrees, dry_run=dry_run))

    if as_json:
        status = "dry_run" if dry_run else "cleaned"
        click.echo(json.dumps({"status": status, "results": [result_to_dict(r) for r in results]}, indent=2))
    else:
        report_clean(results)
        if dry_run:
            click.echo("(dry run, nothing was deleted)")

    if any(isinstance(r, Error) for r in results):
        sys.exit(1)
