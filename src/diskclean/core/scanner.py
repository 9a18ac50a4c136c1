"""Group marker matches into projects."""

from __future__ import annotations

import logging
import os
from dataclasses import replace
from pathlib import Path
from typing import Iterable, Sequence

from diskclean.core.walker import build_skip_set, find_markers
from diskclean.models.project import Project
from diskclean.models.rule import Rule
from diskclean.utils import dir_size

log = logging.getLogger(__name__)


def scan(
    rule: Rule,
    root: Path | str,
    skip: Iterable[str] | None = None,
    compute_size: bool = False,
) -> list[Project]:
    """Find projects of one type under *root*.

    The directory holding a marker is the project root; several markers
    in one directory yield a single project.  Only targets that exist
    are kept, in the order the rule declares them, and projects without
    any are left out.

    Args:
        rule: Project type to look for.
        root: Directory to search.
        skip: Directory names not to descend into. Defaults to the skip
            set built from *rule* alone.
        compute_size: Sum target sizes. Otherwise ``Project.size`` is None.
    """
    if skip is None:
        skip = build_skip_set([rule])

    projects: list[Project] = []
    seen: set[Path] = set()

    for marker in find_markers(root, rule.markers, skip):
        project_root = marker.parent
        if project_root in seen:
            continue
        seen.add(project_root)

        targets = tuple(
            project_root / name for name in rule.targets if os.path.isdir(project_root / name)
        )
        if not targets:
            continue

        size = sum(dir_size(t) for t in targets) if compute_size else None
        projects.append(Project(root=project_root, rule=rule, targets=targets, size=size))

    log.debug("Rule '%s': %d project(s) under %s", rule.name, len(projects), root)
    return projects


def scan_all(
    rules: Sequence[Rule],
    root: Path | str,
    compute_size: bool = False,
) -> list[Project]:
    """Scan for every rule in *rules*, in order, with a shared skip set.

    A target directory is reported under one project only.  The first
    rule to claim it keeps it; later projects lose that target and are
    dropped if nothing is left.
    """
    skip = build_skip_set(rules)
    claimed: set[Path] = set()
    projects: list[Project] = []

    for rule in rules:
        for project in scan(rule, root, skip, compute_size):
            unique = tuple(t for t in project.targets if t not in claimed)
            claimed.update(unique)
            if not unique:
                log.debug("Dropping %s (%s): targets already claimed", project.root, rule.name)
                continue
            if len(unique) != len(project.targets):
                size = sum(dir_size(t) for t in unique) if compute_size else None
                project = replace(project, targets=unique, size=size)
            projects.append(project)

    return projects


def matches_exclude(root: Path | str, excludes: Iterable[str]) -> bool:
    """Check whether any whole path segment of *root* is in *excludes*.

    ``myapp`` excludes ``/code/myapp/web`` but not ``/code/myapp2``.
    """
    segments = set(Path(os.fspath(root)).parts)
    return any(ex in segments for ex in excludes)


def filter_excluded(projects: Iterable[Project], excludes: Iterable[str]) -> list[Project]:
    """Drop projects whose root matches any exclude segment."""
    excludes = [e for e in excludes if e]
    if not excludes:
        return list(projects)
    return [p for p in projects if not matches_exclude(p.root, excludes)]
