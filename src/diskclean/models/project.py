"""Scan result dataclasses."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from diskclean.models.rule import Rule


@dataclass(frozen=True, slots=True)
class Project:
    """A project root with at least one existing artifact directory.

    ``size`` is ``None`` when sizes were not calculated during the scan,
    which is different from a calculated size of zero.
    """

    root: Path
    rule: Rule
    targets: tuple[Path, ...]
    size: int | None = None


@dataclass(frozen=True, slots=True)
class WorktreeInfo:
    """A linked git worktree whose branch is merged into the main branch."""

    path: Path
    branch: str
    main_repo: Path
    size: int | None = None
