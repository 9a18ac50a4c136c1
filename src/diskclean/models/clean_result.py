"""Cleaning result types.

A cleaning attempt ends in exactly one of three outcomes, each its own
frozen dataclass carrying only the fields that make sense for it.
``CleanResult`` is the union of the three; use ``match`` or
``isinstance`` to tell them apart.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union

from diskclean.models.project import Project, WorktreeInfo


class CleanMethod(Enum):
    """How a successful clean was carried out."""

    TOOL = "tool"
    FALLBACK_REMOVE = "rm"
    WORKTREE_REMOVE = "git worktree remove"


@dataclass(frozen=True, slots=True)
class Success:
    subject: Project | WorktreeInfo
    method: CleanMethod
    freed_bytes: int


@dataclass(frozen=True, slots=True)
class Skipped:
    subject: Project | WorktreeInfo
    reason: str


@dataclass(frozen=True, slots=True)
class Error:
    subject: Project | WorktreeInfo
    message: str


CleanResult = Union[Success, Skipped, Error]
