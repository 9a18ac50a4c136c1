"""diskclean data models."""

from diskclean.models.rule import Rule
from diskclean.models.project import Project, WorktreeInfo
from diskclean.models.clean_result import CleanMethod, CleanResult, Error, Skipped, Success

__all__ = [
    "CleanMethod",
    "CleanResult",
    "Error",
    "Project",
    "Rule",
    "Skipped",
    "Success",
    "WorktreeInfo",
]
