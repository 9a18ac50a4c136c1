"""Project-type rule descriptor."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Rule:
    """Describes how to recognise and clean one kind of project.

    Any of ``markers`` identifies a project root. A marker is either an
    exact file name (``Cargo.toml``) or a suffix glob with a single
    leading ``*`` (``*.nimble``).
    """

    name: str
    icon: str
    markers: tuple[str, ...]
    targets: tuple[str, ...] = ()
    tool: str = ""
    """Native clean command line, e.g. ``cargo clean``. Empty means none."""
    tool_bin: str = ""
    """Binary looked up on PATH to decide whether ``tool`` can run."""

    @property
    def has_tool(self) -> bool:
        return bool(self.tool and self.tool_bin)
