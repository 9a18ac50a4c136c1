"""Shared test fixtures."""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Sequence

import pytest

from diskclean.core.process import CommandResult, CommandRunner
from diskclean.models.rule import Rule


class FakeRunner(CommandRunner):
    """Command runner that never spawns processes.

    ``binaries`` maps names to fake paths; anything missing is "not
    installed".  ``handler`` receives ``(name, args, cwd)`` and returns
    the ``CommandResult`` (or None for a launch failure).
    """

    def __init__(
        self,
        binaries: Sequence[str] = (),
        handler: Callable[[str, list[str], Path | str | None], CommandResult | None] | None = None,
    ) -> None:
        super().__init__()
        self._binaries = set(binaries)
        self._handler = handler or (lambda name, args, cwd: CommandResult("", 0))
        self.calls: list[tuple[str, list[str], Path | str | None]] = []

    def which(self, name: str) -> str | None:
        return f"/usr/bin/{name}" if name in self._binaries else None

    def run(self, name, args, cwd=None):
        if name not in self._binaries:
            return None
        self.calls.append((name, list(args), cwd))
        return self._handler(name, list(args), cwd)


@pytest.fixture
def rust_rule() -> Rule:
    return Rule(
        name="rust",
        icon="R",
        markers=("Cargo.toml",),
        targets=("target",),
        tool="cargo clean",
        tool_bin="cargo",
    )


@pytest.fixture
def node_rule() -> Rule:
    return Rule(name="node", icon="N", markers=("package.json",), targets=("node_modules",))


@pytest.fixture
def make_project(tmp_path):
    """Create a project directory with a marker and populated targets.

    Each target gets one file of ``size`` bytes.
    """

    def _make(name: str, marker: str, targets: Sequence[str] = (), size: int = 10) -> Path:
        root = tmp_path / name
        root.mkdir(parents=True, exist_ok=True)
        (root / marker).write_text("x")
        for target in targets:
            (root / target).mkdir(parents=True, exist_ok=True)
            (root / target / "artifact.bin").write_bytes(b"a" * size)
        return root

    return _make
