"""External command execution without a shell."""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CommandResult:
    """Combined stdout/stderr and exit code of a finished command."""

    output: str
    returncode: int

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class CommandRunner:
    """Runs external programs and remembers where they live.

    Binary lookups are cached per instance, so one runner should be
    shared for the duration of a run and passed to whatever needs it.
    Tests substitute a subclass that scripts ``which`` and ``run``.
    """

    def __init__(self) -> None:
        self._resolved: dict[str, str | None] = {}

    def which(self, name: str) -> str | None:
        """Return the absolute path of *name* on PATH, or None."""
        if name not in self._resolved:
            self._resolved[name] = shutil.which(name)
            log.debug("Resolved %s -> %s", name, self._resolved[name])
        return self._resolved[name]

    def run(
        self,
        name: str,
        args: Sequence[str],
        cwd: Path | str | None = None,
    ) -> CommandResult | None:
        """Run *name* with *args* and wait for it to exit.

        Arguments are passed as a vector, never through a shell.  Returns
        None if the binary cannot be found or started.  No timeout is
        applied: a command that hangs blocks the caller.
        """
        binary = self.which(name)
        if binary is None:
            return None

        try:
            proc = subprocess.run(
                [binary, *args],
                cwd=os.fspath(cwd) if cwd is not None else None,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                stdin=subprocess.DEVNULL,
                text=True,
                errors="replace",
            )
        except OSError as e:
            log.debug("Failed to start %s: %s", binary, e)
            return None

        return CommandResult(output=proc.stdout or "", returncode=proc.returncode)
