"""Directory walker that finds project marker files.

The walk is best-effort: directories that cannot be read are skipped and
the scan carries on with their siblings.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterable

from diskclean.models.rule import Rule

log = logging.getLogger(__name__)

# Never descended into, whatever rules are active.
PERMANENT_SKIP: frozenset[str] = frozenset({".git", ".hg", ".svn", ".cache"})


def build_skip_set(rules: Iterable[Rule]) -> frozenset[str]:
    """Directory names the walker must not enter.

    The permanent VCS/cache names plus every target of every rule, so
    markers inside artifact trees (``node_modules/x/package.json``) are
    never mistaken for projects.
    """
    skip = set(PERMANENT_SKIP)
    for rule in rules:
        skip.update(rule.targets)
    return frozenset(skip)


def _split_markers(markers: Iterable[str]) -> tuple[set[str], list[str]]:
    """Separate exact names from ``*SUFFIX`` patterns.

    Only a single leading ``*`` is special. Anything else (``?``,
    ``[abc]``, ``**/``) is compared literally.
    """
    exact: set[str] = set()
    suffixes: list[str] = []
    for marker in markers:
        if marker.startswith("*"):
            suffixes.append(marker[1:])
        else:
            exact.add(marker)
    return exact, suffixes


def find_markers(
    root: Path | str,
    markers: Iterable[str],
    skip: Iterable[str] = PERMANENT_SKIP,
) -> list[Path]:
    """Walk *root* and return absolute paths of files matching *markers*.

    A ``*SUFFIX`` pattern matches any name ending in ``SUFFIX``, including
    a file called exactly ``SUFFIX`` (``*.nimble`` matches ``.nimble``).
    Symlinks to files match like files and symlinks to directories are
    followed; there is no cycle detection here.
    """
    root = os.path.abspath(root)
    if not os.path.isdir(root):
        return []

    skip = frozenset(skip)
    exact, suffixes = _split_markers(markers)
    found: list[Path] = []
    stack: list[str] = [root]

    while stack:
        current = stack.pop()
        try:
            with os.scandir(current) as it:
                entries = list(it)
        except OSError:
            log.debug("Cannot read directory: %s", current)
            continue

        for entry in entries:
            name = entry.name
            try:
                if entry.is_dir():
                    if name not in skip:
                        stack.append(entry.path)
                    continue
                if not entry.is_file():
                    continue
            except OSError:
                log.debug("Cannot stat: %s", entry.path)
                continue

            if name in exact or any(name.endswith(sfx) for sfx in suffixes):
                found.append(Path(entry.path))

    return found
