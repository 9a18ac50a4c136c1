"""Central rule registry."""

from __future__ import annotations

import logging
from typing import Iterable, Iterator

from diskclean.models.rule import Rule

log = logging.getLogger(__name__)


class UnknownRuleError(ValueError):
    """Raised when a type filter names a rule that is not registered."""

    def __init__(self, name: str, available: list[str]) -> None:
        self.name = name
        self.available = available
        super().__init__(f"Unknown type: {name}. Available: {', '.join(available)}")


class RuleRegistry:
    """Stores project-type rules in declaration order.

    Iteration order is registration order, which is also the precedence
    order used when deduplicating shared target directories.
    """

    def __init__(self, rules: Iterable[Rule] = ()) -> None:
        self._rules: dict[str, Rule] = {}
        for rule in rules:
            self.register(rule)

    def register(self, rule: Rule) -> None:
        """Register a rule, ignoring duplicates by name."""
        if rule.name in self._rules:
            log.warning("Rule '%s' already registered, skipping duplicate", rule.name)
            return
        self._rules[rule.name] = rule
        log.debug("Registered rule: %s", rule.name)

    def get(self, name: str) -> Rule | None:
        """Get a rule by name (case-insensitive)."""
        return self._rules.get(name.strip().lower())

    def get_all(self) -> list[Rule]:
        """Get all registered rules in declaration order."""
        return list(self)

    def names(self) -> list[str]:
        return list(self._rules)

    def select(self, names: str) -> list[Rule]:
        """Resolve a comma-separated, case-insensitive list of rule names.

        The result keeps declaration order regardless of the order the
        names were given in, so dedup precedence never depends on input.

        Raises:
            UnknownRuleError: if any name is not registered.
        """
        wanted: set[str] = set()
        for raw in names.split(","):
            name = raw.strip().lower()
            if not name:
                continue
            if name not in self:
                raise UnknownRuleError(raw.strip(), self.names())
            wanted.add(name)
        return [rule for rule in self if rule.name in wanted]

    def __iter__(self) -> Iterator[Rule]:
        return iter(self._rules.values())

    def __contains__(self, name: str) -> bool:
        return self.get(name) is not None
