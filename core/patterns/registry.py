"""Pattern registry and the priority table shared by all rules."""

from __future__ import annotations

import re
from types import MappingProxyType

from core.patterns.models import Normalizer, PatternRule, RuleScope, identity_normalizer

PRIORITY = MappingProxyType(
    {
        "save": 90,
        "damage_multi": 80,
        "damage": 70,
        "healing": 70,
        "skill": 70,
        "flat": 70,
        "utility": 70,
        "basic_damage": 60,
        "basic_skill": 60,
        "legacy": 50,
        "damage_consolidation": 40,
        "legacy_condition": 40,
        "condition": 30,
        "action": 30,
        "template": 20,
    }
)

# Highest tier first. Keys inside a tier share one value; tiers strictly decrease.
_PRIORITY_TIERS: tuple[tuple[str, ...], ...] = (
    ("save",),
    ("damage_multi",),
    ("damage", "healing", "skill", "flat", "utility"),
    ("basic_damage", "basic_skill"),
    ("legacy",),
    ("damage_consolidation", "legacy_condition"),
    ("condition", "action"),
    ("template",),
)


class PatternRegistry:
    """Ordered collection of pattern rules.

    Registration order carries no meaning downstream: only priority and match offset
    decide which match survives conflict resolution.
    """

    def __init__(self) -> None:
        self._rules: list[PatternRule] = []

    def register(
        self,
        type_tag: str,
        grammar: re.Pattern[str] | str,
        priority: int,
        normalize: Normalizer | None = None,
        *,
        name: str = "",
        scope: RuleScope = "text",
    ) -> PatternRule:
        """Register one rule; a non-callable normalizer falls back to identity."""

        compiled = re.compile(grammar, re.IGNORECASE) if isinstance(grammar, str) else grammar
        rule = PatternRule(
            type_tag=type_tag,
            grammar=compiled,
            priority=priority,
            normalize=normalize if callable(normalize) else identity_normalizer,
            name=name or f"{type_tag}#{len(self._rules)}",
            scope=scope,
        )
        self._rules.append(rule)
        return rule

    def all(self) -> tuple[PatternRule, ...]:
        return tuple(self._rules)

    def type_tags(self) -> list[str]:
        """Return distinct registered type tags in stable order."""

        return sorted({rule.type_tag for rule in self._rules})

    def __len__(self) -> int:
        return len(self._rules)


def assert_priority_order() -> None:
    """Fail fast when the priority table breaks its documented tier order."""

    tier_keys = [key for tier in _PRIORITY_TIERS for key in tier]
    if sorted(tier_keys) != sorted(PRIORITY):
        raise RuntimeError(
            "Priority tiers must cover the priority table exactly: "
            f"tiers={sorted(tier_keys)}, table={sorted(PRIORITY)}"
        )

    previous: int | None = None
    for tier in _PRIORITY_TIERS:
        values = {PRIORITY[key] for key in tier}
        if len(values) != 1:
            raise RuntimeError(f"Priority tier {list(tier)} must share one value: {sorted(values)}")
        (value,) = values
        if previous is not None and value >= previous:
            raise RuntimeError(
                f"Priority tier {list(tier)} must rank below the previous tier ({value} >= {previous})"
            )
        previous = value
