"""Data models for pattern rules and normalized grammar matches."""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Literal

RuleScope = Literal["text", "directive"]


@dataclass(frozen=True)
class MatchSpan:
    """Half-open character range ``[start, end)`` into the original input."""

    start: int
    end: int
    text: str

    @classmethod
    def from_bounds(cls, source: str, start: int, end: int) -> MatchSpan:
        return cls(start=start, end=end, text=source[start:end])

    @classmethod
    def from_match(cls, match: re.Match[str], group: int | str = 0) -> MatchSpan:
        return cls.from_bounds(match.string, match.start(group), match.end(group))

    def overlaps(self, other: MatchSpan) -> bool:
        return self.start < other.end and self.end > other.start

    def is_within(self, source: str) -> bool:
        if not isinstance(self.start, int) or not isinstance(self.end, int):
            return False
        return (
            0 <= self.start < self.end <= len(source)
            and source[self.start : self.end] == self.text
        )


@dataclass(frozen=True)
class NormalizedMatch:
    """Base shape produced by a rule normalizer."""

    span: MatchSpan


@dataclass(frozen=True)
class RawMatch(NormalizedMatch):
    """Unnormalized grammar match, read positionally by the record builders."""

    groups: tuple[str | None, ...] = ()

    @classmethod
    def from_match(cls, match: re.Match[str]) -> RawMatch:
        return cls(span=MatchSpan.from_match(match), groups=match.groups())


@dataclass(frozen=True)
class DamagePair:
    """One dice/type pair recovered from a damage phrase."""

    dice: str
    damage_type: str
    text: str


@dataclass(frozen=True)
class DamageMatch(NormalizedMatch):
    pairs: tuple[DamagePair, ...] = ()
    trailing_word: str = "damage"


@dataclass(frozen=True)
class CheckMatch(NormalizedMatch):
    check_type: str = ""
    dc: str | None = None
    basic: bool = False
    defense: str | None = None
    trailing_word: str = "check"


@dataclass(frozen=True)
class SkillMultiMatch(NormalizedMatch):
    skills: tuple[str, ...] = ()
    dc: str | None = None
    trailing_word: str = "check"


@dataclass(frozen=True)
class TemplateMatch(NormalizedMatch):
    shape: str = ""
    distance: int = 0


@dataclass(frozen=True)
class UtilityMatch(NormalizedMatch):
    expression: str = ""
    unit: str = ""


@dataclass(frozen=True)
class ActionMatch(NormalizedMatch):
    action_name: str = ""


@dataclass(frozen=True)
class ConditionMatch(NormalizedMatch):
    """Condition span plus ``[name, degree?]`` arguments kept apart from the regex groups."""

    args: tuple[str, ...] = ()


@dataclass(frozen=True)
class DirectiveMatch(NormalizedMatch):
    """One or more existing ``@Damage`` directive bodies found in the input."""

    bodies: tuple[str, ...] = ()
    suffix: str = ""


Normalizer = Callable[[re.Match[str]], Any]


def identity_normalizer(match: re.Match[str]) -> re.Match[str]:
    """Pass the raw match through unchanged."""

    return match


@dataclass(frozen=True)
class PatternRule:
    """Registered grammar with its type tag, priority and normalizer."""

    type_tag: str
    grammar: re.Pattern[str]
    priority: int
    normalize: Normalizer = identity_normalizer
    name: str = ""
    scope: RuleScope = "text"


@dataclass(frozen=True)
class ResolvedMatch:
    """Normalized match annotated with the rule that produced it."""

    record: NormalizedMatch
    type_tag: str
    priority: int
    span: MatchSpan
    rule_name: str = ""


@dataclass(frozen=True)
class CheckGroups:
    """Named capture-group roles read by the config-driven Check normalizer."""

    type: tuple[str, ...] = ()
    dc: tuple[str, ...] = ()
    basic: tuple[str, ...] = ()
    defense: tuple[str, ...] = ()
