"""Pattern detection and priority-based overlap resolution."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterator

from core.patterns.models import MatchSpan, NormalizedMatch, PatternRule, RawMatch, ResolvedMatch
from core.patterns.registry import PatternRegistry

logger = logging.getLogger("rollconv.detector")

_EXISTING_DIRECTIVE_RE = re.compile(
    r"@(?:Damage|Check|Template|UUID)\[(?:[^\[\]]|\[[^\[\]]*\])*\](?:\{[^{}]*\})?"
    r"|\[\[/[^\]]*\]\](?:\{[^{}]*\})?",
    re.IGNORECASE,
)


class Detector:
    """Run every registered grammar over a text and keep non-overlapping winners."""

    def __init__(self, registry: PatternRegistry) -> None:
        self.registry = registry

    def detect_all(self, text: str) -> list[ResolvedMatch]:
        return resolve_conflicts(self.collect(text))

    def collect(self, text: str) -> list[ResolvedMatch]:
        """Collect normalized matches from all rules, before conflict resolution.

        A normalizer that raises loses only the match it was given; the rule's other
        matches and the other rules still contribute. A grammar that fails while
        scanning keeps whatever it produced before the failure.
        """

        protected = protected_spans(text)
        collected: list[ResolvedMatch] = []

        for rule in self.registry.all():
            try:
                for resolved in self._iter_rule(rule, text, protected):
                    collected.append(resolved)
            except Exception:  # noqa: BLE001
                logger.exception(
                    "rule %s failed while scanning; later matches are dropped", rule.name
                )

        return collected

    def _iter_rule(
        self, rule: PatternRule, text: str, protected: list[MatchSpan]
    ) -> Iterator[ResolvedMatch]:
        for raw in rule.grammar.finditer(text):
            if not raw.group(0):
                continue

            try:
                result = rule.normalize(raw)
            except Exception:  # noqa: BLE001
                logger.exception(
                    "rule %s failed to normalize the match at %d; skipping", rule.name, raw.start()
                )
                continue

            record = _coerce_record(result, text, rule)
            if record is None:
                continue

            if rule.scope == "text" and any(record.span.overlaps(span) for span in protected):
                logger.debug("rule %s matched inside an existing directive at %d", rule.name, raw.start())
                continue

            yield ResolvedMatch(
                record=record,
                type_tag=rule.type_tag,
                priority=rule.priority,
                span=record.span,
                rule_name=rule.name,
            )


def resolve_conflicts(matches: list[ResolvedMatch]) -> list[ResolvedMatch]:
    """Keep the highest-priority match per region, leftmost first among equals.

    Losing matches are dropped entirely, never merged; a short high-priority match beats
    a longer low-priority one.
    """

    ordered = sorted(matches, key=lambda item: (-item.priority, item.span.start))
    accepted: list[ResolvedMatch] = []
    for candidate in ordered:
        if any(candidate.span.overlaps(kept.span) for kept in accepted):
            continue
        accepted.append(candidate)
    return accepted


def protected_spans(text: str) -> list[MatchSpan]:
    """Return spans of directives already present in the input."""

    return [MatchSpan.from_match(match) for match in _EXISTING_DIRECTIVE_RE.finditer(text)]


def _coerce_record(result: object, text: str, rule: PatternRule) -> NormalizedMatch | None:
    if result is None:
        logger.debug("rule %s declined a match", rule.name)
        return None

    if isinstance(result, re.Match):
        result = RawMatch.from_match(result)

    if not isinstance(result, NormalizedMatch) or not isinstance(result.span, MatchSpan):
        logger.warning(
            "rule %s returned a malformed match (%s); skipping", rule.name, type(result).__name__
        )
        return None

    if not result.span.is_within(text):
        logger.warning(
            "rule %s returned an out-of-range span [%r, %r); skipping",
            rule.name,
            result.span.start,
            result.span.end,
        )
        return None

    return result
