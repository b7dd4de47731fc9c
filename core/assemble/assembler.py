"""Splice rendered replacements back into the source text."""

from __future__ import annotations

from collections.abc import Iterable

from core.lexicon.remap import normalize_legacy_conditions
from core.replacements.models import Replacement


def is_applicable(record: Replacement) -> bool:
    return record.enabled and record.validate()


def apply_replacements(
    text: str, records: Iterable[Replacement], *, legacy_cleanup: bool = True
) -> str:
    """Apply enabled, valid records rightmost first, then normalize legacy conditions.

    Splicing from the end keeps every earlier offset valid; records are assumed
    disjoint, which conflict resolution guarantees.
    """

    applicable = sorted(
        (record for record in records if is_applicable(record)),
        key=lambda record: record.start,
        reverse=True,
    )

    result = text
    for record in applicable:
        result = result[: record.start] + record.render() + result[record.end :]

    if legacy_cleanup:
        result = normalize_legacy_conditions(result)
    return result
