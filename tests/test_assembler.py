from __future__ import annotations

from core.assemble.assembler import apply_replacements
from core.patterns.models import MatchSpan
from core.replacements.models import ActionReplacement, ConditionReplacement, TemplateReplacement


def _span(text: str, fragment: str, start: int = 0) -> MatchSpan:
    index = text.index(fragment, start)
    return MatchSpan.from_bounds(text, index, index + len(fragment))


def test_splices_rightmost_first_and_preserves_surrounding_text() -> None:
    text = "Try to Seek inside a 20-foot burst, then Trip."
    records = [
        ActionReplacement(span=_span(text, "Seek"), priority=30, type_tag="action", action_name="seek"),
        TemplateReplacement(
            span=_span(text, "20-foot burst"), priority=20, type_tag="template", shape="burst", distance=20
        ),
        ActionReplacement(span=_span(text, "Trip"), priority=30, type_tag="action", action_name="trip"),
    ]

    result = apply_replacements(text, records)

    assert result == (
        "Try to [[/act seek]] inside a @Template[type:burst|distance:20], then [[/act trip]]."
    )


def test_adjacent_spans_have_no_gap_or_overlap() -> None:
    text = "SeekTrip"
    records = [
        ActionReplacement(span=_span(text, "Seek"), priority=30, type_tag="action", action_name="seek"),
        ActionReplacement(span=_span(text, "Trip"), priority=30, type_tag="action", action_name="trip"),
    ]

    assert apply_replacements(text, records) == "[[/act seek]][[/act trip]]"


def test_disabled_and_invalid_records_leave_text_untouched() -> None:
    text = "prone and prone in a 0-foot cone"
    records = [
        ConditionReplacement(
            span=_span(text, "prone"),
            priority=30,
            type_tag="condition",
            condition_name="prone",
            resolved_id="Item.prone",
            enabled=False,
        ),
        ConditionReplacement(
            span=_span(text, "prone", 6), priority=30, type_tag="condition", condition_name="prone"
        ),
        TemplateReplacement(
            span=_span(text, "0-foot cone"), priority=20, type_tag="template", shape="cone", distance=0
        ),
    ]

    assert apply_replacements(text, records) == text


def test_final_pass_normalizes_legacy_condition_alias() -> None:
    text = "It is flat-footed."

    assert apply_replacements(text, []) == "It is off-guard."
    assert apply_replacements(text, [], legacy_cleanup=False) == text
