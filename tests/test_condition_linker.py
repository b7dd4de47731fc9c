from __future__ import annotations

from core.replacements.linker import ConditionLinker, dedup_key


def test_dedup_key_includes_degree() -> None:
    assert dedup_key("Frightened") == "frightened"
    assert dedup_key("Frightened", "2") == "frightened-2"


def test_flat_footed_shares_off_guard_key() -> None:
    assert dedup_key("flat-footed") == "off-guard"
    assert dedup_key("Flat-Footed") == "off-guard"


def test_first_claim_wins_and_later_claims_are_refused() -> None:
    linker = ConditionLinker()

    assert linker.claim("frightened", "2")
    assert not linker.claim("Frightened", "2")
    assert not linker.claim("frightened", "2")


def test_distinct_degrees_and_bare_mentions_are_distinct_keys() -> None:
    linker = ConditionLinker()

    assert linker.claim("sickened", "1")
    assert linker.claim("sickened", "2")
    assert linker.claim("sickened")
    assert linker.linked_keys() == ["sickened", "sickened-1", "sickened-2"]


def test_legacy_alias_after_modern_name_is_a_duplicate() -> None:
    linker = ConditionLinker()

    assert linker.claim("off-guard")
    assert not linker.claim("flat-footed")


def test_new_linker_starts_empty() -> None:
    first = ConditionLinker()
    first.claim("prone")

    assert ConditionLinker().claim("prone")
