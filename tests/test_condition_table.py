from __future__ import annotations

from pathlib import Path

import pytest

from core.conditions.table import ConditionTable, load_condition_table
from core.lexicon.constants import ALL_CONDITIONS


def test_default_table_covers_every_condition() -> None:
    table = load_condition_table()

    for name in ALL_CONDITIONS:
        assert table.resolve(name) == f"Compendium.pf2e.conditionitems.Item.{name}"


def test_resolve_is_case_insensitive_and_returns_none_for_unknown() -> None:
    table = ConditionTable(conditions={"Prone": "Item.prone"})

    assert table.resolve("PRONE ") == "Item.prone"
    assert table.resolve("slippery") is None


def test_overrides_are_layered_over_table() -> None:
    table = ConditionTable(conditions={"prone": "Item.prone", "dazzled": "Item.dazzled"})

    merged = table.with_overrides({"Prone": "Custom.prone"})

    assert merged.resolve("prone") == "Custom.prone"
    assert merged.resolve("dazzled") == "Item.dazzled"
    assert table.resolve("prone") == "Item.prone"


def test_load_condition_table_raises_for_missing_file(tmp_path: Path) -> None:
    with pytest.raises(ValueError, match="Condition table not found"):
        load_condition_table(tmp_path / "missing.yaml")


def test_load_condition_table_raises_for_non_mapping(tmp_path: Path) -> None:
    path = tmp_path / "conditions.yaml"
    path.write_text("- prone\n- dazzled\n", encoding="utf-8")

    with pytest.raises(ValueError, match="must contain a mapping"):
        load_condition_table(path)


def test_load_condition_table_raises_for_unknown_key(tmp_path: Path) -> None:
    path = tmp_path / "conditions.yaml"
    path.write_text("conditions: {prone: Item.prone}\nextra: true\n", encoding="utf-8")

    with pytest.raises(ValueError, match="Invalid condition table schema"):
        load_condition_table(path)


def test_load_condition_table_raises_for_invalid_yaml(tmp_path: Path) -> None:
    path = tmp_path / "conditions.yaml"
    path.write_text("conditions: [unclosed\n", encoding="utf-8")

    with pytest.raises(ValueError, match="Invalid YAML"):
        load_condition_table(path)
