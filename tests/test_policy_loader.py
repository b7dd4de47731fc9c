from __future__ import annotations

from pathlib import Path

import pytest

from core.conversion.policy_loader import load_policy, load_policy_text


def test_load_default_policy() -> None:
    policy = load_policy()

    assert policy.disabled_types == []
    assert policy.legacy_cleanup is True
    assert policy.secret_check_types == []
    assert policy.condition_overrides == {}


def test_load_policy_reads_all_fields(tmp_path: Path) -> None:
    path = tmp_path / "policy.yaml"
    path.write_text(
        """
disabled_types: [action, template]
legacy_cleanup: false
secret_check_types: [Perception]
condition_overrides:
  prone: Custom.prone
""",
        encoding="utf-8",
    )

    policy = load_policy(path)

    assert policy.disabled_types == ["action", "template"]
    assert policy.legacy_cleanup is False
    assert policy.secret_check_types == ["perception"]
    assert policy.condition_overrides == {"prone": "Custom.prone"}


def test_load_policy_raises_for_unknown_type_tag(tmp_path: Path) -> None:
    path = tmp_path / "policy.yaml"
    path.write_text("disabled_types: [teleport]\n", encoding="utf-8")

    with pytest.raises(ValueError, match="Invalid policy schema"):
        load_policy(path)


def test_load_policy_raises_for_unknown_field(tmp_path: Path) -> None:
    path = tmp_path / "policy.yaml"
    path.write_text("legacy_cleanup: true\nstrict: true\n", encoding="utf-8")

    with pytest.raises(ValueError, match="Invalid policy schema"):
        load_policy(path)


def test_load_policy_raises_for_missing_file(tmp_path: Path) -> None:
    with pytest.raises(ValueError, match="Policy file not found"):
        load_policy(tmp_path / "missing.yaml")


def test_load_policy_raises_for_non_mapping(tmp_path: Path) -> None:
    path = tmp_path / "policy.yaml"
    path.write_text("- action\n", encoding="utf-8")

    with pytest.raises(ValueError, match="must contain a mapping"):
        load_policy(path)


def test_load_policy_text_accepts_empty_document() -> None:
    assert load_policy_text("").legacy_cleanup is True


def test_load_policy_text_raises_for_invalid_yaml() -> None:
    with pytest.raises(ValueError, match="Invalid YAML in policy file: policy_yaml"):
        load_policy_text("disabled_types: [", source="policy_yaml")
