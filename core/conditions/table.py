"""Condition identifier table used as the default condition resolver."""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path

import yaml  # type: ignore[import-untyped]
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator


class ConditionTable(BaseModel):
    """Lowercase condition name to host identifier."""

    model_config = ConfigDict(extra="forbid")

    conditions: dict[str, str] = Field(default_factory=dict)

    @field_validator("conditions")
    @classmethod
    def _lowercase_keys(cls, value: dict[str, str]) -> dict[str, str]:
        return {name.strip().lower(): identifier for name, identifier in value.items()}

    def resolve(self, condition_name: str) -> str | None:
        identifier = self.conditions.get(condition_name.strip().lower())
        return identifier or None

    def with_overrides(self, overrides: Mapping[str, str]) -> ConditionTable:
        """Return a copy with override entries layered over this table."""

        merged = dict(self.conditions)
        merged.update({name.strip().lower(): identifier for name, identifier in overrides.items()})
        return ConditionTable(conditions=merged)


def load_condition_table(path: Path | None = None) -> ConditionTable:
    """Load and validate a condition table from YAML."""

    table_path = path or Path(__file__).with_name("conditions.yaml")

    try:
        raw = yaml.safe_load(table_path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise ValueError(f"Condition table not found: {table_path}") from exc
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid YAML in condition table: {table_path}") from exc

    if not isinstance(raw, dict):
        raise ValueError(f"Condition table must contain a mapping: {table_path}")

    try:
        return ConditionTable.model_validate(raw)
    except ValidationError as exc:
        raise ValueError(f"Invalid condition table schema: {table_path}") from exc
