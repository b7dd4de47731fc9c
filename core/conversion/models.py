"""Data models for conversion policy, replacement logs, and reports."""

from __future__ import annotations

from collections import Counter
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

KNOWN_TYPE_TAGS: tuple[str, ...] = (
    "action",
    "condition",
    "consolidation",
    "damage",
    "flat",
    "healing",
    "legacy",
    "save",
    "skill",
    "template",
    "utility",
)

EntryStatus = Literal["replaced", "duplicate", "invalid", "failed"]


class ConversionPolicy(BaseModel):
    """Conversion policy loaded from YAML."""

    model_config = ConfigDict(extra="forbid")

    disabled_types: list[str] = Field(default_factory=list)
    legacy_cleanup: bool = True
    secret_check_types: list[str] = Field(default_factory=list)
    condition_overrides: dict[str, str] = Field(default_factory=dict)

    @field_validator("disabled_types")
    @classmethod
    def _known_types(cls, value: list[str]) -> list[str]:
        unknown = sorted(set(value) - set(KNOWN_TYPE_TAGS))
        if unknown:
            raise ValueError(f"unknown type tags: {unknown}")
        return value

    @field_validator("secret_check_types")
    @classmethod
    def _lowercase_checks(cls, value: list[str]) -> list[str]:
        return [item.strip().lower() for item in value]


class ReplacementLogEntry(BaseModel):
    """Outcome of one resolved match."""

    model_config = ConfigDict(extra="forbid")

    status: EntryStatus
    type_tag: str
    rule_name: str
    start: int
    end: int
    original_text: str
    new_text: str | None = None
    reason: str | None = None


class ConversionSummary(BaseModel):
    """Aggregate counts for observability."""

    model_config = ConfigDict(extra="forbid")

    total_matches: int
    replaced_count: int
    duplicate_count: int
    invalid_count: int
    failed_count: int
    by_type: dict[str, int] = Field(default_factory=dict)


class ConversionReport(BaseModel):
    """Per-match log plus summary.

    Rules:
    - total_matches == len(entries)
    - by_type counts replaced entries only
    """

    model_config = ConfigDict(extra="forbid")

    entries: list[ReplacementLogEntry] = Field(default_factory=list)
    summary: ConversionSummary

    @classmethod
    def from_entries(cls, entries: list[ReplacementLogEntry]) -> ConversionReport:
        statuses: Counter[str] = Counter(entry.status for entry in entries)
        by_type: Counter[str] = Counter(
            entry.type_tag for entry in entries if entry.status == "replaced"
        )
        return cls(
            entries=entries,
            summary=ConversionSummary(
                total_matches=len(entries),
                replaced_count=statuses["replaced"],
                duplicate_count=statuses["duplicate"],
                invalid_count=statuses["invalid"],
                failed_count=statuses["failed"],
                by_type=dict(sorted(by_type.items())),
            ),
        )


class ConversionResult(BaseModel):
    """Converted text with its report."""

    model_config = ConfigDict(extra="forbid")

    text: str
    report: ConversionReport
