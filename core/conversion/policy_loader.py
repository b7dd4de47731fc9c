"""Policy loading utilities for the conversion pipeline."""

from __future__ import annotations

from pathlib import Path

import yaml  # type: ignore[import-untyped]
from pydantic import ValidationError

from core.conversion.models import ConversionPolicy


def load_policy(path: Path | None = None) -> ConversionPolicy:
    """Load and validate conversion policy from YAML."""

    policy_path = path or Path(__file__).with_name("policy.yaml")

    try:
        raw = yaml.safe_load(policy_path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise ValueError(f"Policy file not found: {policy_path}") from exc
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid YAML in policy file: {policy_path}") from exc

    return _validate_policy(raw, str(policy_path))


def load_policy_text(text: str, source: str = "<inline>") -> ConversionPolicy:
    """Validate a policy supplied inline, e.g. through the API."""

    try:
        raw = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid YAML in policy file: {source}") from exc

    return _validate_policy(raw, source)


def _validate_policy(raw: object, source: str) -> ConversionPolicy:
    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ValueError(f"Policy file must contain a mapping: {source}")

    try:
        return ConversionPolicy.model_validate(raw)
    except ValidationError as exc:
        raise ValueError(f"Invalid policy schema: {source}") from exc
