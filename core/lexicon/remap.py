"""Legacy-to-current vocabulary remapping helpers."""

from __future__ import annotations

import re

from core.lexicon.constants import LEGACY_CONDITION, LEGACY_DAMAGE_TYPES, MODERN_CONDITION

_TAG_LIST_RE = re.compile(r"\[([^\[\]]*)\]")
_LEGACY_CONDITION_RE = re.compile(rf"\b{re.escape(LEGACY_CONDITION)}\b", re.IGNORECASE)


def remap_damage_type(damage_type: str) -> str:
    """Return the current damage type for a legacy word, or the input unchanged."""

    return LEGACY_DAMAGE_TYPES.get(damage_type.lower(), damage_type)


def has_legacy_type_tags(directive_body: str) -> bool:
    """Whether any bracketed tag list inside a directive body holds a legacy type."""

    for match in _TAG_LIST_RE.finditer(directive_body):
        for tag in match.group(1).split(","):
            if tag.strip().lower() in LEGACY_DAMAGE_TYPES:
                return True
    return False


def remap_type_tags(directive_body: str) -> str:
    """Rewrite legacy words inside every bracketed tag list of a directive body."""

    def _replace(match: re.Match[str]) -> str:
        tags = [remap_damage_type(tag.strip()) for tag in match.group(1).split(",")]
        return "[" + ",".join(tags) + "]"

    return _TAG_LIST_RE.sub(_replace, directive_body)


def normalize_legacy_conditions(text: str) -> str:
    """Replace every remaining legacy condition alias with the current name."""

    return _LEGACY_CONDITION_RE.sub(MODERN_CONDITION, text)
