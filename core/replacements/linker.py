"""Per-run condition link deduplication."""

from __future__ import annotations

from core.lexicon.constants import LEGACY_CONDITION, MODERN_CONDITION


def dedup_key(condition_name: str, degree: str | None = None) -> str:
    """Build the dedup key for a condition mention; the legacy alias shares the modern key."""

    key = f"{condition_name.lower()}-{degree}" if degree else condition_name.lower()
    if key == LEGACY_CONDITION:
        key = MODERN_CONDITION
    return key


class ConditionLinker:
    """Tracks which condition/degree pairs were already linked in one document.

    Create one per conversion run; sharing an instance across documents would leave
    later documents with unlinked first mentions.
    """

    def __init__(self) -> None:
        self._linked: set[str] = set()

    def claim(self, condition_name: str, degree: str | None = None) -> bool:
        """Return True for the first mention of a key, False for every later one."""

        key = dedup_key(condition_name, degree)
        if key in self._linked:
            return False
        self._linked.add(key)
        return True

    def linked_keys(self) -> list[str]:
        return sorted(self._linked)
