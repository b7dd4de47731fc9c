"""Custom exceptions for core conversion logic."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from core.patterns.models import ResolvedMatch


class ConversionError(Exception):
    """Base error for a single match that cannot become a replacement."""

    def __init__(self, message: str, *, match: ResolvedMatch | None = None) -> None:
        super().__init__(message)
        self.match = match


class UnknownPatternTypeError(ConversionError):
    """Raised when no replacement builder is registered for a type tag."""

    def __init__(self, type_tag: str, *, match: ResolvedMatch | None = None) -> None:
        super().__init__(f"Unknown pattern type: {type_tag}", match=match)
        self.type_tag = type_tag


class MalformedMatchError(ConversionError):
    """Raised when a normalized match has a shape its builder cannot read."""
