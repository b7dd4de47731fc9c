"""Detection -> replacement construction -> assembly pipeline."""

from __future__ import annotations

import logging

from core.assemble.assembler import apply_replacements
from core.conditions.table import ConditionTable, load_condition_table
from core.conversion.models import ConversionPolicy, ConversionReport, ConversionResult, ReplacementLogEntry
from core.detect.detector import Detector
from core.patterns.definitions import build_default_registry
from core.patterns.models import ResolvedMatch
from core.patterns.registry import PatternRegistry
from core.replacements.factory import BuildContext, ConditionResolver, build_replacement
from core.replacements.linker import ConditionLinker
from core.replacements.models import ConditionReplacement, Replacement

logger = logging.getLogger("rollconv.pipeline")


class Converter:
    """Converts rules text to inline directives.

    The registry is built once and shared across calls; the condition linker is
    created fresh for every call.
    """

    def __init__(
        self,
        registry: PatternRegistry | None = None,
        resolve_condition_id: ConditionResolver | None = None,
        policy: ConversionPolicy | None = None,
    ) -> None:
        self.policy = policy or ConversionPolicy()
        if registry is None:
            registry = build_default_registry(self.policy.disabled_types)
        self.registry = registry
        self.detector = Detector(self.registry)
        if resolve_condition_id is None:
            table = _default_condition_table(self.policy)
            resolve_condition_id = table.resolve
        self.resolve_condition_id = resolve_condition_id

    def run(self, text: str) -> ConversionResult:
        """Convert text and report what happened to every resolved match."""

        if not isinstance(text, str):
            raise TypeError(f"text must be str, got {type(text).__name__}")

        context = BuildContext(
            linker=ConditionLinker(),
            resolve_condition_id=self.resolve_condition_id,
            secret_check_types=frozenset(self.policy.secret_check_types),
        )
        resolved = sorted(self.detector.detect_all(text), key=lambda item: item.span.start)

        records: list[Replacement] = []
        entries: list[ReplacementLogEntry] = []
        for match in resolved:
            try:
                record = build_replacement(match, context)
            except Exception as exc:  # noqa: BLE001
                logger.warning("failed to build %s replacement at %d: %s", match.type_tag, match.span.start, exc)
                entries.append(_entry(match, "failed", reason=str(exc)))
                continue
            records.append(record)
            entries.append(_record_entry(match, record))

        converted = apply_replacements(text, records, legacy_cleanup=self.policy.legacy_cleanup)
        return ConversionResult(text=converted, report=ConversionReport.from_entries(entries))

    def convert(self, text: str) -> str:
        """Convert text; on an unexpected failure return it unchanged."""

        if not isinstance(text, str):
            raise TypeError(f"text must be str, got {type(text).__name__}")
        try:
            return self.run(text).text
        except Exception:  # noqa: BLE001
            logger.exception("conversion failed; returning input unchanged")
            return text


def _default_condition_table(policy: ConversionPolicy) -> ConditionTable:
    table = load_condition_table()
    if policy.condition_overrides:
        table = table.with_overrides(policy.condition_overrides)
    return table


def _record_entry(match: ResolvedMatch, record: Replacement) -> ReplacementLogEntry:
    if not record.enabled:
        return _entry(match, "duplicate", reason="condition already linked")
    if not record.validate():
        if isinstance(record, ConditionReplacement) and record.condition_name and not record.resolved_id:
            return _entry(match, "invalid", reason="condition identifier not found")
        return _entry(match, "invalid", reason="record failed validation")
    return _entry(match, "replaced", new_text=record.render())


def _entry(
    match: ResolvedMatch,
    status: str,
    *,
    new_text: str | None = None,
    reason: str | None = None,
) -> ReplacementLogEntry:
    return ReplacementLogEntry(
        status=status,  # type: ignore[arg-type]
        type_tag=match.type_tag,
        rule_name=match.rule_name,
        start=match.span.start,
        end=match.span.end,
        original_text=match.span.text,
        new_text=new_text,
        reason=reason,
    )


_default_converter: Converter | None = None


def convert_text(text: str) -> str:
    """Convert with a lazily built default converter."""

    global _default_converter
    if _default_converter is None:
        _default_converter = Converter()
    return _default_converter.convert(text)
