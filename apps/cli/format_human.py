"""Human-readable conversion summary rendering for CLI output."""

from __future__ import annotations

from core.conversion.models import ConversionReport

_MAX_SKIPPED_LINES = 5


def render_report_summary(report: ConversionReport) -> str:
    """Render one-screen human-readable conversion summary."""

    summary = report.summary
    lines: list[str] = []
    lines.append("conversion_summary:")
    lines.append(
        f"matches={summary.total_matches} replaced={summary.replaced_count} "
        f"duplicate={summary.duplicate_count} invalid={summary.invalid_count} "
        f"failed={summary.failed_count}"
    )

    if summary.by_type:
        by_type_text = ", ".join(f"{tag}={count}" for tag, count in summary.by_type.items())
        lines.append(f"by_type: {by_type_text}")
    else:
        lines.append("by_type: none")

    skipped = [entry for entry in report.entries if entry.status in {"invalid", "failed"}]
    if not skipped:
        lines.append("skipped: none")
        return "\n".join(lines)

    for entry in skipped[:_MAX_SKIPPED_LINES]:
        lines.append(
            f"skipped: [{entry.start},{entry.end}) {entry.type_tag} "
            f"{entry.original_text!r} {entry.status} ({_to_string(entry.reason)})"
        )
    if len(skipped) > _MAX_SKIPPED_LINES:
        lines.append(f"skipped: ... {len(skipped) - _MAX_SKIPPED_LINES} more")
    return "\n".join(lines)


def _to_string(value: object) -> str:
    if value is None:
        return "none"
    return str(value)
