"""Typer CLI entrypoint for the inline roll converter."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, Literal, cast

import typer

from apps.cli.format_human import render_report_summary
from apps.cli.io import existing_output_files, read_input_text, write_json_atomic, write_text_atomic
from core.conditions.table import load_condition_table
from core.conversion.policy_loader import load_policy
from core.orchestrator.pipeline import Converter
from core.patterns.definitions import build_default_registry

app = typer.Typer(help="Inline roll converter CLI", rich_markup_mode=None)
ReportMode = Literal["none", "human", "json"]


@app.callback()
def cli_callback() -> None:
    """CLI root callback to keep `rollconv convert` as explicit command form."""


@app.command("convert")
def convert_command(
    input_path: Annotated[
        str, typer.Option("--input", help="Input text file, or '-' for stdin.")
    ] = "-",
    out: Annotated[
        Path | None, typer.Option("--out", help="Output file; stdout when omitted.")
    ] = None,
    policy: Annotated[Path | None, typer.Option()] = None,
    conditions: Annotated[
        Path | None, typer.Option(help="Condition identifier table YAML.")
    ] = None,
    report: Annotated[str, typer.Option()] = "none",
    report_out: Annotated[
        Path | None, typer.Option("--report-out", help="Write the JSON report to this file.")
    ] = None,
    force: Annotated[
        bool, typer.Option("--force", help="Overwrite outputs when they already exist.")
    ] = False,
) -> None:
    """Convert rules text to inline directives."""

    normalized_report = report.lower().strip()
    if normalized_report not in {"none", "human", "json"}:
        _echo("ERROR: --report must be one of: none, human, json.")
        raise typer.Exit(code=1)
    report_mode = cast(ReportMode, normalized_report)

    existing = existing_output_files([out, report_out])
    if existing and not force:
        names = ", ".join(path.name for path in existing)
        _echo(f"ERROR: outputs already exist: {names} (use --force to overwrite).")
        raise typer.Exit(code=2)
    if existing:
        names = ", ".join(path.name for path in existing)
        _echo(f"INFO: overwriting existing outputs: {names}")

    try:
        text = read_input_text(input_path)
        policy_model = load_policy(policy)
        resolver = None
        if conditions is not None:
            table = load_condition_table(conditions)
            if policy_model.condition_overrides:
                table = table.with_overrides(policy_model.condition_overrides)
            resolver = table.resolve
        converter = Converter(resolve_condition_id=resolver, policy=policy_model)
        result = converter.run(text)
    except Exception as exc:  # noqa: BLE001
        _echo(f"ERROR: {type(exc).__name__}: {exc}")
        raise typer.Exit(code=1) from exc

    try:
        if out is None:
            typer.echo(result.text, nl=False)
        else:
            write_text_atomic(out, result.text)
            _echo(f"INFO: wrote converted text to {out}")
        if report_out is not None:
            write_json_atomic(report_out, result.report.model_dump(mode="json"))
            _echo(f"INFO: wrote report to {report_out}")
    except OSError as exc:
        _echo(f"ERROR: write output failed: {exc}")
        raise typer.Exit(code=1) from exc

    if report_mode == "human":
        _echo(render_report_summary(result.report))
    elif report_mode == "json":
        _echo(result.report.model_dump_json())

    _echo("INFO: success")
    raise typer.Exit(code=0)


@app.command("rules")
def rules_command(
    policy: Annotated[Path | None, typer.Option()] = None,
) -> None:
    """List registered rules with type tag and priority, highest priority first."""

    try:
        policy_model = load_policy(policy)
    except ValueError as exc:
        _echo(f"ERROR: {exc}")
        raise typer.Exit(code=1) from exc

    registry = build_default_registry(policy_model.disabled_types)
    for rule in sorted(registry.all(), key=lambda item: (-item.priority, item.name)):
        typer.echo(f"{rule.priority:>3} {rule.type_tag:<13} {rule.scope:<9} {rule.name}")
    raise typer.Exit(code=0)


def _echo(message: str) -> None:
    typer.echo(message, err=True)


def main() -> None:
    """Console script entrypoint."""

    app()


if __name__ == "__main__":
    main()
