from __future__ import annotations

import json
from pathlib import Path

from typer.testing import CliRunner

from apps.cli.main import app

runner = CliRunner()


def test_cli_converts_file_to_out_file() -> None:
    with runner.isolated_filesystem() as tmp:
        root = Path(tmp)
        source = root / "rules.txt"
        out = root / "converted.txt"
        source.write_text("The target takes 1d6 persistent fire damage.", encoding="utf-8")

        result = runner.invoke(app, ["convert", "--input", str(source), "--out", str(out)])

        assert result.exit_code == 0, result.output
        assert out.read_text(encoding="utf-8") == (
            "The target takes @Damage[1d6[persistent,fire]] damage."
        )
        assert "INFO: success" in result.output
        assert list(root.glob("converted.txt.*.tmp")) == []


def test_cli_reads_stdin_and_writes_stdout() -> None:
    result = runner.invoke(app, ["convert"], input="DC 25 Reflex save")

    assert result.exit_code == 0
    assert "@Check[reflex|dc:25] save" in result.output


def test_cli_refuses_existing_output_without_force() -> None:
    with runner.isolated_filesystem() as tmp:
        root = Path(tmp)
        source = root / "rules.txt"
        out = root / "converted.txt"
        source.write_text("frightened 1", encoding="utf-8")
        out.write_text("keep me", encoding="utf-8")

        refused = runner.invoke(app, ["convert", "--input", str(source), "--out", str(out)])
        forced = runner.invoke(
            app, ["convert", "--input", str(source), "--out", str(out), "--force"]
        )

        assert refused.exit_code == 2
        assert "outputs already exist" in refused.output
        assert forced.exit_code == 0
        assert "overwriting existing outputs" in forced.output
        assert out.read_text(encoding="utf-8").startswith("@UUID[")


def test_cli_writes_json_report() -> None:
    with runner.isolated_filesystem() as tmp:
        root = Path(tmp)
        source = root / "rules.txt"
        out = root / "converted.txt"
        report = root / "report.json"
        source.write_text("frightened 2 and frightened 2", encoding="utf-8")

        result = runner.invoke(
            app,
            [
                "convert",
                "--input",
                str(source),
                "--out",
                str(out),
                "--report-out",
                str(report),
            ],
        )

        assert result.exit_code == 0, result.output
        payload = json.loads(report.read_text(encoding="utf-8"))
        assert payload["summary"]["total_matches"] == 2
        assert payload["summary"]["duplicate_count"] == 1


def test_cli_human_report_summary() -> None:
    result = runner.invoke(
        app, ["convert", "--report", "human"], input="frightened 1 in a 20-foot burst"
    )

    assert result.exit_code == 0
    assert "conversion_summary:" in result.output
    assert "matches=2 replaced=2" in result.output
    assert "by_type: condition=1, template=1" in result.output
    assert "skipped: none" in result.output


def test_cli_rejects_unknown_report_mode() -> None:
    result = runner.invoke(app, ["convert", "--report", "xml"], input="text")

    assert result.exit_code == 1
    assert "--report must be one of" in result.output


def test_cli_invalid_policy_exits_1() -> None:
    with runner.isolated_filesystem() as tmp:
        policy = Path(tmp) / "policy.yaml"
        policy.write_text("disabled_types: [teleport]\n", encoding="utf-8")

        result = runner.invoke(app, ["convert", "--policy", str(policy)], input="text")

        assert result.exit_code == 1
        assert "Invalid policy schema" in result.output


def test_cli_uses_custom_condition_table() -> None:
    with runner.isolated_filesystem() as tmp:
        table = Path(tmp) / "conditions.yaml"
        table.write_text("conditions:\n  prone: Custom.prone\n", encoding="utf-8")

        result = runner.invoke(app, ["convert", "--conditions", str(table)], input="prone")

        assert result.exit_code == 0
        assert "@UUID[Custom.prone]{Prone}" in result.output


def test_cli_lists_rules_highest_priority_first() -> None:
    result = runner.invoke(app, ["rules"])

    assert result.exit_code == 0
    lines = result.output.strip().splitlines()
    assert lines[0].split() == ["90", "save", "text", "save.comprehensive"]
    assert any(line.endswith("template.radius") for line in lines)
