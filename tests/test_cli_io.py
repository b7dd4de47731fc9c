from __future__ import annotations

import json
from pathlib import Path

from apps.cli.io import existing_output_files, read_input_text, write_json_atomic, write_text_atomic


def test_write_text_atomic_leaves_no_tmp_files(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "out.txt"

    write_text_atomic(path, "@Check[reflex|dc:25] save")

    assert path.read_text(encoding="utf-8") == "@Check[reflex|dc:25] save"
    assert list(path.parent.glob("out.txt.*.tmp")) == []


def test_write_json_atomic_is_compact_and_sorted(tmp_path: Path) -> None:
    path = tmp_path / "report.json"

    write_json_atomic(path, {"b": 1, "a": [1, 2]})

    assert path.read_text(encoding="utf-8") == '{"a":[1,2],"b":1}'
    assert json.loads(path.read_text(encoding="utf-8")) == {"a": [1, 2], "b": 1}


def test_existing_output_files_ignores_missing_and_none(tmp_path: Path) -> None:
    present = tmp_path / "present.txt"
    present.write_text("x", encoding="utf-8")

    assert existing_output_files([present, tmp_path / "absent.txt", None]) == [present]


def test_read_input_text_from_file(tmp_path: Path) -> None:
    path = tmp_path / "rules.txt"
    path.write_text("frightened 1", encoding="utf-8")

    assert read_input_text(str(path)) == "frightened 1"
