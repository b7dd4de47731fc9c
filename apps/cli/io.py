"""CLI I/O helpers for reading input and atomic output writing."""

from __future__ import annotations

import json
import tempfile
from pathlib import Path
from typing import Any

import typer

STDIO_MARKER = "-"


def read_input_text(source: str) -> str:
    """Read text from a file path, or stdin when source is '-'."""

    if source == STDIO_MARKER:
        return typer.get_text_stream("stdin").read()
    return Path(source).read_text(encoding="utf-8")


def existing_output_files(paths: list[Path | None]) -> list[Path]:
    """Return existing files among requested output paths."""

    return [path for path in paths if path is not None and path.exists()]


def write_text_atomic(path: Path, text: str) -> None:
    """Write converted text atomically using a temporary file + replace."""

    path.parent.mkdir(parents=True, exist_ok=True)
    with tempfile.NamedTemporaryFile(
        mode="w",
        encoding="utf-8",
        dir=path.parent,
        delete=False,
        prefix=f"{path.name}.",
        suffix=".tmp",
    ) as tmp:
        tmp_path = Path(tmp.name)
        tmp.write(text)

    tmp_path.replace(path)


def write_json_atomic(path: Path, payload: dict[str, Any]) -> None:
    """Write a JSON report atomically."""

    path.parent.mkdir(parents=True, exist_ok=True)
    with tempfile.NamedTemporaryFile(
        mode="w",
        encoding="utf-8",
        dir=path.parent,
        delete=False,
        prefix=f"{path.name}.",
        suffix=".tmp",
    ) as tmp:
        tmp_path = Path(tmp.name)
        json.dump(payload, tmp, ensure_ascii=False, sort_keys=True, separators=(",", ":"))

    tmp_path.replace(path)
