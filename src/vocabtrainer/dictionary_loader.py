"""Read word pairs from dictionary files."""

from __future__ import annotations

import csv
import json
import logging
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from openpyxl import load_workbook

from .dictionary import DictionaryIndex

logger = logging.getLogger(__name__)

SUPPORTED_SUFFIXES = (".csv", ".tsv", ".json", ".xlsx")


def load_entries(path: Path | str) -> list[tuple[str, str]]:
    """Load `(source, target)` pairs, choosing the reader by file suffix."""
    file_path = Path(path)
    suffix = file_path.suffix.lower()
    if suffix == ".csv":
        rows = _read_delimited(file_path, ",")
    elif suffix == ".tsv":
        rows = _read_delimited(file_path, "\t")
    elif suffix == ".json":
        rows = _read_json(file_path)
    elif suffix == ".xlsx":
        rows = _read_xlsx(file_path)
    else:
        supported = ", ".join(SUPPORTED_SUFFIXES)
        raise ValueError(f"Unsupported dictionary format '{suffix}' (expected one of {supported}).")
    return _pairs_from_rows(file_path, rows)


def load_dictionary(path: Path | str) -> DictionaryIndex:
    """Load and index a dictionary file."""
    index = DictionaryIndex.build(load_entries(path))
    logger.info("Loaded %d dictionary entries from %s", len(index), path)
    return index


def _read_delimited(path: Path, delimiter: str) -> list[list[Any]]:
    with path.open(encoding="utf-8-sig", newline="") as handle:
        return [row for row in csv.reader(handle, delimiter=delimiter)]


def _read_json(path: Path) -> list[list[Any]]:
    """Accept `[[source, target], ...]` or `[{"source": ..., "target": ...}, ...]`."""
    raw = json.loads(path.read_text(encoding="utf-8-sig"))
    if not isinstance(raw, list):
        raise ValueError(f"Dictionary file {path} must contain a JSON array.")
    rows: list[list[Any]] = []
    for item in raw:
        if isinstance(item, dict):
            rows.append([item.get("source"), item.get("target")])
        elif isinstance(item, list):
            rows.append(item)
        else:
            rows.append([item])
    return rows


def _read_xlsx(path: Path) -> list[list[Any]]:
    """Read columns A and B of the first worksheet."""
    workbook = load_workbook(path, read_only=True, data_only=True)
    try:
        sheet = workbook.worksheets[0]
        return [list(row[:2]) for row in sheet.iter_rows(values_only=True)]
    finally:
        workbook.close()


def _pairs_from_rows(path: Path, rows: Iterable[list[Any]]) -> list[tuple[str, str]]:
    """Validate raw rows; blank rows are skipped, half-filled rows are errors."""
    pairs: list[tuple[str, str]] = []
    for number, row in enumerate(rows, start=1):
        cells = [_cell_text(value) for value in row[:2]]
        if not any(cells):
            continue
        if len(cells) < 2 or not cells[0] or not cells[1]:
            raise ValueError(f"Dictionary {path.name} row {number} needs both a source and a target word.")
        pairs.append((cells[0], cells[1]))
    return pairs


def _cell_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()
