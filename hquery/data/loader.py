"""Data loading: parse CSV or JSON into records with type inference."""

from __future__ import annotations

import csv
import json
import logging
from pathlib import Path
from typing import Any, TextIO

from hquery.errors import QueryError
from hquery.model.literals import Literal, LiteralKind, resolve_cell

logger = logging.getLogger(__name__)


class LoadError(QueryError):
    """Raised when data loading fails."""


def load_csv(source: TextIO) -> list[dict[str, Any]]:
    """Read CSV data from a text stream and return a list of records.

    The first row is treated as headers (field names). Every cell goes
    through the literal resolver; a column keeps the typed values only if
    all of its non-empty cells resolve to the same kind (integers and
    decimals count as one numeric kind). Otherwise the column stays text.
    Empty cells are NULL.
    """
    reader = csv.reader(source)
    try:
        headers = [h.strip() for h in next(reader)]
    except StopIteration:
        return []

    raw_rows: list[list[str]] = []
    for line_no, row in enumerate(reader, start=2):
        if not any(cell.strip() for cell in row):
            continue
        if len(row) != len(headers):
            raise LoadError(
                f"Line {line_no}: expected {len(headers)} fields, got {len(row)}"
            )
        raw_rows.append(row)

    typed = [_infer_column(headers[i], [r[i] for r in raw_rows]) for i in range(len(headers))]
    records = [
        {header: typed[col][index] for col, header in enumerate(headers)}
        for index in range(len(raw_rows))
    ]
    logger.debug("loaded %d CSV records with fields %s", len(records), headers)
    return records


def _infer_column(name: str, cells: list[str]) -> list[Any]:
    """Resolve one column's cells, falling back to text on mixed kinds."""
    literals = [resolve_cell(cell) for cell in cells]
    kinds = {_kind_group(lit) for lit in literals if lit.kind != LiteralKind.NULL}
    if len(kinds) <= 1:
        return [lit.value for lit in literals]
    logger.debug("column %s has mixed kinds %s; keeping text", name, kinds)
    return [None if lit.kind == LiteralKind.NULL else cell for lit, cell in zip(literals, cells)]


def _kind_group(literal: Literal) -> str:
    return "numeric" if literal.kind.numeric else literal.kind.value


def load_json(source: TextIO) -> list[dict[str, Any]]:
    """Read a JSON array of objects."""
    try:
        data = json.load(source)
    except json.JSONDecodeError as e:
        raise LoadError(f"Invalid JSON: {e}") from e
    if not isinstance(data, list) or not all(isinstance(r, dict) for r in data):
        raise LoadError("JSON data must be an array of objects")
    return data


def load_file(path: str | Path) -> list[dict[str, Any]]:
    """Load a .json file as JSON and anything else as CSV."""
    path = Path(path)
    try:
        with open(path, newline="") as f:
            if path.suffix.lower() == ".json":
                return load_json(f)
            return load_csv(f)
    except OSError as e:
        raise LoadError(f"Cannot read {path}: {e}") from e
