"""ASCII table formatter for query results."""

from __future__ import annotations

import json
from datetime import date, datetime
from decimal import Decimal
from typing import Any

from hquery.parser.serializer import format_date


def format_value(value: Any) -> str:
    """Format a single value for display."""
    if value is None:
        return "NULL"
    if isinstance(value, (date, datetime)):
        return format_date(value)
    if isinstance(value, (list, tuple, set)):
        return "(" + ", ".join(format_value(v) for v in value) + ")"
    return str(value)


def format_rows(rows: list[dict[str, Any]]) -> str:
    """Format result rows as an ASCII table, columns in first-seen order."""
    if not rows:
        return "(no rows)"

    headers: list[str] = []
    for row in rows:
        for key in row:
            if key not in headers:
                headers.append(key)
    cells = [[format_value(row.get(h)) for h in headers] for row in rows]
    return _build_table(headers, cells)


def format_json(rows: list[dict[str, Any]]) -> str:
    """Format result rows as a JSON array."""
    return json.dumps(rows, indent=2, default=_json_default)


def _json_default(value: Any) -> Any:
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (date, datetime)):
        return format_date(value)
    return str(value)


def _build_table(headers: list[str], rows: list[list[str]]) -> str:
    """Build an ASCII table from headers and rows."""
    widths = [len(h) for h in headers]
    for row in rows:
        for i, cell in enumerate(row):
            widths[i] = max(widths[i], len(cell))

    sep = "+-" + "-+-".join("-" * w for w in widths) + "-+"
    header = "| " + " | ".join(h.ljust(w) for h, w in zip(headers, widths)) + " |"

    lines = [sep, header, sep]
    for row in rows:
        lines.append("| " + " | ".join(cell.ljust(w) for cell, w in zip(row, widths)) + " |")
    lines.append(sep)
    return "\n".join(lines)
