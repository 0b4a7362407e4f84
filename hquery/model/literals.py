"""Literal resolution: raw token text to a typed value.

Resolution order matters because numeric and UUID surface forms overlap
with identifier syntax. The first matching rule wins:

  1. UUID            2821c2b9-c485-4550-8dd8-6ec83033fa84
  2. integer         -42
  3. decimal         5.3, -0.00023, -2.3E-4, 2E10
  4. point           POINT (23.34 34.98)       quotes optional
  5. date            '2017-07-07 22:15:32'     quotes optional
  6. quoted string   'text'                    quotes stripped
  7. anything else   string
"""

from __future__ import annotations

import re
import uuid
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any

_NUM = r"-?\d+(?:\.\d+)?(?:[eE][+-]?\d+)?"

_UUID_RE = re.compile(
    r"^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}$"
)
_INT_RE = re.compile(r"^-?\d+$")
_DECIMAL_RE = re.compile(r"^-?(?:\d+\.\d+(?:[eE][+-]?\d+)?|\d+[eE][+-]?\d+)$")
_POINT_RE = re.compile(
    rf"^(?P<q>'?)\s*POINT\s*\(\s*(?P<x>{_NUM})\s+(?P<y>{_NUM})\s*\)\s*(?P=q)$",
    re.IGNORECASE,
)
_DATE_RE = re.compile(
    r"^(?P<q>'?)(?P<date>\d{4}-\d{2}-\d{2})(?: (?P<time>\d{2}:\d{2}:\d{2}))?(?P=q)$"
)
_QUOTED_RE = re.compile(r"^'(?P<body>.*)'$", re.DOTALL)

DATE_FORMAT = "%Y-%m-%d"
DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"


class LiteralKind(Enum):
    """Tag of a resolved literal."""

    INTEGER = "integer"
    DECIMAL = "decimal"
    UUID = "uuid"
    DATE = "date"
    POINT = "point"
    STRING = "string"
    NULL = "null"

    @property
    def numeric(self) -> bool:
        return self in (LiteralKind.INTEGER, LiteralKind.DECIMAL)


@dataclass(frozen=True)
class Point:
    """A geometric point with decimal coordinates."""

    x: Decimal
    y: Decimal

    def __str__(self) -> str:
        return f"POINT ({self.x} {self.y})"


@dataclass(frozen=True)
class Literal:
    """A typed literal value, resolved once at compile time."""

    kind: LiteralKind
    value: Any


def null_literal() -> Literal:
    """The NULL literal."""
    return Literal(LiteralKind.NULL, None)


def parse_date(text: str) -> date | datetime | None:
    """Parse 'yyyy-MM-dd HH:mm:ss' or 'yyyy-MM-dd'; None if it is neither."""
    match = _DATE_RE.match(text)
    if match is None:
        return None
    try:
        if match.group("time"):
            return datetime.strptime(
                f"{match.group('date')} {match.group('time')}", DATETIME_FORMAT
            )
        return datetime.strptime(match.group("date"), DATE_FORMAT).date()
    except ValueError:
        return None


def parse_point(text: str) -> Point | None:
    """Parse 'POINT (x y)'; None if it does not match."""
    match = _POINT_RE.match(text)
    if match is None:
        return None
    return Point(Decimal(match.group("x")), Decimal(match.group("y")))


def unquote(text: str) -> str:
    """Strip single quotes and unescape doubled quotes."""
    match = _QUOTED_RE.match(text)
    if match is None:
        return text
    return match.group("body").replace("''", "'")


def resolve(raw: str) -> Literal:
    """Resolve a raw token to a typed literal. Never fails."""
    if _UUID_RE.match(raw):
        return Literal(LiteralKind.UUID, uuid.UUID(raw))
    if _INT_RE.match(raw):
        return Literal(LiteralKind.INTEGER, int(raw))
    if _DECIMAL_RE.match(raw):
        return Literal(LiteralKind.DECIMAL, Decimal(raw))
    point = parse_point(raw)
    if point is not None:
        return Literal(LiteralKind.POINT, point)
    when = parse_date(raw)
    if when is not None:
        return Literal(LiteralKind.DATE, when)
    if _QUOTED_RE.match(raw):
        return Literal(LiteralKind.STRING, unquote(raw))
    return Literal(LiteralKind.STRING, raw)


def resolve_cell(text: str) -> Literal:
    """Resolve an unquoted data cell. Empty cells are NULL."""
    text = text.strip()
    if text == "":
        return null_literal()
    return resolve(text)

