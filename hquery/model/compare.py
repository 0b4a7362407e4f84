"""Value comparison shared by the evaluator and compile-time reduction.

Comparisons never raise on type mismatch: values that cannot be ordered
against each other simply do not match.
"""

from __future__ import annotations

import re
import uuid
from collections.abc import Collection, Mapping
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from functools import lru_cache
from typing import Any

from hquery.model.literals import Point, parse_date, parse_point


def is_numeric(value: Any) -> bool:
    """True for int, float and Decimal (bool excluded)."""
    return isinstance(value, (int, float, Decimal)) and not isinstance(value, bool)


def is_collection(value: Any) -> bool:
    """True for lists, tuples, sets and other non-string collections."""
    return isinstance(value, Collection) and not isinstance(
        value, (str, bytes, bytearray, Mapping)
    )


def promote_numeric(value: Any) -> Any:
    """Promote a string to int or Decimal if possible."""
    if not isinstance(value, str):
        return value
    text = value.strip()
    try:
        return int(text)
    except ValueError:
        pass
    try:
        return Decimal(text)
    except InvalidOperation:
        return value


def _promote(value: Any, like: Any) -> Any:
    """Coerce a string toward the type of its counterpart."""
    if not isinstance(value, str) or isinstance(like, str):
        return value
    if is_numeric(like):
        return promote_numeric(value)
    if isinstance(like, uuid.UUID):
        try:
            return uuid.UUID(value)
        except ValueError:
            return value
    if isinstance(like, date):
        parsed = parse_date(value)
        return value if parsed is None else parsed
    if isinstance(like, Point):
        parsed = parse_point(value)
        return value if parsed is None else parsed
    return value


def _align_dates(a: Any, b: Any) -> tuple[Any, Any]:
    """Widen a plain date to midnight when the other side is a datetime."""
    if isinstance(a, datetime) and type(b) is date:
        return a, datetime(b.year, b.month, b.day)
    if isinstance(b, datetime) and type(a) is date:
        return datetime(a.year, a.month, a.day), b
    return a, b


def coerce_pair(
    a: Any, b: Any, constant: tuple[bool, bool] = (False, False)
) -> tuple[Any, Any]:
    """Bring two values to comparable types where that is unambiguous.

    A constant side (a literal or a bound parameter) keeps the type it was
    given; only a non-constant side is converted toward its counterpart.
    """
    const_a, const_b = constant
    promoted_a = a if const_a else _promote(a, b)
    promoted_b = b if const_b else _promote(b, a)
    return _align_dates(promoted_a, promoted_b)


def values_equal(a: Any, b: Any, constant: tuple[bool, bool] = (False, False)) -> bool:
    """Equality with numeric, UUID and date coercion. NULL equals only NULL."""
    if a is None or b is None:
        return a is None and b is None
    a, b = coerce_pair(a, b, constant)
    return a == b


def _not_equal(a: Any, b: Any, constant: tuple[bool, bool]) -> bool:
    """!= and <>. A NULL or absent value only differs from an explicit NULL."""
    if a is None and b is None:
        return False
    if a is None:
        return constant[0]
    if b is None:
        return constant[1]
    return not values_equal(a, b, constant)


_ORDERING = {
    ">": lambda a, b: a > b,
    ">=": lambda a, b: a >= b,
    "<": lambda a, b: a < b,
    "<=": lambda a, b: a <= b,
}


def compare(
    op: str,
    left: Any,
    right: Any,
    *,
    case_sensitive: bool = False,
    constant: tuple[bool, bool] = (False, False),
) -> bool:
    """Apply a comparison operator to two already-evaluated values.

    constant flags which sides came from a literal or parameter rather than
    from a record.
    """
    if op == "=":
        return values_equal(left, right, constant)
    if op in ("!=", "<>"):
        return _not_equal(left, right, constant)
    if op == "LIKE":
        if left is None or right is None:
            return False
        return like_match(str(left), str(right), case_sensitive)
    if op == "IN":
        return contains(left, right, constant)
    if op in _ORDERING:
        if left is None or right is None:
            return False
        a, b = coerce_pair(left, right, constant)
        if isinstance(a, str) != isinstance(b, str):
            return False
        try:
            return _ORDERING[op](a, b)
        except TypeError:
            return False
    raise ValueError(f"Unknown comparison operator: {op}")


@lru_cache(maxsize=256)
def _like_regex(pattern: str, case_sensitive: bool) -> re.Pattern[str]:
    parts = []
    for ch in pattern:
        if ch == "%":
            parts.append(".*")
        elif ch == "_":
            parts.append(".")
        else:
            parts.append(re.escape(ch))
    flags = re.DOTALL if case_sensitive else re.DOTALL | re.IGNORECASE
    return re.compile("".join(parts), flags)


def like_match(value: str, pattern: str, case_sensitive: bool = False) -> bool:
    """SQL LIKE: % matches any run of characters, _ exactly one."""
    return _like_regex(pattern, case_sensitive).fullmatch(value) is not None


def _member(item: Any, items: Any, constant: tuple[bool, bool]) -> bool:
    return any(values_equal(item, candidate, constant) for candidate in items)


def contains(
    field_value: Any, value: Any, constant: tuple[bool, bool] = (False, False)
) -> bool:
    """IN semantics: containment in whichever side is the collection.

    A mapping contributes its keys. When both sides are collections the
    result is true if they share any element. Scalars fall back to equality.
    """
    swapped = (constant[1], constant[0])
    if isinstance(field_value, Mapping):
        if is_collection(value):
            return any(_member(v, field_value.keys(), swapped) for v in value)
        return _member(value, field_value.keys(), swapped)
    if is_collection(field_value):
        if is_collection(value):
            return any(_member(v, field_value, swapped) for v in value)
        return _member(value, field_value, swapped)
    if isinstance(value, Mapping):
        return _member(field_value, value.keys(), constant)
    if is_collection(value):
        return _member(field_value, value, constant)
    return values_equal(field_value, value, constant)


def sort_key(value: Any) -> tuple:
    """Total ordering over heterogeneous values. NULL sorts first."""
    if value is None:
        return (0,)
    if is_numeric(value) or isinstance(value, bool):
        return (1, value)
    if isinstance(value, datetime):
        return (2, value)
    if isinstance(value, date):
        return (2, datetime(value.year, value.month, value.day))
    if isinstance(value, str):
        return (3, value)
    if isinstance(value, uuid.UUID):
        return (4, str(value))
    if isinstance(value, Point):
        return (5, value.x, value.y)
    return (6, str(value))
