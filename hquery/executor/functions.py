"""Arithmetic, scalar functions and aggregate functions.

Scalar functions receive their evaluated arguments; aggregates receive the
values of their argument across the rows of one group. NULL arguments
propagate to a NULL result for the numeric functions.
"""

from __future__ import annotations

import math
from decimal import Decimal, InvalidOperation
from typing import Any, Callable

from hquery.errors import EvaluationError
from hquery.model.compare import is_numeric, promote_numeric, sort_key


def _to_number(value: Any, context: str) -> int | Decimal:
    """Promote to int or Decimal, or raise."""
    value = promote_numeric(value)
    if isinstance(value, float):
        return Decimal(str(value))
    if not is_numeric(value):
        raise EvaluationError(f"{context}: {value!r} is not a number")
    return value


def arithmetic(op: str, left: Any, right: Any) -> Any:
    """Evaluate left op right for op in + - * /."""
    if left is None or right is None:
        return None
    a = _to_number(left, f"Cannot apply {op}")
    b = _to_number(right, f"Cannot apply {op}")
    if op == "+":
        return a + b
    if op == "-":
        return a - b
    if op == "*":
        return a * b
    if op == "/":
        if b == 0:
            raise EvaluationError("Division by zero")
        if isinstance(a, int) and isinstance(b, int) and a % b == 0:
            return a // b
        return Decimal(a) / Decimal(b)
    raise EvaluationError(f"Unknown operator: {op}")


def negate(value: Any) -> Any:
    if value is None:
        return None
    return -_to_number(value, "Cannot negate")


def _numeric(fn: Callable[..., Any]) -> Callable[[list[Any]], Any]:
    """Adapt a numeric function: NULL in, NULL out; args promoted."""

    def wrapper(args: list[Any]) -> Any:
        if any(a is None for a in args):
            return None
        numbers = [_to_number(a, fn.__name__) for a in args]
        try:
            return fn(*numbers)
        except (InvalidOperation, ArithmeticError) as e:
            raise EvaluationError(f"{fn.__name__}{tuple(args)}: {e}") from e

    return wrapper


def _round(value: int | Decimal, digits: int | Decimal = 0) -> int | Decimal:
    return round(value, int(digits)) if digits else round(value)


def _sqrt(value: int | Decimal) -> Decimal:
    return Decimal(value).sqrt()


def _log(value: int | Decimal) -> Decimal:
    return Decimal(value).ln()


def _log10(value: int | Decimal) -> Decimal:
    return Decimal(value).log10()


def _exp(value: int | Decimal) -> Decimal:
    return Decimal(value).exp()


def _pow(base: int | Decimal, exponent: int | Decimal) -> int | Decimal:
    if isinstance(base, int) and isinstance(exponent, int) and exponent >= 0:
        return base**exponent
    return Decimal(base) ** Decimal(exponent)


def _concat(args: list[Any]) -> str:
    return "".join("" if a is None else str(a) for a in args)


def _coalesce(args: list[Any]) -> Any:
    return next((a for a in args if a is not None), None)


def _text(fn: Callable[[str], Any]) -> Callable[[list[Any]], Any]:
    def wrapper(args: list[Any]) -> Any:
        if len(args) != 1:
            raise EvaluationError(f"{fn.__name__} takes one argument")
        return None if args[0] is None else fn(str(args[0]))

    return wrapper


def _lower(text: str) -> str:
    return text.lower()


def _upper(text: str) -> str:
    return text.upper()


def _length(text: str) -> int:
    return len(text)


SCALAR_FUNCTIONS: dict[str, Callable[[list[Any]], Any]] = {
    "abs": _numeric(abs),
    "ceil": _numeric(math.ceil),
    "floor": _numeric(math.floor),
    "round": _numeric(_round),
    "sqrt": _numeric(_sqrt),
    "log": _numeric(_log),
    "log10": _numeric(_log10),
    "exp": _numeric(_exp),
    "pow": _numeric(_pow),
    "lower": _text(_lower),
    "upper": _text(_upper),
    "length": _text(_length),
    "concat": _concat,
    "coalesce": _coalesce,
}


# --- Aggregates ---


def agg_count(values: list[Any]) -> int:
    """Count non-NULL values."""
    return sum(1 for v in values if v is not None)


def agg_sum(values: list[Any]) -> int | Decimal | None:
    """Sum non-NULL values; NULL when there are none."""
    numbers = [_to_number(v, "sum") for v in values if v is not None]
    if not numbers:
        return None
    return sum(numbers)


def agg_avg(values: list[Any]) -> Decimal | None:
    """Mean of non-NULL values; NULL when there are none."""
    numbers = [_to_number(v, "avg") for v in values if v is not None]
    if not numbers:
        return None
    return Decimal(sum(numbers)) / len(numbers)


def agg_min(values: list[Any]) -> Any:
    present = [v for v in values if v is not None]
    return min(present, key=sort_key) if present else None


def agg_max(values: list[Any]) -> Any:
    present = [v for v in values if v is not None]
    return max(present, key=sort_key) if present else None


AGGREGATES: dict[str, Callable[[list[Any]], Any]] = {
    "count": agg_count,
    "sum": agg_sum,
    "avg": agg_avg,
    "min": agg_min,
    "max": agg_max,
}


def get_function(name: str) -> Callable[[list[Any]], Any]:
    """Look up a scalar function by name."""
    fn = SCALAR_FUNCTIONS.get(name)
    if fn is None:
        raise EvaluationError(f"Unknown function: {name!r}")
    return fn
