"""Serializer: Query AST back to canonical query text.

Compiling the output again yields a structurally equal Query. Operator
spelling (e.g. '<>' vs '!='), field order and join order are preserved.
Literals are written in one canonical form per kind.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

from hquery.model.literals import (
    DATE_FORMAT,
    DATETIME_FORMAT,
    Literal,
    LiteralKind,
    Point,
)
from hquery.parser import ast_nodes as ast

_PRECEDENCE = {"+": 1, "-": 1, "*": 2, "/": 2}


def serialize(query: ast.Query) -> str:
    """Render a Query as canonical text."""
    parts = ["SELECT", ", ".join(_format_select_field(f) for f in query.fields)]
    parts += ["FROM", ", ".join(query.resources)]
    for join in query.joins:
        parts.append(
            f"{join.kind} JOIN {join.right} ON {format_condition(join.condition)}"
        )
    if query.where is not None and not isinstance(query.where, ast.TrueCondition):
        parts += ["WHERE", format_condition(query.where)]
    if query.group_by:
        parts += ["GROUP BY", ", ".join(format_expr(e) for e in query.group_by)]
    if query.order_by:
        parts += ["ORDER BY", ", ".join(_format_order_field(o) for o in query.order_by)]
    if query.start is not None:
        parts.append(f"START {query.start}")
    if query.limit is not None:
        parts.append(f"LIMIT {query.limit}")
    return " ".join(parts)


def _format_select_field(field: ast.SelectField) -> str:
    text = format_expr(field.expr)
    if field.alias:
        return f"{text} AS {field.alias}"
    return text


def _format_order_field(order: ast.OrderField) -> str:
    text = format_expr(order.expr)
    return f"{text} DESC" if order.descending else text


# --- Conditions ---


def format_condition(cond: ast.Condition) -> str:
    """Render a condition tree.

    AND/OR fold left to right when parsed, so only a combination on the
    right-hand side needs parentheses to keep its shape.
    """
    if isinstance(cond, ast.Comparison):
        return f"{format_expr(cond.left)} {cond.op} {format_expr(cond.right)}"
    if isinstance(cond, ast.BoolCombination):
        left = format_condition(cond.left)
        right = format_condition(cond.right)
        if isinstance(cond.right, ast.BoolCombination):
            right = f"({right})"
        return f"{left} {cond.op} {right}"
    if isinstance(cond, ast.TrueCondition):
        return "1 = 1"
    raise TypeError(f"Unknown condition type: {type(cond).__name__}")


# --- Expressions ---


def format_expr(expr: ast.Expr) -> str:
    """Render an expression with the minimum parentheses needed."""
    if isinstance(expr, Literal):
        return format_literal(expr)
    if isinstance(expr, ast.FieldRef):
        return expr.name
    if isinstance(expr, ast.Parameter):
        return "?"
    if isinstance(expr, ast.AllColumns):
        return "*"
    if isinstance(expr, ast.BinOp):
        return _format_binop(expr)
    if isinstance(expr, ast.Negate):
        operand = format_expr(expr.operand)
        if isinstance(expr.operand, (ast.FieldRef, ast.FunctionCall, ast.Parameter)):
            return f"-{operand}"
        return f"-({operand})"
    if isinstance(expr, ast.FunctionCall):
        return f"{expr.name}({', '.join(format_expr(a) for a in expr.args)})"
    if isinstance(expr, ast.ListLiteral):
        return f"({', '.join(format_expr(e) for e in expr.elements)})"
    raise TypeError(f"Unknown expression type: {type(expr).__name__}")


def _format_binop(expr: ast.BinOp) -> str:
    prec = _PRECEDENCE[expr.op]
    left = format_expr(expr.left)
    right = format_expr(expr.right)
    if isinstance(expr.left, ast.BinOp) and _PRECEDENCE[expr.left.op] < prec:
        left = f"({left})"
    if isinstance(expr.right, ast.BinOp) and _PRECEDENCE[expr.right.op] <= prec:
        right = f"({right})"
    return f"{left} {expr.op} {right}"


def format_literal(literal: Literal) -> str:
    """Canonical text for a typed literal."""
    kind, value = literal.kind, literal.value
    if kind == LiteralKind.NULL:
        return "NULL"
    if kind == LiteralKind.INTEGER:
        return str(value)
    if kind == LiteralKind.DECIMAL:
        return format_decimal(value)
    if kind == LiteralKind.UUID:
        return str(value)
    if kind == LiteralKind.DATE:
        return f"'{format_date(value)}'"
    if kind == LiteralKind.POINT:
        return format_point(value)
    return quote(str(value))


def format_decimal(value: Decimal) -> str:
    """Plain notation within a sane exponent range, scientific outside it.

    Plain output always carries a fractional digit so it resolves back to a
    decimal rather than an integer.
    """
    if not value.is_finite():
        return str(value)
    if -7 <= value.adjusted() <= 20:
        text = format(value, "f")
        if "." not in text:
            text += ".0"
        return text
    return str(value)


def format_date(value: date | datetime) -> str:
    if isinstance(value, datetime):
        return value.strftime(DATETIME_FORMAT)
    return value.strftime(DATE_FORMAT)


def format_point(value: Point) -> str:
    return f"POINT ({format_decimal(value.x)} {format_decimal(value.y)})"


def quote(text: str) -> str:
    """Single-quote a string, doubling embedded quotes."""
    return "'" + text.replace("'", "''") + "'"
