"""Evaluation of condition and expression trees against one row.

A Row pairs resource names with the records that make it up: a single
record for a plain scan, several for a joined (composite) row. Resources
padded by an outer join map to MISSING so their fields read as NULL.

Every call receives a ``values`` dict owned by the caller for the
duration of one record pass. It caches computed sub-expressions keyed by
node, so a field or call referenced by several sibling conditions is only
resolved once per record. It must never be shared between records.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from hquery.config import EngineConfig, default_config
from hquery.errors import AmbiguousFieldError, EvaluationError, QueryError
from hquery.executor.functions import AGGREGATES, arithmetic, get_function, negate
from hquery.model.accessor import MISSING, FieldAccessor, default_accessor
from hquery.model.compare import compare
from hquery.model.literals import Literal
from hquery.parser import ast_nodes as ast


class Row:
    """A simple or composite record, keyed by resource name."""

    __slots__ = ("sources",)

    def __init__(self, sources: dict[str | None, Any]) -> None:
        self.sources = sources

    def with_source(self, name: str, record: Any) -> Row:
        """Return a new Row with one more resource attached."""
        return Row({**self.sources, name: record})

    def present(self) -> list[tuple[str | None, Any]]:
        """(resource, record) pairs that are not outer-join padding."""
        return [(n, r) for n, r in self.sources.items() if r is not MISSING]

    def __repr__(self) -> str:
        return f"Row({self.sources!r})"


class Evaluator:
    """Evaluates conditions and expressions with a field-access capability."""

    def __init__(
        self,
        accessor: FieldAccessor | None = None,
        parameters: Sequence[Any] = (),
        config: EngineConfig | None = None,
    ) -> None:
        self._config = config or default_config()
        self._accessor = accessor or default_accessor(self._config.naming)
        self._parameters = tuple(parameters)

    @property
    def accessor(self) -> FieldAccessor:
        return self._accessor

    # --- Conditions ---

    def test(self, cond: ast.Condition, row: Row, values: dict) -> bool:
        """Evaluate a condition to a boolean."""
        if isinstance(cond, ast.Comparison):
            left = self.value(cond.left, row, values)
            right = self.value(cond.right, row, values)
            return compare(
                cond.op,
                left,
                right,
                case_sensitive=self._config.like_case_sensitive,
                constant=(_is_constant(cond.left), _is_constant(cond.right)),
            )
        if isinstance(cond, ast.BoolCombination):
            if cond.op == "AND":
                return self.test(cond.left, row, values) and self.test(
                    cond.right, row, values
                )
            if cond.op == "OR":
                return self.test(cond.left, row, values) or self.test(
                    cond.right, row, values
                )
            raise EvaluationError(f"Unknown boolean operator: {cond.op}")
        if isinstance(cond, ast.TrueCondition):
            return True
        raise EvaluationError(f"Unknown condition type: {type(cond).__name__}")

    # --- Expressions ---

    def value(
        self,
        expr: ast.Expr,
        row: Row,
        values: dict,
        group: list[Row] | None = None,
    ) -> Any:
        """Evaluate an expression; group supplies the rows for aggregates."""
        if isinstance(expr, Literal):
            return expr.value
        if isinstance(expr, ast.Parameter):
            return self._parameter(expr)
        if expr in values:
            return values[expr]
        result = self._compute(expr, row, values, group)
        values[expr] = result
        return result

    def _compute(
        self, expr: ast.Expr, row: Row, values: dict, group: list[Row] | None
    ) -> Any:
        if isinstance(expr, ast.FieldRef):
            result = self.resolve_field(expr, row)
            return None if result is MISSING else result
        if isinstance(expr, ast.BinOp):
            return arithmetic(
                expr.op,
                self.value(expr.left, row, values, group),
                self.value(expr.right, row, values, group),
            )
        if isinstance(expr, ast.Negate):
            return negate(self.value(expr.operand, row, values, group))
        if isinstance(expr, ast.FunctionCall):
            if expr.name in AGGREGATES:
                return self._aggregate(expr, group)
            args = [self.value(a, row, values, group) for a in expr.args]
            return get_function(expr.name)(args)
        if isinstance(expr, ast.ListLiteral):
            return tuple(self.value(e, row, values, group) for e in expr.elements)
        if isinstance(expr, ast.AllColumns):
            raise EvaluationError("'*' is only allowed in SELECT and count(*)")
        raise EvaluationError(f"Unknown expression type: {type(expr).__name__}")

    def _parameter(self, param: ast.Parameter) -> Any:
        try:
            return self._parameters[param.index]
        except IndexError:
            raise EvaluationError(
                f"No value bound for parameter {param.index + 1} "
                f"({len(self._parameters)} given)"
            ) from None

    def _aggregate(self, call: ast.FunctionCall, group: list[Row] | None) -> Any:
        """Evaluate an aggregate over the rows of the current group."""
        if group is None:
            raise EvaluationError(f"Aggregate {call.name}() used outside a grouped query")
        if len(call.args) != 1:
            raise EvaluationError(f"{call.name}() takes exactly one argument")
        arg = call.args[0]
        if isinstance(arg, ast.AllColumns):
            if call.name != "count":
                raise EvaluationError(f"{call.name}(*) is not supported")
            return len(group)
        # Each member is its own record pass with its own cache.
        member_values = [self.value(arg, member, {}) for member in group]
        return AGGREGATES[call.name](member_values)

    # --- Field resolution ---

    def resolve_field(self, ref: ast.FieldRef, row: Row) -> Any:
        """Read a field off a simple or composite row.

        'r.f' reads f from resource r when r is part of the row. Otherwise the
        dotted name is looked up across the row's resources (first match in
        FROM/JOIN order, or AmbiguousFieldError under the "reject" policy).
        A single-resource row also accepts a qualifier it does not know.
        """
        qualifier = ref.qualifier
        if qualifier is not None and qualifier in row.sources:
            record = row.sources[qualifier]
            if record is MISSING:
                return MISSING
            return self._read(record, ref.field)

        present = row.present()
        found: list[tuple[str | None, Any]] = []
        for name, record in present:
            result = self._read(record, ref.name)
            if result is not MISSING:
                found.append((name, result))
                if self._config.ambiguous_fields == "priority":
                    break

        if len(found) > 1:
            raise AmbiguousFieldError(ref.name, [str(name) for name, _ in found])
        if found:
            return found[0][1]
        if qualifier is not None and len(present) == 1:
            return self._read(present[0][1], ref.field)
        return MISSING

    def _read(self, record: Any, name: str) -> Any:
        try:
            return self._accessor.get(record, name)
        except QueryError:
            raise
        except Exception as e:
            raise EvaluationError(f"Cannot read field {name!r}: {e}") from e


def _is_constant(expr: ast.Expr) -> bool:
    """Literals and parameters keep their type in comparisons."""
    if isinstance(expr, ast.ListLiteral):
        return all(_is_constant(e) for e in expr.elements)
    return isinstance(expr, (Literal, ast.Parameter))


def evaluate(
    condition: ast.Condition | None,
    record: Any,
    accessor: FieldAccessor | None = None,
    parameters: Sequence[Any] = (),
    *,
    resource: str | None = None,
    config: EngineConfig | None = None,
) -> bool:
    """Evaluate a condition against a single record. None matches everything."""
    if condition is None:
        return True
    evaluator = Evaluator(accessor, parameters, config)
    return evaluator.test(condition, Row({resource: record}), {})
