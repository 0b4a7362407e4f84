"""Executor: applies a compiled Query to records from a record source.

Pipeline, in order:

  1. scan FROM resources and build composite rows for each JOIN
  2. filter through WHERE
  3. partition by GROUP BY (first-occurrence order)
  4. stable sort by ORDER BY
  5. window with START / LIMIT (clamped, never an error)
  6. project through the SELECT list
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from hquery.config import EngineConfig, default_config
from hquery.errors import EvaluationError, QueryError
from hquery.executor.environment import Environment
from hquery.executor.evaluator import Evaluator, Row
from hquery.executor.functions import AGGREGATES
from hquery.model.accessor import MISSING, FieldAccessor, default_accessor
from hquery.model.compare import sort_key
from hquery.parser import ast_nodes as ast
from hquery.parser.serializer import format_expr

logger = logging.getLogger(__name__)

# A unit of output: the row it projects from and, for grouped queries,
# the member rows its aggregates run over.
_Unit = tuple[Row, "list[Row] | None"]


class Executor:
    """Evaluates Query ASTs against a record source."""

    def __init__(
        self,
        source: Environment | Mapping[str, Iterable[Any]],
        accessor: FieldAccessor | None = None,
        config: EngineConfig | None = None,
    ) -> None:
        self._source = source if isinstance(source, Environment) else Environment(source)
        self._config = config or default_config()
        self._accessor = accessor or default_accessor(self._config.naming)

    @property
    def source(self) -> Environment:
        """Return the record source."""
        return self._source

    def execute(
        self, query: ast.Query, parameters: Sequence[Any] = ()
    ) -> list[dict[str, Any]]:
        """Run the full pipeline and return projected rows."""
        evaluator = Evaluator(self._accessor, parameters, self._config)
        try:
            rows = self._scan(query, evaluator)
            logger.debug("scan %s: %d rows", ",".join(query.resources), len(rows))
            rows = self._filter(query.where, rows, evaluator)
            logger.debug("filter: %d rows", len(rows))
            units = self._group(query, rows, evaluator)
            units = self._order(query, units, evaluator)
            units = self._window(query, units)
            logger.debug("window: %d rows", len(units))
            return [self._project(query, unit, evaluator) for unit in units]
        except QueryError:
            raise
        except (TypeError, ValueError) as e:
            raise EvaluationError(str(e)) from e

    # --- 1. Scan and join ---

    def _records(self, name: str) -> list[Any]:
        try:
            return self._source.lookup(name)
        except KeyError:
            raise EvaluationError(f"Unknown resource: {name!r}") from None

    def _scan(self, query: ast.Query, evaluator: Evaluator) -> list[Row]:
        """Cross the FROM resources, then apply each join in order."""
        rows = [Row({})]
        for name in query.resources:
            records = self._records(name)
            rows = [row.with_source(name, rec) for row in rows for rec in records]
        scope = list(query.resources)
        for join in query.joins:
            rows = self._join(join, rows, scope, evaluator)
            scope.append(join.right)
        return rows

    def _join(
        self,
        join: ast.Join,
        left_rows: list[Row],
        scope: list[str],
        evaluator: Evaluator,
    ) -> list[Row]:
        """Nested-loop join of the accumulated rows with one more resource."""
        right_records = self._records(join.right)
        matched_right: set[int] = set()
        result: list[Row] = []
        for left in left_rows:
            matched = False
            for index, record in enumerate(right_records):
                candidate = left.with_source(join.right, record)
                if evaluator.test(join.condition, candidate, {}):
                    result.append(candidate)
                    matched_right.add(index)
                    matched = True
            if not matched and join.kind == "LEFT":
                result.append(left.with_source(join.right, MISSING))
        if join.kind == "RIGHT":
            padding = {name: MISSING for name in scope}
            for index, record in enumerate(right_records):
                if index not in matched_right:
                    result.append(Row({**padding, join.right: record}))
        logger.debug("%s JOIN %s: %d rows", join.kind, join.right, len(result))
        return result

    # --- 2. Filter ---

    def _filter(
        self, where: ast.Condition | None, rows: list[Row], evaluator: Evaluator
    ) -> list[Row]:
        if where is None:
            return rows
        return [row for row in rows if evaluator.test(where, row, {})]

    # --- 3. Group ---

    def _group(
        self, query: ast.Query, rows: list[Row], evaluator: Evaluator
    ) -> list[_Unit]:
        """Partition rows by the GROUP BY values, keeping first-seen order.

        Aggregates in the select list without GROUP BY make one group of
        everything.
        """
        if not query.group_by:
            if any(_has_aggregate(f.expr) for f in query.fields):
                return [(rows[0] if rows else Row({}), rows)]
            return [(row, None) for row in rows]

        groups: dict[tuple, list[Row]] = {}
        for row in rows:
            values: dict = {}
            key = tuple(
                _hashable(evaluator.value(expr, row, values)) for expr in query.group_by
            )
            groups.setdefault(key, []).append(row)
        logger.debug("group: %d groups", len(groups))
        return [(members[0], members) for members in groups.values()]

    # --- 4. Order ---

    def _order(
        self, query: ast.Query, units: list[_Unit], evaluator: Evaluator
    ) -> list[_Unit]:
        """Stable multi-key sort; NULLs first ascending, last descending."""
        if not query.order_by:
            return units
        aliases = {f.alias: f.expr for f in query.fields if f.alias}
        exprs = [_order_expr(o.expr, aliases) for o in query.order_by]
        keyed = []
        for row, group in units:
            values: dict = {}
            keys = [sort_key(evaluator.value(e, row, values, group)) for e in exprs]
            keyed.append((keys, (row, group)))
        for position in reversed(range(len(query.order_by))):
            keyed.sort(
                key=lambda item: item[0][position],
                reverse=query.order_by[position].descending,
            )
        return [unit for _, unit in keyed]

    # --- 5. Window ---

    def _window(self, query: ast.Query, units: list[_Unit]) -> list[_Unit]:
        start = query.start or 0
        units = units[start:]
        if query.limit is not None:
            units = units[: query.limit]
        return units

    # --- 6. Project ---

    def _project(
        self, query: ast.Query, unit: _Unit, evaluator: Evaluator
    ) -> dict[str, Any]:
        row, group = unit
        values: dict = {}
        out: dict[str, Any] = {}
        for field in query.fields:
            if isinstance(field.expr, ast.AllColumns):
                self._expand_all(row, out)
                continue
            out[output_name(field)] = evaluator.value(field.expr, row, values, group)
        return out

    def _expand_all(self, row: Row, out: dict[str, Any]) -> None:
        """Copy every field of every resource; qualify names that collide."""
        list_fields = getattr(self._accessor, "fields", None)
        if list_fields is None:
            list_fields = default_accessor().fields
        for name, record in row.present():
            for field in list_fields(record):
                value = self._accessor.get(record, field)
                key = field if field not in out or name is None else f"{name}.{field}"
                out[key] = None if value is MISSING else value


def output_name(field: ast.SelectField) -> str:
    """Alias if given, the field as written, or the expression's canonical text."""
    if field.alias:
        return field.alias
    if isinstance(field.expr, ast.FieldRef):
        return field.expr.name
    return format_expr(field.expr)


def _order_expr(expr: ast.Expr, aliases: dict[str, ast.Expr]) -> ast.Expr:
    """An unqualified ORDER BY name that matches a select alias sorts by it."""
    if isinstance(expr, ast.FieldRef) and len(expr.parts) == 1:
        return aliases.get(expr.parts[0], expr)
    return expr


def _has_aggregate(expr: ast.Expr) -> bool:
    if isinstance(expr, ast.FunctionCall):
        return expr.name in AGGREGATES or any(_has_aggregate(a) for a in expr.args)
    if isinstance(expr, ast.BinOp):
        return _has_aggregate(expr.left) or _has_aggregate(expr.right)
    if isinstance(expr, ast.Negate):
        return _has_aggregate(expr.operand)
    return False


def _hashable(value: Any) -> Any:
    """Group keys must be hashable; fall back to repr for lists and dicts."""
    try:
        hash(value)
    except TypeError:
        return repr(value)
    return value


def filter_records(
    query: ast.Query,
    records: Iterable[Any],
    accessor: FieldAccessor | None = None,
    parameters: Sequence[Any] = (),
    config: EngineConfig | None = None,
) -> list[Any]:
    """Apply only the WHERE clause to records of query.resource.

    Order is preserved and records are returned as-is, so filtering a result
    again with the same query yields the same list.
    """
    records = list(records)
    if query.where is None:
        return records
    evaluator = Evaluator(accessor, parameters, config)
    resource = query.resource
    return [rec for rec in records if evaluator.test(query.where, Row({resource: rec}), {})]
