"""hquery: a SQL-like query compiler and in-memory evaluation engine."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from hquery.config import EngineConfig
from hquery.errors import (
    AmbiguousFieldError,
    ConfigError,
    EvaluationError,
    QueryError,
    QuerySyntaxError,
)
from hquery.executor.environment import Environment
from hquery.executor.evaluator import evaluate
from hquery.executor.executor import Executor, filter_records
from hquery.lexer.lexer import LexError
from hquery.model.accessor import FieldAccessor, ObjectAccessor
from hquery.parser import ast_nodes as ast
from hquery.parser.parser import ParseError, compile_query
from hquery.parser.serializer import serialize


def execute(
    query: ast.Query | str,
    source: Environment | Mapping[str, Iterable[Any]],
    accessor: FieldAccessor | None = None,
    parameters: Sequence[Any] = (),
    config: EngineConfig | None = None,
) -> list[dict[str, Any]]:
    """Run a query (compiled or as text) against a record source."""
    if isinstance(query, str):
        query = compile_query(query)
    return Executor(source, accessor, config).execute(query, parameters)


__all__ = [
    "AmbiguousFieldError",
    "ConfigError",
    "EngineConfig",
    "Environment",
    "EvaluationError",
    "Executor",
    "LexError",
    "ObjectAccessor",
    "ParseError",
    "QueryError",
    "QuerySyntaxError",
    "compile_query",
    "evaluate",
    "execute",
    "filter_records",
    "serialize",
]
