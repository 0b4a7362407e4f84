"""Exception hierarchy shared by the lexer, parser and executor."""

from __future__ import annotations

from typing import Any


class QueryError(Exception):
    """Base class for every error raised by hquery."""


class QuerySyntaxError(QueryError):
    """Malformed query text. Compilation is aborted."""

    def __init__(self, message: str, line: int, col: int, token: Any = None) -> None:
        super().__init__(message)
        self.line = line
        self.col = col
        self.token = token


class EvaluationError(QueryError):
    """Raised when a record cannot be evaluated."""


class AmbiguousFieldError(EvaluationError):
    """An unqualified field name exists in more than one joined resource."""

    def __init__(self, field: str, resources: list[str]) -> None:
        super().__init__(
            f"Ambiguous field {field!r}: present in {', '.join(resources)}"
        )
        self.field = field
        self.resources = resources


class ConfigError(QueryError):
    """Invalid engine configuration."""
