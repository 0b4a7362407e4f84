"""Core value types: typed literals and field access."""

from hquery.model.accessor import MISSING, FieldAccessor, ObjectAccessor
from hquery.model.literals import Literal, LiteralKind, Point, resolve

__all__ = [
    "MISSING",
    "FieldAccessor",
    "Literal",
    "LiteralKind",
    "ObjectAccessor",
    "Point",
    "resolve",
]
