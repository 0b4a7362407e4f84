"""AST node dataclasses for the query parser.

Every node is a frozen dataclass with tuple children, so a compiled Query
is immutable and can be evaluated from several threads at once.
"""

from __future__ import annotations

from dataclasses import dataclass

from hquery.model.literals import Literal


# --- Expressions (compute scalar values) ---


@dataclass(frozen=True)
class FieldRef:
    """Field reference, e.g. 'field' or 'resource.field'."""

    parts: tuple[str, ...]

    @property
    def name(self) -> str:
        """Return the full dotted name."""
        return ".".join(self.parts)

    @property
    def qualifier(self) -> str | None:
        """The leading part of a dotted name, usually a resource."""
        return self.parts[0] if len(self.parts) > 1 else None

    @property
    def field(self) -> str:
        """The name with the leading qualifier removed."""
        return ".".join(self.parts[1:]) if len(self.parts) > 1 else self.parts[0]


@dataclass(frozen=True)
class Parameter:
    """A '?' placeholder bound at evaluation time, numbered from 0."""

    index: int


@dataclass(frozen=True)
class AllColumns:
    """'*' in a select list or in count(*)."""


@dataclass(frozen=True)
class BinOp:
    """Binary arithmetic operation.

    op is one of: +, -, *, /
    """

    left: Expr
    op: str
    right: Expr


@dataclass(frozen=True)
class Negate:
    """Unary minus on a non-literal operand."""

    operand: Expr


@dataclass(frozen=True)
class FunctionCall:
    """Function call: log(5), count(*), concat(a, b)."""

    name: str
    args: tuple[Expr, ...]


@dataclass(frozen=True)
class ListLiteral:
    """Parenthesized literal list on the right of IN."""

    elements: tuple[Expr, ...]


# Expr is the union of all expression types
Expr = (
    Literal
    | FieldRef
    | Parameter
    | AllColumns
    | BinOp
    | Negate
    | FunctionCall
    | ListLiteral
)


# --- Conditions (boolean evaluators) ---


@dataclass(frozen=True)
class Comparison:
    """A comparison: left op right.

    op is one of: =, !=, <>, >, >=, <, <=, LIKE, IN. The spelling is kept
    as written so that serialization preserves it.
    """

    left: Expr
    op: str
    right: Expr


@dataclass(frozen=True)
class BoolCombination:
    """Boolean combination of conditions: left AND right, left OR right."""

    left: Condition
    op: str  # "AND" or "OR"
    right: Condition


@dataclass(frozen=True)
class TrueCondition:
    """Always satisfied. Produced when a predicate reduces to true."""


Condition = Comparison | BoolCombination | TrueCondition


# --- Clauses ---


@dataclass(frozen=True)
class SelectField:
    """One entry of the select list, with an optional AS alias."""

    expr: Expr
    alias: str | None = None


@dataclass(frozen=True)
class Join:
    """[INNER|LEFT|RIGHT] JOIN right ON condition.

    left is the resource the join attaches to: the FROM resource or the
    right side of the previous join.
    """

    kind: str
    left: str
    right: str
    condition: Condition


@dataclass(frozen=True)
class OrderField:
    """An ORDER BY key: expr [ASC|DESC]."""

    expr: Expr
    descending: bool = False


# --- Top-level ---


@dataclass(frozen=True)
class Query:
    """A compiled SELECT statement."""

    fields: tuple[SelectField, ...]
    resources: tuple[str, ...]
    joins: tuple[Join, ...] = ()
    where: Condition | None = None
    group_by: tuple[Expr, ...] = ()
    order_by: tuple[OrderField, ...] = ()
    start: int | None = None
    limit: int | None = None

    @property
    def resource(self) -> str:
        """The first FROM resource."""
        return self.resources[0]
