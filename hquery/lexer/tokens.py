"""Token types and Token dataclass for the query lexer."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto


class TokenType(Enum):
    """All token types in the query language."""

    # Literal spans
    NUMBER = auto()
    STRING = auto()         # 'quoted', value keeps the quotes
    UUID = auto()

    # Words
    IDENT = auto()
    KEYWORD = auto()        # value is upper-cased

    # Comparison operators
    EQ = auto()             # =
    NEQ = auto()            # != or <>
    GT = auto()             # >
    GTE = auto()            # >=
    LT = auto()             # <
    LTE = auto()            # <=

    # Arithmetic
    PLUS = auto()           # +
    MINUS = auto()          # -
    STAR = auto()           # *   all columns / multiply
    SLASH = auto()          # /

    # Punctuation
    COMMA = auto()          # ,
    LPAREN = auto()         # (
    RPAREN = auto()         # )
    DOT = auto()            # .
    QMARK = auto()          # ?   runtime parameter

    # Special
    EOF = auto()


KEYWORDS = frozenset(
    {
        "SELECT", "FROM", "WHERE", "JOIN", "ON", "INNER", "LEFT", "RIGHT",
        "GROUP", "BY", "ORDER", "START", "LIMIT", "AND", "OR", "IN", "LIKE",
        "AS", "ASC", "DESC", "NULL",
    }
)


@dataclass(frozen=True)
class Token:
    """A lexer token with type, value, and position."""

    type: TokenType
    value: str
    line: int
    col: int
    pos: int = 0

    def is_keyword(self, *words: str) -> bool:
        """True if this is one of the given keywords."""
        return self.type == TokenType.KEYWORD and self.value in words

    def __repr__(self) -> str:
        return f"Token({self.type.name}, {self.value!r}, {self.line}:{self.col})"
