"""Lexer for the query language."""

from hquery.lexer.lexer import Lexer, LexError
from hquery.lexer.tokens import Token, TokenType

__all__ = ["Lexer", "LexError", "Token", "TokenType"]
