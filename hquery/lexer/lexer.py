"""Lexer for the query language.

Hand-written with two-character lookahead for digraph operators. Quoted
strings and UUIDs are read as opaque spans so that commas, keywords and
dashes inside them never split a literal.
"""

from __future__ import annotations

import re

from hquery.errors import QuerySyntaxError
from hquery.lexer.tokens import KEYWORDS, Token, TokenType

_UUID_RE = re.compile(
    r"[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}"
)
_NUMBER_RE = re.compile(r"\d+(?:\.\d+)?(?:[eE][+-]?\d+)?")


class LexError(QuerySyntaxError):
    """Raised on invalid input."""

    def __init__(self, message: str, line: int, col: int, token: str) -> None:
        super().__init__(f"Lex error at {line}:{col}: {message}", line, col, token)


class Lexer:
    """Tokenizes query source text."""

    def __init__(self, source: str) -> None:
        self._source = source
        self._pos = 0
        self._line = 1
        self._col = 1
        # (line, col) of every '(' not yet closed
        self._open_parens: list[tuple[int, int]] = []

    def tokenize(self) -> list[Token]:
        """Tokenize the entire source, returning a list of tokens ending with EOF."""
        tokens: list[Token] = []
        while True:
            tok = self._next_token()
            tokens.append(tok)
            if tok.type == TokenType.EOF:
                break
        if self._open_parens:
            line, col = self._open_parens[-1]
            raise LexError(
                "Unbalanced parenthesis: '(' is never closed", line, col, "("
            )
        return tokens

    def _peek(self, offset: int = 0) -> str:
        """Peek at a character ahead without consuming it."""
        pos = self._pos + offset
        if pos >= len(self._source):
            return ""
        return self._source[pos]

    def _advance(self) -> str:
        """Consume and return the current character."""
        ch = self._source[self._pos]
        self._pos += 1
        if ch == "\n":
            self._line += 1
            self._col = 1
        else:
            self._col += 1
        return ch

    def _advance_n(self, n: int) -> str:
        """Consume n characters and return them."""
        return "".join(self._advance() for _ in range(n))

    def _skip_whitespace(self) -> None:
        """Skip whitespace and -- line comments."""
        while self._pos < len(self._source):
            ch = self._peek()
            if ch.isspace():
                self._advance()
            elif ch == "-" and self._peek(1) == "-":
                while self._pos < len(self._source) and self._peek() != "\n":
                    self._advance()
            else:
                break

    def _make_token(
        self, ttype: TokenType, value: str, line: int, col: int, pos: int
    ) -> Token:
        """Create a token with position info."""
        return Token(type=ttype, value=value, line=line, col=col, pos=pos)

    def _next_token(self) -> Token:
        """Produce the next token."""
        self._skip_whitespace()

        line = self._line
        col = self._col
        pos = self._pos

        if self._pos >= len(self._source):
            return self._make_token(TokenType.EOF, "", line, col, pos)

        ch = self._peek()
        ch2 = self._peek(1)

        # --- Digraph detection (two-char lookahead) ---

        digraphs = {
            "!=": TokenType.NEQ,
            "<>": TokenType.NEQ,
            ">=": TokenType.GTE,
            "<=": TokenType.LTE,
        }
        if ch + ch2 in digraphs:
            return self._make_token(
                digraphs[ch + ch2], self._advance_n(2), line, col, pos
            )

        # --- Single-char operators ---

        single_map: dict[str, TokenType] = {
            "=": TokenType.EQ,
            ">": TokenType.GT,
            "<": TokenType.LT,
            "+": TokenType.PLUS,
            "-": TokenType.MINUS,
            "*": TokenType.STAR,
            "/": TokenType.SLASH,
            ",": TokenType.COMMA,
            ".": TokenType.DOT,
            "?": TokenType.QMARK,
        }

        if ch in single_map:
            self._advance()
            return self._make_token(single_map[ch], ch, line, col, pos)

        if ch == "(":
            self._advance()
            self._open_parens.append((line, col))
            return self._make_token(TokenType.LPAREN, ch, line, col, pos)
        if ch == ")":
            if not self._open_parens:
                raise LexError("Unbalanced parenthesis: unexpected ')'", line, col, ch)
            self._advance()
            self._open_parens.pop()
            return self._make_token(TokenType.RPAREN, ch, line, col, pos)

        # --- String literals ---

        if ch == "'":
            return self._read_quoted(line, col, pos)
        if ch == '"':
            return self._read_double_quoted(line, col, pos)

        # --- UUIDs come before numbers and identifiers ---

        match = _UUID_RE.match(self._source, self._pos)
        if match and not self._is_word_char(match.end()):
            return self._make_token(
                TokenType.UUID, self._advance_n(match.end() - pos), line, col, pos
            )

        # --- Number literals ---

        if ch.isdigit():
            match = _NUMBER_RE.match(self._source, self._pos)
            if not self._is_word_char(match.end()):
                return self._make_token(
                    TokenType.NUMBER, self._advance_n(match.end() - pos), line, col, pos
                )
            return self._read_ident(line, col, pos)

        # --- Identifiers and keywords ---

        if ch.isalpha() or ch == "_":
            return self._read_ident(line, col, pos)

        raise LexError(f"Unexpected character: {ch!r}", line, col, ch)

    def _is_word_char(self, pos: int) -> bool:
        """True if the character at an absolute position continues a word."""
        if pos >= len(self._source):
            return False
        ch = self._source[pos]
        return ch.isalnum() or ch == "_"

    def _read_quoted(self, line: int, col: int, pos: int) -> Token:
        """Read a single-quoted string. '' is an escaped quote.

        The token value is the raw span including quotes; the literal
        resolver strips them.
        """
        self._advance()  # consume opening '
        while self._pos < len(self._source):
            if self._peek() == "'":
                if self._peek(1) == "'":
                    self._advance_n(2)
                    continue
                self._advance()  # consume closing '
                return self._make_token(
                    TokenType.STRING, self._source[pos : self._pos], line, col, pos
                )
            self._advance()
        raise LexError(
            "Unterminated string literal", line, col, self._source[pos:]
        )

    def _read_double_quoted(self, line: int, col: int, pos: int) -> Token:
        """Read a double-quoted string and normalize it to single-quoted form.

        Double quotes delimit strings here, never identifiers.
        """
        self._advance()  # consume opening "
        chars: list[str] = []
        while self._pos < len(self._source):
            ch = self._peek()
            if ch == '"':
                self._advance()
                body = "".join(chars).replace("'", "''")
                return self._make_token(TokenType.STRING, f"'{body}'", line, col, pos)
            if ch == "\\":
                self._advance()
                if self._pos >= len(self._source):
                    break
                esc = self._advance()
                escape_map = {"n": "\n", "t": "\t", "\\": "\\", '"': '"'}
                chars.append(escape_map.get(esc, esc))
            else:
                chars.append(self._advance())
        raise LexError(
            "Unterminated string literal", line, col, self._source[pos:]
        )

    def _read_ident(self, line: int, col: int, pos: int) -> Token:
        """Read an identifier or keyword."""
        while self._is_word_char(self._pos):
            self._advance()
        value = self._source[pos : self._pos]
        if value.upper() in KEYWORDS:
            return self._make_token(TokenType.KEYWORD, value.upper(), line, col, pos)
        return self._make_token(TokenType.IDENT, value, line, col, pos)
