"""Tests for the lexer."""

import pytest

from hquery.lexer.lexer import Lexer, LexError
from hquery.lexer.tokens import TokenType


def types(source: str) -> list[TokenType]:
    """Helper: return token types (excluding EOF)."""
    tokens = Lexer(source).tokenize()
    return [t.type for t in tokens if t.type != TokenType.EOF]


def values(source: str) -> list[str]:
    """Helper: return token values (excluding EOF)."""
    tokens = Lexer(source).tokenize()
    return [t.value for t in tokens if t.type != TokenType.EOF]


class TestSingleCharOperators:
    """Test single-character operator tokens."""

    def test_all_singles(self) -> None:
        result = types("= > < + - * / , . ? ( )")
        expected = [
            TokenType.EQ, TokenType.GT, TokenType.LT, TokenType.PLUS,
            TokenType.MINUS, TokenType.STAR, TokenType.SLASH, TokenType.COMMA,
            TokenType.DOT, TokenType.QMARK, TokenType.LPAREN, TokenType.RPAREN,
        ]
        assert result == expected


class TestDigraphOperators:
    """Test two-character operator tokens."""

    def test_neq_spellings_kept_verbatim(self) -> None:
        assert types("!= <>") == [TokenType.NEQ, TokenType.NEQ]
        assert values("!= <>") == ["!=", "<>"]

    def test_gte_lte(self) -> None:
        assert types(">= <=") == [TokenType.GTE, TokenType.LTE]

    def test_digraph_without_spaces(self) -> None:
        """a>=1 splits into ident, operator, number."""
        assert types("a>=1") == [TokenType.IDENT, TokenType.GTE, TokenType.NUMBER]


class TestKeywordsAndIdentifiers:
    """Test keyword recognition."""

    def test_keywords_are_uppercased(self) -> None:
        tokens = Lexer("select From wHeRe").tokenize()
        assert [t.type for t in tokens[:-1]] == [TokenType.KEYWORD] * 3
        assert [t.value for t in tokens[:-1]] == ["SELECT", "FROM", "WHERE"]

    def test_identifier_keeps_case(self) -> None:
        assert values("createdAt") == ["createdAt"]
        assert types("createdAt") == [TokenType.IDENT]

    def test_qualified_name(self) -> None:
        assert types("employee.name") == [TokenType.IDENT, TokenType.DOT, TokenType.IDENT]

    def test_keyword_prefix_is_identifier(self) -> None:
        """'order_id' is not the ORDER keyword."""
        assert types("order_id") == [TokenType.IDENT]


class TestLiterals:
    """Test number, string and UUID tokens."""

    def test_integer_and_decimal(self) -> None:
        assert values("42 5.3 2.3E-4 2E10") == ["42", "5.3", "2.3E-4", "2E10"]
        assert types("42 5.3") == [TokenType.NUMBER, TokenType.NUMBER]

    def test_single_quoted_keeps_quotes(self) -> None:
        tokens = Lexer("'hello, world'").tokenize()
        assert tokens[0].type == TokenType.STRING
        assert tokens[0].value == "'hello, world'"

    def test_doubled_quote_escape(self) -> None:
        assert values("'it''s'") == ["'it''s'"]

    def test_double_quoted_normalized(self) -> None:
        assert values('"it\'s"') == ["'it''s'"]

    def test_double_quoted_is_string_not_identifier(self) -> None:
        assert types('"name"') == [TokenType.STRING]
        assert values(r'"a\"b\\c"') == ["'a\"b\\c'"]

    def test_keyword_inside_string_is_not_split(self) -> None:
        assert types("'a AND b'") == [TokenType.STRING]

    def test_uuid(self) -> None:
        tokens = Lexer("2821c2b9-c485-4550-8dd8-6ec83033fa84").tokenize()
        assert tokens[0].type == TokenType.UUID
        assert len(tokens) == 2

    def test_uuid_starting_with_digits(self) -> None:
        """A UUID that starts with digits is not read as a number."""
        assert types("12345678-1234-1234-1234-123456789abc") == [TokenType.UUID]

    def test_digits_then_letters_is_identifier(self) -> None:
        assert types("3d") == [TokenType.IDENT]


class TestComments:
    """Test -- line comments."""

    def test_comment_skipped(self) -> None:
        assert values("a -- comment\nb") == ["a", "b"]

    def test_minus_is_not_comment(self) -> None:
        assert types("a - b") == [TokenType.IDENT, TokenType.MINUS, TokenType.IDENT]


class TestPositions:
    """Test line and column tracking."""

    def test_line_and_col(self) -> None:
        tokens = Lexer("SELECT a\nFROM t").tokenize()
        from_tok = tokens[2]
        assert from_tok.value == "FROM"
        assert (from_tok.line, from_tok.col) == (2, 1)


class TestErrors:
    """Test lexer errors."""

    def test_unterminated_string(self) -> None:
        with pytest.raises(LexError, match="Unterminated string"):
            Lexer("name = 'abc").tokenize()

    def test_unexpected_close_paren(self) -> None:
        with pytest.raises(LexError, match="unexpected '\\)'"):
            Lexer("a = 1)").tokenize()

    def test_unclosed_paren(self) -> None:
        with pytest.raises(LexError, match="never closed") as exc_info:
            Lexer("(a = 1").tokenize()
        assert (exc_info.value.line, exc_info.value.col) == (1, 1)

    def test_unexpected_character(self) -> None:
        with pytest.raises(LexError, match="Unexpected character"):
            Lexer("a = #").tokenize()

    def test_error_message_has_position(self) -> None:
        with pytest.raises(LexError, match="Lex error at 1:5"):
            Lexer("a = @").tokenize()

    def test_error_carries_offending_text(self) -> None:
        with pytest.raises(LexError) as exc_info:
            Lexer("a = #").tokenize()
        assert exc_info.value.token == "#"

    def test_unterminated_string_carries_span(self) -> None:
        with pytest.raises(LexError) as exc_info:
            Lexer("name = 'abc").tokenize()
        assert exc_info.value.token == "'abc"

    def test_paren_errors_carry_paren(self) -> None:
        with pytest.raises(LexError) as exc_info:
            Lexer("a = 1)").tokenize()
        assert exc_info.value.token == ")"
        with pytest.raises(LexError) as exc_info:
            Lexer("(a = 1").tokenize()
        assert exc_info.value.token == "("
