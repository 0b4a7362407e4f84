"""Recursive descent parser for the query language.

Grammar overview (informal):

  query      := SELECT select_list FROM ident (',' ident)*
                join* [WHERE condition] [GROUP BY expr_list]
                [ORDER BY order_list] [START int] [LIMIT int]
  join       := [INNER | LEFT | RIGHT] JOIN ident ON condition
  condition  := operand ((AND | OR) operand)*
  operand    := '(' condition ')' | expr op rhs
  expr       := term (('+' | '-') term)*
  term       := unary (('*' | '/') unary)*
  unary      := '-' unary | primary
  primary    := literal | '?' | NULL | call | field_ref | '(' expr ')'

AND and OR share one precedence level and fold left to right:
``a AND b OR c`` is ``(a AND b) OR c`` and ``a OR b AND c`` is
``(a OR b) AND c``. Parentheses group explicitly.
"""

from __future__ import annotations

import logging

from hquery.errors import QuerySyntaxError
from hquery.lexer.lexer import Lexer
from hquery.lexer.tokens import Token, TokenType
from hquery.model.compare import compare
from hquery.model.literals import Literal, null_literal, resolve
from hquery.parser import ast_nodes as ast

logger = logging.getLogger(__name__)

_COMPARISON_OPS = {
    TokenType.EQ,
    TokenType.NEQ,
    TokenType.GT,
    TokenType.GTE,
    TokenType.LT,
    TokenType.LTE,
}

_CLAUSE_KEYWORDS = ("WHERE", "GROUP", "ORDER", "START", "LIMIT")


class ParseError(QuerySyntaxError):
    """Raised on parse errors."""

    def __init__(self, message: str, token: Token) -> None:
        super().__init__(
            f"Parse error at {token.line}:{token.col}: {message}",
            token.line,
            token.col,
            token,
        )


def compile_query(source: str) -> ast.Query:
    """Lex and parse query text into a Query."""
    query = Parser(Lexer(source).tokenize()).parse()
    logger.debug("compiled %r", source)
    return query


class Parser:
    """Recursive descent parser for the query language."""

    def __init__(self, tokens: list[Token]) -> None:
        self._tokens = tokens
        self._pos = 0
        self._next_param = 0

    def parse(self) -> ast.Query:
        """Parse the token stream into a Query."""
        result = self._parse_query()
        if self._peek().type != TokenType.EOF:
            raise ParseError(f"Unexpected token {self._peek().value!r}", self._peek())
        return result

    # --- Token navigation ---

    def _peek(self, offset: int = 0) -> Token:
        """Look at a token without consuming it."""
        pos = self._pos + offset
        if pos >= len(self._tokens):
            return self._tokens[-1]  # EOF
        return self._tokens[pos]

    def _advance(self) -> Token:
        """Consume and return the current token."""
        tok = self._peek()
        if tok.type != TokenType.EOF:
            self._pos += 1
        return tok

    def _expect(self, ttype: TokenType) -> Token:
        """Consume a token of the expected type, or raise."""
        tok = self._peek()
        if tok.type != ttype:
            raise ParseError(
                f"Expected {ttype.name}, got {tok.type.name} ({tok.value!r})", tok
            )
        return self._advance()

    def _expect_keyword(self, word: str) -> Token:
        """Consume the given keyword, or raise."""
        tok = self._peek()
        if not tok.is_keyword(word):
            raise ParseError(f"Expected {word}, got {tok.value or 'end of input'!r}", tok)
        return self._advance()

    def _match(self, *types: TokenType) -> Token | None:
        """Consume if the current token matches any of the given types."""
        if self._peek().type in types:
            return self._advance()
        return None

    def _match_keyword(self, *words: str) -> Token | None:
        """Consume if the current token is one of the given keywords."""
        if self._peek().is_keyword(*words):
            return self._advance()
        return None

    # --- Clauses ---

    def _parse_query(self) -> ast.Query:
        """Parse a full SELECT statement."""
        self._expect_keyword("SELECT")
        fields = self._parse_select_list()

        self._expect_keyword("FROM")
        resources = [self._expect(TokenType.IDENT).value]
        while self._match(TokenType.COMMA):
            resources.append(self._expect(TokenType.IDENT).value)

        joins: list[ast.Join] = []
        while self._peek().is_keyword("JOIN", "INNER", "LEFT", "RIGHT"):
            left = joins[-1].right if joins else resources[-1]
            joins.append(self._parse_join(left))

        where: ast.Condition | None = None
        if self._match_keyword("WHERE"):
            tok = self._peek()
            if tok.type == TokenType.EOF or tok.is_keyword(*_CLAUSE_KEYWORDS):
                raise ParseError("Empty predicate after WHERE", tok)
            where = self._parse_condition()

        group_by: tuple[ast.Expr, ...] = ()
        if self._match_keyword("GROUP"):
            self._expect_keyword("BY")
            group_by = tuple(self._parse_expr_list())

        order_by: tuple[ast.OrderField, ...] = ()
        if self._match_keyword("ORDER"):
            self._expect_keyword("BY")
            order_by = tuple(self._parse_order_list())

        start = self._parse_count("START", minimum=0)
        limit = self._parse_count("LIMIT", minimum=1)

        return ast.Query(
            fields=tuple(fields),
            resources=tuple(resources),
            joins=tuple(joins),
            where=where,
            group_by=group_by,
            order_by=order_by,
            start=start,
            limit=limit,
        )

    def _parse_select_list(self) -> list[ast.SelectField]:
        """Parse: * | item (',' item)*."""
        fields = [self._parse_select_field()]
        while self._match(TokenType.COMMA):
            fields.append(self._parse_select_field())
        return fields

    def _parse_select_field(self) -> ast.SelectField:
        """Parse: * | expr [AS alias]."""
        if self._match(TokenType.STAR):
            return ast.SelectField(expr=ast.AllColumns())
        expr = self._parse_expr()
        alias = None
        if self._match_keyword("AS"):
            alias = self._expect(TokenType.IDENT).value
        return ast.SelectField(expr=expr, alias=alias)

    def _parse_join(self, left: str) -> ast.Join:
        """Parse: [INNER|LEFT|RIGHT] JOIN resource ON condition."""
        kind_tok = self._match_keyword("INNER", "LEFT", "RIGHT")
        kind = kind_tok.value if kind_tok else "INNER"
        self._expect_keyword("JOIN")
        right = self._expect(TokenType.IDENT).value
        self._expect_keyword("ON")
        condition = self._parse_condition()
        return ast.Join(kind=kind, left=left, right=right, condition=condition)

    def _parse_expr_list(self) -> list[ast.Expr]:
        """Parse: expr (',' expr)*."""
        exprs = [self._parse_expr()]
        while self._match(TokenType.COMMA):
            exprs.append(self._parse_expr())
        return exprs

    def _parse_order_list(self) -> list[ast.OrderField]:
        """Parse: expr [ASC|DESC] (',' expr [ASC|DESC])*."""
        keys: list[ast.OrderField] = []
        while True:
            expr = self._parse_expr()
            direction = self._match_keyword("ASC", "DESC")
            descending = direction is not None and direction.value == "DESC"
            keys.append(ast.OrderField(expr=expr, descending=descending))
            if not self._match(TokenType.COMMA):
                return keys

    def _parse_count(self, keyword: str, minimum: int) -> int | None:
        """Parse an optional 'START n' or 'LIMIT n' clause."""
        if not self._match_keyword(keyword):
            return None
        tok = self._advance()
        if tok.type != TokenType.NUMBER or not tok.value.isdigit():
            raise ParseError(
                f"{keyword} expects an integer, got {tok.value or 'end of input'!r}",
                tok,
            )
        value = int(tok.value)
        if value < minimum:
            raise ParseError(f"{keyword} must be at least {minimum}, got {value}", tok)
        return value

    # --- Conditions ---

    def _parse_condition(self) -> ast.Condition:
        """Parse a left-to-right chain of operands joined by AND/OR."""
        left = self._parse_condition_operand()
        while True:
            op_tok = self._match_keyword("AND", "OR")
            if op_tok is None:
                return left
            right = self._parse_condition_operand()
            left = _combine(left, op_tok.value, right)

    def _parse_condition_operand(self) -> ast.Condition:
        """Parse a parenthesized condition group or a single comparison."""
        if self._peek().type == TokenType.LPAREN and self._paren_holds_condition():
            self._advance()
            cond = self._parse_condition()
            self._expect(TokenType.RPAREN)
            return cond
        return self._parse_comparison()

    def _paren_holds_condition(self) -> bool:
        """Scan to the matching ')' and report whether the group is boolean.

        '(a + b) > 1' opens with an arithmetic group; '(a > 1 OR b = 2)'
        opens with a condition group. The difference is a comparison
        operator or AND/OR at depth one.
        """
        depth = 0
        offset = 0
        while True:
            tok = self._peek(offset)
            if tok.type == TokenType.EOF:
                return False
            if tok.type == TokenType.LPAREN:
                depth += 1
            elif tok.type == TokenType.RPAREN:
                depth -= 1
                if depth == 0:
                    return False
            elif depth == 1 and (
                tok.type in _COMPARISON_OPS
                or tok.is_keyword("AND", "OR", "LIKE", "IN")
            ):
                return True
            offset += 1

    def _parse_comparison(self) -> ast.Condition:
        """Parse: expr op rhs. A comparison of two literals that holds reduces to TRUE."""
        left = self._parse_expr()
        tok = self._peek()
        if tok.type in _COMPARISON_OPS:
            self._advance()
            op = tok.value
            right = self._parse_expr()
        elif tok.is_keyword("LIKE"):
            self._advance()
            op = "LIKE"
            right = self._parse_expr()
        elif tok.is_keyword("IN"):
            self._advance()
            op = "IN"
            right = self._parse_in_rhs()
        else:
            raise ParseError(
                f"Expected comparison operator, got {tok.value or 'end of input'!r}",
                tok,
            )

        comparison = ast.Comparison(left=left, op=op, right=right)
        if (
            op not in ("LIKE", "IN")
            and isinstance(left, Literal)
            and isinstance(right, Literal)
            and compare(op, left.value, right.value, constant=(True, True))
        ):
            return ast.TrueCondition()
        return comparison

    def _parse_in_rhs(self) -> ast.Expr:
        """Parse the right side of IN: '(' expr (',' expr)* ')' or an expression."""
        if not self._match(TokenType.LPAREN):
            return self._parse_expr()
        elements = self._parse_expr_list()
        self._expect(TokenType.RPAREN)
        return ast.ListLiteral(elements=tuple(elements))

    # --- Expressions ---

    def _parse_expr(self) -> ast.Expr:
        """Parse additive arithmetic."""
        left = self._parse_term()
        while self._peek().type in (TokenType.PLUS, TokenType.MINUS):
            op_tok = self._advance()
            right = self._parse_term()
            left = ast.BinOp(left=left, op=op_tok.value, right=right)
        return left

    def _parse_term(self) -> ast.Expr:
        """Parse multiplicative arithmetic."""
        left = self._parse_unary()
        while self._peek().type in (TokenType.STAR, TokenType.SLASH):
            op_tok = self._advance()
            right = self._parse_unary()
            left = ast.BinOp(left=left, op=op_tok.value, right=right)
        return left

    def _parse_unary(self) -> ast.Expr:
        """Parse unary minus; a minus before a number folds into the literal."""
        if self._match(TokenType.MINUS):
            if self._peek().type == TokenType.NUMBER:
                return resolve("-" + self._advance().value)
            return ast.Negate(operand=self._parse_unary())
        return self._parse_primary()

    def _parse_primary(self) -> ast.Expr:
        """Parse an atomic value."""
        tok = self._peek()
        if tok.type in (TokenType.NUMBER, TokenType.STRING, TokenType.UUID):
            self._advance()
            return resolve(tok.value)
        if tok.is_keyword("NULL"):
            self._advance()
            return null_literal()
        if tok.type == TokenType.QMARK:
            self._advance()
            param = ast.Parameter(index=self._next_param)
            self._next_param += 1
            return param
        if tok.type == TokenType.IDENT:
            if tok.value.upper() == "POINT" and self._is_point_ahead():
                return self._parse_point()
            if self._peek(1).type == TokenType.LPAREN:
                return self._parse_call()
            return self._parse_field_ref()
        if tok.type == TokenType.LPAREN:
            self._advance()
            expr = self._parse_expr()
            self._expect(TokenType.RPAREN)
            return expr
        raise ParseError(f"Expected value, got {tok.value or 'end of input'!r}", tok)

    def _parse_field_ref(self) -> ast.FieldRef:
        """Parse a field reference: ident or ident.ident..."""
        parts = [self._expect(TokenType.IDENT).value]
        while self._peek().type == TokenType.DOT and self._peek(1).type == TokenType.IDENT:
            self._advance()  # consume .
            parts.append(self._advance().value)
        return ast.FieldRef(parts=tuple(parts))

    def _parse_call(self) -> ast.FunctionCall:
        """Parse: name '(' [args] ')', where count(*) takes AllColumns."""
        name = self._advance().value.lower()
        self._expect(TokenType.LPAREN)
        args: list[ast.Expr] = []
        if self._peek().type != TokenType.RPAREN:
            while True:
                if self._match(TokenType.STAR):
                    args.append(ast.AllColumns())
                else:
                    args.append(self._parse_expr())
                if not self._match(TokenType.COMMA):
                    break
        self._expect(TokenType.RPAREN)
        return ast.FunctionCall(name=name, args=tuple(args))

    def _is_point_ahead(self) -> bool:
        """True if the tokens ahead read POINT '(' [-]num [-]num ')'."""
        offset = 1
        if self._peek(offset).type != TokenType.LPAREN:
            return False
        offset += 1
        for _ in range(2):
            if self._peek(offset).type == TokenType.MINUS:
                offset += 1
            if self._peek(offset).type != TokenType.NUMBER:
                return False
            offset += 1
        return self._peek(offset).type == TokenType.RPAREN

    def _parse_point(self) -> Literal:
        """Parse POINT (x y) into a point literal."""
        self._advance()  # POINT
        self._expect(TokenType.LPAREN)
        coords: list[str] = []
        for _ in range(2):
            sign = "-" if self._match(TokenType.MINUS) else ""
            coords.append(sign + self._expect(TokenType.NUMBER).value)
        self._expect(TokenType.RPAREN)
        return resolve(f"POINT ({coords[0]} {coords[1]})")


def _combine(left: ast.Condition, op: str, right: ast.Condition) -> ast.Condition:
    """Build left op right, dropping constant-true operands.

    OR with a constant-true side collapses to TRUE only when the other side
    holds no '?' placeholders. Dropping one would shift the position of
    every later placeholder once the query is serialized and compiled again.
    """
    if op == "AND":
        if isinstance(left, ast.TrueCondition):
            return right
        if isinstance(right, ast.TrueCondition):
            return left
    elif isinstance(left, ast.TrueCondition) or isinstance(right, ast.TrueCondition):
        if not (_has_parameter(left) or _has_parameter(right)):
            return ast.TrueCondition()
    return ast.BoolCombination(left=left, op=op, right=right)


def _has_parameter(node: ast.Condition | ast.Expr) -> bool:
    if isinstance(node, ast.Parameter):
        return True
    if isinstance(node, (ast.Comparison, ast.BoolCombination, ast.BinOp)):
        return _has_parameter(node.left) or _has_parameter(node.right)
    if isinstance(node, ast.Negate):
        return _has_parameter(node.operand)
    if isinstance(node, ast.FunctionCall):
        return any(_has_parameter(a) for a in node.args)
    if isinstance(node, ast.ListLiteral):
        return any(_has_parameter(e) for e in node.elements)
    return False
