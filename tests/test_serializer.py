"""Tests for the serializer and compile/serialize round trips."""

from decimal import Decimal

import pytest

from hquery import execute
from hquery.model.literals import Literal, LiteralKind, Point
from hquery.parser import ast_nodes as ast
from hquery.parser.parser import compile_query
from hquery.parser.serializer import format_decimal, format_expr, serialize


ROUND_TRIP_QUERIES = [
    "SELECT * FROM holder",
    "SELECT name, salary * 12 AS yearly FROM employee WHERE salary > 50000",
    "SELECT * FROM holder WHERE id = 2821c2b9-c485-4550-8dd8-6ec83033fa84",
    "SELECT * FROM holder WHERE price >= 5.3 AND delta < -0.00023",
    "SELECT * FROM holder WHERE created = '2017-07-07 22:15:32'",
    "SELECT * FROM holder WHERE day = '2017-07-07'",
    "SELECT * FROM holder WHERE location = POINT (23.34 -34.98)",
    "SELECT * FROM holder WHERE name LIKE 'O''Br%' OR name = NULL",
    "SELECT * FROM holder WHERE a <> 1 AND b != 2",
    "SELECT * FROM holder WHERE a = 1 AND (b = 2 OR c = 3)",
    "SELECT * FROM holder WHERE a = 1 OR b = 2 AND c = 3",
    "SELECT * FROM holder WHERE id IN (1, 2, 3) AND tag IN ?",
    "SELECT * FROM holder WHERE x = ? AND y > ?",
    "SELECT * FROM holder WHERE 1 = 1 OR a = ? AND b = ?",
    "SELECT * FROM holder WHERE (a + b) * 2 > c / (d - e)",
    "SELECT -a, -(a + b), abs(-3) FROM holder",
    "SELECT * FROM holder LEFT JOIN child ON (holder.id = child.holder_id)",
    "SELECT * FROM holder INNER JOIN child ON holder.id = child.holder_id "
    "RIGHT JOIN toy ON child.id = toy.child_id WHERE toy.price > 2",
    "SELECT role, count(*) AS n, avg(salary) FROM employee GROUP BY role "
    "ORDER BY n DESC, role START 2 LIMIT 10",
    "SELECT * FROM a, b WHERE a.id = b.a_id",
    "SELECT * FROM holder WHERE big = 2E+30 AND small = 1.5E-12",
    "SELECT * FROM holder WHERE log(value) > 2.0",
]


class TestRoundTrip:
    """compile(serialize(compile(q))) equals compile(q)."""

    @pytest.mark.parametrize("text", ROUND_TRIP_QUERIES)
    def test_round_trip(self, text: str) -> None:
        query = compile_query(text)
        assert compile_query(serialize(query)) == query

    @pytest.mark.parametrize("text", ROUND_TRIP_QUERIES)
    def test_serialization_is_stable(self, text: str) -> None:
        once = serialize(compile_query(text))
        assert serialize(compile_query(once)) == once

    def test_placeholders_bind_the_same_after_round_trip(self) -> None:
        """A constant-true operand next to ? keeps parameter positions."""
        records = {"r": [{"a": 1, "b": "x"}, {"a": 2, "b": "y"}]}
        query = compile_query("SELECT * FROM r WHERE 1 = 1 OR a = ? AND b = ?")
        again = compile_query(serialize(query))
        expected = [{"a": 2, "b": "y"}]
        assert execute(query, records, parameters=(1, "y")) == expected
        assert execute(again, records, parameters=(1, "y")) == expected


class TestCanonicalText:
    """Test the canonical output form."""

    def test_keywords_uppercase_single_spaces(self) -> None:
        text = serialize(compile_query("select  a\nfrom   t   where a=1  limit 3"))
        assert text == "SELECT a FROM t WHERE a = 1 LIMIT 3"

    def test_join_kind_always_written(self) -> None:
        text = serialize(compile_query("SELECT * FROM a JOIN b ON a.id = b.id"))
        assert text == "SELECT * FROM a INNER JOIN b ON a.id = b.id"

    def test_true_where_omitted(self) -> None:
        assert serialize(compile_query("SELECT * FROM t WHERE 1 = 1")) == "SELECT * FROM t"

    def test_double_quotes_normalized(self) -> None:
        text = serialize(compile_query('SELECT * FROM t WHERE name = "it\'s"'))
        assert text == "SELECT * FROM t WHERE name = 'it''s'"

    def test_operator_spelling_preserved(self) -> None:
        text = serialize(compile_query("SELECT * FROM t WHERE a <> 1"))
        assert text == "SELECT * FROM t WHERE a <> 1"

    def test_right_nested_or_parenthesized(self) -> None:
        text = serialize(compile_query("SELECT * FROM t WHERE a = 1 AND (b = 2 OR c = 3)"))
        assert text.endswith("WHERE a = 1 AND (b = 2 OR c = 3)")

    def test_left_nested_not_parenthesized(self) -> None:
        text = serialize(compile_query("SELECT * FROM t WHERE (a = 1 OR b = 2) AND c = 3"))
        assert text.endswith("WHERE a = 1 OR b = 2 AND c = 3")

    def test_point_unquoted(self) -> None:
        text = serialize(compile_query("SELECT * FROM t WHERE p = 'POINT (1.5 2.5)'"))
        assert text.endswith("p = POINT (1.5 2.5)")


class TestFormatExpr:
    """Test expression rendering."""

    def test_minimal_parentheses(self) -> None:
        expr = compile_query("SELECT (a * b) + (c * d) FROM t").fields[0].expr
        assert format_expr(expr) == "a * b + c * d"

    def test_right_operand_at_same_precedence(self) -> None:
        expr = compile_query("SELECT a - (b - c) FROM t").fields[0].expr
        assert format_expr(expr) == "a - (b - c)"

    def test_negate_of_negative_literal(self) -> None:
        expr = ast.Negate(Literal(LiteralKind.INTEGER, -1))
        assert format_expr(expr) == "-(-1)"

    def test_list_literal(self) -> None:
        expr = ast.ListLiteral((Literal(LiteralKind.INTEGER, 1), Literal(LiteralKind.STRING, "a")))
        assert format_expr(expr) == "(1, 'a')"

    def test_point(self) -> None:
        lit = Literal(LiteralKind.POINT, Point(Decimal("1"), Decimal("-2.5")))
        assert format_expr(lit) == "POINT (1.0 -2.5)"


class TestFormatDecimal:
    """Test canonical decimal text."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            (Decimal("5.3"), "5.3"),
            (Decimal("-2.3E-4"), "-0.00023"),
            (Decimal("2E10"), "20000000000.0"),
            (Decimal("7"), "7.0"),
            (Decimal("2E+30"), "2E+30"),
        ],
    )
    def test_format(self, value: Decimal, expected: str) -> None:
        assert format_decimal(value) == expected
