"""End-to-end tests: compile, serialize and execute over object records."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from decimal import Decimal

import pytest

import hquery
from hquery.config import EngineConfig


@dataclass
class Holder:
    id: uuid.UUID
    name: str
    balance: Decimal
    tags: list[str] = field(default_factory=list)


class Child:
    """A bean-style record with getter methods."""

    def __init__(self, holder_id: uuid.UUID, name: str, age: int) -> None:
        self._holder_id = holder_id
        self._name = name
        self._age = age

    def getHolderId(self) -> uuid.UUID:
        return self._holder_id

    def getName(self) -> str:
        return self._name

    def getAge(self) -> int:
        return self._age


HOLDER_A = uuid.UUID("2821c2b9-c485-4550-8dd8-6ec83033fa84")
HOLDER_B = uuid.UUID("5a1f3e2d-0000-4000-8000-000000000001")


@pytest.fixture
def source() -> dict[str, list]:
    return {
        "holder": [
            Holder(HOLDER_A, "Ann", Decimal("150.25"), ["gold", "early"]),
            Holder(HOLDER_B, "Ben", Decimal("-3.5"), ["late"]),
        ],
        "child": [
            Child(HOLDER_A, "Cat", 7),
            Child(HOLDER_A, "Dan", 12),
        ],
    }


class TestObjectRecords:
    """Queries over dataclasses and getter-method records."""

    def test_uuid_literal(self, source: dict) -> None:
        rows = hquery.execute(f"SELECT name FROM holder WHERE id = {HOLDER_A}", source)
        assert rows == [{"name": "Ann"}]

    def test_negative_decimal(self, source: dict) -> None:
        rows = hquery.execute("SELECT name FROM holder WHERE balance < -1.0", source)
        assert rows == [{"name": "Ben"}]

    def test_in_on_collection_field(self, source: dict) -> None:
        rows = hquery.execute("SELECT name FROM holder WHERE tags IN ('gold', 'silver')", source)
        assert rows == [{"name": "Ann"}]

    def test_left_join_with_getters(self, source: dict) -> None:
        rows = hquery.execute(
            "SELECT holder.name, child.name AS kid FROM holder "
            "LEFT JOIN child ON (holder.id = child.holderId AND child.age > 10)",
            source,
        )
        assert rows == [
            {"holder.name": "Ann", "kid": "Dan"},
            {"holder.name": "Ben", "kid": None},
        ]

    def test_camel_naming(self, source: dict) -> None:
        config = EngineConfig.load(naming="camel")
        rows = hquery.execute(
            "SELECT child.name FROM child WHERE holder_id = ?",
            source,
            parameters=[HOLDER_A],
            config=config,
        )
        assert len(rows) == 2

    def test_group_by_over_join(self, source: dict) -> None:
        rows = hquery.execute(
            "SELECT holder.name, count(*) AS kids, avg(child.age) AS mean FROM holder "
            "JOIN child ON holder.id = child.holderId GROUP BY holder.name",
            source,
        )
        assert rows == [{"holder.name": "Ann", "kids": 2, "mean": Decimal("9.5")}]


class TestFacade:
    """The package-level API."""

    def test_compile_serialize_execute(self, source: dict) -> None:
        query = hquery.compile_query("select name from holder where balance > 100 limit 1")
        text = hquery.serialize(query)
        assert text == "SELECT name FROM holder WHERE balance > 100 LIMIT 1"
        assert hquery.execute(hquery.compile_query(text), source) == [{"name": "Ann"}]

    def test_evaluate_single_record(self, source: dict) -> None:
        query = hquery.compile_query("SELECT * FROM holder WHERE name LIKE 'a%'")
        assert hquery.evaluate(query.where, source["holder"][0])
        assert not hquery.evaluate(query.where, source["holder"][1])

    def test_error_hierarchy(self) -> None:
        with pytest.raises(hquery.QuerySyntaxError):
            hquery.compile_query("SELECT")
        with pytest.raises(hquery.QueryError):
            hquery.compile_query("SELECT * FROM t WHERE 'x")
