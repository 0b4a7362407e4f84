"""Tests for the default field accessor."""

from __future__ import annotations

from dataclasses import dataclass

import pytest

from hquery.config import EngineConfig
from hquery.executor.evaluator import Evaluator, evaluate
from hquery.model.accessor import (
    MISSING,
    ObjectAccessor,
    default_accessor,
    to_camel,
    to_snake,
)
from hquery.parser.parser import compile_query


@dataclass
class Address:
    city: str


@dataclass
class Holder:
    name: str
    address: Address


class Slotted:
    __slots__ = ("code", "_hidden")

    def __init__(self, code: str) -> None:
        self.code = code
        self._hidden = 1


class Bean:
    """Exposes values only through getter methods."""

    def __init__(self) -> None:
        self._balance = 10
        self._active = True

    def getBalance(self) -> int:
        return self._balance

    def isActive(self) -> bool:
        return self._active

    def get_owner(self) -> str:
        return "ann"


class TestGet:
    """Test reading fields."""

    def test_mapping(self) -> None:
        assert ObjectAccessor().get({"a": 1}, "a") == 1
        assert ObjectAccessor().get({"a": 1}, "b") is MISSING

    def test_mapping_none_value_is_not_missing(self) -> None:
        assert ObjectAccessor().get({"a": None}, "a") is None

    def test_dataclass_and_nested(self) -> None:
        holder = Holder("x", Address("Paris"))
        accessor = ObjectAccessor()
        assert accessor.get(holder, "name") == "x"
        assert accessor.get(holder, "address.city") == "Paris"
        assert accessor.get(holder, "address.zip") is MISSING

    def test_nested_through_none(self) -> None:
        assert ObjectAccessor().get({"a": None}, "a.b") is MISSING

    def test_slots(self) -> None:
        assert ObjectAccessor().get(Slotted("c1"), "code") == "c1"

    def test_getter_methods(self) -> None:
        accessor = ObjectAccessor()
        bean = Bean()
        assert accessor.get(bean, "balance") == 10
        assert accessor.get(bean, "active") is True
        assert accessor.get(bean, "owner") == "ann"

    def test_method_is_not_a_field(self) -> None:
        assert ObjectAccessor().get(Bean(), "getBalance") is MISSING

    def test_getter_cache_reused(self) -> None:
        accessor = ObjectAccessor()
        accessor.get(Bean(), "balance")
        getter = accessor._getters[(Bean, "balance")]
        accessor.get(Bean(), "balance")
        assert accessor._getters[(Bean, "balance")] is getter


class TestSharedAccessor:
    """Test the accessor shared by evaluators built without one."""

    def test_one_instance_per_naming(self) -> None:
        assert default_accessor("snake") is default_accessor("snake")
        assert default_accessor("snake") is not default_accessor("camel")

    def test_evaluators_share_it(self) -> None:
        config = EngineConfig.load(naming="none")
        assert Evaluator(config=config).accessor is default_accessor("none")
        assert Evaluator(config=config).accessor is Evaluator(config=config).accessor

    def test_getter_cache_survives_evaluate_calls(self) -> None:
        config = EngineConfig.load(naming="none")
        where = compile_query("SELECT * FROM t WHERE balance > 5").where
        assert evaluate(where, Bean(), config=config)
        getter = default_accessor("none")._getters[(Bean, "balance")]
        assert evaluate(where, Bean(), config=config)
        assert default_accessor("none")._getters[(Bean, "balance")] is getter


class TestNaming:
    """Test naming-convention matching."""

    def test_conversions(self) -> None:
        assert to_snake("createdAt") == "created_at"
        assert to_camel("created_at") == "createdAt"

    def test_snake_naming(self) -> None:
        accessor = ObjectAccessor(naming="snake")
        assert accessor.get({"created_at": 1}, "createdAt") == 1

    def test_camel_naming(self) -> None:
        accessor = ObjectAccessor(naming="camel")
        assert accessor.get({"createdAt": 1}, "created_at") == 1

    def test_exact_name_wins(self) -> None:
        accessor = ObjectAccessor(naming="snake")
        assert accessor.get({"createdAt": 1, "created_at": 2}, "createdAt") == 1

    def test_no_naming_is_exact(self) -> None:
        assert ObjectAccessor().get({"created_at": 1}, "createdAt") is MISSING

    def test_unknown_naming(self) -> None:
        with pytest.raises(ValueError):
            ObjectAccessor(naming="kebab")


class TestFields:
    """Test listing field names."""

    def test_mapping_fields(self) -> None:
        assert ObjectAccessor().fields({"b": 1, "a": 2}) == ["b", "a"]

    def test_dataclass_fields(self) -> None:
        assert ObjectAccessor().fields(Holder("x", Address("y"))) == ["name", "address"]

    def test_slots_skip_private(self) -> None:
        assert ObjectAccessor().fields(Slotted("c")) == ["code"]

    def test_missing_is_falsy(self) -> None:
        assert not MISSING
        assert repr(MISSING) == "MISSING"
