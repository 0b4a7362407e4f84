"""Field access: read a named value off an arbitrary record.

The executor only needs ``get(record, name)``. ``ObjectAccessor`` is the
default implementation; it works uniformly across mappings, dataclasses,
slotted classes, plain objects and objects exposing ``get_x()`` style
getter methods.

Getter lookups for non-mapping records are cached per (type, field name).
The cache is insert-only, so concurrent readers never block and a racing
writer can at worst build the same getter twice.
"""

from __future__ import annotations

import dataclasses
import logging
import re
from collections.abc import Mapping
from functools import lru_cache
from typing import Any, Callable, Protocol

logger = logging.getLogger(__name__)


class _Missing:
    """Sentinel for an absent field."""

    _instance: _Missing | None = None

    def __new__(cls) -> _Missing:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "MISSING"


MISSING: Any = _Missing()


class FieldAccessor(Protocol):
    """The field-access capability consumed by the evaluator."""

    def get(self, record: Any, name: str) -> Any:
        """Return the named value, or MISSING if the record has no such field."""
        ...


# --- Naming conventions ---

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


def to_snake(name: str) -> str:
    """createdAt -> created_at."""
    return _CAMEL_BOUNDARY.sub("_", name).lower()


def to_camel(name: str) -> str:
    """created_at -> createdAt."""
    head, *rest = name.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


NAMING: dict[str, Callable[[str], str]] = {
    "none": lambda name: name,
    "snake": to_snake,
    "camel": to_camel,
}


def _capitalize(name: str) -> str:
    return name[:1].upper() + name[1:]


Getter = Callable[[Any], Any]


class ObjectAccessor:
    """Default field accessor.

    naming selects an extra spelling tried after the exact name: "snake"
    lets ``createdAt`` find ``created_at``, "camel" the reverse.
    """

    def __init__(self, naming: str = "none") -> None:
        if naming not in NAMING:
            raise ValueError(f"Unknown naming convention: {naming!r}")
        self._normalize = NAMING[naming]
        self._getters: dict[tuple[type, str], Getter] = {}

    def get(self, record: Any, name: str) -> Any:
        """Read a possibly dotted field name, walking nested values."""
        value = record
        for part in name.split("."):
            if value is None or value is MISSING:
                return MISSING
            value = self._get_one(value, part)
        return value

    def fields(self, record: Any) -> list[str]:
        """List the field names of a record, in declaration order."""
        if isinstance(record, Mapping):
            return [str(k) for k in record.keys()]
        if dataclasses.is_dataclass(record):
            return [f.name for f in dataclasses.fields(record)]
        slots = getattr(type(record), "__slots__", None)
        if slots:
            return [s for s in slots if not s.startswith("_")]
        return [k for k in vars(record) if not k.startswith("_")]

    def _candidates(self, name: str) -> list[str]:
        normalized = self._normalize(name)
        return [name] if normalized == name else [name, normalized]

    def _get_one(self, obj: Any, name: str) -> Any:
        if isinstance(obj, Mapping):
            for candidate in self._candidates(name):
                if candidate in obj:
                    return obj[candidate]
            return MISSING
        key = (type(obj), name)
        getter = self._getters.get(key)
        if getter is None:
            getter = self._getters.setdefault(key, self._build_getter(type(obj), name))
        return getter(obj)

    def _build_getter(self, cls: type, name: str) -> Getter:
        """Find how instances of cls expose name."""
        logger.debug("building getter for %s.%s", cls.__name__, name)
        candidates = self._candidates(name)
        methods = [
            method_name
            for candidate in candidates
            for method_name in (
                f"get_{candidate}",
                f"get{_capitalize(candidate)}",
                f"is{_capitalize(candidate)}",
            )
            if callable(getattr(cls, method_name, None))
        ]

        def getter(obj: Any) -> Any:
            for candidate in candidates:
                value = getattr(obj, candidate, MISSING)
                if value is not MISSING and not callable(value):
                    return value
            if methods:
                return getattr(obj, methods[0])()
            return MISSING

        return getter


@lru_cache(maxsize=None)
def default_accessor(naming: str = "none") -> ObjectAccessor:
    """The shared accessor for a naming convention.

    Evaluators built without an explicit accessor use this one, so its
    getter cache lives for the whole process.
    """
    return ObjectAccessor(naming=naming)
