"""Environment: the record source, mapping resource names to records."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any


class Environment:
    """A mutable mapping of resource names to record sequences."""

    def __init__(self, resources: Mapping[str, Iterable[Any]] | None = None) -> None:
        self._bindings: dict[str, list[Any]] = {}
        for name, records in (resources or {}).items():
            self.bind(name, records)

    def bind(self, name: str, records: Iterable[Any]) -> None:
        """Bind a resource name to its records."""
        self._bindings[name] = list(records)

    def lookup(self, name: str) -> list[Any]:
        """Look up the records of a resource by name."""
        if name not in self._bindings:
            raise KeyError(f"Unknown resource: {name!r}")
        return self._bindings[name]

    def names(self) -> list[str]:
        """Return all bound resource names, sorted."""
        return sorted(self._bindings.keys())

    def unbind(self, name: str) -> None:
        """Remove a resource binding by name.

        Raises KeyError if the name is not bound.
        """
        if name not in self._bindings:
            raise KeyError(f"Unknown resource: {name!r}")
        del self._bindings[name]

    def __contains__(self, name: str) -> bool:
        return name in self._bindings
