"""Engine configuration."""

from __future__ import annotations

import os
from functools import lru_cache
from typing import Literal

from pydantic import BaseModel, Field, ValidationError

from hquery.errors import ConfigError

ENV_PREFIX = "HQUERY_"


def _env(name: str, default: str) -> str:
    return os.environ.get(f"{ENV_PREFIX}{name}", default)


def _env_flag(name: str, default: bool) -> bool:
    raw = os.environ.get(f"{ENV_PREFIX}{name}")
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


class EngineConfig(BaseModel):
    """Knobs that change how compiled queries are evaluated.

    ambiguous_fields:
        "priority" resolves an unqualified name to the first resource (FROM
        order, then JOIN order) that has it; "reject" raises
        AmbiguousFieldError instead.
    like_case_sensitive:
        LIKE matching is case-insensitive unless this is set.
    naming:
        Naming convention used by the default accessor to match field names
        against record attributes ("snake", "camel" or "none").
    """

    ambiguous_fields: Literal["priority", "reject"] = Field(
        default_factory=lambda: _env("AMBIGUOUS_FIELDS", "priority")
    )
    like_case_sensitive: bool = Field(
        default_factory=lambda: _env_flag("LIKE_CASE_SENSITIVE", False)
    )
    naming: Literal["none", "snake", "camel"] = Field(
        default_factory=lambda: _env("NAMING", "none")
    )
    log_level: str = Field(default_factory=lambda: _env("LOG_LEVEL", "WARNING"))

    model_config = {"frozen": True, "validate_default": True}

    @classmethod
    def load(cls, **overrides: object) -> EngineConfig:
        """Build a config from the environment plus explicit overrides."""
        try:
            return cls(**overrides)
        except ValidationError as e:
            raise ConfigError(str(e)) from e


@lru_cache(maxsize=1)
def default_config() -> EngineConfig:
    """The environment-derived config, read once per process."""
    return EngineConfig.load()
