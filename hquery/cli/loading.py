"""Shared CLI helpers: bind files and stdin as resources."""

from __future__ import annotations

import pathlib
import sys

import click

from hquery.data.loader import LoadError, load_csv, load_file
from hquery.executor.environment import Environment


def bind_inputs(env: Environment, files: tuple[str, ...], aliases: tuple[str, ...]) -> None:
    """Load aliased files (--as name=path) and positional files (stem is the name).

    A path of - reads CSV from stdin.
    """
    for alias in aliases:
        if "=" not in alias:
            raise click.ClickException(f"Invalid --as format: {alias!r} (expected name=path)")
        name, path = alias.split("=", 1)
        _bind(env, name.strip(), path.strip())

    for filepath in files:
        name = "stdin" if filepath == "-" else pathlib.Path(filepath).stem
        _bind(env, name, filepath)


def _bind(env: Environment, name: str, path: str) -> None:
    try:
        if path == "-":
            records = load_csv(sys.stdin)
        else:
            records = load_file(path)
    except LoadError as e:
        raise click.ClickException(str(e))
    env.bind(name, records)
