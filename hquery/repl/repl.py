"""REPL loop: read-compile-execute-display."""

from __future__ import annotations

import readline  # noqa: F401  enables line editing and history for input()
from pathlib import Path

from hquery.config import EngineConfig
from hquery.data.loader import LoadError, load_file
from hquery.data.sample import SAMPLE_RESOURCES, load_sample_data
from hquery.errors import QueryError
from hquery.executor.environment import Environment
from hquery.executor.executor import Executor
from hquery.parser.parser import compile_query
from hquery.repl.formatter import format_rows


def run_repl(env: Environment | None = None, config: EngineConfig | None = None) -> None:
    """Run the interactive REPL."""
    if env is None:
        env = Environment()

    executor = Executor(env, config=config)

    print("hquery REPL")
    print("Commands: \\load [file] [--as=name], \\drop <name>, \\env, \\quit")
    print()

    while True:
        try:
            line = input("hquery> ").strip()
        except (EOFError, KeyboardInterrupt):
            print()
            break

        if not line:
            continue

        if line.startswith("\\"):
            _handle_command(line, env)
            continue

        try:
            print(format_rows(executor.execute(compile_query(line))))
        except QueryError as e:
            print(f"Error: {e}")

        print()


def _handle_command(line: str, env: Environment) -> None:
    """Handle REPL meta-commands."""
    parts = line.split()
    cmd = parts[0].lower()
    args = parts[1:]

    if cmd in ("\\quit", "\\q"):
        raise SystemExit(0)
    elif cmd == "\\load":
        _cmd_load(args, env)
    elif cmd == "\\drop":
        _cmd_drop(args, env)
    elif cmd == "\\env":
        _cmd_env(env)
    else:
        print(f"Unknown command: {cmd}")


def _cmd_load(args: list[str], env: Environment) -> None:
    """Handle \\load: load sample data, or a CSV/JSON file."""
    if not args:
        load_sample_data(env)
        print(f"Loaded: {', '.join(SAMPLE_RESOURCES)}")
        return

    file_arg = None
    alias = None
    for arg in args:
        if arg.startswith("--as="):
            alias = arg[len("--as="):]
        elif file_arg is None:
            file_arg = arg
        else:
            print(f"Error: unexpected argument: {arg}")
            return

    if file_arg is None:
        print("Error: \\load requires a filename")
        return

    path = Path(file_arg)
    if not path.exists():
        print(f"Error: file not found: {path}")
        return

    name = alias if alias else path.stem
    try:
        records = load_file(path)
    except LoadError as e:
        print(f"Error: {e}")
        return
    env.bind(name, records)
    print(f"Loaded {name}: {len(records)} records")


def _cmd_drop(args: list[str], env: Environment) -> None:
    """Handle \\drop: remove a resource from the environment."""
    if not args:
        print("Error: \\drop requires a resource name")
        return

    name = args[0]
    try:
        env.unbind(name)
        print(f"Dropped {name}")
    except KeyError:
        print(f"Error: unknown resource: {name!r}")


def _cmd_env(env: Environment) -> None:
    """Handle \\env: show all resource bindings."""
    names = env.names()
    if not names:
        print("(no resources loaded)")
    else:
        for name in names:
            print(f"  {name}: {len(env.lookup(name))} records")
