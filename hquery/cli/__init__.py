"""CLI entry point for hquery."""

import logging

import click

from hquery.cli.eval_cmd import eval_cmd
from hquery.cli.format_cmd import format_cmd
from hquery.cli.repl_cmd import repl_cmd
from hquery.config import EngineConfig
from hquery.errors import ConfigError


@click.group()
@click.option("-v", "--verbose", is_flag=True, default=False, help="Log debug output to stderr.")
def main(verbose: bool) -> None:
    """hquery: compile and run SQL-like queries over CSV and JSON data."""
    try:
        level = "DEBUG" if verbose else EngineConfig.load().log_level.upper()
    except ConfigError as e:
        raise click.ClickException(str(e))
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


main.add_command(eval_cmd)
main.add_command(format_cmd)
main.add_command(repl_cmd)
