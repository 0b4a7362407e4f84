"""CLI subcommand: repl."""

import click

from hquery.cli.loading import bind_inputs
from hquery.config import EngineConfig
from hquery.data.sample import SAMPLE_RESOURCES, load_sample_data
from hquery.errors import ConfigError
from hquery.executor.environment import Environment
from hquery.repl.repl import run_repl


@click.command("repl")
@click.argument("files", nargs=-1, type=click.Path())
@click.option(
    "--as",
    "aliases",
    multiple=True,
    help="Bind a file with an explicit name: --as name=path.csv",
)
@click.option("--load", "auto_load", is_flag=True, help="Auto-load sample data")
def repl_cmd(files: tuple[str, ...], aliases: tuple[str, ...], auto_load: bool) -> None:
    """Start the interactive REPL.

    Optionally load CSV or JSON files as resources before entering the REPL.
    """
    try:
        config = EngineConfig.load()
    except ConfigError as e:
        raise click.ClickException(str(e))

    env = Environment()
    if auto_load:
        load_sample_data(env)
        click.echo(f"Sample data loaded: {', '.join(SAMPLE_RESOURCES)}")

    bind_inputs(env, files, aliases)

    if env.names():
        click.echo(f"Loaded: {', '.join(env.names())}")

    run_repl(env, config)
