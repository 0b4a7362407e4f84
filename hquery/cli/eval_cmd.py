"""CLI subcommand: eval."""

import click

from hquery.cli.loading import bind_inputs
from hquery.config import EngineConfig
from hquery.data.sample import load_sample_data
from hquery.errors import QueryError
from hquery.executor.environment import Environment
from hquery.executor.executor import Executor
from hquery.model.literals import resolve
from hquery.parser.parser import compile_query
from hquery.repl.formatter import format_json, format_rows


@click.command("eval")
@click.argument("query")
@click.argument("files", nargs=-1, type=click.Path())
@click.option(
    "--as",
    "aliases",
    multiple=True,
    help="Bind a file with an explicit name: --as name=path.csv",
)
@click.option(
    "--sample", is_flag=True, default=False, help="Load sample data (employee, department, phone)"
)
@click.option(
    "-p",
    "--param",
    "params",
    multiple=True,
    help="Value for the next ? placeholder, typed like a query literal.",
)
@click.option("--json", "as_json", is_flag=True, default=False, help="Print rows as JSON.")
def eval_cmd(
    query: str,
    files: tuple[str, ...],
    aliases: tuple[str, ...],
    sample: bool,
    params: tuple[str, ...],
    as_json: bool,
) -> None:
    """Run a single query and print the result.

    Load CSV or JSON files as resources. By default, the file stem (without
    extension) is used as the resource name. Use --as name=path.csv for
    explicit naming, and - to read CSV from stdin.
    """
    env = Environment()
    if sample:
        load_sample_data(env)
    bind_inputs(env, files, aliases)

    parameters = [resolve(p).value for p in params]
    try:
        config = EngineConfig.load()
        rows = Executor(env, config=config).execute(compile_query(query), parameters)
    except QueryError as e:
        raise click.ClickException(str(e))

    click.echo(format_json(rows) if as_json else format_rows(rows))
