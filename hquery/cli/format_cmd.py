"""CLI subcommand: format."""

import click

from hquery.errors import QueryError
from hquery.parser.parser import compile_query
from hquery.parser.serializer import serialize


@click.command("format")
@click.argument("query")
def format_cmd(query: str) -> None:
    """Compile a query and print its canonical text."""
    try:
        click.echo(serialize(compile_query(query)))
    except QueryError as e:
        raise click.ClickException(str(e))
