# src/pagedb/cli.py
"""pagedb Command Line Interface.

Entry point for the pagedb CLI tool.
"""

import logging
import sys
from pathlib import Path

import structlog
import typer
from pydantic import ValidationError

from pagedb import __version__
from pagedb.contracts import CursorMode, PagedbError
from pagedb.core.config import PagedbSettings, load_settings
from pagedb.core.connection import create_connection_factory

app = typer.Typer(
    name="pagedb",
    help="pagedb: paginated, transactional SQL queries.",
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"pagedb version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    """pagedb: paginated, transactional SQL queries."""
    pass


def configure_logging(verbose: bool) -> None:
    """Send structlog output to stderr; debug events only when verbose."""
    level = logging.DEBUG if verbose else logging.WARNING
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(sys.stderr),
    )


def _load(settings: str) -> PagedbSettings:
    try:
        return load_settings(Path(settings))
    except FileNotFoundError:
        typer.echo(f"Error: Settings file not found: {settings}", err=True)
        raise typer.Exit(1) from None
    except ValidationError as e:
        typer.echo("Configuration errors:", err=True)
        for error in e.errors():
            loc = ".".join(str(x) for x in error["loc"])
            typer.echo(f"  - {loc}: {error['msg']}", err=True)
        raise typer.Exit(1) from None


def _parse_params(params: list[str]) -> dict[str, str]:
    parsed = {}
    for param in params:
        name, sep, value = param.partition("=")
        if not sep or not name:
            typer.echo(f"Error: Invalid parameter {param!r}, expected name=value", err=True)
            raise typer.Exit(1)
        parsed[name] = value
    return parsed


@app.command()
def query(
    sql: str = typer.Argument(..., help="SQL SELECT statement to run."),
    settings: str = typer.Option(
        ...,
        "--settings",
        "-s",
        help="Path to settings YAML file.",
    ),
    first: int = typer.Option(0, "--first", "-f", min=0, help="0-based offset of the first row."),
    max_rows: int = typer.Option(
        -1, "--max", "-m", min=-1, help="Maximum rows to print (-1 for all)."
    ),
    count: bool = typer.Option(
        False, "--count", "-c", help="Print the total matching row count instead of rows."
    ),
    scrollable: bool = typer.Option(
        False, "--scrollable", help="Use a scrollable cursor instead of forward-only."
    ),
    param: list[str] = typer.Option(
        [], "--param", "-p", help="Bind parameter as name=value (repeatable)."
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Log connection and query activity to stderr.",
    ),
) -> None:
    """Run a read query and print one page of rows, tab-separated."""
    configure_logging(verbose)
    config = _load(settings)
    parameters = _parse_params(param)
    mode = CursorMode.SCROLLABLE if scrollable else CursorMode.FORWARD_ONLY

    try:
        factory = create_connection_factory(config.database)
        try:
            with factory.new_transaction(False, config.paging.isolation_level) as tx:
                result_query = tx.prepare(sql, mode, parameters)
                if count:
                    typer.echo(str(result_query.get_result_count()))
                    return
                result_query.set_first_result(first)
                result_query.set_max_results(max_rows)
                for row in result_query.get_result_list():
                    typer.echo("\t".join("" if v is None else str(v) for v in row))
        finally:
            factory.dispose()
    except PagedbError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None


if __name__ == "__main__":
    app()
