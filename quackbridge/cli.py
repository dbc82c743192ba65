"""
QuackBridge CLI

Command-line interface for running the agent server and inspecting the
per-user DuckDB files it keeps.

Usage:
    quackbridge serve                          # Run the Copilot agent server
    quackbridge path octocat                   # Show a user's database file
    quackbridge query octocat "SELECT 42"      # Query a user's database
    quackbridge query octocat "..." --markdown # Print the agent's Markdown output
"""

import asyncio
import logging
from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from quackbridge import __version__
from quackbridge.config import get_settings
from quackbridge.connectors.base import ConnectorError, QueryResult
from quackbridge.connectors.duckdb import DuckDBConnector
from quackbridge.connectors.paths import user_database_path
from quackbridge.pipeline.formatter import create_renderer, format_cell

console = Console()


def configure_cli_logging() -> None:
    logging.disable(logging.CRITICAL)
    for logger_name in ("quackbridge", "httpx", "openai", "asyncio"):
        logging.getLogger(logger_name).setLevel(logging.CRITICAL)


def _resolve_root(root: str | None) -> Path:
    return Path(root) if root else get_settings().storage.root


async def _run_query(database_path: Path, sql: str, read_only: bool) -> QueryResult:
    async with DuckDBConnector(database_path, read_only=read_only) as connector:
        return await connector.execute(sql)


def _print_result_table(result: QueryResult) -> None:
    if result.is_empty:
        console.print("[dim]Ok. No results returned.[/dim]")
        return
    table = Table(show_header=True, header_style="bold cyan")
    for column in result.columns:
        table.add_column(column)
    for row in result.rows:
        table.add_row(*(format_cell(row.get(column)) for column in result.columns))
    console.print(table)
    console.print(f"[dim]{result.row_count} row(s) in {result.execution_time_ms:.1f} ms[/dim]")


@click.group()
@click.version_option(version=__version__, prog_name="QuackBridge")
def cli():
    """QuackBridge - DuckDB answers for GitHub Copilot Chat."""
    pass


@cli.command()
@click.option("--host", default=None, help="Bind host (default: API_HOST setting).")
@click.option("--port", default=None, type=int, help="Bind port (default: API_PORT setting).")
@click.option("--reload", is_flag=True, help="Reload on code changes (development only).")
def serve(host: str | None, port: int | None, reload: bool):
    """Run the Copilot agent HTTP server."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "quackbridge.api.main:app",
        host=host or settings.api_host,
        port=port or settings.api_port,
        reload=reload,
        log_level=settings.logging.level.lower(),
    )


@cli.command()
@click.argument("identity")
@click.option("--root", default=None, help="Storage root (default: STORAGE_ROOT setting).")
def path(identity: str, root: str | None):
    """Print the DuckDB file used for IDENTITY."""
    configure_cli_logging()
    database_path = user_database_path(identity, _resolve_root(root))
    click.echo(str(database_path))


@cli.command()
@click.argument("identity")
@click.argument("sql")
@click.option("--root", default=None, help="Storage root (default: STORAGE_ROOT setting).")
@click.option("--read-only", is_flag=True, help="Open the database read-only.")
@click.option(
    "--markdown",
    "render_mode",
    flag_value="table",
    default=None,
    help="Print the Markdown table the agent would send.",
)
@click.option(
    "--annotated",
    "render_mode",
    flag_value="annotated",
    help="Print the SQL-annotated Markdown the agent would send.",
)
def query(identity: str, sql: str, root: str | None, read_only: bool, render_mode: str | None):
    """Run SQL against the DuckDB file used for IDENTITY."""
    configure_cli_logging()
    database_path = user_database_path(identity, _resolve_root(root))

    try:
        result = asyncio.run(_run_query(database_path, sql, read_only))
    except ConnectorError as e:
        console.print(f"[red]Oops! {escape(str(e))}[/red]")
        raise click.exceptions.Exit(1)

    if render_mode:
        click.echo("".join(create_renderer(render_mode).render(sql, result)), nl=False)
        return
    _print_result_table(result)


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
