"""
CLI: ``tempgroup db`` - database management commands.
"""

from __future__ import annotations

import typer

from tempgroup.cli.utils import console, get_store, print_json

app = typer.Typer(no_args_is_help=True)


@app.command()
def init(
    database: str | None = typer.Option(None, "--database", "-d", help="Database URL or path"),
    json_out: bool = typer.Option(False, "--json", help="JSON output"),
) -> None:
    """Initialise database schema (create tables)."""
    store = get_store(database, create_schema=True)
    result = {"database": str(store.engine.url), "records": store.count()}
    if json_out:
        print_json(result)
        return
    console.print(f"[green]Initialised[/green] {result['database']} ({result['records']} records)")
