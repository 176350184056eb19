"""
CLI utility helpers - output formatting and store management.
"""

from __future__ import annotations

import json
from typing import Any, NoReturn

import typer
from rich.console import Console
from rich.table import Table

from tempgroup.core.errors import ConfigError, TempGroupError
from tempgroup.core.logging import configure_logging
from tempgroup.core.settings import get_settings
from tempgroup.store.repository import SqlRecordStore

console = Console()
err_console = Console(stderr=True)


# ── Store helper ─────────────────────────────────────────────────────────


def get_store(database: str | None = None, *, create_schema: bool = True) -> SqlRecordStore:
    """Open the record store.  Defaults to ``TEMPGROUP_DATABASE_URL``."""
    settings = get_settings()
    url = database or settings.database_url
    try:
        return SqlRecordStore.from_url(url, echo=settings.database_echo, create_schema=create_schema)
    except Exception as e:
        fail(f"Cannot open database {url!r}: {e}")


def setup_logging() -> None:
    """Configure logging from settings for this invocation."""
    try:
        settings = get_settings()
    except ConfigError as e:
        fail_error(e)
    configure_logging(
        level=settings.log_level,
        json_format=settings.log_format == "json",
        force=True,
    )


def fail(message: str, code: int = 1) -> NoReturn:
    err_console.print(f"[bold red]Error[/bold red]: {message}")
    raise typer.Exit(code=code)


def fail_error(error: TempGroupError) -> NoReturn:
    fail(f"({error.category.value}) {error.message}")


# ── Output helpers ───────────────────────────────────────────────────────


def _to_dict(obj: Any) -> dict[str, Any]:
    """Convert dataclass / pydantic model / dict to plain dict."""
    if hasattr(obj, "model_dump"):
        return obj.model_dump()
    if hasattr(obj, "to_dict"):
        return obj.to_dict()
    if isinstance(obj, dict):
        return obj
    return {"value": str(obj)}


def print_json(data: Any) -> None:
    payload = [_to_dict(d) for d in data] if isinstance(data, list | tuple) else _to_dict(data)
    console.print_json(json.dumps(payload, default=str))


def print_table(items: list, *, title: str = "", columns: list[str] | None = None) -> None:
    """Render a list of dataclasses/dicts as a Rich table."""
    if not items:
        console.print("[dim]No items.[/dim]")
        return
    rows = [_to_dict(item) for item in items]
    columns = columns or list(rows[0])
    table = Table(title=title or None, show_lines=False, pad_edge=False)
    for col in columns:
        table.add_column(col, overflow="fold")
    for row in rows:
        table.add_row(*("" if row.get(col) is None else str(row.get(col)) for col in columns))
    console.print(table)


def print_dict(data: dict[str, Any], *, title: str = "") -> None:
    """Render a single dict as key-value pairs."""
    if title:
        console.print(f"[bold]{title}[/bold]")
    for k, v in data.items():
        console.print(f"  [cyan]{k}[/cyan]: {v}")
