"""
Root Typer application for the tempgroup CLI.
"""

from __future__ import annotations

import typer
from typer import Typer

app = Typer(
    name="tempgroup",
    help="tempgroup - assign shared temp ids to records with repeated account ids.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# ── Version callback ─────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        from tempgroup import __version__

        typer.echo(f"tempgroup {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(  # noqa: UP007
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """tempgroup CLI - seed records, run the grouping job, inspect runs."""
    from tempgroup.cli.utils import setup_logging

    setup_logging()


# ── Sub-command registration ─────────────────────────────────────────────

from tempgroup.cli.db import app as db_app  # noqa: E402
from tempgroup.cli.job import records, run  # noqa: E402
from tempgroup.cli.runs import app as runs_app  # noqa: E402
from tempgroup.cli.seed import app as seed_app  # noqa: E402

app.command("run")(run)
app.command("records")(records)
app.add_typer(db_app, name="db", help="Database operations.")
app.add_typer(seed_app, name="seed", help="Load sample or synthetic records.")
app.add_typer(runs_app, name="runs", help="Job execution history.")
