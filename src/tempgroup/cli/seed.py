"""
CLI: ``tempgroup seed`` - load sample or synthetic records.
"""

from __future__ import annotations

import typer

from tempgroup.cli.utils import console, get_store, print_json
from tempgroup.seed import seed_sample, seed_synthetic

app = typer.Typer(no_args_is_help=True)


@app.command()
def sample(
    database: str | None = typer.Option(None, "--database", "-d"),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Insert the nine sample records."""
    store = get_store(database)
    inserted = seed_sample(store)
    if json_out:
        print_json({"inserted": inserted, "total": store.count()})
        return
    console.print(f"Inserted [bold]{inserted}[/bold] sample records")


@app.command()
def synthetic(
    count: int = typer.Option(10_000, "--count", "-n", min=1, help="Records to generate"),
    seed: int | None = typer.Option(None, "--seed", help="Random seed for repeatable data"),
    accounts: int | None = typer.Option(None, "--accounts", min=1, help="Distinct account id pool size"),
    batch_size: int = typer.Option(10_000, "--batch-size", min=1),
    database: str | None = typer.Option(None, "--database", "-d"),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Insert generated records with repeating account ids."""
    store = get_store(database)
    inserted = seed_synthetic(store, count, batch_size=batch_size, seed=seed, account_pool=accounts)
    if json_out:
        print_json({"inserted": inserted, "total": store.count()})
        return
    console.print(f"Inserted [bold]{inserted}[/bold] synthetic records")
