"""
CLI: ``tempgroup run`` and ``tempgroup records`` - run the grouping job and
inspect its output.
"""

from __future__ import annotations

import typer

from tempgroup.batch.job import GroupingJob
from tempgroup.batch.ledger import JobLedger
from tempgroup.batch.params import JobParameters
from tempgroup.cli.utils import console, err_console, fail_error, get_store, print_dict, print_json, print_table
from tempgroup.core.errors import TempGroupError
from tempgroup.core.settings import get_settings

_RECORD_COLUMNS = ["id", "org_id", "group_key", "account_id", "temp_id"]
_STEP_COLUMNS = ["step_name", "status", "read_count", "write_count", "chunk_count", "commit_count", "rollback_count"]


def run(
    chunk_size: int | None = typer.Option(None, "--chunk-size", "-c", help="Records per chunk transaction"),
    page_size: int | None = typer.Option(None, "--page-size", "-p", help="Records per reader page"),
    max_threads: int | None = typer.Option(None, "--max-threads", "-t", help="Worker threads per chunk"),
    log_frequency: int | None = typer.Option(None, "--log-frequency", help="Progress log interval"),
    preload: bool | None = typer.Option(
        None, "--preload/--no-preload", help="Warm the account cache from the store"
    ),
    writer: str | None = typer.Option(None, "--writer", "-w", help="Chunk writer: batch | upsert"),
    database: str | None = typer.Option(None, "--database", "-d"),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Run the grouping job once; exits 1 if the job fails."""
    try:
        params = JobParameters.from_settings(
            get_settings(),
            chunk_size=chunk_size,
            page_size=page_size,
            max_threads=max_threads,
            log_frequency=log_frequency,
            preload_known_accounts=preload,
            writer_mode=writer,
        )
    except TempGroupError as e:
        fail_error(e)

    store = get_store(database)
    job = GroupingJob(store, params, ledger=JobLedger(store))
    execution = job.run()

    if json_out:
        print_json(execution)
    else:
        summary = execution.to_dict()
        summary.pop("steps")
        summary.pop("params")
        print_dict(summary, title="Grouping job")
        print_table(execution.step_executions, title="Steps", columns=_STEP_COLUMNS)

    if not execution.succeeded:
        err_console.print(
            f"[bold red]Job failed[/bold red] in step {execution.failed_step}: "
            f"{execution.error_type}: {execution.error}"
        )
        raise typer.Exit(code=1)


def records(
    limit: int = typer.Option(50, "--limit", "-n", min=1),
    offset: int = typer.Option(0, "--offset", min=0),
    account: str | None = typer.Option(None, "--account", "-a", help="Only records of this account id"),
    database: str | None = typer.Option(None, "--database", "-d"),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """List records with their temp ids, ordered by id."""
    store = get_store(database)
    if account:
        items = store.records_for_account(account, limit=limit, offset=offset)
    else:
        items = store.list_records(limit=limit, offset=offset)

    if json_out:
        print_json(items)
        return
    print_table(items, title="Records", columns=_RECORD_COLUMNS)
    total = store.count()
    console.print(f"\n[dim]Showing {len(items)} of {total} (offset {offset})[/dim]")
