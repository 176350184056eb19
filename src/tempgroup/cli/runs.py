"""
CLI: ``tempgroup runs`` - job execution history.
"""

from __future__ import annotations

import typer

from tempgroup.batch.ledger import JobLedger
from tempgroup.batch.status import JobStatus
from tempgroup.cli.utils import fail, get_store, print_dict, print_json, print_table

app = typer.Typer(no_args_is_help=True)

_LIST_COLUMNS = ["execution_id", "status", "created_at", "duration_seconds", "final_identifier", "known_accounts"]
_STEP_COLUMNS = ["step_name", "status", "read_count", "write_count", "commit_count", "rollback_count", "error"]


@app.command("list")
def list_runs(
    status: str | None = typer.Option(None, "--status", "-s"),
    limit: int = typer.Option(20, "--limit", "-n", min=1),
    database: str | None = typer.Option(None, "--database", "-d"),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """List recent job executions."""
    try:
        status_filter = JobStatus(status.lower()) if status else None
    except ValueError:
        fail(f"Unknown status {status!r}; expected one of {[s.value for s in JobStatus]}")

    ledger = JobLedger(get_store(database))
    executions = ledger.list_executions(limit=limit, status=status_filter)
    if json_out:
        print_json(executions)
        return
    print_table(executions, title="Runs", columns=_LIST_COLUMNS)


@app.command("show")
def show_run(
    execution_id: str = typer.Argument(..., help="Execution ID"),
    database: str | None = typer.Option(None, "--database", "-d"),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Show one job execution with its steps."""
    ledger = JobLedger(get_store(database))
    execution = ledger.get_execution(execution_id)
    if execution is None:
        fail(f"Execution not found: {execution_id}")

    if json_out:
        print_json(execution)
        return
    summary = execution.to_dict()
    summary.pop("steps")
    print_dict(summary, title=f"Run: {execution_id}")
    print_table(execution.step_executions, title="Steps", columns=_STEP_COLUMNS)
