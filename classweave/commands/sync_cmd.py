"""Sync command - bring the output root up to date with the inputs."""

from __future__ import annotations

import json

from rich.console import Console

from ..audit_log import log_reconcile_result
from ..changes import classify, coalesce, format_record
from ..config import ReconcileConfig
from ..errors import ReconcileError
from ..reconciler import OutputReconciler, ReconcileResult
from ..snapshot import InputSnapshot, diff_snapshots, take_snapshot


def render_result(console: Console, result: ReconcileResult) -> None:
    """Print a one-pass summary."""
    console.print(
        f"  copied: {len(result.copied)} ({result.bytes_written:,} bytes)  "
        f"deleted: {len(result.deleted)}  already absent: {len(result.missing)}"
    )
    if result.aborted_at is not None:
        console.print(
            f"[yellow]Pass ended at directory change {result.aborted_at.relative_path}; "
            "remaining changes were not applied[/yellow]",
            highlight=False,
        )
    for failure in result.delete_failures:
        console.print(f"[red]Delete failed:[/red] {failure.target} ({failure.reason})", highlight=False)


def run_sync(
    config: ReconcileConfig,
    *,
    full: bool = False,
    dry_run: bool = False,
    output_format: str = "text",
) -> int:
    """
    Reconcile the output root against the inputs' changes since the last sync.

    The stored snapshot is replaced only after a successful pass, so an
    incomplete pass is retried from the same baseline next time.

    Returns exit code (0 = success, 1 = incomplete or failed pass).
    """
    console = Console()

    previous = InputSnapshot() if full else InputSnapshot.load(config.snapshot_path)
    current = take_snapshot(config.inputs)
    records = coalesce(classify(diff_snapshots(previous, current)))

    if dry_run:
        if output_format == "json":
            console.print_json(json.dumps([r.to_dict() for r in records]))
        else:
            for record in records:
                console.print(format_record(record), markup=False, highlight=False)
            console.print(f"[dim]{len(records)} changes (dry run)[/dim]")
        return 0

    if not records:
        if output_format == "json":
            console.print_json(json.dumps(ReconcileResult().to_dict()))
        else:
            console.print("[dim]Output is up to date.[/dim]")
        current.save(config.snapshot_path)
        return 0

    reconciler = OutputReconciler(config.output_dir)
    try:
        result = reconciler.reconcile(records)
    except ReconcileError as e:
        log_reconcile_result(config.audit_log_path, "sync", e.result or ReconcileResult(), error=str(e))
        console.print(f"[red]Sync failed:[/red] {e}", highlight=False)
        return 1

    log_reconcile_result(config.audit_log_path, "sync", result)

    if output_format == "json":
        console.print_json(json.dumps(result.to_dict()))
    else:
        console.print(f"[bold]Synced[/bold] {config.output_dir}")
        render_result(console, result)

    if not result.success:
        return 1

    current.save(config.snapshot_path)
    return 0
