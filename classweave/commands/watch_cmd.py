"""Watch command - keep the output root in sync as inputs change."""

from __future__ import annotations

from datetime import datetime

from rich.console import Console

from ..audit_log import log_reconcile_result
from ..config import ReconcileConfig
from ..errors import ReconcileError
from ..reconciler import ReconcileResult
from ..watcher import run_watch_loop
from .sync_cmd import render_result, run_sync


def run_watch(config: ReconcileConfig, *, include_directories: bool = False) -> int:
    """
    Sync once, then watch the inputs and reconcile each batch of changes.

    This is a blocking command that runs until interrupted (Ctrl+C).
    Every batch is recorded in the audit log.

    The stored snapshot stays at the initial sync, so the next `sync`
    re-checks everything that changed while watching.

    Returns exit code (0 = every pass succeeded).
    """
    console = Console(stderr=True)

    exit_code = run_sync(config)
    if exit_code != 0:
        console.print("[red]Initial sync failed; not watching.[/red]")
        return exit_code

    console.print(f"[bold]Watching[/bold] {len(config.inputs)} input roots")
    for root in config.inputs:
        console.print(f"  {root}")
    console.print(f"  Output: {config.output_dir}")
    console.print()
    console.print("[dim]Press Ctrl+C to stop watching[/dim]")
    console.print()

    passes = 0
    failed = 0

    def on_result(result: ReconcileResult) -> None:
        nonlocal passes, failed
        passes += 1
        if not result.success:
            failed += 1
        log_reconcile_result(config.audit_log_path, "watch", result)
        timestamp = datetime.now().strftime("%H:%M:%S")
        console.print(f"[dim]{timestamp}[/dim] pass {passes}")
        render_result(console, result)

    try:
        run_watch_loop(config, on_result=on_result, include_directories=include_directories)
    except ReconcileError as e:
        log_reconcile_result(config.audit_log_path, "watch", e.result or ReconcileResult(), error=str(e))
        console.print(f"[red]Watch stopped:[/red] {e}", highlight=False)
        return 1

    console.print()
    console.print(f"[bold]Stopped.[/bold] Ran {passes} passes.")

    return 1 if failed else 0
