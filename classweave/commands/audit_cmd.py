"""Audit command - show recorded reconciliation passes."""

from __future__ import annotations

import json
from pathlib import Path

from rich.console import Console

from ..audit_log import format_audit_entry, read_audit_log


def run_audit(log_path: Path, *, last_n: int | None = None, output_format: str = "text") -> int:
    """
    Display audit log entries.

    Returns the number of entries displayed.
    """
    console = Console()

    entries = read_audit_log(log_path, last_n=last_n)
    if not entries:
        console.print("[dim]No passes recorded.[/dim]")
        return 0

    if output_format == "json":
        for entry in entries:
            console.print(json.dumps(entry.to_dict()), markup=False, highlight=False, soft_wrap=True)
    else:
        for entry in entries:
            console.print(format_audit_entry(entry), markup=False, highlight=False)
            console.print()

    return len(entries)
