"""Flags and config commands - inspect transformation settings."""

from __future__ import annotations

from rich.console import Console
from rich.table import Table

from ..config import ProjectConfig
from ..modifiers import ModifierResolver, describe_flags


class _FlagValue:
    """Member double that reports a fixed flag value."""

    def __init__(self, flags: int):
        self.flags = flags

    def current_flags(self, implemented: bool) -> int:
        return self.flags


def run_flags(value: int, resolver: ModifierResolver, *, implemented: bool = True) -> int:
    """
    Apply a resolver to a raw flag value and show before/after.

    Returns the resolved flag value.
    """
    console = Console()
    resolved = resolver.transform(_FlagValue(value), implemented)

    table = Table(title=f"Resolver: {resolver.value}")
    table.add_column("", style="bold")
    table.add_column("Value", justify="right")
    table.add_column("Flags")
    table.add_row("Before", f"{value} (0x{value:04x})", describe_flags(value))
    table.add_row("After", f"{resolved} (0x{resolved:04x})", describe_flags(resolved))
    console.print(table)

    return resolved


def run_show_config(config: ProjectConfig) -> None:
    """Print the resolved project configuration."""
    console = Console()

    if config.source:
        console.print(f"[bold]Config[/bold] {config.source}")
    console.print("[bold]Inputs[/bold]")
    for root in config.reconcile.inputs:
        console.print(f"  {root}", highlight=False)
    console.print(f"[bold]Output[/bold] {config.reconcile.output_dir}", highlight=False)
    console.print(f"[bold]State[/bold] {config.reconcile.state_dir}", highlight=False)
    console.print(f"[bold]Resolver[/bold] {config.transform.resolver.value}")

    discovery = config.transform.discovery_set
    if discovery is None:
        console.print("[bold]Discovery[/bold] not requested")
    elif not discovery:
        console.print("[bold]Discovery[/bold] requested over no locations")
    else:
        console.print("[bold]Discovery[/bold]")
        for location in discovery:
            console.print(f"  {location}", highlight=False)
