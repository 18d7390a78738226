"""CLI entrypoint for classweave."""

import logging
import sys
from pathlib import Path

import click
from rich.logging import RichHandler

from . import __version__
from .config import CONFIG_FILENAME, find_config, load_config
from .errors import ConfigError
from .modifiers import ModifierResolver, parse_flags


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="%H:%M:%S",
        handlers=[RichHandler(show_path=False)],
        force=True,
    )


@click.group()
@click.version_option(__version__, prog_name="classweave")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False, dir_okay=False, path_type=Path),
    default=None,
    help=f"Path to {CONFIG_FILENAME} (defaults to the nearest one above the working directory)",
)
@click.option("--verbose", is_flag=True, help="Log every copy and delete")
@click.pass_context
def cli(ctx: click.Context, config_path: Path | None, verbose: bool) -> None:
    """classweave - incremental output mirroring and modifier resolution.

    Keeps a merged class output directory in sync with several compiler
    output directories, and resolves member access flags.
    """
    _configure_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path


def _load(ctx: click.Context):
    """Load the project config lazily; only some commands need it."""
    config_path = ctx.obj.get("config_path")
    if config_path is None:
        config_path = find_config(Path.cwd())
        if config_path is None:
            raise click.ClickException(
                f"{CONFIG_FILENAME} not found. Pass --config PATH or run from inside the project."
            )
    if not config_path.exists():
        raise click.BadParameter(f"File '{config_path}' does not exist.", param_hint="--config / -c")
    try:
        return load_config(config_path)
    except ConfigError as e:
        raise click.ClickException(str(e)) from e


@cli.command()
@click.option("--full", is_flag=True, help="Ignore the stored snapshot and copy every input file")
@click.option("--dry-run", is_flag=True, help="List the changes without applying them")
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["text", "json"]),
    default="text",
    show_default=True,
    help="Output format",
)
@click.pass_context
def sync(ctx: click.Context, full: bool, dry_run: bool, output_format: str) -> None:
    """Apply input changes since the last sync to the output directory.

    Examples:

        classweave sync

        classweave sync --dry-run

        classweave sync --full
    """
    from .commands.sync_cmd import run_sync

    config = _load(ctx)
    exit_code = run_sync(config.reconcile, full=full, dry_run=dry_run, output_format=output_format)
    sys.exit(exit_code)


@cli.command()
@click.option(
    "--directories/--no-directories",
    "include_directories",
    default=False,
    show_default=True,
    help="Forward directory events (a directory change ends the current pass)",
)
@click.pass_context
def watch(ctx: click.Context, include_directories: bool) -> None:
    """Sync, then keep syncing as input files change.

    Runs until interrupted (Ctrl+C). Each pass is recorded in the audit log.
    """
    from .commands.watch_cmd import run_watch

    config = _load(ctx)
    sys.exit(run_watch(config.reconcile, include_directories=include_directories))


@cli.command()
@click.option("--last", "last_n", type=int, default=None, help="Show only the last N passes")
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["text", "json"]),
    default="text",
    show_default=True,
    help="Output format",
)
@click.pass_context
def audit(ctx: click.Context, last_n: int | None, output_format: str) -> None:
    """Show recorded reconciliation passes.

    Examples:

        classweave audit --last 10

        classweave audit --format json
    """
    from .commands.audit_cmd import run_audit

    config = _load(ctx)
    count = run_audit(config.reconcile.audit_log_path, last_n=last_n, output_format=output_format)
    sys.exit(0 if count > 0 else 1)


@cli.command()
@click.argument("value")
@click.option(
    "--resolver",
    "resolver_name",
    type=click.Choice([r.value for r in ModifierResolver], case_sensitive=False),
    default=None,
    help="Resolver to apply (defaults to the configured one, or identity)",
)
@click.option(
    "--implemented/--not-implemented",
    default=True,
    show_default=True,
    help="Whether the member is being implemented",
)
@click.pass_context
def flags(ctx: click.Context, value: str, resolver_name: str | None, implemented: bool) -> None:
    """Resolve a member's access flags.

    VALUE is decimal, 0x hex or 0b binary.

    Examples:

        classweave flags 0x21 --resolver desynchronizing

        classweave flags 42 --resolver desynchronizing --not-implemented
    """
    from .commands.flags_cmd import run_flags

    try:
        raw = parse_flags(value)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="VALUE") from e

    if resolver_name is not None:
        resolver = ModifierResolver.parse(resolver_name)
    elif ctx.obj.get("config_path") is not None or find_config(Path.cwd()) is not None:
        resolver = _load(ctx).transform.resolver
    else:
        resolver = ModifierResolver.IDENTITY

    run_flags(raw, resolver, implemented=implemented)


@cli.command("config")
@click.pass_context
def show_config(ctx: click.Context) -> None:
    """Print the resolved configuration."""
    from .commands.flags_cmd import run_show_config

    run_show_config(_load(ctx))


def main() -> None:
    """Main entrypoint."""
    cli()


if __name__ == "__main__":
    main()
