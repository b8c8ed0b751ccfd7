"""
tallyaudit CLI — Package init.

Re-exports the main CLI group and shared utilities.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import click
from rich.console import Console

from tallyaudit import __version__, config
from tallyaudit.exceptions import TallyAuditError

console = Console()
err_console = Console(stderr=True)


def setup_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else getattr(logging, config.LOG_LEVEL, logging.WARNING)
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(name)s] %(levelname)s — %(message)s",
        datefmt="%H:%M:%S",
        force=True,
    )


def fail(error: TallyAuditError) -> None:
    """Print a diagnostic and abort the command."""
    err_console.print(f"[red]✗ {type(error).__name__}:[/] {error}", highlight=False)
    sys.exit(1)


def write_output(content: str, output: Path | None) -> None:
    if output is None:
        click.echo(content, nl=False)
        return
    output.write_text(content, encoding="utf-8")
    err_console.print(f"[green]✓[/] Report written to [bold]{output}[/]")


# ─── Main Group ──────────────────────────────────────────────────


@click.group()
@click.version_option(__version__, prog_name="tallyaudit")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
def cli(verbose) -> None:
    """tallyaudit — Reconstruct votes and voter rewards from ledger logs."""
    setup_logging(verbose)


# ─── Register all sub-modules ───────────────────────────────────
from tallyaudit.cli.recovery_cmds import recover  # noqa: E402
from tallyaudit.cli.rewards_cmds import rewards  # noqa: E402

cli.add_command(recover)
cli.add_command(rewards)


if __name__ == "__main__":
    cli()
