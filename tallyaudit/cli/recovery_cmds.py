"""CLI commands: recover votes."""

from __future__ import annotations

from pathlib import Path

import click

from tallyaudit import config
from tallyaudit.cli import fail, write_output
from tallyaudit.exceptions import TallyAuditError
from tallyaudit.export import format_report, votes_report
from tallyaudit.fragments import load_fragment_logs
from tallyaudit.genesis import load_genesis
from tallyaudit.recovery.votes import recover_votes


@click.group()
def recover():
    """Recover the ledger's decisions from persisted fragment logs."""
    pass


@recover.command("votes")
@click.option(
    "--genesis", "genesis_path", required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to the decoded block0 (JSON)",
)
@click.option(
    "--logs-path", required=True,
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help="Folder containing the fragment logs used for the reconstruction",
)
@click.option("--block-range-start", type=int, default=None, help="First replayed block height")
@click.option("--block-range-end", type=int, default=None, help="Block height where the replay stops")
@click.option("--output", "-o", type=click.Path(dir_okay=False, path_type=Path), default=None,
              help="Write the report to this file instead of stdout")
@click.option("--format", "fmt", type=click.Choice(["json", "yaml"]), default="json",
              help="Report format")
def votes(genesis_path, logs_path, block_range_start, block_range_end, output, fmt) -> None:
    """Print every voter's votes, as logged and as accepted by the ledger."""
    start = config.BLOCK_RANGE_START if block_range_start is None else block_range_start
    end = config.BLOCK_RANGE_END if block_range_end is None else block_range_end
    try:
        genesis = load_genesis(genesis_path)
        logs = load_fragment_logs(logs_path)
        original, filtered = recover_votes(genesis, logs, range(start, end))
    except TallyAuditError as e:
        fail(e)
        return

    write_output(format_report(votes_report(original, filtered), fmt), output)
