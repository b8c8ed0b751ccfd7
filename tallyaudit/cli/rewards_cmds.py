"""CLI commands: rewards voters."""

from __future__ import annotations

from pathlib import Path

import click

from tallyaudit.cli import err_console, fail, write_output
from tallyaudit.exceptions import TallyAuditError
from tallyaudit.export import export_rewards_csv
from tallyaudit.genesis import load_genesis
from tallyaudit.rewards.voters import allocate_rewards, calculate_stake


@click.group()
def rewards():
    """Compute reward allocations from the genesis funds."""
    pass


@rewards.command("voters")
@click.option(
    "--genesis", "genesis_path", required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to the decoded block0 (JSON)",
)
@click.option("--total-rewards", required=True, type=click.IntRange(min=1),
              help="Reward (in lovelace) to be distributed")
@click.option("--output", "-o", type=click.Path(dir_okay=False, path_type=Path), default=None,
              help="Write the CSV to this file instead of stdout")
def voters(genesis_path, total_rewards, output) -> None:
    """Stake-weighted rewards for every non-committee account."""
    try:
        genesis = load_genesis(genesis_path)
        total_stake, stake_per_voter = calculate_stake(genesis.committee_accounts(), genesis)
        rows = allocate_rewards(total_stake, stake_per_voter, total_rewards)
    except TallyAuditError as e:
        fail(e)
        return

    if not rows:
        err_console.print("[yellow]⚠ No non-committee stake found in genesis.[/]")
    write_output(export_rewards_csv(rows), output)
