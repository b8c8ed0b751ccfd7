"""
tallyaudit — Export Module.

Renders the recovered votes as JSON or YAML and the reward table as CSV.
"""

from __future__ import annotations

import csv
import io
import json
from typing import TYPE_CHECKING, Any

import yaml

from tallyaudit.recovery.votes import VotesByVoter, votes_to_dict

if TYPE_CHECKING:
    from tallyaudit.rewards.voters import VoterReward

REWARDS_HEADER = [
    "Address",
    "Stake of the voter",
    "Reward for the voter (ADA)",
    "Reward for the voter (lovelace)",
]


def votes_report(original: VotesByVoter, filtered: VotesByVoter) -> dict[str, Any]:
    return {"original": votes_to_dict(original), "filtered": votes_to_dict(filtered)}


def format_report(report: dict[str, Any], fmt: str = "json") -> str:
    """Render a report dict.

    Args:
        report: JSON-serializable report.
        fmt: Format — 'json' or 'yaml'.

    Raises:
        ValueError: If format is unsupported.
    """
    fmt = fmt.lower().strip()
    if fmt == "json":
        return json.dumps(report, indent=2, sort_keys=True) + "\n"
    elif fmt == "yaml":
        return yaml.safe_dump(report, sort_keys=True)
    else:
        raise ValueError(f"Unsupported output format: '{fmt}'. Use: json, yaml")


def export_rewards_csv(rewards: list[VoterReward]) -> str:
    """Export the reward table as CSV with headers."""
    output = io.StringIO()
    writer = csv.writer(output, lineterminator="\n")
    writer.writerow(REWARDS_HEADER)
    for r in rewards:
        writer.writerow([r.address, r.stake, r.reward_in_units, r.reward_in_subunits])
    return output.getvalue()
