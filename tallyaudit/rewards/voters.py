"""
tallyaudit — Voter Rewards.

Splits a reward pool among non-committee genesis accounts in proportion
to their stake. Shares are kept as integers: the inverse share
``total_stake / voter_stake`` is computed on a total scaled by the
subunit factor, and the reward is the pool divided by that share.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping, Set
from dataclasses import dataclass

from tallyaudit import config
from tallyaudit.exceptions import DegenerateRewardError, StakeOverflowError
from tallyaudit.genesis import GenesisLedger

logger = logging.getLogger("tallyaudit.rewards")


@dataclass(frozen=True)
class VoterReward:
    address: str
    stake: int
    inverse_share: int
    reward: float
    factor: int = config.ADA_TO_LOVELACE_FACTOR

    @property
    def reward_in_units(self) -> str:
        return f"{self.reward:.{config.REWARD_UNIT_DECIMALS}f}"

    @property
    def reward_in_subunits(self) -> str:
        return f"{math.trunc(self.reward * self.factor):.{config.REWARD_SUBUNIT_DECIMALS}f}"


def calculate_stake(
    committee_keys: Set[str], genesis: GenesisLedger
) -> tuple[int, dict[str, int]]:
    """Total and per-account stake of the genesis funds, committee excluded.

    Only ``fund`` entries count; certificates and legacy funds carry no
    stake attributable to an account.

    Raises:
        StakeOverflowError: the total leaves the u64 range.
    """
    total_stake = 0
    stake_per_voter: dict[str, int] = {}

    for fund in genesis.fund_entries():
        if fund.address in committee_keys or fund.value == 0:
            continue
        total_stake += fund.value
        if total_stake > config.U64_MAX:
            raise StakeOverflowError(fund.address, total_stake)
        stake_per_voter[fund.address] = stake_per_voter.get(fund.address, 0) + fund.value

    logger.info("Total stake %d over %d voters", total_stake, len(stake_per_voter))
    return total_stake, stake_per_voter


def scale_stake(total_stake: int, factor: int = config.ADA_TO_LOVELACE_FACTOR) -> int:
    scaled = total_stake * factor
    if scaled > config.U64_MAX:
        raise StakeOverflowError(None, scaled)
    return scaled


def calculate_inverse_reward_share(
    total_stake: int, stake_per_voter: Mapping[str, int]
) -> dict[str, int]:
    """``total_stake // voter_stake`` for every voter."""
    shares = {}
    for address, stake in stake_per_voter.items():
        if stake <= 0:
            raise DegenerateRewardError(f"account {address} has no stake")
        shares[address] = total_stake // stake
    return shares


def calculate_total_reward(share: int, total_reward: int) -> float:
    """Reward for a voter from its inverse share."""
    if total_reward <= 0:
        raise DegenerateRewardError("reward pool is empty")
    if share <= 0:
        raise DegenerateRewardError("inverse share is zero")
    return (1 / share) * total_reward


def allocate_rewards(
    total_stake: int,
    stake_per_voter: Mapping[str, int],
    total_rewards: int,
    factor: int = config.ADA_TO_LOVELACE_FACTOR,
) -> list[VoterReward]:
    """Reward rows for every voter, sorted by address.

    ``total_rewards`` is expressed in subunits; the resulting reward is in
    whole units.
    """
    if total_rewards <= 0:
        raise DegenerateRewardError("reward pool is empty")
    shares = calculate_inverse_reward_share(scale_stake(total_stake, factor), stake_per_voter)
    return [
        VoterReward(
            address=address,
            stake=stake_per_voter[address],
            inverse_share=shares[address],
            reward=calculate_total_reward(shares[address], total_rewards),
            factor=factor,
        )
        for address in sorted(shares)
    ]
