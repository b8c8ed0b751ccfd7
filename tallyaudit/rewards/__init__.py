"""
tallyaudit — Rewards.

Stake calculation and reward allocation from the genesis funds.
"""

from .voters import (
    VoterReward,
    allocate_rewards,
    calculate_inverse_reward_share,
    calculate_stake,
    calculate_total_reward,
)
