"""
tallyaudit — Post-hoc audit of ledger-based votes.

Reconstructs the votes each voter actually cast from persisted fragment
logs, and allocates stake-weighted rewards from the genesis funds.
"""

__version__ = "0.3.0"

from tallyaudit.genesis import GenesisLedger, load_genesis
from tallyaudit.recovery import VoteFragmentFilter, group_by_voter
from tallyaudit.rewards import allocate_rewards, calculate_stake

__all__ = [
    "GenesisLedger",
    "VoteFragmentFilter",
    "__version__",
    "allocate_rewards",
    "calculate_stake",
    "group_by_voter",
    "load_genesis",
]
