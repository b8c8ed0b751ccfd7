"""
tallyaudit — Vote Recovery.

Replays persisted fragments and reconstructs the votes each voter cast.
"""

from .filter import FilterReport, Rejection, RejectReason, VoteFragmentFilter
from .votes import group_by_voter, recover_votes, votes_to_dict
