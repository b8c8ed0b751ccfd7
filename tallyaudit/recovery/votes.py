"""Group vote casts by voter for the recovery report."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from types import MappingProxyType

from tallyaudit.decoder import VoteCastRecord, decode_vote_cast
from tallyaudit.genesis import GenesisLedger
from tallyaudit.models import Fragment, FragmentKind, PersistentFragmentLog
from tallyaudit.recovery.filter import VoteFragmentFilter

VotesByVoter = Mapping[str, tuple[VoteCastRecord, ...]]


def group_by_voter(fragments: Iterable[tuple[Fragment, int | None]]) -> VotesByVoter:
    """Fold ``(fragment, spending counter)`` pairs into votes per voter.

    Non vote-cast fragments are skipped. Within a voter, records keep
    the order of ``fragments``. The result is read-only and shares no
    state with the input.
    """
    groups: dict[str, list[VoteCastRecord]] = {}
    for fragment, spending_counter in fragments:
        if fragment.kind is not FragmentKind.VOTE_CAST:
            continue
        record = decode_vote_cast(fragment, spending_counter)
        groups.setdefault(record.voter, []).append(record)
    return MappingProxyType({voter: tuple(records) for voter, records in groups.items()})


def votes_to_dict(votes: VotesByVoter) -> dict[str, list[dict]]:
    return {voter: [r.to_dict() for r in records] for voter, records in votes.items()}


def recover_votes(
    genesis: GenesisLedger,
    logs: Sequence[PersistentFragmentLog],
    block_range: range,
) -> tuple[VotesByVoter, VotesByVoter]:
    """Votes as logged and votes as accepted by the replayed ledger."""
    original = group_by_voter((log.fragment, None) for log in logs)
    filtered = group_by_voter(VoteFragmentFilter(genesis, block_range, logs))
    return original, filtered
