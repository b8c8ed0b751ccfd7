"""
tallyaudit — Vote Cast Decoder.

Extracts the audit-relevant contents of a vote-cast transaction. Only
account-based transactions carrying a public ballot are understood;
anything else raises an ``UnsupportedTransactionError``.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any

from tallyaudit.exceptions import (
    PrivateVoteNotSupported,
    UnsupportedTransactionError,
    UtxoVoteNotSupported,
)
from tallyaudit.models import Fragment, FragmentKind, VoteCast


@dataclass(frozen=True)
class VoteCastRecord:
    """One vote as reconstructed from a fragment."""

    fragment_id: str
    voter: str
    vote_plan: str
    proposal_index: int
    choice: int
    spending_counter: int | None = None

    @property
    def vote_key(self) -> tuple[str, str, int]:
        """Records sharing this key are the same vote."""
        return (self.voter, self.vote_plan, self.proposal_index)

    def to_dict(self) -> dict[str, Any]:
        d = asdict(self)
        if self.spending_counter is None:
            del d["spending_counter"]
        return d


def deconstruct_account_transaction(fragment: Fragment) -> tuple[VoteCast, str, int | None]:
    """Split a vote-cast fragment into (vote cast, voter account, declared counter).

    Raises:
        UtxoVoteNotSupported: the transaction spends a UTXO input.
        UnsupportedTransactionError: not exactly one account input.
    """
    tx = fragment.transaction
    if fragment.kind is not FragmentKind.VOTE_CAST or tx is None or tx.vote_cast is None:
        raise UnsupportedTransactionError(fragment.id, f"not a vote cast: {fragment.kind.value}")
    if any(i.kind == "utxo" for i in tx.inputs):
        raise UtxoVoteNotSupported(fragment.id)
    if len(tx.inputs) != 1:
        raise UnsupportedTransactionError(
            fragment.id, f"vote cast must have exactly one account input, found {len(tx.inputs)}"
        )
    return tx.vote_cast, tx.inputs[0].account, tx.spending_counter


def public_choice(fragment: Fragment, vote_cast: VoteCast) -> int:
    if vote_cast.payload.public is None:
        raise PrivateVoteNotSupported(fragment.id)
    return vote_cast.payload.public.choice


def decode_vote_cast(fragment: Fragment, spending_counter: int | None = None) -> VoteCastRecord:
    """Build the record for a vote-cast fragment accepted under ``spending_counter``."""
    vote_cast, voter, _ = deconstruct_account_transaction(fragment)
    return VoteCastRecord(
        fragment_id=fragment.id,
        voter=voter,
        vote_plan=vote_cast.vote_plan,
        proposal_index=vote_cast.proposal_index,
        choice=public_choice(fragment, vote_cast),
        spending_counter=spending_counter,
    )
