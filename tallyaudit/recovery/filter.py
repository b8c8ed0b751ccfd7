"""
tallyaudit — Vote Fragment Filter.

Replays persisted fragments against the genesis ledger to decide which
vote casts the ledger actually accepted. For every account the replay
keeps a spending counter; a vote is only accepted when its counter
moves that account's sequence forward. When an account voted more
than once on the same proposal, the cast with the highest counter is
the authoritative one.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from enum import Enum

from tallyaudit.decoder import deconstruct_account_transaction, public_choice
from tallyaudit.exceptions import LedgerInitError
from tallyaudit.genesis import GenesisLedger
from tallyaudit.models import Fragment, FragmentKind, PersistentFragmentLog

logger = logging.getLogger("tallyaudit.recovery.filter")


class RejectReason(str, Enum):
    UNSUPPORTED_FRAGMENT = "unsupported_fragment"
    OUTSIDE_BLOCK_RANGE = "outside_block_range"
    DUPLICATE_FRAGMENT = "duplicate_fragment"
    UNKNOWN_ACCOUNT = "unknown_account"
    UNKNOWN_VOTE_PLAN = "unknown_vote_plan"
    INVALID_PROPOSAL = "invalid_proposal"
    OUTSIDE_VOTE_WINDOW = "outside_vote_window"
    STALE_SPENDING_COUNTER = "stale_spending_counter"
    DUPLICATE_SPENDING_COUNTER = "duplicate_spending_counter"
    SUPERSEDED = "superseded"


@dataclass(frozen=True)
class Rejection:
    fragment_id: str
    reason: RejectReason
    detail: str = ""


@dataclass(frozen=True)
class FilterReport:
    """Outcome of one replay. ``accepted`` keeps input order."""

    accepted: tuple[tuple[Fragment, int], ...]
    rejected: tuple[Rejection, ...]

    def rejected_by(self, reason: RejectReason) -> list[Rejection]:
        return [r for r in self.rejected if r.reason is reason]


@dataclass(frozen=True)
class _Accepted:
    fragment: Fragment
    spending_counter: int
    vote_key: tuple[str, str, int]


class VoteFragmentFilter:
    """Ledger replay over a bounded block-height window.

    Args:
        genesis: Initial ledger state.
        block_range: Block heights that are replayed; fragments
            submitted outside it are not acceptable.
        fragments: Persisted fragments in submission order.

    Raises:
        LedgerInitError: The genesis state cannot seed the replay.
    """

    def __init__(
        self,
        genesis: GenesisLedger,
        block_range: range,
        fragments: Iterable[PersistentFragmentLog],
    ):
        if block_range.step != 1 or len(block_range) == 0:
            raise LedgerInitError(f"block range {block_range!r} replays no block")
        if genesis.slot_duration <= 0:
            raise LedgerInitError(f"invalid slot duration {genesis.slot_duration}")
        accounts = frozenset(entry.address for entry in genesis.fund_entries())
        if not accounts:
            raise LedgerInitError("genesis declares no initial funds")

        self._genesis = genesis
        self._block_range = block_range
        self._accounts = accounts
        self._vote_plans = genesis.vote_plans()
        self._fragments = tuple(fragments)

    def __iter__(self) -> Iterator[tuple[Fragment, int]]:
        return iter(self.run().accepted)

    def _check_ledger(self, log: PersistentFragmentLog, voter: str, vote_cast) -> Rejection | None:
        fragment_id = log.fragment.id
        height = self._genesis.block_height_at(log.time)
        if height not in self._block_range:
            return Rejection(fragment_id, RejectReason.OUTSIDE_BLOCK_RANGE, f"height {height}")
        if voter not in self._accounts:
            return Rejection(fragment_id, RejectReason.UNKNOWN_ACCOUNT, voter)
        plan = self._vote_plans.get(vote_cast.vote_plan)
        if plan is None:
            return Rejection(fragment_id, RejectReason.UNKNOWN_VOTE_PLAN, vote_cast.vote_plan)
        if vote_cast.proposal_index >= plan.proposals:
            return Rejection(
                fragment_id, RejectReason.INVALID_PROPOSAL,
                f"proposal {vote_cast.proposal_index} of {plan.proposals}",
            )
        if not plan.vote_start <= height < plan.vote_end:
            return Rejection(
                fragment_id, RejectReason.OUTSIDE_VOTE_WINDOW,
                f"height {height} not in [{plan.vote_start}, {plan.vote_end})",
            )
        return None

    def run(self) -> FilterReport:
        """Replay every fragment once and report the ledger's decisions.

        Raises:
            UnsupportedTransactionError: a vote cast spends a UTXO input
                or carries a private ballot.
        """
        accepted: dict[int, _Accepted] = {}
        rejected: dict[int, Rejection] = {}
        seen_ids: set[str] = set()
        last_counter: dict[str, int] = {}
        # account -> accepted spending counter -> input position
        used_counters: dict[str, dict[int, int]] = {}

        for pos, log in enumerate(self._fragments):
            fragment = log.fragment
            if fragment.kind is not FragmentKind.VOTE_CAST:
                rejected[pos] = Rejection(
                    fragment.id, RejectReason.UNSUPPORTED_FRAGMENT, fragment.kind.value
                )
                continue

            # UTXO inputs and private ballots abort the whole replay.
            vote_cast, voter, declared = deconstruct_account_transaction(fragment)
            public_choice(fragment, vote_cast)

            rejection = self._check_ledger(log, voter, vote_cast)
            if rejection is None and fragment.id in seen_ids:
                rejection = Rejection(fragment.id, RejectReason.DUPLICATE_FRAGMENT)
            if rejection is not None:
                rejected[pos] = rejection
                continue

            previous = last_counter.get(voter)
            if declared is not None:
                counter = declared
            else:
                counter = 0 if previous is None else previous + 1

            spent = used_counters.setdefault(voter, {})
            if counter in spent:
                # Two casts signed under one counter: neither can be trusted.
                detail = f"counter {counter} reused by {voter}"
                rejected[pos] = Rejection(fragment.id, RejectReason.DUPLICATE_SPENDING_COUNTER, detail)
                clash_pos = spent[counter]
                clash = accepted.pop(clash_pos, None)
                if clash is not None:
                    rejected[clash_pos] = Rejection(
                        clash.fragment.id, RejectReason.DUPLICATE_SPENDING_COUNTER, detail
                    )
                seen_ids.add(fragment.id)
                continue
            if previous is not None and counter < previous:
                rejected[pos] = Rejection(
                    fragment.id, RejectReason.STALE_SPENDING_COUNTER,
                    f"counter {counter} after {previous}",
                )
                continue

            seen_ids.add(fragment.id)
            last_counter[voter] = counter
            spent[counter] = pos
            accepted[pos] = _Accepted(
                fragment, counter, (voter, vote_cast.vote_plan, vote_cast.proposal_index)
            )

        latest: dict[tuple[str, str, int], int] = {}
        for pos, entry in accepted.items():
            current = latest.get(entry.vote_key)
            if current is None or accepted[current].spending_counter < entry.spending_counter:
                latest[entry.vote_key] = pos
        authoritative = set(latest.values())
        for pos in [p for p in accepted if p not in authoritative]:
            entry = accepted.pop(pos)
            winner = accepted[latest[entry.vote_key]]
            rejected[pos] = Rejection(
                entry.fragment.id, RejectReason.SUPERSEDED, f"by {winner.fragment.id}"
            )

        for pos in sorted(rejected):
            r = rejected[pos]
            logger.debug("Rejected fragment %s: %s %s", r.fragment_id, r.reason.value, r.detail)
        logger.info(
            "Replayed %d fragments over heights %d..%d: %d accepted, %d rejected",
            len(self._fragments), self._block_range.start, self._block_range.stop,
            len(accepted), len(rejected),
        )
        return FilterReport(
            accepted=tuple((accepted[p].fragment, accepted[p].spending_counter) for p in sorted(accepted)),
            rejected=tuple(rejected[p] for p in sorted(rejected)),
        )
