"""
tallyaudit — Custom Exceptions.

Typed error hierarchy. Every error aborts the pipeline that raised it;
there is no partial-success mode.
"""


class TallyAuditError(Exception):
    """Base exception for all tallyaudit errors."""


class GenesisError(TallyAuditError):
    """Raised when the genesis snapshot cannot be read or validated."""


class FragmentLogError(TallyAuditError):
    """Raised when the fragment log folder cannot be read."""


class LedgerInitError(TallyAuditError):
    """Raised when the genesis state cannot seed the replay simulation."""


class UnsupportedTransactionError(TallyAuditError):
    """Raised for vote casts the audit cannot interpret.

    Not recoverable: a tally built while skipping these would be
    incomplete without anybody noticing.
    """

    def __init__(self, fragment_id: str, message: str):
        self.fragment_id = fragment_id
        super().__init__(f"{message} (fragment {fragment_id})")


class UtxoVoteNotSupported(UnsupportedTransactionError):
    """Vote cast built on a UTXO-style transaction input."""

    def __init__(self, fragment_id: str):
        super().__init__(fragment_id, "utxo votes not supported")


class PrivateVoteNotSupported(UnsupportedTransactionError):
    """Vote cast carrying an encrypted (private) ballot."""

    def __init__(self, fragment_id: str):
        super().__init__(fragment_id, "cannot handle private votes")


class StakeOverflowError(TallyAuditError):
    """Raised when accumulated stake leaves the unsigned 64-bit range."""

    def __init__(self, account: str | None, value: int):
        self.account = account
        self.value = value
        where = f" while adding account {account}" if account else ""
        super().__init__(f"stake {value} overflows u64{where}")


class DegenerateRewardError(TallyAuditError):
    """Raised for a zero reward pool or a zero-stake account."""
