"""
tallyaudit — Input Models.
Pydantic models validating the decoded genesis snapshot and the
persisted fragment log records.
"""

from __future__ import annotations

import string
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from tallyaudit.canonical import compute_fragment_id

SPENDING_COUNTER_MAX = 2**32 - 1
MAX_PROPOSALS_PER_PLAN = 256
_HEX_DIGITS = frozenset(string.hexdigits)


def normalize_key(value: str) -> str:
    """Lowercase hex form of a public key or identifier, ``0x`` stripped."""
    if not isinstance(value, str):
        raise ValueError("key must be a hex string")
    key = value.strip().lower()
    if key.startswith("0x"):
        key = key[2:]
    if not key or not set(key) <= _HEX_DIGITS:
        raise ValueError(f"not a hex key: {value!r}")
    return key


# ─── Genesis ─────────────────────────────────────────────────────────


class FundEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    address: str
    value: int = Field(..., ge=0)

    @field_validator("address")
    @classmethod
    def valid_address(cls, v: str) -> str:
        return normalize_key(v)


class VotePlanCert(BaseModel):
    """Vote plan declared in the genesis block, windows in block heights."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["vote_plan"]
    id: str
    vote_start: int = Field(..., ge=0)
    vote_end: int = Field(..., ge=0)
    proposals: int = Field(..., ge=1, le=MAX_PROPOSALS_PER_PLAN)

    @field_validator("id")
    @classmethod
    def valid_id(cls, v: str) -> str:
        return normalize_key(v)

    @model_validator(mode="after")
    def window_ordered(self) -> VotePlanCert:
        if self.vote_end <= self.vote_start:
            raise ValueError("vote_end must be greater than vote_start")
        return self


class InitialEntry(BaseModel):
    """One ``initial`` entry: exactly one of fund, cert or legacy_fund."""

    model_config = ConfigDict(frozen=True)

    fund: list[FundEntry] | None = None
    cert: dict[str, Any] | None = None
    legacy_fund: list[dict[str, Any]] | None = None

    @model_validator(mode="after")
    def exactly_one(self) -> InitialEntry:
        present = [f for f in ("fund", "cert", "legacy_fund") if getattr(self, f) is not None]
        if len(present) != 1:
            raise ValueError("initial entry must hold exactly one of fund, cert, legacy_fund")
        try:
            self.vote_plan()
        except ValidationError as e:
            raise ValueError(f"invalid vote plan certificate: {e}") from e
        return self

    def vote_plan(self) -> VotePlanCert | None:
        if self.cert is not None and self.cert.get("kind") == "vote_plan":
            return VotePlanCert.model_validate(self.cert)
        return None


class BlockchainConfiguration(BaseModel):
    model_config = ConfigDict(frozen=True)

    block0_date: int = Field(..., ge=0, description="Seconds since the Unix epoch")
    slot_duration: int = Field(..., description="Seconds per slot")
    committees: list[str] = Field(default_factory=list)

    @field_validator("committees")
    @classmethod
    def valid_committees(cls, v: list[str]) -> list[str]:
        return [normalize_key(k) for k in v]


class GenesisConfig(BaseModel):
    """Decoded block0 configuration."""

    model_config = ConfigDict(frozen=True)

    blockchain_configuration: BlockchainConfiguration
    initial: list[InitialEntry] = Field(default_factory=list)


# ─── Fragments ───────────────────────────────────────────────────────


class FragmentKind(str, Enum):
    INITIAL = "initial"
    OLD_UTXO_DECLARATION = "old_utxo_declaration"
    TRANSACTION = "transaction"
    OWNER_STAKE_DELEGATION = "owner_stake_delegation"
    STAKE_DELEGATION = "stake_delegation"
    POOL_REGISTRATION = "pool_registration"
    POOL_RETIREMENT = "pool_retirement"
    POOL_UPDATE = "pool_update"
    UPDATE_PROPOSAL = "update_proposal"
    UPDATE_VOTE = "update_vote"
    VOTE_PLAN = "vote_plan"
    VOTE_CAST = "vote_cast"
    VOTE_TALLY = "vote_tally"
    ENCRYPTED_VOTE_TALLY = "encrypted_vote_tally"


class TransactionInput(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["account", "utxo"]
    account: str | None = None

    @field_validator("account")
    @classmethod
    def valid_account(cls, v: str | None) -> str | None:
        return normalize_key(v) if v is not None else None

    @model_validator(mode="after")
    def account_present(self) -> TransactionInput:
        if self.kind == "account" and self.account is None:
            raise ValueError("account input requires 'account'")
        return self


class PublicBallot(BaseModel):
    model_config = ConfigDict(frozen=True)

    choice: int = Field(..., ge=0, le=255)


class VotePayload(BaseModel):
    """Either a public ballot or an encrypted one."""

    model_config = ConfigDict(frozen=True)

    public: PublicBallot | None = None
    private: dict[str, Any] | None = None

    @model_validator(mode="after")
    def exactly_one(self) -> VotePayload:
        if (self.public is None) == (self.private is None):
            raise ValueError("payload must be either public or private")
        return self


class VoteCast(BaseModel):
    model_config = ConfigDict(frozen=True)

    vote_plan: str
    proposal_index: int = Field(..., ge=0, le=255)
    payload: VotePayload

    @field_validator("vote_plan")
    @classmethod
    def valid_plan(cls, v: str) -> str:
        return normalize_key(v)


class Transaction(BaseModel):
    model_config = ConfigDict(frozen=True)

    inputs: list[TransactionInput] = Field(default_factory=list)
    spending_counter: int | None = Field(None, ge=0, le=SPENDING_COUNTER_MAX)
    vote_cast: VoteCast | None = None


class Fragment(BaseModel):
    """A decoded ledger fragment. ``id`` is its content hash."""

    model_config = ConfigDict(frozen=True)

    id: str
    kind: FragmentKind
    transaction: Transaction | None = None

    @model_validator(mode="before")
    @classmethod
    def derive_id(cls, data: Any) -> Any:
        if isinstance(data, dict) and not data.get("id"):
            data = {**data, "id": compute_fragment_id(data)}
        return data

    @field_validator("id")
    @classmethod
    def valid_id(cls, v: str) -> str:
        return normalize_key(v)

    @model_validator(mode="after")
    def vote_cast_has_body(self) -> Fragment:
        if self.kind is FragmentKind.VOTE_CAST and (
            self.transaction is None or self.transaction.vote_cast is None
        ):
            raise ValueError("vote_cast fragment requires transaction.vote_cast")
        return self


class PersistentFragmentLog(BaseModel):
    """One fragment as persisted by a node, with its submission time."""

    model_config = ConfigDict(frozen=True)

    time: int = Field(..., ge=0, description="Seconds since the Unix epoch")
    fragment: Fragment
