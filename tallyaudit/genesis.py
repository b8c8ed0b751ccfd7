"""
tallyaudit — Genesis Ledger.

Read-only view over the decoded block0 snapshot: initial funds,
committee keys and the vote plans the ledger knows about.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator
from dataclasses import dataclass
from functools import cached_property
from pathlib import Path

from pydantic import ValidationError

from tallyaudit.exceptions import GenesisError
from tallyaudit.models import FundEntry, GenesisConfig, VotePlanCert, normalize_key

logger = logging.getLogger("tallyaudit.genesis")


def account_id_from_public_key(public_key: str) -> str:
    """Account identity owned by a public key.

    Committee keys and fund addresses go through the same
    normalisation so that membership tests compare like with like.
    """
    return normalize_key(public_key)


@dataclass(frozen=True)
class GenesisLedger:
    """Initial ledger state decoded from block0."""

    config: GenesisConfig

    @property
    def block0_date(self) -> int:
        return self.config.blockchain_configuration.block0_date

    @property
    def slot_duration(self) -> int:
        return self.config.blockchain_configuration.slot_duration

    def fund_entries(self) -> Iterator[FundEntry]:
        """Every (address, value) pair of the ``fund`` initial entries."""
        for entry in self.config.initial:
            if entry.fund is not None:
                yield from entry.fund

    def committee_public_keys(self) -> list[str]:
        return list(self.config.blockchain_configuration.committees)

    @cached_property
    def _committee_accounts(self) -> frozenset[str]:
        return frozenset(account_id_from_public_key(pk) for pk in self.committee_public_keys())

    def committee_accounts(self) -> frozenset[str]:
        return self._committee_accounts

    def is_committee(self, account: str) -> bool:
        return account in self._committee_accounts

    def vote_plans(self) -> dict[str, VotePlanCert]:
        plans: dict[str, VotePlanCert] = {}
        for entry in self.config.initial:
            plan = entry.vote_plan()
            if plan is not None:
                plans[plan.id] = plan
        return plans

    def block_height_at(self, time: int) -> int:
        """Simulated block height of a submission time."""
        return (time - self.block0_date) // self.slot_duration

    @classmethod
    def from_dict(cls, data: dict) -> GenesisLedger:
        try:
            return cls(GenesisConfig.model_validate(data))
        except ValidationError as e:
            raise GenesisError(f"invalid genesis snapshot: {e}") from e


def load_genesis(path: str | Path) -> GenesisLedger:
    """Load the decoded genesis snapshot from a JSON file."""
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise GenesisError(f"cannot read genesis file {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise GenesisError(f"genesis file {path} is not valid JSON: {e}") from e

    genesis = GenesisLedger.from_dict(data)
    logger.info(
        "Loaded genesis %s: %d initial entries, %d committee keys",
        path.name, len(genesis.config.initial), len(genesis.committee_public_keys()),
    )
    return genesis
