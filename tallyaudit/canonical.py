"""tallyaudit — Canonical Fragment Identity.

Deterministic JSON serialization and content hashing for decoded
fragments. Logs that do not carry an explicit fragment id get one
derived from the fragment body, so a fragment resubmitted verbatim
always maps to the same identity.
"""

from __future__ import annotations

import hashlib
import json
from typing import Any

# ─── Canonical JSON ───────────────────────────────────────────────


def canonical_json(obj: Any) -> str:
    """Serialize a fragment body so equal bodies hash to the same id."""
    return json.dumps(
        obj, sort_keys=True, separators=(",", ":"),
        ensure_ascii=True, default=str,
    )


# ─── Fragment Id ──────────────────────────────────────────────────

FRAGMENT_ID_BYTES = 32


def compute_fragment_id(fragment_body: dict[str, Any]) -> str:
    """Content hash of a fragment: blake2b-256 over its canonical JSON.

    The ``id`` key itself is excluded so that a body with and without
    an explicit id hash the same.
    """
    body = {k: v for k, v in fragment_body.items() if k != "id"}
    digest = hashlib.blake2b(
        canonical_json(body).encode("utf-8"), digest_size=FRAGMENT_ID_BYTES
    )
    return digest.hexdigest()
