"""
tallyaudit — Configuration.
Shared constants and environment-driven settings.
"""

import os

# ─── Monetary Units ──────────────────────────────────────────────────
# Subunits (lovelace) per whole unit (ADA).
ADA_TO_LOVELACE_FACTOR = 1_000_000
U64_MAX = 2**64 - 1
REWARD_UNIT_DECIMALS = 8
REWARD_SUBUNIT_DECIMALS = 2

# ─── Replay Window ───────────────────────────────────────────────────
BLOCK_RANGE_START = int(os.environ.get("TALLYAUDIT_BLOCK_RANGE_START", "0"))
BLOCK_RANGE_END = int(os.environ.get("TALLYAUDIT_BLOCK_RANGE_END", "1000"))

# ─── Fragment Logs ───────────────────────────────────────────────────
FRAGMENT_LOG_GLOB = os.environ.get("TALLYAUDIT_LOG_GLOB", "*")

# ─── Logging ─────────────────────────────────────────────────────────
LOG_LEVEL = os.environ.get("TALLYAUDIT_LOG_LEVEL", "WARNING").upper()


def reload() -> None:
    """Re-read environment-driven settings."""
    global BLOCK_RANGE_START, BLOCK_RANGE_END, FRAGMENT_LOG_GLOB, LOG_LEVEL
    BLOCK_RANGE_START = int(os.environ.get("TALLYAUDIT_BLOCK_RANGE_START", "0"))
    BLOCK_RANGE_END = int(os.environ.get("TALLYAUDIT_BLOCK_RANGE_END", "1000"))
    FRAGMENT_LOG_GLOB = os.environ.get("TALLYAUDIT_LOG_GLOB", "*")
    LOG_LEVEL = os.environ.get("TALLYAUDIT_LOG_LEVEL", "WARNING").upper()


def default_block_range() -> range:
    """Block heights replayed when the caller does not pass a range."""
    return range(BLOCK_RANGE_START, BLOCK_RANGE_END)
