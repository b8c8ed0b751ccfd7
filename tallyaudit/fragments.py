"""
tallyaudit — Persisted Fragment Logs.

Reads the fragment logs a node persisted to disk. Each file in the
folder is JSON Lines, one ``PersistentFragmentLog`` per line. Files are
read in name order and lines in file order, which is the order the
fragments were submitted in.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path

from pydantic import ValidationError

from tallyaudit import config
from tallyaudit.exceptions import FragmentLogError
from tallyaudit.models import PersistentFragmentLog

logger = logging.getLogger("tallyaudit.fragments")


@dataclass(frozen=True)
class LogEntryError:
    """A log line that could not be decoded."""

    path: Path
    line_no: int
    reason: str


def read_fragment_log(path: Path) -> Iterator[PersistentFragmentLog | LogEntryError]:
    with path.open("r", encoding="utf-8") as fh:
        for line_no, line in enumerate(fh, start=1):
            line = line.strip()
            if not line:
                continue
            try:
                yield PersistentFragmentLog.model_validate(json.loads(line))
            except (json.JSONDecodeError, ValidationError) as e:
                yield LogEntryError(path, line_no, str(e).splitlines()[0])


def log_files(folder: str | Path, pattern: str | None = None) -> list[Path]:
    folder = Path(folder)
    if not folder.is_dir():
        raise FragmentLogError(f"fragment log folder not found: {folder}")
    return sorted(p for p in folder.glob(pattern or config.FRAGMENT_LOG_GLOB) if p.is_file())


def load_persistent_fragments_logs_from_folder_path(
    folder: str | Path, pattern: str | None = None
) -> Iterator[PersistentFragmentLog | LogEntryError]:
    """Every persisted fragment under ``folder``, decode failures included."""
    for path in log_files(folder, pattern):
        logger.debug("Reading fragment log %s", path)
        yield from read_fragment_log(path)


def load_fragment_logs(folder: str | Path, pattern: str | None = None) -> list[PersistentFragmentLog]:
    """Decoded fragments only; undecodable entries are logged and skipped."""
    logs: list[PersistentFragmentLog] = []
    skipped = 0
    for item in load_persistent_fragments_logs_from_folder_path(folder, pattern):
        if isinstance(item, LogEntryError):
            skipped += 1
            logger.warning("Skipping %s:%d: %s", item.path.name, item.line_no, item.reason)
            continue
        logs.append(item)
    logger.info("Loaded %d persisted fragments (%d skipped) from %s", len(logs), skipped, folder)
    return logs
