"""Snapshot file transport.

Loads the journal from, and saves it to, a single JSON file.  Both
directions are best-effort: a missing or unreadable file loads as an empty
journal, and a failed save is logged and reported to the caller rather
than raised, so the in-memory journal is never rolled back.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable

from trade_journal.core.file_io import safe_write_text

from .codec import decode_snapshot, encode_snapshot
from .record import TradeRecord

logger = logging.getLogger(__name__)


class SnapshotFile:
    """JSON file holding the latest journal snapshot.

    Parameters
    ----------
    path : str | Path
        Snapshot location.  Parent directories are created on first save.
    """

    def __init__(self, path: str | Path = "data/trade_journal.json") -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> list[TradeRecord]:
        """Read and decode the snapshot; ``[]`` when absent or unreadable."""
        if not self._path.exists():
            logger.info("No snapshot at %s, starting with an empty journal", self._path)
            return []
        try:
            blob = self._path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError):
            logger.exception("Failed to read snapshot %s", self._path)
            return []
        records = decode_snapshot(blob)
        logger.info("Loaded %d trades from %s", len(records), self._path)
        return records

    def save(self, records: Iterable[TradeRecord]) -> bool:
        """Write a fresh snapshot.  Returns ``False`` if the write failed."""
        records = list(records)
        try:
            safe_write_text(self._path, encode_snapshot(records))
        except (OSError, UnicodeError):
            logger.exception(
                "Failed to save %d trades to %s; they remain in memory only",
                len(records),
                self._path,
            )
            return False
        logger.debug("Saved %d trades to %s", len(records), self._path)
        return True
