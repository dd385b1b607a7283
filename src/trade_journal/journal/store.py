"""In-memory trade store — the single source of truth for a session."""

from __future__ import annotations

import logging
from typing import Iterable, Iterator

from trade_journal.core.errors import DuplicateTradeError

from .record import TradeRecord

logger = logging.getLogger(__name__)


class TradeStore:
    """Ordered, append-only collection of trade records.

    Records are kept in submission order (most recent submission last).
    Nothing in the journal edits or removes a record once appended.
    """

    def __init__(self, records: Iterable[TradeRecord] | None = None) -> None:
        self._records: list[TradeRecord] = []
        self._ids: set[str] = set()
        if records is not None:
            self.load_snapshot(records)

    def append(self, record: TradeRecord) -> None:
        """Add *record* at the end.

        Raises
        ------
        DuplicateTradeError
            A record with the same id is already stored.
        """
        if record.trade_id in self._ids:
            raise DuplicateTradeError(record.trade_id)
        self._records.append(record)
        self._ids.add(record.trade_id)

    def load_snapshot(self, records: Iterable[TradeRecord]) -> None:
        """Replace the whole sequence with *records*.

        Later duplicates of an id already loaded are dropped with a warning.
        """
        loaded: list[TradeRecord] = []
        ids: set[str] = set()
        for record in records:
            if record.trade_id in ids:
                logger.warning("Dropping duplicate trade %s from snapshot", record.trade_id)
                continue
            loaded.append(record)
            ids.add(record.trade_id)
        self._records = loaded
        self._ids = ids
        logger.info("Loaded %d trades into the journal", len(loaded))

    def all(self) -> list[TradeRecord]:
        """Current records in insertion order.  The list is a copy."""
        return list(self._records)

    def get(self, trade_id: str) -> TradeRecord | None:
        for record in self._records:
            if record.trade_id == trade_id:
                return record
        return None

    def __contains__(self, trade_id: object) -> bool:
        return trade_id in self._ids

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[TradeRecord]:
        return iter(list(self._records))
