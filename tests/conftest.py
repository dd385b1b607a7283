"""Shared fixtures for the trade-journal test suite."""

from __future__ import annotations

import itertools
from datetime import datetime

import pytest

from trade_journal.core.clock import SimClock
from trade_journal.core.config import Settings
from trade_journal.core.enums import TradeDirection, TradeStatus
from trade_journal.journal.record import TradeRecord


def _local_ms(*args: int) -> int:
    return int(datetime(*args).astimezone().timestamp() * 1000)


@pytest.fixture
def local_ms():
    """Epoch ms of a naive local wall-clock time."""
    return _local_ms


@pytest.fixture
def sim_clock() -> SimClock:
    """Clock frozen at 2024-03-15 10:30 local time."""
    return SimClock(datetime(2024, 3, 15, 10, 30).astimezone())


@pytest.fixture
def make_trade():
    """Factory for complete TradeRecords with unique ids."""
    counter = itertools.count(1)

    def _make(
        status: TradeStatus = TradeStatus.WIN,
        rr: float = 2.0,
        model: str = "deepzone dc",
        when: tuple[int, ...] = (2024, 3, 15, 10, 30),
        **overrides,
    ) -> TradeRecord:
        fields = dict(
            trade_id=f"t{next(counter)}",
            timestamp=_local_ms(*when),
            price_source="5m",
            timeframe="1h",
            model=model,
            direction=TradeDirection.LONG,
            entry_price=100.0,
            exit_price=110.0,
            rr=rr,
            status=status,
        )
        fields.update(overrides)
        return TradeRecord(**fields)

    return _make


@pytest.fixture
def settings(tmp_path) -> Settings:
    """Settings writing to a temp snapshot with reviews disabled."""
    return Settings(
        storage={"snapshot_path": str(tmp_path / "journal.json")},
        analysis={"enabled": False},
    )
