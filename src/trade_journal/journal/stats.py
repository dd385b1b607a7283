"""Dashboard statistics.

All functions are pure and total: they accept any finite sequence of
records, in any order, and an empty sequence produces zeros rather than a
division error.

Net R vs average R
------------------
``net_rr`` counts a win as its stored ``rr``, a loss as a flat ``-1`` (one
unit of risk, whatever ``rr`` the record carries) and a break-even as ``0``.
``avg_rr`` is the plain mean of the stored ``rr`` over every trade,
including losses and break-evens, so it reports the R:R the trader aimed
for.  The two are deliberately not reconciled.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Sequence

from trade_journal.core.enums import TradeStatus

from .record import TradeRecord

# Dashboard colour per outcome.
STATUS_COLORS: dict[TradeStatus, str] = {
    TradeStatus.WIN: "#10B981",
    TradeStatus.LOSS: "#EF4444",
    TradeStatus.BREAK_EVEN: "#F59E0B",
}

STATUS_LABELS: dict[TradeStatus, str] = {
    TradeStatus.WIN: "Win",
    TradeStatus.LOSS: "Loss",
    TradeStatus.BREAK_EVEN: "Break Even",
}


@dataclass(frozen=True)
class DashboardStats:
    """Headline metrics for a set of trades."""

    total_trades: int = 0
    win_rate: float = 0.0  # percent, 0-100
    avg_rr: float = 0.0
    net_rr: float = 0.0


def r_contribution(record: TradeRecord) -> float:
    """R gained or lost by one trade under the fixed-1R-loss convention."""
    match record.status:
        case TradeStatus.WIN:
            return record.rr
        case TradeStatus.LOSS:
            return -1.0
        case TradeStatus.BREAK_EVEN:
            return 0.0
    raise ValueError(f"Unhandled trade status {record.status!r}")


def compute_stats(records: Iterable[TradeRecord]) -> DashboardStats:
    """Total trades, win rate, average stored R:R and net R."""
    trades: Sequence[TradeRecord] = list(records)
    total = len(trades)
    if total == 0:
        return DashboardStats()

    wins = sum(1 for t in trades if t.status is TradeStatus.WIN)
    return DashboardStats(
        total_trades=total,
        win_rate=wins / total * 100,
        avg_rr=sum(t.rr for t in trades) / total,
        net_rr=sum(r_contribution(t) for t in trades),
    )


def compute_outcome_distribution(records: Iterable[TradeRecord]) -> dict[TradeStatus, int]:
    """Count per outcome.  All three outcomes are always present."""
    counts = {status: 0 for status in TradeStatus}
    for record in records:
        counts[record.status] += 1
    return counts


def compute_model_performance(records: Iterable[TradeRecord]) -> dict[str, float]:
    """Win rate (percent) per setup name, in order of first appearance.

    Only models that occur in *records* are reported, and there is no
    minimum sample size: a model traded once reports 0 or 100.
    """
    totals: dict[str, list[int]] = {}
    for record in records:
        bucket = totals.setdefault(record.model, [0, 0])  # [wins, total]
        bucket[1] += 1
        if record.status is TradeStatus.WIN:
            bucket[0] += 1
    return {model: wins / total * 100 for model, (wins, total) in totals.items()}
