"""Trade Journal — records, snapshots, filtering and dashboard statistics.

Key components
--------------
TradeRecord       One logged trade (immutable)
TradeFormData     Raw entry-form values
build_record      Form → record with graceful defaults
TradeStore        Ordered, append-only in-memory store
SnapshotFile      JSON snapshot load / save
DateRange         Inclusive calendar-date filter bounds
compute_stats     Win rate, average R:R and net R

The session object lives in :mod:`trade_journal.journal.session`.
"""

from .codec import decode_snapshot, encode_snapshot
from .filters import DateRange, filter_records, newest_first, preset_range
from .persistence import SnapshotFile
from .record import TradeFormData, TradeRecord, build_record
from .stats import (
    DashboardStats,
    compute_model_performance,
    compute_outcome_distribution,
    compute_stats,
)
from .store import TradeStore

__all__ = [
    "TradeRecord",
    "TradeFormData",
    "build_record",
    "encode_snapshot",
    "decode_snapshot",
    "TradeStore",
    "SnapshotFile",
    "DateRange",
    "filter_records",
    "newest_first",
    "preset_range",
    "DashboardStats",
    "compute_stats",
    "compute_outcome_distribution",
    "compute_model_performance",
]
