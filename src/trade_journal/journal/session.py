"""Journal session — the application state for one run of the journal.

Holds the store, the active date filter and the snapshot file, and owns
the single in-flight guard for AI reviews.  Every successful submission is
followed by a snapshot save; a failed save is reported on the result and
logged, while the record stays in memory for the rest of the session.

Usage::

    session = JournalSession.open(settings)
    review = await session.request_analysis(form, screenshot)
    result = session.submit(form, screenshot_base64=screenshot, ai_analysis=review)
    session.apply_preset(FilterPreset.THIS_MONTH)
    board = session.dashboard()
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date

from trade_journal.core.clock import IClock, WallClock
from trade_journal.core.config import Settings
from trade_journal.core.enums import FilterPreset, TradeStatus
from trade_journal.llm.analysis import ANALYSIS_FALLBACK, TradeAnalyzer, build_trade_context
from trade_journal.llm.errors import AnalysisInFlightError

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

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SubmitResult:
    """Outcome of :meth:`JournalSession.submit`."""

    record: TradeRecord
    persisted: bool


@dataclass(frozen=True)
class Dashboard:
    """Everything the dashboard view renders for the current filter."""

    stats: DashboardStats
    outcomes: dict[TradeStatus, int]
    model_performance: dict[str, float]


class JournalSession:
    """State object for a single journal session.

    Parameters
    ----------
    store : TradeStore
        In-memory records; hydrate it before handing it over.
    snapshot : SnapshotFile
        Where every mutation is persisted.
    analyzer : TradeAnalyzer | None
        Review service.  ``None`` disables reviews.
    clock : IClock | None
        Time source for record construction and month presets.
    """

    def __init__(
        self,
        store: TradeStore,
        snapshot: SnapshotFile,
        *,
        analyzer: TradeAnalyzer | None = None,
        clock: IClock | None = None,
    ) -> None:
        self._store = store
        self._snapshot = snapshot
        self._analyzer = analyzer
        self._clock = clock or WallClock()
        self._range = DateRange()
        self._analysis_pending = False

    @classmethod
    def open(
        cls,
        settings: Settings,
        *,
        analyzer: TradeAnalyzer | None = None,
        clock: IClock | None = None,
    ) -> JournalSession:
        """Start a session from settings, hydrating the store from disk."""
        snapshot = SnapshotFile(settings.storage.snapshot_path)
        store = TradeStore(snapshot.load())
        if analyzer is None and settings.analysis.enabled:
            analyzer = TradeAnalyzer(settings.analysis)
        return cls(store, snapshot, analyzer=analyzer, clock=clock)

    # ------------------------------------------------------------------ #
    # Accessors                                                            #
    # ------------------------------------------------------------------ #

    @property
    def store(self) -> TradeStore:
        return self._store

    @property
    def date_range(self) -> DateRange:
        return self._range

    @property
    def analysis_pending(self) -> bool:
        return self._analysis_pending

    # ------------------------------------------------------------------ #
    # Mutations                                                            #
    # ------------------------------------------------------------------ #

    def submit(
        self,
        form: TradeFormData,
        *,
        screenshot_base64: str | None = None,
        ai_analysis: str | None = None,
    ) -> SubmitResult:
        """Build a record from *form*, append it and save a snapshot."""
        record = build_record(
            form,
            screenshot_base64=screenshot_base64,
            ai_analysis=ai_analysis,
            clock=self._clock,
        )
        self._store.append(record)
        persisted = self._snapshot.save(self._store.all())
        if not persisted:
            logger.warning(
                "Trade %s kept in memory but not saved to %s",
                record.trade_id,
                self._snapshot.path,
            )
        logger.info(
            "Logged trade %s: %s %s %s",
            record.trade_id,
            record.model,
            record.direction.value,
            record.status.value,
        )
        return SubmitResult(record=record, persisted=persisted)

    async def request_analysis(
        self,
        form: TradeFormData,
        screenshot_base64: str | None = None,
    ) -> str:
        """Ask the review service about a draft trade.

        Only one request may be pending at a time.

        Raises
        ------
        AnalysisInFlightError
            Another review has not finished yet.
        """
        if self._analysis_pending:
            raise AnalysisInFlightError("A trade analysis is already in progress")
        if self._analyzer is None:
            logger.info("Trade analysis disabled, returning fallback text")
            return ANALYSIS_FALLBACK

        self._analysis_pending = True
        try:
            return await self._analyzer.analyze(screenshot_base64, build_trade_context(form))
        finally:
            self._analysis_pending = False

    # ------------------------------------------------------------------ #
    # Filter state                                                         #
    # ------------------------------------------------------------------ #

    def set_range(self, start: date | None = None, end: date | None = None) -> DateRange:
        self._range = DateRange(start, end)
        return self._range

    def apply_preset(self, preset: FilterPreset | str) -> DateRange:
        self._range = preset_range(preset, self._clock)
        return self._range

    def clear_filter(self) -> DateRange:
        return self.apply_preset(FilterPreset.CLEAR)

    # ------------------------------------------------------------------ #
    # Views                                                                #
    # ------------------------------------------------------------------ #

    def visible_records(self) -> list[TradeRecord]:
        """Records inside the active range, in insertion order."""
        return filter_records(self._store.all(), self._range.start, self._range.end)

    def history(self) -> list[TradeRecord]:
        """Records inside the active range, newest first."""
        return newest_first(self.visible_records())

    def dashboard(self) -> Dashboard:
        records = self.visible_records()
        return Dashboard(
            stats=compute_stats(records),
            outcomes=compute_outcome_distribution(records),
            model_performance=compute_model_performance(records),
        )
