"""Analysis-specific error types.

All inherit from :class:`JournalError` via :class:`AnalysisError`.
"""

from __future__ import annotations

from trade_journal.core.errors import JournalError


class AnalysisError(JournalError):
    """Base for all AI review errors."""


class AnalysisUnavailableError(AnalysisError):
    """The review service cannot be called (no API key configured).

    Raised inside :class:`TradeAnalyzer` and turned into the fallback text;
    it never reaches the caller of ``analyze``.
    """


class AnalysisInFlightError(AnalysisError):
    """A review was requested while another one is still pending.

    Raised by the session's single in-flight guard.
    """
