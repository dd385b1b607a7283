"""AI trade review — request builder and HTTP collaborator.

Public API
----------
Models:
    AnalysisRequest

Builder:
    build_trade_context, build_analysis_request, split_data_url

Collaborator:
    TradeAnalyzer, ANALYSIS_FALLBACK, NO_ANALYSIS_TEXT

Errors:
    AnalysisError, AnalysisUnavailableError, AnalysisInFlightError
"""

from trade_journal.llm.analysis import (
    ANALYSIS_FALLBACK,
    NO_ANALYSIS_TEXT,
    AnalysisRequest,
    TradeAnalyzer,
    build_analysis_request,
    build_trade_context,
    split_data_url,
)
from trade_journal.llm.errors import (
    AnalysisError,
    AnalysisInFlightError,
    AnalysisUnavailableError,
)

__all__ = [
    # Models
    "AnalysisRequest",
    # Builder
    "build_analysis_request",
    "build_trade_context",
    "split_data_url",
    # Collaborator
    "ANALYSIS_FALLBACK",
    "NO_ANALYSIS_TEXT",
    "TradeAnalyzer",
    # Errors
    "AnalysisError",
    "AnalysisInFlightError",
    "AnalysisUnavailableError",
]
