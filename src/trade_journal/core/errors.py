"""Custom exception hierarchy for the trade journal."""


class JournalError(Exception):
    """Base exception for all trade journal errors."""


# --- Configuration ---
class ConfigError(JournalError):
    """Invalid or unreadable configuration."""


# --- Records ---
class InvalidTradeInputError(JournalError):
    """A categorical form field holds a value the journal does not know."""


class DuplicateTradeError(JournalError):
    """A record with the same id is already in the store."""

    def __init__(self, trade_id: str):
        self.trade_id = trade_id
        super().__init__(f"Trade {trade_id!r} is already in the journal")


# --- Snapshots ---
class SnapshotError(JournalError):
    """Snapshot blob could not be decoded."""
