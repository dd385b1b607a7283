"""Enumerations used across the journal."""

from enum import Enum


class TradeStatus(str, Enum):
    """Outcome of a logged trade."""

    WIN = "WIN"
    LOSS = "LOSS"
    BREAK_EVEN = "BE"


class TradeDirection(str, Enum):
    LONG = "Long"
    SHORT = "Short"


class FilterPreset(str, Enum):
    """Named date-range shortcuts offered next to the date inputs."""

    THIS_MONTH = "this_month"
    LAST_MONTH = "last_month"
    CLEAR = "clear"
