"""Canonical ID and timestamp factories for the journal.

Record IDs
----------
Opaque strings built from a base-36 millisecond time component followed by
a random base-36 suffix.  A single writer appends records, so uniqueness
within a session only needs the time prefix plus enough randomness to
separate two submissions in the same millisecond.

Timestamp Rule
--------------
Record timestamps are ``int`` milliseconds since the Unix epoch.  Datetimes
handed around internally are timezone-aware, never naive.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from .clock import IClock, WallClock

_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"


def to_base36(value: int) -> str:
    """Render a non-negative integer in lowercase base 36."""
    if value < 0:
        raise ValueError("to_base36 expects a non-negative integer")
    if value == 0:
        return "0"
    digits: list[str] = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


def new_trade_id(clock: IClock | None = None) -> str:
    """Generate a new record ID: base-36 time prefix + random suffix."""
    clock = clock or WallClock()
    prefix = to_base36(clock.now_ms())
    suffix = to_base36(uuid.uuid4().int)[:11]
    return prefix + suffix


def ms_to_datetime(ms: int) -> datetime:
    """Convert epoch milliseconds to a timezone-aware local datetime."""
    return datetime.fromtimestamp(ms / 1000, tz=timezone.utc).astimezone()
