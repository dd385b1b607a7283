"""Trade record — the core data model.

A TradeRecord is one discretionary trade as the trader logged it: when it
happened, what was traded off which chart, the setup ("model") used, the
entry/exit prices, the R:R sought, the outcome, plus optional notes, a
chart screenshot and an AI-written review.

Records are built from raw form text by :func:`build_record`, which never
rejects a submission over a malformed number or date; it substitutes a
default instead (``0`` for numbers, "now" for the timestamp).
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from trade_journal.core.clock import IClock, WallClock
from trade_journal.core.enums import TradeDirection, TradeStatus
from trade_journal.core.errors import InvalidTradeInputError
from trade_journal.core.ids import ms_to_datetime, new_trade_id

# Option lists offered by the entry form.  Suggestions only; any
# non-empty label is accepted.
TIMEFRAME_CHOICES: tuple[str, ...] = ("1m", "5m", "15m", "30m", "1h", "4h", "1d")
MODEL_CHOICES: tuple[str, ...] = (
    "in-out -reject dc",
    "deepzone dc",
    "deepzone cc",
    "reject new snr dc",
    "reject new snr cc",
)

_FORM_DATE_FORMAT = "%Y-%m-%dT%H:%M"


# ---------------------------------------------------------------------- #
# Input coercion                                                           #
# ---------------------------------------------------------------------- #

def coerce_number(value: Any) -> float:
    """Parse a numeric form value; anything unusable becomes ``0.0``.

    Empty strings, non-numeric text, ``NaN`` and infinities all map to
    zero, so a record's numeric fields are always finite.
    """
    if isinstance(value, bool) or value is None:
        return 0.0
    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            return 0.0
    else:
        text = str(value).strip()
        # float() accepts digit separators; form input does not.
        if not text or "_" in text:
            return 0.0
        try:
            number = float(text)
        except ValueError:
            return 0.0
    return number if math.isfinite(number) else 0.0


def coerce_timestamp(value: Any, clock: IClock | None = None) -> int:
    """Parse a form date/time into epoch milliseconds.

    Accepts ISO-8601 dates and date-times (``2024-03-05``,
    ``2024-03-05T14:30``, with or without seconds and a UTC offset).  Naive
    values are interpreted in local time.  Absent or unparseable input
    yields the clock's current instant.
    """
    clock = clock or WallClock()
    if value is None:
        return clock.now_ms()
    text = str(value).strip()
    if not text:
        return clock.now_ms()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
        return int(parsed.astimezone().timestamp() * 1000)
    except (ValueError, OverflowError, OSError):
        return clock.now_ms()


def parse_direction(value: TradeDirection | str) -> TradeDirection:
    """Accept a direction by value (``"Long"``) or name (``"LONG"``)."""
    return _parse_enum(TradeDirection, value, "direction")


def parse_status(value: TradeStatus | str) -> TradeStatus:
    """Accept a status by value (``"BE"``) or name (``"BREAK_EVEN"``)."""
    return _parse_enum(TradeStatus, value, "status")


def _parse_enum(enum_cls: Any, value: Any, label: str) -> Any:
    if isinstance(value, enum_cls):
        return value
    text = str(value).strip()
    for member in enum_cls:
        if text.lower() in (member.value.lower(), member.name.lower()):
            return member
    choices = ", ".join(m.value for m in enum_cls)
    raise InvalidTradeInputError(f"Unknown {label} {value!r} (expected one of {choices})")


# ---------------------------------------------------------------------- #
# Record                                                                   #
# ---------------------------------------------------------------------- #

@dataclass(frozen=True)
class TradeRecord:
    """One logged trade.

    Parameters
    ----------
    trade_id : str
        Opaque unique identifier, assigned at creation.
    timestamp : int
        When the trade occurred, milliseconds since the epoch.
    rr : float
        Risk-to-reward ratio sought.  Realised only on a win.
    ai_analysis : str | None
        Review text attached once, at creation.
    """

    trade_id: str
    timestamp: int
    price_source: str
    timeframe: str
    model: str
    direction: TradeDirection
    entry_price: float
    exit_price: float
    rr: float
    status: TradeStatus
    screenshot_base64: str | None = None
    notes: str | None = None
    ai_analysis: str | None = None

    @property
    def occurred_at(self) -> datetime:
        """Trade time as a local, timezone-aware datetime."""
        return ms_to_datetime(self.timestamp)

    @property
    def has_screenshot(self) -> bool:
        return bool(self.screenshot_base64)

    # ------------------------------------------------------------------ #
    # Serialisation                                                        #
    # ------------------------------------------------------------------ #

    def to_dict(self) -> dict[str, Any]:
        """Export using the snapshot's camelCase keys.

        Optional fields are left out when absent.
        """
        data: dict[str, Any] = {
            "id": self.trade_id,
            "timestamp": self.timestamp,
            "priceSource": self.price_source,
            "timeframe": self.timeframe,
            "model": self.model,
            "direction": self.direction.value,
            "entryPrice": self.entry_price,
            "exitPrice": self.exit_price,
            "rr": self.rr,
            "status": self.status.value,
        }
        if self.screenshot_base64 is not None:
            data["screenshotBase64"] = self.screenshot_base64
        if self.notes is not None:
            data["notes"] = self.notes
        if self.ai_analysis is not None:
            data["aiAnalysis"] = self.ai_analysis
        return data

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> TradeRecord:
        """Rebuild a record from its snapshot dict.

        ``id``, ``timestamp``, ``direction`` and ``status`` are required;
        unknown keys are ignored.

        Raises
        ------
        KeyError
            A required key is missing.
        ValueError
            ``id`` is empty or ``timestamp`` is not a number that maps to
            a representable datetime.
        InvalidTradeInputError
            ``direction`` or ``status`` holds an unknown value.
        """
        trade_id = str(d["id"])
        if not trade_id:
            raise ValueError("record id is empty")
        raw_ts = d["timestamp"]
        if isinstance(raw_ts, bool) or not isinstance(raw_ts, (int, float)):
            raise ValueError(f"timestamp {raw_ts!r} is not a number")
        try:
            timestamp = int(float(raw_ts))
            ms_to_datetime(timestamp)
        except (OverflowError, ValueError, OSError) as exc:
            raise ValueError(f"timestamp {raw_ts!r} is not a representable instant") from exc
        return cls(
            trade_id=trade_id,
            timestamp=timestamp,
            price_source=str(d.get("priceSource", "")),
            timeframe=str(d.get("timeframe", "")),
            model=str(d.get("model", "")),
            direction=parse_direction(d["direction"]),
            entry_price=coerce_number(d.get("entryPrice")),
            exit_price=coerce_number(d.get("exitPrice")),
            rr=coerce_number(d.get("rr")),
            status=parse_status(d["status"]),
            screenshot_base64=d.get("screenshotBase64"),
            notes=d.get("notes"),
            ai_analysis=d.get("aiAnalysis"),
        )


# ---------------------------------------------------------------------- #
# Form input                                                               #
# ---------------------------------------------------------------------- #

def _default_form_date() -> str:
    return datetime.now().strftime(_FORM_DATE_FORMAT)


@dataclass
class TradeFormData:
    """Raw values from the entry form.  Everything numeric is still text."""

    date: str = field(default_factory=_default_form_date)
    price_source: str = ""
    timeframe: str = ""
    model: str = ""
    direction: TradeDirection | str = TradeDirection.LONG
    entry_price: str = ""
    exit_price: str = ""
    rr: str = ""
    status: TradeStatus | str = TradeStatus.WIN
    notes: str = ""

    def analysis_context(self) -> str:
        """Trade details handed to the AI reviewer, one field per line."""
        direction = self.direction.value if isinstance(self.direction, TradeDirection) else self.direction
        status = self.status.value if isinstance(self.status, TradeStatus) else self.status
        lines = [
            f"Date: {self.date}",
            f"Price Source: {self.price_source}",
            f"Timeframe: {self.timeframe}",
            f"Model: {self.model}",
            f"Direction: {direction}",
            f"Result: {status}",
            f"Notes: {self.notes}",
        ]
        return "\n".join(lines)


def build_record(
    form: TradeFormData,
    *,
    screenshot_base64: str | None = None,
    ai_analysis: str | None = None,
    clock: IClock | None = None,
) -> TradeRecord:
    """Turn a form submission into a well-formed record.

    Does not touch any store; the caller appends the result.  Blank
    notes, screenshot and analysis are stored as absent.

    Raises
    ------
    InvalidTradeInputError
        ``direction`` or ``status`` is not a known value.
    """
    clock = clock or WallClock()
    return TradeRecord(
        trade_id=new_trade_id(clock),
        timestamp=coerce_timestamp(form.date, clock),
        price_source=form.price_source,
        timeframe=form.timeframe,
        model=form.model,
        direction=parse_direction(form.direction),
        entry_price=coerce_number(form.entry_price),
        exit_price=coerce_number(form.exit_price),
        rr=coerce_number(form.rr),
        status=parse_status(form.status),
        screenshot_base64=screenshot_base64 or None,
        notes=form.notes or None,
        ai_analysis=ai_analysis or None,
    )
