"""Snapshot codec — the whole journal as one JSON text blob.

The snapshot is a JSON array of record objects using camelCase keys
(``id``, ``timestamp``, ``priceSource`` ...), the same layout the browser
version of the journal kept in local storage, so an exported blob from it
loads unchanged.

Decoding is forgiving by default: an absent, truncated or malformed blob
yields an empty journal, and individual bad entries are dropped, each with
a logged warning.  :func:`decode_snapshot_strict` raises instead, for
callers (tests, import tooling) that want to know what went wrong.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Iterable

from trade_journal.core.errors import JournalError, SnapshotError

from .record import TradeRecord

logger = logging.getLogger(__name__)


def encode_snapshot(records: Iterable[TradeRecord], *, indent: int | None = None) -> str:
    """Serialise records, in order, to a snapshot blob."""
    return json.dumps([r.to_dict() for r in records], indent=indent, ensure_ascii=False)


def decode_snapshot(blob: str | bytes | None) -> list[TradeRecord]:
    """Decode a snapshot blob, falling back to an empty journal.

    Never raises.  Entries that cannot be rebuilt are skipped.
    """
    if blob is None:
        return []
    if isinstance(blob, bytes):
        try:
            blob = blob.decode("utf-8")
        except UnicodeDecodeError:
            logger.warning("Snapshot is not valid UTF-8, starting empty")
            return []
    if not blob.strip():
        return []

    try:
        entries = _load_entries(blob)
    except SnapshotError as exc:
        logger.warning("Discarding unreadable snapshot: %s", exc)
        return []

    records: list[TradeRecord] = []
    for index, entry in enumerate(entries):
        try:
            records.append(_entry_to_record(entry))
        except SnapshotError as exc:
            logger.warning("Skipping malformed snapshot entry %d: %s", index, exc)
    return records


def decode_snapshot_strict(blob: str) -> list[TradeRecord]:
    """Decode a snapshot blob, raising on the first problem.

    Raises
    ------
    SnapshotError
        The blob is not a JSON array or an entry cannot be rebuilt.
    """
    return [_entry_to_record(entry) for entry in _load_entries(blob)]


def _load_entries(blob: str) -> list[Any]:
    try:
        data = json.loads(blob)
    except json.JSONDecodeError as exc:
        raise SnapshotError(f"invalid JSON: {exc}") from exc
    if not isinstance(data, list):
        raise SnapshotError(f"expected a JSON array, got {type(data).__name__}")
    return data


def _entry_to_record(entry: Any) -> TradeRecord:
    if not isinstance(entry, dict):
        raise SnapshotError(f"expected an object, got {type(entry).__name__}")
    try:
        return TradeRecord.from_dict(entry)
    except KeyError as exc:
        raise SnapshotError(f"missing field {exc.args[0]!r}") from exc
    except (ValueError, TypeError, OverflowError, JournalError) as exc:
        raise SnapshotError(str(exc)) from exc
