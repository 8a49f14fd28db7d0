"""
Paste lifecycle policy.

Pure decisions over a `PasteRecord` and a point in time (epoch ms). Nothing
here touches storage: callers fetch the record, ask `evaluate`, and act.
"""
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Optional

from pastebin.models import PasteRecord

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class PasteStatus(str, Enum):
    AVAILABLE = "available"
    EXPIRED = "expired"
    EXHAUSTED = "exhausted"


def expires_at_ms(record: PasteRecord) -> Optional[int]:
    """Absolute expiry in epoch milliseconds, None if the paste has no TTL."""
    if record.ttl_seconds is None:
        return None
    return record.created_at + record.ttl_seconds * 1000


def is_expired(record: PasteRecord, now_ms: int) -> bool:
    deadline = expires_at_ms(record)
    return deadline is not None and now_ms >= deadline


def is_exhausted(record: PasteRecord, views: Optional[int] = None) -> bool:
    if record.max_views is None:
        return False
    if views is None:
        views = record.views
    return views >= record.max_views


def evaluate(record: PasteRecord, now_ms: int) -> PasteStatus:
    """
    Decide whether a paste may be served at `now_ms`.

    Time is checked before views, so a paste that is both past its TTL and
    out of views reports EXPIRED.
    """
    if is_expired(record, now_ms):
        return PasteStatus.EXPIRED
    if is_exhausted(record):
        return PasteStatus.EXHAUSTED
    return PasteStatus.AVAILABLE


def remaining_views(record: PasteRecord, new_views: int) -> Optional[int]:
    """Views left after the read that produced `new_views`."""
    if record.max_views is None:
        return None
    return max(record.max_views - new_views, 0)


def format_timestamp_ms(timestamp_ms: int) -> str:
    """ISO 8601 in UTC with millisecond precision, e.g. 1970-01-01T00:00:02.000Z"""
    moment = EPOCH + timedelta(milliseconds=timestamp_ms)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def expires_at_iso(record: PasteRecord) -> Optional[str]:
    deadline = expires_at_ms(record)
    if deadline is None:
        return None
    return format_timestamp_ms(deadline)
