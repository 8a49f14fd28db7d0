"""
Paste creation and retrieval flows.

Retrieval reads the record, lets the lifecycle policy decide, and only then
spends a view. Pastes found expired or out of views are removed on the spot.
"""
import logging
from typing import NamedTuple, Optional

from pastebin import lifecycle
from pastebin.database import PasteStore
from pastebin.exceptions import NotFoundError, StorageError
from pastebin.lifecycle import PasteStatus
from pastebin.models import PasteRecord

logger = logging.getLogger(__name__)


class OpenedPaste(NamedTuple):
    record: PasteRecord
    views: int
    remaining_views: Optional[int]
    expires_at: Optional[str]


def create_paste(
    store: PasteStore,
    content: str,
    ttl_seconds: Optional[int] = None,
    max_views: Optional[int] = None,
    now_ms: Optional[int] = None,
) -> str:
    return store.create(content, ttl_seconds=ttl_seconds, max_views=max_views, now_ms=now_ms)


def _discard(store: PasteStore, paste_id: str, status: PasteStatus) -> NotFoundError:
    """Remove a paste that can no longer be served and report it as not found."""
    try:
        store.delete(paste_id)
    except StorageError as e:
        # The read outcome is already decided; a failed cleanup is only logged
        logger.warning(f"Cleanup of {status.value} paste {paste_id} failed: {e}")
    return NotFoundError(paste_id, status.value)


def open_paste(store: PasteStore, paste_id: str, now_ms: int) -> OpenedPaste:
    """
    Serve one view of a paste at `now_ms`.

    Raises:
        NotFoundError: Paste absent, expired or out of views
        StorageError: Storage failed while reading or counting the view
    """
    record = store.get(paste_id)

    status = lifecycle.evaluate(record, now_ms)
    if status is not PasteStatus.AVAILABLE:
        raise _discard(store, paste_id, status)

    views = store.increment_views(paste_id)

    # Concurrent readers may all pass the check above; only those whose
    # increment landed within the limit get the content.
    if lifecycle.is_exhausted(record, views - 1):
        raise _discard(store, paste_id, PasteStatus.EXHAUSTED)

    return OpenedPaste(
        record=record,
        views=views,
        remaining_views=lifecycle.remaining_views(record, views),
        expires_at=lifecycle.expires_at_iso(record),
    )
