"""
Tests for the retrieval flow: policy decisions, view spending and cleanup.
"""
from unittest.mock import patch

import pytest

from pastebin import service
from pastebin.database import paste_key
from pastebin.exceptions import NotFoundError, StorageError


def test_available_paste_spends_one_view(memory_store):
    paste_id = service.create_paste(memory_store, "hello", max_views=3, now_ms=0)

    opened = service.open_paste(memory_store, paste_id, now_ms=1)

    assert opened.record.content == "hello"
    assert opened.views == 1
    assert opened.remaining_views == 2
    assert opened.expires_at is None
    assert memory_store.get(paste_id).views == 1


def test_expired_paste_is_deleted(memory_store):
    paste_id = service.create_paste(memory_store, "hello", ttl_seconds=2, now_ms=0)

    with pytest.raises(NotFoundError) as exc_info:
        service.open_paste(memory_store, paste_id, now_ms=2000)

    assert exc_info.value.reason == "expired"
    assert memory_store.redis.hgetall(paste_key(paste_id)) == {}


def test_expired_read_does_not_count_a_view(memory_store):
    paste_id = service.create_paste(memory_store, "hello", ttl_seconds=2, now_ms=0)

    with patch.object(memory_store, "increment_views") as increment, \
            patch.object(memory_store, "delete"):
        with pytest.raises(NotFoundError):
            service.open_paste(memory_store, paste_id, now_ms=5000)

    increment.assert_not_called()


def test_exhausted_paste_is_deleted(memory_store):
    paste_id = service.create_paste(memory_store, "x", max_views=1, now_ms=0)
    service.open_paste(memory_store, paste_id, now_ms=1)

    with pytest.raises(NotFoundError) as exc_info:
        service.open_paste(memory_store, paste_id, now_ms=2)

    assert exc_info.value.reason == "exhausted"
    with pytest.raises(NotFoundError) as exc_info:
        service.open_paste(memory_store, paste_id, now_ms=3)
    assert exc_info.value.reason == "absent"


def test_reader_losing_the_last_view_is_refused(memory_store):
    """Two readers see views=0 on a one-view paste; only the first is served."""
    paste_id = service.create_paste(memory_store, "secret", max_views=1, now_ms=0)
    stale = memory_store.get(paste_id)

    with patch.object(memory_store, "get", return_value=stale):
        first = service.open_paste(memory_store, paste_id, now_ms=1)
        with pytest.raises(NotFoundError) as exc_info:
            service.open_paste(memory_store, paste_id, now_ms=1)

    assert first.remaining_views == 0
    assert exc_info.value.reason == "exhausted"
    assert memory_store.redis.hgetall(paste_key(paste_id)) == {}


def test_cleanup_failure_still_reports_not_found(memory_store):
    paste_id = service.create_paste(memory_store, "hello", ttl_seconds=1, now_ms=0)

    with patch.object(memory_store, "delete", side_effect=StorageError("down")):
        with pytest.raises(NotFoundError) as exc_info:
            service.open_paste(memory_store, paste_id, now_ms=1000)

    assert exc_info.value.reason == "expired"


def test_increment_failure_propagates(memory_store):
    paste_id = service.create_paste(memory_store, "hello", now_ms=0)

    with patch.object(memory_store, "increment_views", side_effect=StorageError("down")):
        with pytest.raises(StorageError):
            service.open_paste(memory_store, paste_id, now_ms=1)


def test_reader_racing_a_delete_is_refused(memory_store):
    """A reader that saw the paste before it was exhausted and deleted gets nothing."""
    paste_id = service.create_paste(memory_store, "secret", max_views=1, now_ms=0)
    stale = memory_store.get(paste_id)

    first = service.open_paste(memory_store, paste_id, now_ms=1)
    with pytest.raises(NotFoundError):
        service.open_paste(memory_store, paste_id, now_ms=2)

    with patch.object(memory_store, "get", return_value=stale):
        with pytest.raises(NotFoundError):
            service.open_paste(memory_store, paste_id, now_ms=3)

    assert first.record.content == "secret"
    assert memory_store.redis.store == {}
