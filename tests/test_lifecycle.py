"""
Tests for the paste lifecycle policy.
"""
import pytest

from pastebin import lifecycle
from pastebin.lifecycle import PasteStatus
from pastebin.models import PasteRecord


def make_record(**overrides):
    fields = {"id": "abcd1234", "content": "hello", "created_at": 10_000}
    fields.update(overrides)
    return PasteRecord(**fields)


class TestEvaluate:
    """Status derivation from timestamps and counters."""

    def test_unlimited_paste_is_always_available(self):
        record = make_record(views=1_000)
        assert lifecycle.evaluate(record, 10_000 + 10 ** 12) is PasteStatus.AVAILABLE

    @pytest.mark.parametrize("ttl", [1, 2, 60, 86_400])
    def test_ttl_boundary(self, ttl):
        record = make_record(ttl_seconds=ttl)
        deadline = record.created_at + ttl * 1000

        assert lifecycle.evaluate(record, deadline - 1) is PasteStatus.AVAILABLE
        assert lifecycle.evaluate(record, deadline) is PasteStatus.EXPIRED
        assert lifecycle.evaluate(record, deadline + 1) is PasteStatus.EXPIRED

    def test_view_limit(self):
        assert lifecycle.evaluate(make_record(max_views=3, views=2), 10_000) is PasteStatus.AVAILABLE
        assert lifecycle.evaluate(make_record(max_views=3, views=3), 10_000) is PasteStatus.EXHAUSTED
        assert lifecycle.evaluate(make_record(max_views=3, views=5), 10_000) is PasteStatus.EXHAUSTED

    def test_expired_wins_over_exhausted(self):
        record = make_record(ttl_seconds=1, max_views=1, views=1)
        assert lifecycle.evaluate(record, 11_000) is PasteStatus.EXPIRED


class TestResponseFields:
    """Remaining views and expiry timestamp."""

    def test_remaining_views_counts_down_and_floors_at_zero(self):
        record = make_record(max_views=2)
        assert lifecycle.remaining_views(record, 1) == 1
        assert lifecycle.remaining_views(record, 2) == 0
        assert lifecycle.remaining_views(record, 7) == 0

    def test_remaining_views_none_without_limit(self):
        assert lifecycle.remaining_views(make_record(), 3) is None

    def test_expires_at_iso(self):
        record = make_record(created_at=0, ttl_seconds=2)
        assert lifecycle.expires_at_ms(record) == 2000
        assert lifecycle.expires_at_iso(record) == "1970-01-01T00:00:02.000Z"

    def test_expires_at_keeps_milliseconds(self):
        record = make_record(created_at=1_700_000_000_123, ttl_seconds=60)
        assert lifecycle.expires_at_iso(record) == "2023-11-14T22:14:20.123Z"

    def test_no_expiry_without_ttl(self):
        record = make_record()
        assert lifecycle.expires_at_ms(record) is None
        assert lifecycle.expires_at_iso(record) is None
