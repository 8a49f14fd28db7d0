"""
FastAPI dependencies shared by the route modules.
"""
import logging
import time
from typing import Optional

from fastapi import Header, Request

from pastebin.config import Settings
from pastebin.database import PasteStore

logger = logging.getLogger(__name__)


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_store(request: Request) -> PasteStore:
    return request.app.state.store


def get_now_ms(
    request: Request,
    x_test_now_ms: Optional[str] = Header(None),
) -> int:
    """
    Current time for this request in epoch milliseconds.

    In TEST_MODE the x-test-now-ms header replaces the wall clock so expiry
    can be tested deterministically. FastAPI resolves this once per request.
    """
    settings = get_settings(request)
    if settings.TEST_MODE and x_test_now_ms:
        try:
            return int(x_test_now_ms)
        except ValueError as e:
            logger.warning(f"Invalid x-test-now-ms header: {e}")

    return int(time.time() * 1000)
