"""
Storage layer for pastes: Redis with an in-memory fallback for development.
Handles paste creation, lookup, atomic view counting, deletion and health checks.
"""
import logging
import threading
import time
import uuid
from typing import Any, Dict, List, Optional, Tuple

from redis import Redis
from redis.exceptions import RedisError

from pastebin.exceptions import NotFoundError, StorageError, ValidationError
from pastebin.models import PasteRecord

logger = logging.getLogger(__name__)

KEY_PREFIX = "paste"
ID_LENGTH = 8
MAX_ID_ATTEMPTS = 5


def paste_key(paste_id: str) -> str:
    return f"{KEY_PREFIX}:{paste_id}"


def _current_time_ms() -> int:
    return int(time.time() * 1000)


class InMemoryStore:
    """Simple in-memory store for development/testing (when Redis unavailable).

    Implements the handful of Redis hash commands the paste store uses.
    Every command runs under one lock, so HINCRBY is atomic per key just
    like on a real server.
    """

    def __init__(self):
        self.store: Dict[str, Dict[str, str]] = {}
        self.ttl_timestamps: Dict[str, float] = {}
        self._lock = threading.RLock()

    def _evict_if_expired(self, key: str):
        deadline = self.ttl_timestamps.get(key)
        if deadline is not None and _current_time_ms() >= deadline:
            self.store.pop(key, None)
            self.ttl_timestamps.pop(key, None)

    def hset(self, key: str, mapping: Dict[str, Any]) -> int:
        """Store hash data."""
        with self._lock:
            self._evict_if_expired(key)
            current = self.store.setdefault(key, {})
            added = len(set(mapping) - set(current))
            current.update({field: str(value) for field, value in mapping.items()})
            return added

    def hgetall(self, key: str) -> Dict[str, str]:
        """Retrieve hash data."""
        with self._lock:
            self._evict_if_expired(key)
            return dict(self.store.get(key, {}))

    def expire(self, key: str, seconds: int) -> bool:
        """Set expiry time in seconds."""
        with self._lock:
            self._evict_if_expired(key)
            if key not in self.store:
                return False
            self.ttl_timestamps[key] = _current_time_ms() + seconds * 1000
            return True

    def hincrby(self, key: str, field: str, increment: int) -> int:
        """Increment hash field and return the new value."""
        with self._lock:
            self._evict_if_expired(key)
            current = self.store.setdefault(key, {})
            value = int(current.get(field, 0)) + increment
            current[field] = str(value)
            return value

    def hexists(self, key: str, field: str) -> bool:
        with self._lock:
            self._evict_if_expired(key)
            return field in self.store.get(key, {})

    def exists(self, key: str) -> int:
        with self._lock:
            self._evict_if_expired(key)
            return int(key in self.store)

    def delete(self, key: str) -> int:
        """Delete a key."""
        with self._lock:
            self.ttl_timestamps.pop(key, None)
            return int(self.store.pop(key, None) is not None)

    def ping(self) -> bool:
        """Health check."""
        return True

    def pipeline(self, transaction: bool = True) -> "InMemoryPipeline":
        return InMemoryPipeline(self)

    def close(self):
        pass


class InMemoryPipeline:
    """Queues commands and applies them together under the store lock."""

    def __init__(self, store: InMemoryStore):
        self._store = store
        self._commands: List[Tuple[str, tuple, dict]] = []

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self._commands.clear()

    def hset(self, key: str, mapping: Dict[str, Any]) -> "InMemoryPipeline":
        self._commands.append(("hset", (key,), {"mapping": mapping}))
        return self

    def expire(self, key: str, seconds: int) -> "InMemoryPipeline":
        self._commands.append(("expire", (key, seconds), {}))
        return self

    def hexists(self, key: str, field: str) -> "InMemoryPipeline":
        self._commands.append(("hexists", (key, field), {}))
        return self

    def hincrby(self, key: str, field: str, increment: int) -> "InMemoryPipeline":
        self._commands.append(("hincrby", (key, field, increment), {}))
        return self

    def execute(self) -> List[Any]:
        with self._store._lock:
            results = [
                getattr(self._store, name)(*args, **kwargs)
                for name, args, kwargs in self._commands
            ]
        self._commands.clear()
        return results


def validate_paste_input(
    content: Any,
    ttl_seconds: Any = None,
    max_views: Any = None,
) -> str:
    """
    Check creation input and return the trimmed content.

    Raises:
        ValidationError: On empty content or a limit that is not an integer >= 1
    """
    if not isinstance(content, str) or not content.strip():
        raise ValidationError("content is required and must be non-empty")

    for name, value in (("ttl_seconds", ttl_seconds), ("max_views", max_views)):
        if value is None:
            continue
        # bool is an int subclass; reject it along with floats such as 1.5
        if isinstance(value, bool) or not isinstance(value, int) or value < 1:
            raise ValidationError(f"{name} must be an integer >= 1")

    return content.strip()


class PasteStore:
    """Paste persistence on top of a Redis client (or InMemoryStore)."""

    def __init__(self, client, using_fallback: bool = False):
        self.redis = client
        self.using_fallback = using_fallback

    @classmethod
    def from_url(cls, redis_url: str) -> "PasteStore":
        """Connect to Redis, falling back to the in-memory store."""
        try:
            # For Upstash Redis, use rediss:// scheme for SSL/TLS
            logger.info(f"Attempting to connect to Redis: {redis_url[:30]}...")
            client = Redis.from_url(redis_url, decode_responses=True)
            client.ping()
            logger.info("Redis connected successfully")
            return cls(client)
        except (RedisError, ValueError) as e:
            # ValueError covers a malformed REDIS_URL
            logger.error(f"Error connecting to Redis: {type(e).__name__}: {e}")
            logger.warning("Using in-memory fallback for development. Data will NOT persist across restarts.")
            return cls(InMemoryStore(), using_fallback=True)

    def is_healthy(self) -> bool:
        """Check if database connection is alive."""
        try:
            return bool(self.redis.ping())
        except RedisError as e:
            logger.error(f"Health check failed: {e}")
        return False

    def close(self):
        try:
            self.redis.close()
        except RedisError as e:
            logger.warning(f"Error closing storage connection: {e}")

    def _generate_id(self) -> str:
        for _ in range(MAX_ID_ATTEMPTS):
            paste_id = uuid.uuid4().hex[:ID_LENGTH]
            if not self.redis.exists(paste_key(paste_id)):
                return paste_id
        raise StorageError("Could not allocate a free paste id")

    def create(
        self,
        content: str,
        ttl_seconds: Optional[int] = None,
        max_views: Optional[int] = None,
        now_ms: Optional[int] = None,
    ) -> str:
        """
        Save a new paste.

        Args:
            content: Text content of the paste, trimmed before storing
            ttl_seconds: Optional time-to-live in seconds
            max_views: Optional maximum view count
            now_ms: Creation time in epoch ms, defaults to the wall clock

        Returns:
            The new paste id

        Raises:
            ValidationError: If input is invalid (nothing is written)
            StorageError: If the write fails
        """
        content = validate_paste_input(content, ttl_seconds, max_views)
        created_at = _current_time_ms() if now_ms is None else now_ms

        try:
            paste_id = self._generate_id()
            key = paste_key(paste_id)
            record = PasteRecord(
                id=paste_id,
                content=content,
                created_at=created_at,
                ttl_seconds=ttl_seconds,
                max_views=max_views,
            )

            with self.redis.pipeline(transaction=True) as pipe:
                pipe.hset(key, mapping=record.to_hash())
                # Storage-side expiry is only hygiene; reads re-derive expiry
                if ttl_seconds:
                    pipe.expire(key, ttl_seconds)
                pipe.execute()
        except RedisError as e:
            logger.error(f"Error saving paste: {e}")
            raise StorageError("Failed to save paste") from e

        logger.info(f"Paste {paste_id} saved successfully")
        return paste_id

    def get(self, paste_id: str) -> PasteRecord:
        """
        Fetch a paste record.

        Raises:
            NotFoundError: If no record exists for the id
            StorageError: If the read fails
        """
        try:
            paste_data = self.redis.hgetall(paste_key(paste_id))
        except RedisError as e:
            logger.error(f"Error fetching paste {paste_id}: {e}")
            raise StorageError("Failed to fetch paste") from e

        if not paste_data:
            raise NotFoundError(paste_id)

        # A hash without content is a counter left behind by an increment
        # racing a delete; remove it so the key does not linger
        if "content" not in paste_data:
            self.delete(paste_id)
            raise NotFoundError(paste_id)

        try:
            return PasteRecord.from_hash(paste_id, paste_data)
        except (KeyError, ValueError) as e:
            logger.error(f"Corrupt record for paste {paste_id}: {type(e).__name__}: {e}")
            raise StorageError("Stored paste is corrupt") from e

    def increment_views(self, paste_id: str) -> int:
        """
        Atomically increment the view count and return the new value.

        The increment only counts if the paste still has its content when
        the transaction runs; a paste deleted since it was read is reported
        as not found and the counter the increment created is removed.

        Raises:
            NotFoundError: If the paste no longer exists
            StorageError: If the increment fails
        """
        key = paste_key(paste_id)
        try:
            with self.redis.pipeline(transaction=True) as pipe:
                pipe.hexists(key, "content")
                pipe.hincrby(key, "views", 1)
                still_exists, views = pipe.execute()
        except RedisError as e:
            logger.error(f"Error incrementing views for {paste_id}: {e}")
            raise StorageError("Failed to count view") from e

        if not still_exists:
            logger.warning(f"Paste {paste_id} was deleted before its view was counted")
            self.delete(paste_id)
            raise NotFoundError(paste_id)

        views = int(views)
        logger.debug(f"View count for paste {paste_id} is now {views}")
        return views

    def delete(self, paste_id: str):
        """
        Delete a paste. Deleting a missing paste is not an error.

        Raises:
            StorageError: If the delete fails
        """
        try:
            self.redis.delete(paste_key(paste_id))
        except RedisError as e:
            logger.error(f"Error deleting paste {paste_id}: {e}")
            raise StorageError("Failed to delete paste") from e

        logger.info(f"Paste {paste_id} deleted")
