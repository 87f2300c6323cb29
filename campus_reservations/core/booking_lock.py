from __future__ import annotations

from contextlib import ExitStack, contextmanager
from datetime import date
from functools import lru_cache
import logging
import threading
import time
import uuid
from typing import Dict, Iterator, Optional

from redis import Redis

from ..monitoring.prometheus_metrics import prometheus_metrics
from .config import settings
from .exceptions import SlotBusyException

logger = logging.getLogger(__name__)

_SYNC_REDIS: Dict[str, Redis] = {}
_SYNC_REDIS_LOCK = threading.Lock()

# Delete the key only when it still holds our token.
_RELEASE_SCRIPT = """
if redis.call('get', KEYS[1]) == ARGV[1] then
    return redis.call('del', KEYS[1])
end
return 0
"""


def slot_lock_key(resource_id: str, booking_date: date) -> str:
    return f"slot:{resource_id}:{booking_date.isoformat()}:mutex"


def _namespaced_key(namespace: str, key: str) -> str:
    return f"{namespace}:lock:{key}"


def _get_sync_redis(redis_url: str) -> Optional[Redis]:
    client = _SYNC_REDIS.get(redis_url)
    if client is not None:
        return client
    with _SYNC_REDIS_LOCK:
        client = _SYNC_REDIS.get(redis_url)
        if client is not None:
            return client
        try:
            client = Redis.from_url(redis_url, encoding="utf-8", decode_responses=True)
            client.ping()
        except Exception as exc:
            logger.warning("slot_lock_redis_unavailable: %s", exc)
            return None
        _SYNC_REDIS[redis_url] = client
        return client


class _LocalEntry:
    __slots__ = ("lock", "holders")

    def __init__(self) -> None:
        self.lock = threading.Lock()
        self.holders = 0


class SlotLockRegistry:
    """
    Process-local mutexes keyed by resource and date.

    Entries are reference counted and dropped once no thread holds or waits
    on them.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._entries: Dict[str, _LocalEntry] = {}

    def acquire(self, key: str, timeout: float) -> bool:
        with self._guard:
            entry = self._entries.setdefault(key, _LocalEntry())
            entry.holders += 1
        acquired = entry.lock.acquire(timeout=timeout)
        if not acquired:
            self._forget(key, entry)
        return acquired

    def release(self, key: str) -> None:
        with self._guard:
            entry = self._entries.get(key)
        if entry is None:
            return
        entry.lock.release()
        self._forget(key, entry)

    def held_keys(self) -> list[str]:
        with self._guard:
            return [key for key, entry in self._entries.items() if entry.lock.locked()]

    def _forget(self, key: str, entry: _LocalEntry) -> None:
        with self._guard:
            entry.holders -= 1
            if entry.holders <= 0 and self._entries.get(key) is entry:
                del self._entries[key]


class SlotLocker:
    """
    Serializes check-and-write sequences for one resource on one date.

    The process-local lock is always taken. When a Redis URL is configured a
    Redis lock is taken as well so that several API processes serialize on the
    same key; if Redis cannot be reached the local lock and the database row
    lock still apply.
    """

    def __init__(
        self,
        registry: Optional[SlotLockRegistry] = None,
        *,
        redis_url: Optional[str] = None,
        namespace: str = "campus_reservations",
        ttl_s: int = 30,
        wait_s: float = 10.0,
    ) -> None:
        self.registry = registry or SlotLockRegistry()
        self.redis_url = redis_url
        self.namespace = namespace
        self.ttl_s = ttl_s
        self.wait_s = wait_s

    @contextmanager
    def hold(self, resource_id: str, *booking_dates: date) -> Iterator[None]:
        """Hold the locks for every given date, acquired in sorted order."""
        keys = sorted({slot_lock_key(resource_id, d) for d in booking_dates})
        with ExitStack() as stack:
            for key in keys:
                stack.enter_context(self._hold_key(key))
            yield

    @contextmanager
    def _hold_key(self, key: str) -> Iterator[None]:
        if not self.registry.acquire(key, timeout=self.wait_s):
            prometheus_metrics.record_slot_lock("local", "acquire", "timeout")
            logger.warning("slot_lock_local_timeout", extra={"lock_key": key})
            raise SlotBusyException(key)
        prometheus_metrics.record_slot_lock("local", "acquire", "success")
        token: Optional[str] = None
        try:
            token = self._acquire_redis(key)
            yield
        finally:
            if token is not None:
                self._release_redis(key, token)
            self.registry.release(key)
            prometheus_metrics.record_slot_lock("local", "release", "success")

    def _acquire_redis(self, key: str) -> Optional[str]:
        if not self.redis_url:
            return None
        client = _get_sync_redis(self.redis_url)
        if client is None:
            prometheus_metrics.record_slot_lock("redis", "acquire", "redis_unavailable")
            return None

        token = uuid.uuid4().hex
        deadline = time.monotonic() + self.wait_s
        namespaced = _namespaced_key(self.namespace, key)
        try:
            while True:
                if client.set(namespaced, token, nx=True, ex=self.ttl_s):
                    prometheus_metrics.record_slot_lock("redis", "acquire", "success")
                    return token
                if time.monotonic() >= deadline:
                    break
                time.sleep(0.05)
        except Exception as exc:
            prometheus_metrics.record_slot_lock("redis", "acquire", "error")
            logger.warning(
                "slot_lock_redis_acquire_failed",
                extra={"lock_key": key, "error": str(exc), "error_type": type(exc).__name__},
            )
            return None

        prometheus_metrics.record_slot_lock("redis", "acquire", "timeout")
        raise SlotBusyException(key)

    def _release_redis(self, key: str, token: str) -> None:
        client = _get_sync_redis(self.redis_url) if self.redis_url else None
        if client is None:
            return
        try:
            deleted = client.eval(_RELEASE_SCRIPT, 1, _namespaced_key(self.namespace, key), token)
            outcome = "success" if deleted else "not_found"
            prometheus_metrics.record_slot_lock("redis", "release", outcome)
        except Exception as exc:
            prometheus_metrics.record_slot_lock("redis", "release", "error")
            logger.warning(
                "slot_lock_redis_release_failed",
                extra={"lock_key": key, "error": str(exc), "error_type": type(exc).__name__},
            )


@lru_cache(maxsize=1)
def default_slot_locker() -> SlotLocker:
    """Process-wide locker built from settings; all services must share one registry."""
    return SlotLocker(
        redis_url=settings.redis_url,
        namespace=settings.lock_namespace,
        ttl_s=settings.booking_lock_ttl_seconds,
        wait_s=settings.booking_lock_wait_seconds,
    )
