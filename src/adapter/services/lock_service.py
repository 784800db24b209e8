import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Dict

from redis.exceptions import LockError, RedisError

from src.app.services.lock_service import LockService, LockTimeout, LockUnavailable

logger = logging.getLogger(__name__)


class InMemoryLockService(LockService):
    """Per-key asyncio locks. Only serialises handlers within one process."""

    def __init__(self):
        self._locks: Dict[str, asyncio.Lock] = {}

    def _lock_for(self, key: str) -> asyncio.Lock:
        if key not in self._locks:
            self._locks[key] = asyncio.Lock()
        return self._locks[key]

    @asynccontextmanager
    async def acquire(self, key: str, timeout: float):
        lock = self._lock_for(key)
        try:
            async with asyncio.timeout(timeout):
                await lock.acquire()
        except TimeoutError:
            raise LockTimeout(key, timeout)
        try:
            yield
        finally:
            lock.release()


class RedisLockService(LockService):
    """Distributed lock on redis.asyncio, shared by every worker."""

    def __init__(self, client, prefix: str = "lock:", hold_seconds: float = 30.0):
        self.client = client
        self.prefix = prefix
        self.hold_seconds = hold_seconds

    @asynccontextmanager
    async def acquire(self, key: str, timeout: float):
        lock = self.client.lock(
            f"{self.prefix}{key}",
            timeout=self.hold_seconds,
            blocking_timeout=timeout,
        )
        try:
            acquired = await lock.acquire()
        except RedisError as e:
            logger.error("Redis lock '%s' could not be acquired: %s", key, e)
            raise LockUnavailable(key, str(e)) from e
        if not acquired:
            raise LockTimeout(key, timeout)
        try:
            yield
        finally:
            try:
                await lock.release()
            except LockError:
                # Auto-release already expired the lock
                logger.warning("Redis lock '%s' expired before release", key)
            except RedisError as e:
                # Expires after hold_seconds
                logger.error("Redis lock '%s' could not be released: %s", key, e)
