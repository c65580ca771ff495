import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, Optional, Tuple

from redis.exceptions import LockError

from src.fault_triage.fault_events.exceptions import StorageConflictException
from src.fault_triage.redis.redis import RedisManager, redis_manager

logger = logging.getLogger(__name__)

DedupKey = Tuple[str, int]


class DedupLockArena:
    """
    Per-key mutual exclusion for the find-or-create-or-update section.

    Each (source, id_from_source) key gets its own asyncio.Lock, created on
    first use and dropped once nobody holds or waits for it. When Redis is
    connected, a Redis lock on the same key is taken inside the local one so
    that several worker processes serialize as well.
    """

    def __init__(
        self,
        redis: RedisManager = redis_manager,
        lock_timeout: float = 30.0,
        blocking_timeout: float = 10.0,
    ):
        self._redis = redis
        self.lock_timeout = lock_timeout
        self.blocking_timeout = blocking_timeout
        self._locks: Dict[DedupKey, asyncio.Lock] = {}
        self._users: Dict[DedupKey, int] = {}

    def __len__(self) -> int:
        return len(self._locks)

    @staticmethod
    def redis_key(key: DedupKey) -> str:
        source, id_from_source = key
        return f"fault_event_lock:{source}:{id_from_source}"

    @asynccontextmanager
    async def hold(self, key: Optional[DedupKey]) -> AsyncIterator[None]:
        # Keyless events never match an existing ticket, nothing to serialize
        if key is None:
            yield
            return

        lock = self._locks.setdefault(key, asyncio.Lock())
        self._users[key] = self._users.get(key, 0) + 1
        try:
            async with lock:
                async with self._distributed(key):
                    yield
        finally:
            self._users[key] -= 1
            if self._users[key] == 0:
                del self._users[key]
                del self._locks[key]

    @asynccontextmanager
    async def _distributed(self, key: DedupKey) -> AsyncIterator[None]:
        client = self._redis.redis_client
        if client is None:
            yield
            return

        name = self.redis_key(key)
        redis_lock = client.lock(
            name,
            timeout=self.lock_timeout,
            blocking_timeout=self.blocking_timeout,
        )
        if not await redis_lock.acquire():
            logger.warning(f"Timed out waiting for Redis lock {name}")
            raise StorageConflictException(
                key[0], key[1], f"timed out waiting for lock {name}"
            )
        try:
            yield
        finally:
            try:
                await redis_lock.release()
            except LockError as e:
                # Lock expired while held; the unique constraint still guards writes
                logger.warning(f"Failed to release Redis lock {name}: {e}")
