import logging

import redis.asyncio as redis

from src.fault_triage.config import get_settings

logger = logging.getLogger(__name__)


class RedisManager:
    """Holds the shared Redis client used for cross-process fault-event locks."""

    def __init__(self):
        self.redis_client: redis.Redis | None = None

    async def init_redis(self):
        """Initialize Redis connection"""
        if not get_settings().REDIS_ENABLED:
            logger.info("Redis disabled; fault-event locks are process-local")
            return
        client = redis.Redis(
            host=get_settings().REDIS_HOST,
            port=get_settings().REDIS_PORT,
            encoding="utf-8",
            decode_responses=True,
        )
        await client.ping()
        self.redis_client = client
        logger.info("Redis connection initialized")

    async def close_redis(self):
        """Close Redis connection"""
        if self.redis_client:
            await self.redis_client.aclose()
            logger.info("Redis connection closed")
            self.redis_client = None


redis_manager = RedisManager()
