"""
Redis Connection

Shared async Redis client backing the health-check job queue.
Unlike a cache, the queue cannot run without Redis, so connection
failures propagate.
"""

import redis.asyncio as redis
import structlog

from inframind.config import Settings, get_settings

logger = structlog.get_logger(__name__)


class RedisConnection:
    """Owns one redis.asyncio client for the process."""

    def __init__(self, settings: Settings | None = None):
        self.settings = settings or get_settings()
        self._client: redis.Redis | None = None

    async def connect(self) -> None:
        """Connect to Redis and verify with a ping."""
        if self._client is not None:
            logger.warning("Redis client already initialized")
            return

        logger.info("Connecting to Redis", url=self.settings.redis_url)

        client = redis.from_url(
            self.settings.redis_url,
            password=self.settings.redis_password or None,
            db=self.settings.redis_db,
            encoding="utf-8",
            decode_responses=True,
        )
        try:
            await client.ping()
        except Exception as e:
            logger.error("Failed to connect to Redis", error=str(e))
            await client.aclose()
            raise
        self._client = client
        logger.info("Redis connection established")

    async def disconnect(self) -> None:
        """Close Redis connection."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
            logger.info("Redis connection closed")

    @property
    def client(self) -> redis.Redis:
        """Get Redis client."""
        if self._client is None:
            raise RuntimeError("Redis not connected. Call connect() first.")
        return self._client

    @property
    def is_connected(self) -> bool:
        return self._client is not None

    async def health_check(self) -> bool:
        """Check if Redis answers a ping."""
        if self._client is None:
            return False
        try:
            return bool(await self._client.ping())
        except Exception as e:
            logger.error("Redis health check failed", error=str(e))
            return False


_redis: RedisConnection | None = None


async def get_redis() -> RedisConnection:
    """Get the global Redis connection, connecting on first use."""
    global _redis

    if _redis is None:
        connection = RedisConnection()
        await connection.connect()
        _redis = connection

    return _redis


async def close_redis() -> None:
    """Close the global Redis connection."""
    global _redis

    if _redis is not None:
        await _redis.disconnect()
        _redis = None
