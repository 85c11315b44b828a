"""
Dependency Health Checks

Reachability checks for the stores this process depends on, reported
by the API's /health endpoint. Connections are resolved inside the
check, so a store that cannot even be connected to reports DOWN.
"""

import time
from abc import ABC, abstractmethod
from typing import Awaitable, Callable

from inframind.models.health import DependencyHealth, DependencyStatus
from inframind.storage.database import Database
from inframind.storage.redis_client import RedisConnection


class BaseHealthCheck(ABC):
    """Abstract base class for all dependency health checks."""

    name: str = "unknown"

    @abstractmethod
    async def ping(self) -> bool:
        """Return True if the dependency answered."""

    async def check(self) -> DependencyHealth:
        """
        Perform the health check.

        Returns:
            DependencyHealth: status and latency. Exceptions are reported as DOWN.
        """
        start_time = time.time()
        try:
            is_healthy = await self.ping()
            message = None if is_healthy else f"{self.name} health check failed"
        except Exception as e:
            is_healthy = False
            message = str(e)
        return DependencyHealth(
            dependency=self.name,
            status=DependencyStatus.UP if is_healthy else DependencyStatus.DOWN,
            latency_ms=(time.time() - start_time) * 1000,
            message=message,
        )


class PostgresHealthCheck(BaseHealthCheck):
    name = "postgresql"

    def __init__(self, get_db: Callable[[], Awaitable[Database]]):
        self.get_db = get_db

    async def ping(self) -> bool:
        db = await self.get_db()
        return await db.health_check()


class RedisHealthCheck(BaseHealthCheck):
    name = "redis"

    def __init__(self, get_redis: Callable[[], Awaitable[RedisConnection]]):
        self.get_redis = get_redis

    async def ping(self) -> bool:
        redis = await self.get_redis()
        return await redis.health_check()
