"""
Database Connection Manager

Async PostgreSQL connection with connection pooling via asyncpg.
Holds services, health runs and prediction reports.
"""

import json
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator

import asyncpg
import structlog
from asyncpg import Pool, Connection

from inframind.config import Settings, get_settings

logger = structlog.get_logger(__name__)


class Database:
    """
    Async PostgreSQL database manager with connection pooling.

    Provides:
    - Connection pooling via asyncpg
    - Transaction support
    - Query execution helpers
    - JSONB codecs so metrics and report bodies round-trip as Python objects
    """

    def __init__(self, settings: Settings | None = None):
        self.settings = settings or get_settings()
        self._pool: Pool | None = None

    async def connect(self) -> None:
        """Initialize the connection pool."""
        if self._pool is not None:
            logger.warning("Database pool already initialized")
            return

        if self.settings.database_url is None:
            raise RuntimeError("DATABASE_URL is not configured")

        logger.info(
            "Connecting to database",
            min_size=self.settings.db_pool_min_size,
            max_size=self.settings.db_pool_max_size,
        )

        try:
            self._pool = await asyncpg.create_pool(
                dsn=self.settings.database_url.get_secret_value(),
                min_size=self.settings.db_pool_min_size,
                max_size=self.settings.db_pool_max_size,
                command_timeout=60,
                init=self._init_connection,
            )
            logger.info("Database connection pool established")
        except Exception as e:
            logger.error("Failed to connect to database", error=str(e))
            raise

    async def _init_connection(self, conn: Connection) -> None:
        """Register JSON codecs on every new pooled connection."""
        for type_name in ("json", "jsonb"):
            await conn.set_type_codec(
                type_name,
                encoder=json.dumps,
                decoder=json.loads,
                schema="pg_catalog",
            )

    async def disconnect(self) -> None:
        """Close the connection pool."""
        if self._pool is not None:
            await self._pool.close()
            self._pool = None
            logger.info("Database connection pool closed")

    @property
    def pool(self) -> Pool:
        """Get the connection pool."""
        if self._pool is None:
            raise RuntimeError("Database not connected. Call connect() first.")
        return self._pool

    @asynccontextmanager
    async def acquire(self) -> AsyncGenerator[Connection, None]:
        """
        Acquire a connection from the pool.

        Usage:
            async with db.acquire() as conn:
                await conn.fetch("SELECT * FROM services")
        """
        async with self.pool.acquire() as conn:
            yield conn

    @asynccontextmanager
    async def transaction(self) -> AsyncGenerator[Connection, None]:
        """Acquire a connection and start a transaction."""
        async with self.pool.acquire() as conn:
            async with conn.transaction():
                yield conn

    async def execute(
        self,
        query: str,
        *args: Any,
        timeout: float | None = None,
    ) -> str:
        """
        Execute a query and return status.

        Returns:
            Status string (e.g., "UPDATE 1")
        """
        async with self.acquire() as conn:
            return await conn.execute(query, *args, timeout=timeout)

    async def fetch(
        self,
        query: str,
        *args: Any,
        timeout: float | None = None,
    ) -> list[asyncpg.Record]:
        """Fetch multiple rows."""
        async with self.acquire() as conn:
            return await conn.fetch(query, *args, timeout=timeout)

    async def fetchrow(
        self,
        query: str,
        *args: Any,
        timeout: float | None = None,
    ) -> asyncpg.Record | None:
        """Fetch a single row, or None if not found."""
        async with self.acquire() as conn:
            return await conn.fetchrow(query, *args, timeout=timeout)

    async def fetchval(
        self,
        query: str,
        *args: Any,
        column: int = 0,
        timeout: float | None = None,
    ) -> Any:
        """Fetch a single value from the given column."""
        async with self.acquire() as conn:
            return await conn.fetchval(query, *args, column=column, timeout=timeout)

    async def health_check(self) -> bool:
        """Check if database is healthy."""
        try:
            result = await self.fetchval("SELECT 1")
            return result == 1
        except Exception as e:
            logger.error("Database health check failed", error=str(e))
            return False


# Global database instance
_database: Database | None = None


async def get_database() -> Database:
    """
    Get the global database instance.

    Creates and connects if not already done.
    """
    global _database

    if _database is None:
        _database = Database()
        await _database.connect()

    return _database


async def close_database() -> None:
    """Close the global database connection."""
    global _database

    if _database is not None:
        await _database.disconnect()
        _database = None


# Driver-level failures that repositories surface as PersistenceError on writes
WRITE_ERRORS = (asyncpg.PostgresError, asyncpg.InterfaceError, OSError)


def json_field(value: Any, default: Any) -> Any:
    """Decode a JSON column that may arrive as text when no codec is registered."""
    if value is None:
        return default
    if isinstance(value, str):
        return json.loads(value) if value else default
    return value
