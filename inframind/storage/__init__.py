"""
Storage Layer - Data Access

Components:
- Database: PostgreSQL connection with asyncpg
- RedisConnection: Redis client backing the job queue
- Repositories: Data access objects for each entity
"""

from inframind.storage.database import Database, get_database
from inframind.storage.redis_client import RedisConnection, get_redis

__all__ = [
    "Database",
    "get_database",
    "RedisConnection",
    "get_redis",
]
