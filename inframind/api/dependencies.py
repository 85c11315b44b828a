"""
API Dependencies

FastAPI dependencies that hand route handlers their repositories,
queue and admission service. Tests replace them through
app.dependency_overrides.
"""

from typing import Annotated

from fastapi import Depends

from inframind.config import get_settings
from inframind.queue.admission import HealthCheckAdmission
from inframind.queue.job_queue import HealthCheckQueue
from inframind.services.health import BaseHealthCheck, PostgresHealthCheck, RedisHealthCheck
from inframind.storage.database import Database, get_database
from inframind.storage.redis_client import RedisConnection, get_redis
from inframind.storage.repositories.health_run_repo import HealthRunRepository
from inframind.storage.repositories.report_repo import PredictionReportRepository
from inframind.storage.repositories.service_repo import ServiceRepository


async def get_db() -> Database:
    return await get_database()


async def get_redis_connection() -> RedisConnection:
    return await get_redis()


async def get_service_repo(db: Annotated[Database, Depends(get_db)]) -> ServiceRepository:
    return ServiceRepository(db)


async def get_run_repo(db: Annotated[Database, Depends(get_db)]) -> HealthRunRepository:
    return HealthRunRepository(db)


async def get_report_repo(db: Annotated[Database, Depends(get_db)]) -> PredictionReportRepository:
    return PredictionReportRepository(db)


async def get_queue(
    redis: Annotated[RedisConnection, Depends(get_redis_connection)],
) -> HealthCheckQueue:
    return HealthCheckQueue(redis.client, get_settings())


async def get_admission(
    queue: Annotated[HealthCheckQueue, Depends(get_queue)],
    service_repo: Annotated[ServiceRepository, Depends(get_service_repo)],
    run_repo: Annotated[HealthRunRepository, Depends(get_run_repo)],
) -> HealthCheckAdmission:
    return HealthCheckAdmission(queue, service_repo, run_repo, get_settings())


async def get_dependency_checks() -> list[BaseHealthCheck]:
    return [PostgresHealthCheck(get_database), RedisHealthCheck(get_redis)]
