"""
InfraMind Web API

FastAPI app exposing health-check admission and read access to runs,
reports and queue state. Service CRUD lives elsewhere.
"""

import asyncio
from contextlib import asynccontextmanager
from typing import Annotated, Any
from uuid import UUID

import structlog
from fastapi import APIRouter, Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from inframind import __version__
from inframind.api.dependencies import (
    get_admission,
    get_dependency_checks,
    get_queue,
    get_report_repo,
    get_run_repo,
)
from inframind.config import get_settings
from inframind.errors import ConflictError, ReferenceNotFoundError
from inframind.models.health import DependencyHealth, DependencyStatus
from inframind.queue.admission import HealthCheckAdmission
from inframind.queue.job_queue import HealthCheckQueue
from inframind.services.health import BaseHealthCheck
from inframind.storage.database import close_database, get_database
from inframind.storage.redis_client import close_redis, get_redis
from inframind.storage.repositories.health_run_repo import HealthRunRepository
from inframind.storage.repositories.report_repo import PredictionReportRepository

logger = structlog.get_logger(__name__)
settings = get_settings()


# =============================================================================
# Lifecycle
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage API lifecycle."""
    logger.info("Starting InfraMind Web API...")
    await get_database()
    await get_redis()
    yield
    await close_redis()
    await close_database()
    logger.info("Web API shutdown complete")


# =============================================================================
# App Setup
# =============================================================================

app = FastAPI(
    title="InfraMind API",
    description="Health-check admission and reliability reports",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[o for o in settings.cors_origins if o],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

router = APIRouter(prefix="/api")


# =============================================================================
# Admission
# =============================================================================

@router.post("/services/{service_id}/run-health-check")
async def run_health_check(
    service_id: UUID,
    admission: Annotated[HealthCheckAdmission, Depends(get_admission)],
) -> dict[str, Any]:
    """Queue a health check. Returns immediately; the burst runs on a worker."""
    try:
        handle = await admission.request_health_check(service_id)
    except ReferenceNotFoundError:
        raise HTTPException(status_code=404, detail="Service not found")
    except ConflictError as e:
        raise HTTPException(
            status_code=409,
            detail={
                "message": "Health check already running for this service",
                "health_run_id": str(e.running_run_id),
            },
        )

    return {
        "message": "Health check queued successfully",
        "health_run_id": str(handle.health_run_id),
        "job_id": str(handle.job_id),
        "status": "queued",
    }


# =============================================================================
# Health Runs
# =============================================================================

@router.get("/health-runs/{health_run_id}")
async def get_health_run(
    health_run_id: UUID,
    run_repo: Annotated[HealthRunRepository, Depends(get_run_repo)],
    report_repo: Annotated[PredictionReportRepository, Depends(get_report_repo)],
) -> dict[str, Any]:
    run = await run_repo.get_by_id(health_run_id)
    if run is None:
        raise HTTPException(status_code=404, detail="Health run not found")

    report = await report_repo.get_by_health_run(health_run_id)
    return {
        "health_run": {
            **run.model_dump(mode="json", exclude={"raw_results"}),
            "duration_ms": run.duration_ms,
        },
        "prediction_report_id": str(report.id) if report else None,
    }


@router.get("/health-runs/{health_run_id}/raw-results")
async def get_raw_results(
    health_run_id: UUID,
    run_repo: Annotated[HealthRunRepository, Depends(get_run_repo)],
) -> dict[str, Any]:
    run = await run_repo.get_by_id(health_run_id)
    if run is None:
        raise HTTPException(status_code=404, detail="Health run not found")
    return {
        "service_id": str(run.service_id),
        "raw_results": [r.model_dump(mode="json") for r in run.raw_results],
    }


# =============================================================================
# Reports
# =============================================================================

@router.get("/reports/{report_id}")
async def get_report(
    report_id: UUID,
    report_repo: Annotated[PredictionReportRepository, Depends(get_report_repo)],
) -> dict[str, Any]:
    report = await report_repo.get_by_id(report_id)
    if report is None:
        raise HTTPException(status_code=404, detail="Prediction report not found")
    return {"report": report.model_dump(mode="json")}


# =============================================================================
# Queue
# =============================================================================

@router.get("/queue/stats")
async def queue_stats(
    queue: Annotated[HealthCheckQueue, Depends(get_queue)],
) -> dict[str, int]:
    return await queue.stats()


app.include_router(router)


# =============================================================================
# Self Health
# =============================================================================

@app.get("/health")
async def health(
    checks: Annotated[list[BaseHealthCheck], Depends(get_dependency_checks)],
) -> dict[str, Any]:
    """Reachability of Postgres and Redis."""
    results: list[DependencyHealth] = await asyncio.gather(*[c.check() for c in checks])
    healthy = all(r.status is DependencyStatus.UP for r in results)
    return {
        "status": "healthy" if healthy else "degraded",
        "version": __version__,
        "dependencies": [r.model_dump(mode="json") for r in results],
    }
