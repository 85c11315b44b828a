"""
Health Run Repository

Data access layer for health runs. A run is inserted as RUNNING at
admission and written once more when its job reaches a terminal state.
"""

from datetime import datetime, timezone
from typing import Any
from uuid import UUID, uuid4

import structlog

from inframind.errors import PersistenceError
from inframind.models.health_run import HealthMetrics, HealthRun, ProbeOutcome, RunStatus
from inframind.storage.database import WRITE_ERRORS, Database, json_field

logger = structlog.get_logger(__name__)


class HealthRunRepository:
    """
    Repository for HealthRun records.

    Provides:
    - Creation of RUNNING runs at admission time
    - Lookup of the active run for a service
    - Terminal-state writes from the worker
    """

    def __init__(self, db: Database):
        self.db = db

    async def create_running(self, service_id: UUID) -> HealthRun:
        """Insert a new run in RUNNING state."""
        query = """
            INSERT INTO health_runs (id, service_id, started_at, status)
            VALUES ($1, $2, $3, $4)
            RETURNING *
        """
        try:
            row = await self.db.fetchrow(
                query,
                uuid4(),
                service_id,
                datetime.now(timezone.utc),
                RunStatus.RUNNING.value,
            )
        except WRITE_ERRORS as e:
            raise PersistenceError(f"Failed to create health run for service {service_id}: {e}") from e

        logger.info("Health run created", health_run_id=str(row["id"]), service_id=str(service_id))
        return self._row_to_run(row)

    async def get_by_id(self, health_run_id: UUID) -> HealthRun | None:
        """Get a run by ID."""
        row = await self.db.fetchrow("SELECT * FROM health_runs WHERE id = $1", health_run_id)
        return self._row_to_run(row) if row else None

    async def get_running_for_service(
        self,
        service_id: UUID,
        exclude_id: UUID | None = None,
    ) -> HealthRun | None:
        """Get the RUNNING run for a service, if there is one."""
        query = """
            SELECT * FROM health_runs
            WHERE service_id = $1 AND status = $2 AND ($3::uuid IS NULL OR id <> $3)
            ORDER BY started_at DESC
            LIMIT 1
        """
        row = await self.db.fetchrow(query, service_id, RunStatus.RUNNING.value, exclude_id)
        return self._row_to_run(row) if row else None

    async def complete(
        self,
        health_run_id: UUID,
        status: RunStatus,
        metrics: HealthMetrics,
        raw_results: list[ProbeOutcome],
        finished_at: datetime | None = None,
    ) -> HealthRun:
        """Write a run's terminal state, metrics and raw probe outcomes."""
        if not status.is_terminal:
            raise ValueError("complete() requires a terminal status")

        query = """
            UPDATE health_runs
            SET finished_at = $2, status = $3, metrics = $4, raw_results = $5, updated_at = NOW()
            WHERE id = $1
            RETURNING *
        """
        try:
            row = await self.db.fetchrow(
                query,
                health_run_id,
                finished_at or datetime.now(timezone.utc),
                status.value,
                metrics.model_dump(mode="json"),
                [outcome.model_dump(mode="json") for outcome in raw_results],
            )
        except WRITE_ERRORS as e:
            raise PersistenceError(f"Failed to complete health run {health_run_id}: {e}") from e

        if row is None:
            raise PersistenceError(f"Health run {health_run_id} vanished before completion")

        logger.info("Health run completed", health_run_id=str(health_run_id), status=status.value)
        return self._row_to_run(row)

    async def mark_unhealthy(
        self,
        health_run_id: UUID,
        finished_at: datetime | None = None,
    ) -> bool:
        """Force a run into terminal UNHEALTHY after a failed attempt."""
        query = """
            UPDATE health_runs
            SET finished_at = $2, status = $3, updated_at = NOW()
            WHERE id = $1
            RETURNING id
        """
        try:
            result = await self.db.fetchval(
                query,
                health_run_id,
                finished_at or datetime.now(timezone.utc),
                RunStatus.UNHEALTHY.value,
            )
        except WRITE_ERRORS as e:
            raise PersistenceError(f"Failed to mark health run {health_run_id} unhealthy: {e}") from e
        return result is not None

    async def list_by_service(
        self,
        service_id: UUID,
        limit: int = 10,
        offset: int = 0,
    ) -> list[HealthRun]:
        """List runs for a service, newest first, without raw outcomes."""
        query = """
            SELECT id, service_id, started_at, finished_at, status, metrics,
                   NULL AS raw_results, created_at, updated_at
            FROM health_runs
            WHERE service_id = $1
            ORDER BY created_at DESC
            LIMIT $2 OFFSET $3
        """
        rows = await self.db.fetch(query, service_id, limit, offset)
        return [self._row_to_run(row) for row in rows]

    def _row_to_run(self, row: Any) -> HealthRun:
        """Convert database row to HealthRun model."""
        metrics = json_field(row["metrics"], None)
        raw_results = json_field(row["raw_results"], [])

        return HealthRun(
            id=row["id"],
            service_id=row["service_id"],
            started_at=row["started_at"],
            finished_at=row["finished_at"],
            status=RunStatus(row["status"]),
            metrics=HealthMetrics.model_validate(metrics) if metrics else None,
            raw_results=[ProbeOutcome.model_validate(r) for r in raw_results],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )
