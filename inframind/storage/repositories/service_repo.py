"""
Service Repository

Data access layer for probed services.
"""

from typing import Any
from uuid import UUID, uuid4

import structlog

from inframind.errors import PersistenceError
from inframind.models.service import Service, ServiceCreate, ServiceEnvironment
from inframind.storage.database import WRITE_ERRORS, Database

logger = structlog.get_logger(__name__)


class ServiceRepository:
    """Repository for Service records."""

    def __init__(self, db: Database):
        self.db = db

    async def create(self, service: ServiceCreate) -> Service:
        """Register a new service."""
        query = """
            INSERT INTO services (
                id, name, base_url, health_path,
                expected_latency_min_ms, expected_latency_max_ms, env
            ) VALUES ($1, $2, $3, $4, $5, $6, $7)
            RETURNING *
        """
        try:
            row = await self.db.fetchrow(
                query,
                uuid4(),
                service.name,
                service.base_url,
                service.health_path,
                service.expected_latency_min_ms,
                service.expected_latency_max_ms,
                service.env.value,
            )
        except WRITE_ERRORS as e:
            raise PersistenceError(f"Failed to create service {service.name}: {e}") from e

        logger.info("Service created", service_id=str(row["id"]), name=service.name)
        return self._row_to_service(row)

    async def get_by_id(self, service_id: UUID) -> Service | None:
        """Get a service by ID."""
        row = await self.db.fetchrow("SELECT * FROM services WHERE id = $1", service_id)
        return self._row_to_service(row) if row else None

    async def list_all(self, limit: int = 100, offset: int = 0) -> list[Service]:
        """List services, newest first."""
        rows = await self.db.fetch(
            "SELECT * FROM services ORDER BY created_at DESC LIMIT $1 OFFSET $2",
            limit,
            offset,
        )
        return [self._row_to_service(row) for row in rows]

    async def delete(self, service_id: UUID) -> bool:
        """Delete a service. Runs and reports go with it via ON DELETE CASCADE."""
        try:
            result = await self.db.fetchval(
                "DELETE FROM services WHERE id = $1 RETURNING id", service_id
            )
        except WRITE_ERRORS as e:
            raise PersistenceError(f"Failed to delete service {service_id}: {e}") from e
        return result is not None

    def _row_to_service(self, row: Any) -> Service:
        return Service(
            id=row["id"],
            name=row["name"],
            base_url=row["base_url"],
            health_path=row["health_path"],
            expected_latency_min_ms=row["expected_latency_min_ms"],
            expected_latency_max_ms=row["expected_latency_max_ms"],
            env=ServiceEnvironment(row["env"]),
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )
