"""
Error Types

Failures raised by the orchestration and storage layers. Probe-level
network failures and timeouts never surface here; they are recorded as
outcomes by the probe executor.
"""

from uuid import UUID


class InfraMindError(Exception):
    """Base class for all inframind errors."""


class ReferenceNotFoundError(InfraMindError):
    """A service or health run referenced by a job does not exist."""

    def __init__(self, kind: str, entity_id: UUID | str):
        self.kind = kind
        self.entity_id = entity_id
        super().__init__(f"{kind} {entity_id} not found")


class ConflictError(InfraMindError):
    """A health check is already running for the service."""

    def __init__(self, service_id: UUID, running_run_id: UUID):
        self.service_id = service_id
        self.running_run_id = running_run_id
        super().__init__(
            f"Health check already running for service {service_id} (run {running_run_id})"
        )


class PersistenceError(InfraMindError):
    """A write to the store failed or touched no row."""
