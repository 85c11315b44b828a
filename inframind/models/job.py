"""
Job Models

Work items carried by the health-check queue and the records the
queue keeps about them.
"""

from datetime import datetime, timezone
from enum import Enum
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from inframind.models.health_run import RunStatus
from inframind.models.report import RiskLevel


class JobState(str, Enum):
    """Where a job currently sits in the queue."""
    WAITING = "waiting"
    DELAYED = "delayed"
    ACTIVE = "active"
    COMPLETED = "completed"
    FAILED = "failed"
    DEAD = "dead"


class HealthCheckJob(BaseModel):
    """Run a health check for one service, updating one pre-created run."""

    id: UUID = Field(default_factory=uuid4)
    service_id: UUID
    health_run_id: UUID
    attempts_made: int = 0
    enqueued_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class JobHandle(BaseModel):
    """Returned to callers of the admission API."""

    job_id: UUID
    service_id: UUID
    health_run_id: UUID
    state: JobState = JobState.DELAYED


class HealthCheckJobResult(BaseModel):
    """Summary returned by a successful job."""

    health_run_id: UUID
    status: RunStatus
    report_id: UUID
    risk_level: RiskLevel


class FailedJobRecord(BaseModel):
    """A failed attempt, or a job that exhausted its retries."""

    job: HealthCheckJob
    error: str
    failed_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
