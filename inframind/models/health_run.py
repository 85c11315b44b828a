"""
Health Run Models

A HealthRun is one burst of probes against a service, together with
its aggregated metrics and terminal status.
"""

from datetime import datetime
from enum import Enum
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class RunStatus(str, Enum):
    """
    Lifecycle status of a health run.

    RUNNING is the only non-terminal state. A run leaves it exactly once.
    """
    RUNNING = "running"
    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"

    @property
    def is_terminal(self) -> bool:
        return self is not RunStatus.RUNNING


class ProbeOutcome(BaseModel):
    """Result of a single probe request."""

    url: str
    status_code: int | None = None
    latency_ms: float | None = None
    error: str | None = None
    timestamp: datetime


class HealthMetrics(BaseModel):
    """Statistical summary of one burst."""

    avg_latency_ms: float = 0.0
    p95_latency_ms: float = 0.0
    success_rate: float = Field(default=0.0, ge=0.0, le=1.0)
    error_rate: float = Field(default=0.0, ge=0.0, le=1.0)
    timeout_count: int = Field(default=0, ge=0)
    status_code_counts: dict[str, int] = Field(
        default_factory=dict,
        description="Stringified status code -> count, plus an 'error' bucket",
    )

    def count_for(self, code: str) -> int:
        return self.status_code_counts.get(code, 0)

    @property
    def server_error_count(self) -> int:
        """Sum of all 5xx buckets."""
        return sum(
            count for code, count in self.status_code_counts.items()
            if code.startswith("5")
        )


class HealthRun(BaseModel):
    """A health run as stored."""

    id: UUID = Field(default_factory=uuid4)
    service_id: UUID
    started_at: datetime
    finished_at: datetime | None = None
    status: RunStatus = RunStatus.RUNNING
    metrics: HealthMetrics | None = None
    raw_results: list[ProbeOutcome] = Field(default_factory=list)
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def duration_ms(self) -> float | None:
        """Wall time between start and finish, if the run has finished."""
        if self.finished_at is None:
            return None
        return (self.finished_at - self.started_at).total_seconds() * 1000
