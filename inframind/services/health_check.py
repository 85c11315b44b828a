"""
Health Check Service

Runs one burst against a service and reduces it to metrics and a
summary status.
"""

import structlog
from pydantic import BaseModel

from inframind.engine.classifier import classify_status
from inframind.engine.metrics import aggregate_outcomes
from inframind.models.health_run import HealthMetrics, ProbeOutcome, RunStatus
from inframind.models.service import Service
from inframind.services.probe_executor import ProbeExecutor

logger = structlog.get_logger(__name__)


class HealthCheckResult(BaseModel):
    """Outcome of one health check before it is persisted."""
    summary_status: RunStatus
    metrics: HealthMetrics
    raw_results: list[ProbeOutcome]


class HealthCheckService:
    """Probe -> aggregate -> classify for a single service."""

    def __init__(self, executor: ProbeExecutor | None = None):
        self.executor = executor or ProbeExecutor()

    async def perform(self, service: Service) -> HealthCheckResult:
        logger.info("Testing service", service=service.name, url=service.health_url)

        outcomes = await self.executor.run_burst(service.health_url)
        metrics = aggregate_outcomes(outcomes)
        status = classify_status(metrics, service)

        logger.info(
            "Health check results",
            service=service.name,
            summary_status=status.value,
            avg_latency_ms=round(metrics.avg_latency_ms, 2),
            success_rate=round(metrics.success_rate, 3),
            error_rate=round(metrics.error_rate, 3),
        )

        return HealthCheckResult(summary_status=status, metrics=metrics, raw_results=outcomes)
