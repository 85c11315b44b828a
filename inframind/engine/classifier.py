"""
Status Classifier

Maps burst metrics and a service's latency SLO to a terminal status.
Rules are checked in order and the first match wins, so every
unhealthy condition preempts every degraded one.
"""

from inframind.models.health_run import HealthMetrics, RunStatus
from inframind.models.service import Service


def is_unhealthy(metrics: HealthMetrics) -> bool:
    return (
        metrics.error_rate > 0.5
        or metrics.timeout_count > 5
        or metrics.success_rate < 0.5
    )


def is_degraded(metrics: HealthMetrics, service: Service) -> bool:
    max_ms = service.expected_latency_max_ms
    return (
        metrics.error_rate > 0.1
        or metrics.p95_latency_ms > max_ms * 1.5
        or metrics.avg_latency_ms > max_ms
        or metrics.success_rate < 0.9
    )


def classify_status(metrics: HealthMetrics, service: Service) -> RunStatus:
    """Classify a burst as healthy, degraded or unhealthy."""
    if is_unhealthy(metrics):
        return RunStatus.UNHEALTHY
    if is_degraded(metrics, service):
        return RunStatus.DEGRADED
    return RunStatus.HEALTHY
