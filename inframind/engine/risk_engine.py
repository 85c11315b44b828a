"""
Risk Engine

Heuristic reliability report generator. Given a service and the
metrics of one burst it scores risk, lists warnings and suggestions,
writes a short timeline and renders infrastructure configs.

The generator does no I/O. With the same inputs and the same `now`
it produces byte-identical output.
"""

from datetime import datetime, timezone
from typing import Protocol

import structlog

from inframind.engine.infra_configs import generate_infra_configs
from inframind.models.health_run import HealthMetrics
from inframind.models.report import ReportContent, RiskLevel
from inframind.models.service import Service

logger = structlog.get_logger(__name__)


RISK_MARKERS = {
    RiskLevel.HIGH: "🔴",
    RiskLevel.MEDIUM: "🟡",
    RiskLevel.LOW: "🟢",
}

RATE_LIMIT_SUGGESTIONS = [
    "Implement NGINX rate limiting to protect against traffic spikes and DDoS attacks",
    "Configure application-level rate limiting with appropriate burst allowances",
]
LATENCY_SUGGESTIONS = [
    "Consider scaling up CPU resources or optimizing database queries",
    "Implement caching layer (Redis/Memcached) for frequently accessed data",
    "Review and optimize slow API endpoints identified in monitoring",
]
RELIABILITY_SUGGESTIONS = [
    "Implement circuit breaker pattern for external dependencies",
    "Add comprehensive error handling and graceful degradation",
    "Set up automated alerting for error rate spikes",
]
RESOURCE_SUGGESTIONS = [
    "Increase container memory limits and CPU requests",
    "Implement connection pooling and optimize database connections",
    "Consider horizontal pod autoscaling based on CPU/memory usage",
]
MONITORING_SUGGESTIONS = [
    "Set up comprehensive monitoring with Prometheus and Grafana",
    "Implement structured logging with correlation IDs",
    "Create runbooks for common failure scenarios",
]
BASELINE_SUGGESTIONS = [
    "Implement health check endpoints with detailed status information",
    "Set up automated deployment rollback on health check failures",
]


class ReportGenerator(Protocol):
    """Anything that turns a service and its burst metrics into report content."""

    def generate(
        self,
        service: Service,
        metrics: HealthMetrics,
        now: datetime | None = None,
    ) -> ReportContent:
        ...


def _pct(rate: float) -> str:
    return f"{rate * 100:.1f}"


def _num(value: float) -> str:
    """Render whole numbers without a trailing .0."""
    value = float(value)
    return str(int(value)) if value.is_integer() else repr(value)


def _iso(now: datetime) -> str:
    return now.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def missing_rate_limiting(metrics: HealthMetrics) -> bool:
    """No 429 seen while errors stayed low suggests nothing is throttling traffic."""
    return metrics.count_for("429") == 0 and metrics.error_rate < 0.1


def risk_score(metrics: HealthMetrics, service: Service) -> int:
    """Sum of independent bands. Unbounded; each band contributes at most once."""
    score = 0

    if metrics.error_rate > 0.3:
        score += 3
    elif metrics.error_rate > 0.1:
        score += 2
    elif metrics.error_rate > 0.05:
        score += 1

    latency_ratio = metrics.p95_latency_ms / service.expected_latency_max_ms
    if latency_ratio > 2:
        score += 3
    elif latency_ratio > 1.5:
        score += 2
    elif latency_ratio > 1.2:
        score += 1

    if metrics.timeout_count > 5:
        score += 2
    elif metrics.timeout_count > 2:
        score += 1

    if metrics.success_rate < 0.7:
        score += 3
    elif metrics.success_rate < 0.9:
        score += 2
    elif metrics.success_rate < 0.95:
        score += 1

    if missing_rate_limiting(metrics):
        score += 1

    return score


def determine_risk_level(metrics: HealthMetrics, service: Service) -> RiskLevel:
    score = risk_score(metrics, service)
    if score >= 6:
        return RiskLevel.HIGH
    if score >= 3:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW


def generate_warnings(metrics: HealthMetrics, service: Service) -> list[str]:
    max_ms = service.expected_latency_max_ms
    warnings: list[str] = []

    if metrics.error_rate > 0.2:
        warnings.append(
            f"High error rate detected: {_pct(metrics.error_rate)}% of requests failed"
        )
    if metrics.p95_latency_ms > max_ms * 1.5:
        warnings.append(
            f"P95 latency ({_num(metrics.p95_latency_ms)}ms) is 50% above expected maximum ({max_ms}ms)"
        )
    if metrics.timeout_count > 3:
        warnings.append(f"{metrics.timeout_count} requests timed out during load testing")
    if metrics.success_rate < 0.8:
        warnings.append(
            f"Low success rate: only {_pct(metrics.success_rate)}% of requests succeeded"
        )
    if missing_rate_limiting(metrics):
        warnings.append("No rate limiting detected - service may be vulnerable to traffic spikes")

    server_errors = metrics.server_error_count
    if server_errors > 0:
        warnings.append(
            f"{server_errors} server errors (5xx) detected - indicates internal service issues"
        )
    if metrics.avg_latency_ms > max_ms:
        warnings.append(
            f"Average latency ({metrics.avg_latency_ms:.1f}ms) exceeds expected maximum ({max_ms}ms)"
        )

    return warnings


def generate_suggestions(
    metrics: HealthMetrics,
    service: Service,
    warnings: list[str],
) -> list[str]:
    """Conditional groups in fixed order, then the baseline pair. No de-duplication."""
    suggestions: list[str] = []

    if missing_rate_limiting(metrics):
        suggestions.extend(RATE_LIMIT_SUGGESTIONS)
    if metrics.p95_latency_ms > service.expected_latency_max_ms:
        suggestions.extend(LATENCY_SUGGESTIONS)
    if metrics.error_rate > 0.1:
        suggestions.extend(RELIABILITY_SUGGESTIONS)
    if metrics.timeout_count > 2:
        suggestions.extend(RESOURCE_SUGGESTIONS)
    if len(warnings) > 2:
        suggestions.extend(MONITORING_SUGGESTIONS)

    suggestions.extend(BASELINE_SUGGESTIONS)
    return suggestions


def generate_timeline(metrics: HealthMetrics, service: Service, now: datetime) -> list[str]:
    stamp = _iso(now)
    max_ms = service.expected_latency_max_ms
    timeline = [f"{stamp}: Health check initiated for {service.name} ({service.env.value})"]

    if metrics.success_rate > 0.9:
        timeline.append(
            f"{stamp}: Service responding normally with {_pct(metrics.success_rate)}% success rate"
        )
    else:
        timeline.append(
            f"{stamp}: Service showing degraded performance with {_pct(metrics.success_rate)}% success rate"
        )

    if metrics.avg_latency_ms > max_ms:
        timeline.append(
            f"{stamp}: Latency spike detected - average {metrics.avg_latency_ms:.1f}ms vs expected {max_ms}ms"
        )
    if metrics.error_rate > 0.1:
        timeline.append(
            f"{stamp}: Error rate elevated at {_pct(metrics.error_rate)}% - investigating root cause"
        )

    timeline.append(f"{stamp}: Analysis complete - risk assessment and recommendations generated")
    return timeline


def status_label(metrics: HealthMetrics) -> str:
    if metrics.success_rate > 0.95:
        return "Healthy"
    if metrics.success_rate > 0.8:
        return "Degraded"
    return "Critical"


def generate_title(service: Service, risk_level: RiskLevel, metrics: HealthMetrics) -> str:
    return (
        f"{RISK_MARKERS[risk_level]} {service.name} ({service.env.value}) - "
        f"{status_label(metrics)} - Risk Level: {risk_level.value.upper()}"
    )


def generate_summary(
    service: Service,
    metrics: HealthMetrics,
    risk_level: RiskLevel,
    warning_count: int,
) -> str:
    parts = [
        f"InfraMind completed a comprehensive reliability assessment of {service.name} "
        f"in the {service.env.value} environment."
    ]

    if risk_level is RiskLevel.HIGH:
        parts.append(f"🚨 HIGH RISK detected with {warning_count} critical issues identified.")
    elif risk_level is RiskLevel.MEDIUM:
        parts.append(f"⚠️ MEDIUM RISK detected with {warning_count} issues requiring attention.")
    else:
        parts.append("✅ LOW RISK - service is performing within acceptable parameters.")

    parts.append(
        f"During load testing, the service achieved a {_pct(metrics.success_rate)}% success rate "
        f"with an average response time of {metrics.avg_latency_ms:.1f}ms."
    )
    if metrics.error_rate > 0.1:
        parts.append(
            f"Error rate of {_pct(metrics.error_rate)}% indicates potential stability issues."
        )
    if metrics.p95_latency_ms > service.expected_latency_max_ms:
        parts.append(
            f"P95 latency of {_num(metrics.p95_latency_ms)}ms exceeds expected maximum "
            f"of {service.expected_latency_max_ms}ms."
        )
    parts.append(
        "Preventive infrastructure configurations and monitoring recommendations have been "
        "generated to improve reliability and prevent future outages."
    )
    return " ".join(parts)


class HeuristicReportGenerator:
    """
    Deterministic report generator.

    Stays the reference implementation if an inference-backed generator
    is ever plugged in behind ReportGenerator.
    """

    def generate(
        self,
        service: Service,
        metrics: HealthMetrics,
        now: datetime | None = None,
    ) -> ReportContent:
        now = now or datetime.now(timezone.utc)

        risk_level = determine_risk_level(metrics, service)
        warnings = generate_warnings(metrics, service)
        suggestions = generate_suggestions(metrics, service, warnings)

        logger.debug(
            "Generated heuristic report",
            service=service.name,
            risk_level=risk_level.value,
            warnings=len(warnings),
        )

        return ReportContent(
            title=generate_title(service, risk_level, metrics),
            summary=generate_summary(service, metrics, risk_level, len(warnings)),
            risk_level=risk_level,
            timeline=generate_timeline(metrics, service, now),
            warnings=warnings,
            suggestions=suggestions,
            generated_configs=generate_infra_configs(metrics, service, risk_level),
        )
