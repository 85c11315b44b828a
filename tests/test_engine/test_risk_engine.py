"""
Tests for the heuristic risk engine.

The engine is pure, so every test pins `now` and asserts on exact text.
"""

from datetime import timedelta

import pytest

from inframind.engine.risk_engine import (
    BASELINE_SUGGESTIONS,
    LATENCY_SUGGESTIONS,
    MONITORING_SUGGESTIONS,
    RATE_LIMIT_SUGGESTIONS,
    RELIABILITY_SUGGESTIONS,
    RESOURCE_SUGGESTIONS,
    HeuristicReportGenerator,
    ReportGenerator,
    determine_risk_level,
    generate_suggestions,
    generate_timeline,
    generate_warnings,
    risk_score,
)
from inframind.models.health_run import HealthMetrics
from inframind.models.report import ReportContent, RiskLevel

MISSING_RATE_LIMIT_WARNING = "No rate limiting detected - service may be vulnerable to traffic spikes"


@pytest.fixture
def slow_metrics() -> HealthMetrics:
    """A burst over its SLO: avg 600ms, p95 900ms against a 500ms maximum."""
    return HealthMetrics(
        avg_latency_ms=600.0,
        p95_latency_ms=900.0,
        success_rate=0.85,
        error_rate=0.05,
        timeout_count=0,
        status_code_counts={"200": 17, "503": 1},
    )


@pytest.fixture
def generator() -> HeuristicReportGenerator:
    return HeuristicReportGenerator()


# =============================================================================
# Scoring
# =============================================================================

class TestRiskScore:

    def test_slow_burst_is_medium(self, sample_service, slow_metrics):
        # latency ratio 1.8 (+2), success 0.85 (+2), no 429 with low errors (+1)
        assert risk_score(slow_metrics, sample_service) == 5
        assert determine_risk_level(slow_metrics, sample_service) is RiskLevel.MEDIUM

    def test_clean_burst_is_low(self, sample_service, healthy_metrics):
        assert risk_score(healthy_metrics, sample_service) == 0
        assert determine_risk_level(healthy_metrics, sample_service) is RiskLevel.LOW

    def test_bands_accumulate_to_high(self, sample_service):
        metrics = HealthMetrics(
            avg_latency_ms=2000.0,
            p95_latency_ms=1200.0,
            success_rate=0.4,
            error_rate=0.6,
            timeout_count=8,
        )
        # 3 + 3 + 2 + 3, and no rate-limit point because errors are high
        assert risk_score(metrics, sample_service) == 11
        assert determine_risk_level(metrics, sample_service) is RiskLevel.HIGH

    @pytest.mark.parametrize("error_rate,expected", [
        (0.05, 0),
        (0.06, 1),
        (0.11, 2),
        (0.31, 3),
    ])
    def test_error_rate_bands(self, sample_service, error_rate, expected):
        metrics = HealthMetrics(
            p95_latency_ms=100.0,
            success_rate=1.0,
            error_rate=error_rate,
            status_code_counts={"429": 1},
        )
        assert risk_score(metrics, sample_service) == expected

    @pytest.mark.parametrize("p95,expected", [
        (600.0, 0),
        (601.0, 1),
        (751.0, 2),
        (1001.0, 3),
    ])
    def test_latency_ratio_bands(self, sample_service, p95, expected):
        metrics = HealthMetrics(
            p95_latency_ms=p95,
            success_rate=1.0,
            status_code_counts={"429": 1},
        )
        assert risk_score(metrics, sample_service) == expected

    def test_score_thresholds(self, sample_service):
        # success 0.8 (+2) plus missing rate limiting (+1) lands exactly on medium
        metrics = HealthMetrics(p95_latency_ms=100.0, success_rate=0.8, error_rate=0.0)
        assert risk_score(metrics, sample_service) == 3
        assert determine_risk_level(metrics, sample_service) is RiskLevel.MEDIUM


# =============================================================================
# Rate-limit heuristic
# =============================================================================

class TestMissingRateLimiting:

    def test_no_429_with_low_errors_flags_missing_rate_limiting(
        self, generator, sample_service, fixed_now
    ):
        metrics = HealthMetrics(
            avg_latency_ms=100.0,
            p95_latency_ms=150.0,
            success_rate=0.98,
            error_rate=0.02,
            status_code_counts={"200": 49, "500": 1},
        )
        report = generator.generate(sample_service, metrics, now=fixed_now)

        assert MISSING_RATE_LIMIT_WARNING in report.warnings
        assert report.generated_configs.nginx_rate_limit_config is not None
        assert report.suggestions[:2] == RATE_LIMIT_SUGGESTIONS

    def test_429_seen_suppresses_warning_and_nginx(
        self, generator, sample_service, healthy_metrics, fixed_now
    ):
        report = generator.generate(sample_service, healthy_metrics, now=fixed_now)

        assert MISSING_RATE_LIMIT_WARNING not in report.warnings
        assert report.generated_configs.nginx_rate_limit_config is None
        assert report.generated_configs.docker_resource_config is not None
        assert report.generated_configs.k8s_resources_config is not None

    def test_high_errors_do_not_flag_missing_rate_limiting(self, sample_service):
        metrics = HealthMetrics(success_rate=0.8, error_rate=0.2, p95_latency_ms=100.0)
        assert MISSING_RATE_LIMIT_WARNING not in generate_warnings(metrics, sample_service)


# =============================================================================
# Report text
# =============================================================================

class TestWarningsAndSuggestions:

    def test_slow_burst_warnings(self, sample_service, slow_metrics):
        assert generate_warnings(slow_metrics, sample_service) == [
            "P95 latency (900ms) is 50% above expected maximum (500ms)",
            MISSING_RATE_LIMIT_WARNING,
            "1 server errors (5xx) detected - indicates internal service issues",
            "Average latency (600.0ms) exceeds expected maximum (500ms)",
        ]

    def test_failing_burst_warnings(self, sample_service):
        metrics = HealthMetrics(
            avg_latency_ms=100.0,
            p95_latency_ms=200.0,
            success_rate=0.7,
            error_rate=0.3,
            timeout_count=4,
            status_code_counts={"200": 7, "error": 3},
        )
        assert generate_warnings(metrics, sample_service) == [
            "High error rate detected: 30.0% of requests failed",
            "4 requests timed out during load testing",
            "Low success rate: only 70.0% of requests succeeded",
        ]

    def test_suggestion_groups_in_order(self, sample_service, slow_metrics):
        warnings = generate_warnings(slow_metrics, sample_service)
        suggestions = generate_suggestions(slow_metrics, sample_service, warnings)

        assert suggestions == (
            RATE_LIMIT_SUGGESTIONS
            + LATENCY_SUGGESTIONS
            + MONITORING_SUGGESTIONS
            + BASELINE_SUGGESTIONS
        )

    def test_every_group(self, sample_service):
        metrics = HealthMetrics(
            p95_latency_ms=900.0,
            success_rate=0.5,
            error_rate=0.5,
            timeout_count=3,
        )
        suggestions = generate_suggestions(metrics, sample_service, ["a", "b", "c"])

        assert suggestions == (
            LATENCY_SUGGESTIONS
            + RELIABILITY_SUGGESTIONS
            + RESOURCE_SUGGESTIONS
            + MONITORING_SUGGESTIONS
            + BASELINE_SUGGESTIONS
        )

    def test_baseline_always_last(self, sample_service, healthy_metrics):
        suggestions = generate_suggestions(healthy_metrics, sample_service, [])
        assert suggestions == BASELINE_SUGGESTIONS


class TestTimeline:

    def test_healthy_timeline(self, sample_service, healthy_metrics, fixed_now):
        assert generate_timeline(healthy_metrics, sample_service, fixed_now) == [
            "2024-03-01T12:00:00.000Z: Health check initiated for payments-api (prod)",
            "2024-03-01T12:00:00.000Z: Service responding normally with 95.0% success rate",
            "2024-03-01T12:00:00.000Z: Analysis complete - risk assessment and recommendations generated",
        ]

    def test_degraded_timeline(self, sample_service, fixed_now):
        metrics = HealthMetrics(
            avg_latency_ms=650.5,
            p95_latency_ms=900.0,
            success_rate=0.8,
            error_rate=0.2,
        )
        timeline = generate_timeline(metrics, sample_service, fixed_now)

        assert timeline[1].endswith("Service showing degraded performance with 80.0% success rate")
        assert timeline[2].endswith("Latency spike detected - average 650.5ms vs expected 500ms")
        assert timeline[3].endswith("Error rate elevated at 20.0% - investigating root cause")
        assert len(timeline) == 5


class TestHeuristicReportGenerator:

    def test_satisfies_protocol(self, generator):
        report_generator: ReportGenerator = generator
        assert callable(report_generator.generate)

    def test_low_risk_report(self, generator, sample_service, healthy_metrics, fixed_now):
        report = generator.generate(sample_service, healthy_metrics, now=fixed_now)

        assert isinstance(report, ReportContent)
        assert report.risk_level is RiskLevel.LOW
        assert report.title == "🟢 payments-api (prod) - Degraded - Risk Level: LOW"
        assert report.summary == (
            "InfraMind completed a comprehensive reliability assessment of payments-api "
            "in the prod environment. "
            "✅ LOW RISK - service is performing within acceptable parameters. "
            "During load testing, the service achieved a 95.0% success rate "
            "with an average response time of 120.0ms. "
            "Preventive infrastructure configurations and monitoring recommendations have been "
            "generated to improve reliability and prevent future outages."
        )
        assert report.warnings == []
        assert report.suggestions == BASELINE_SUGGESTIONS

    def test_medium_risk_report(self, generator, sample_service, slow_metrics, fixed_now):
        report = generator.generate(sample_service, slow_metrics, now=fixed_now)

        assert report.risk_level is RiskLevel.MEDIUM
        assert report.title == "🟡 payments-api (prod) - Degraded - Risk Level: MEDIUM"
        assert "⚠️ MEDIUM RISK detected with 4 issues requiring attention." in report.summary
        assert "P95 latency of 900ms exceeds expected maximum of 500ms." in report.summary
        assert "rate=20r/s" in report.generated_configs.nginx_rate_limit_config

    def test_high_risk_report(self, generator, sample_service, fixed_now):
        metrics = HealthMetrics(
            avg_latency_ms=2000.0,
            p95_latency_ms=1200.0,
            success_rate=0.4,
            error_rate=0.6,
            timeout_count=8,
            status_code_counts={"200": 8, "error": 8, "500": 4},
        )
        report = generator.generate(sample_service, metrics, now=fixed_now)

        assert report.risk_level is RiskLevel.HIGH
        assert report.title.startswith("🔴 payments-api (prod) - Critical")
        assert f"🚨 HIGH RISK detected with {len(report.warnings)} critical issues identified." in report.summary
        assert "Error rate of 60.0% indicates potential stability issues." in report.summary
        assert "replicas: 3" in report.generated_configs.k8s_resources_config

    def test_identical_inputs_identical_report(self, generator, sample_service, slow_metrics, fixed_now):
        first = generator.generate(sample_service, slow_metrics, now=fixed_now)
        second = generator.generate(sample_service, slow_metrics, now=fixed_now)
        assert first == second

    def test_only_timeline_depends_on_clock(self, generator, sample_service, slow_metrics, fixed_now):
        first = generator.generate(sample_service, slow_metrics, now=fixed_now)
        later = generator.generate(sample_service, slow_metrics, now=fixed_now + timedelta(hours=1))

        assert first.timeline != later.timeline
        assert first.model_dump(exclude={"timeline"}) == later.model_dump(exclude={"timeline"})
