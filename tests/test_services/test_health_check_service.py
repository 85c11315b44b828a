"""
Tests for HealthCheckService: probe, aggregate, classify.
"""

import pytest

from inframind.models.health_run import RunStatus
from inframind.services.health_check import HealthCheckService
from inframind.services.probe_executor import ProbeExecutor
from tests.mocks.http import failing_transport, ok_transport, sequence_transport


@pytest.mark.asyncio
async def test_all_ok_is_healthy(test_settings, sample_service):
    service = HealthCheckService(ProbeExecutor(test_settings, transport=ok_transport()))

    result = await service.perform(sample_service)

    assert result.summary_status is RunStatus.HEALTHY
    assert len(result.raw_results) == test_settings.probe_burst_size
    assert result.metrics.success_rate == 1.0
    assert result.metrics.status_code_counts == {"200": test_settings.probe_burst_size}


@pytest.mark.asyncio
async def test_unreachable_service_is_unhealthy(test_settings, sample_service):
    service = HealthCheckService(ProbeExecutor(test_settings, transport=failing_transport()))

    result = await service.perform(sample_service)

    assert result.summary_status is RunStatus.UNHEALTHY
    assert result.metrics.error_rate == 1.0
    assert result.metrics.status_code_counts == {"error": test_settings.probe_burst_size}


@pytest.mark.asyncio
async def test_some_server_errors_degrade(test_settings, sample_service):
    # 2 of 10 fail: error rate 0.2 and success rate 0.8
    codes = [200] * 8 + [503] * 2
    service = HealthCheckService(ProbeExecutor(test_settings, transport=sequence_transport(codes)))

    result = await service.perform(sample_service)

    assert result.summary_status is RunStatus.DEGRADED
    assert result.metrics.count_for("503") == 2


@pytest.mark.asyncio
async def test_probes_hit_health_url(test_settings, sample_service):
    service = HealthCheckService(ProbeExecutor(test_settings, transport=ok_transport()))

    result = await service.perform(sample_service)

    assert {o.url for o in result.raw_results} == {"https://payments.example.com/health"}
