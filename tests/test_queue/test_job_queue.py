"""
Tests for the Redis-backed health-check queue.
"""

from uuid import uuid4

import pytest

from inframind.models.health_run import RunStatus
from inframind.models.job import HealthCheckJob, HealthCheckJobResult
from inframind.models.report import RiskLevel


def new_job() -> HealthCheckJob:
    return HealthCheckJob(service_id=uuid4(), health_run_id=uuid4())


@pytest.mark.asyncio
async def test_enqueue_without_delay_is_immediately_available(queue):
    job = new_job()
    await queue.enqueue(job)

    assert (await queue.stats())["waiting"] == 1
    dequeued = await queue.dequeue()
    assert dequeued == job


@pytest.mark.asyncio
async def test_fifo_order(queue):
    first, second = new_job(), new_job()
    await queue.enqueue(first)
    await queue.enqueue(second)

    assert (await queue.dequeue()).id == first.id
    assert (await queue.dequeue()).id == second.id
    assert await queue.dequeue() is None


@pytest.mark.asyncio
async def test_delayed_job_waits_until_due(queue, mock_redis):
    job = new_job()
    await queue.enqueue(job, delay_ms=60_000)

    assert await queue.promote_due() == 0
    assert await queue.dequeue() is None
    assert (await queue.stats())["delayed"] == 1

    mock_redis.make_all_due(queue.delayed_key)

    assert await queue.promote_due() == 1
    assert (await queue.dequeue()).id == job.id
    assert (await queue.stats())["delayed"] == 0


@pytest.mark.asyncio
async def test_completed_history_is_capped(queue, test_settings):
    for _ in range(test_settings.queue_keep_completed + 3):
        job = new_job()
        await queue.record_completed(job, HealthCheckJobResult(
            health_run_id=job.health_run_id,
            status=RunStatus.HEALTHY,
            report_id=uuid4(),
            risk_level=RiskLevel.LOW,
        ))

    assert (await queue.stats())["completed"] == test_settings.queue_keep_completed


@pytest.mark.asyncio
async def test_failed_history_is_capped(queue, test_settings):
    job = new_job()
    for attempt in range(test_settings.queue_keep_failed + 2):
        await queue.record_failed(job, f"attempt {attempt} failed")

    assert (await queue.stats())["failed"] == test_settings.queue_keep_failed


@pytest.mark.asyncio
async def test_dead_set_and_manual_requeue(queue):
    job = new_job()
    job.attempts_made = 3
    await queue.move_to_dead(job, "Service not found")

    dead = await queue.list_dead()
    assert len(dead) == 1
    assert dead[0].job.id == job.id
    assert dead[0].error == "Service not found"

    requeued = await queue.requeue_dead(job.id)

    assert requeued is not None
    assert requeued.attempts_made == 0
    assert await queue.list_dead() == []
    assert (await queue.dequeue()).id == job.id


@pytest.mark.asyncio
async def test_requeue_unknown_job(queue):
    assert await queue.requeue_dead(uuid4()) is None


@pytest.mark.asyncio
async def test_keys_are_prefixed_with_queue_name(queue):
    assert queue.waiting_key == "test-health-check:waiting"
    assert queue.active_key == "test-health-check:active"
    assert queue.dead_key == "test-health-check:dead"


@pytest.mark.asyncio
async def test_dequeued_job_stays_active_until_acked(queue):
    job = new_job()
    await queue.enqueue(job)

    taken = await queue.dequeue()

    stats = await queue.stats()
    assert stats["waiting"] == 0
    assert stats["active"] == 1

    assert await queue.ack(taken) is True
    assert (await queue.stats())["active"] == 0
    assert await queue.ack(taken) is False


@pytest.mark.asyncio
async def test_recover_stalled_returns_jobs_to_front(queue):
    stalled, fresh = new_job(), new_job()
    await queue.enqueue(stalled)
    await queue.dequeue()
    await queue.enqueue(fresh)

    assert await queue.recover_stalled() == 1

    stats = await queue.stats()
    assert stats["active"] == 0
    assert stats["waiting"] == 2
    assert (await queue.dequeue()).id == stalled.id
    assert (await queue.dequeue()).id == fresh.id


@pytest.mark.asyncio
async def test_recover_stalled_with_nothing_active(queue):
    assert await queue.recover_stalled() == 0
