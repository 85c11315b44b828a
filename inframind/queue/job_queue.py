"""
Health Check Queue

Redis-backed work queue shared by the admission side and the worker
pool. Delivery is at-least-once.

Keys (prefixed with the queue name):
- waiting:   list of jobs ready to run (LPUSH in, BLMOVE out)
- active:    jobs a worker has taken but not yet settled; left over
             entries are moved back to waiting when a worker starts
- delayed:   sorted set of jobs scored by ready-at epoch milliseconds
- completed: capped list of job results
- failed:    capped list of failed attempts
- dead:      jobs that exhausted their retries; kept until handled manually
"""

import time
from uuid import UUID

import redis.asyncio as redis
import structlog

from inframind.config import Settings, get_settings
from inframind.models.job import FailedJobRecord, HealthCheckJob, HealthCheckJobResult, JobState

logger = structlog.get_logger(__name__)


class HealthCheckQueue:
    """Message passing between admission and the worker pool."""

    def __init__(self, client: redis.Redis, settings: Settings | None = None):
        self.client = client
        self.settings = settings or get_settings()
        prefix = self.settings.queue_name
        self.waiting_key = f"{prefix}:waiting"
        self.active_key = f"{prefix}:active"
        self.delayed_key = f"{prefix}:delayed"
        self.completed_key = f"{prefix}:completed"
        self.failed_key = f"{prefix}:failed"
        self.dead_key = f"{prefix}:dead"

    @staticmethod
    def _now_ms() -> int:
        return int(time.time() * 1000)

    # =========================================================================
    # Producer side
    # =========================================================================

    async def enqueue(self, job: HealthCheckJob, delay_ms: int = 0) -> HealthCheckJob:
        """
        Add a job. With a delay it is parked in the delayed set until due.
        """
        payload = job.model_dump_json()
        if delay_ms > 0:
            await self.client.zadd(self.delayed_key, {payload: self._now_ms() + delay_ms})
        else:
            await self.client.lpush(self.waiting_key, payload)

        logger.info(
            "Health check job enqueued",
            job_id=str(job.id),
            service_id=str(job.service_id),
            health_run_id=str(job.health_run_id),
            delay_ms=delay_ms,
        )
        return job

    # =========================================================================
    # Consumer side
    # =========================================================================

    async def promote_due(self) -> int:
        """
        Move delayed jobs whose time has come onto the waiting list.

        Safe with several workers: only the worker whose ZREM succeeds
        pushes the job.
        """
        due = await self.client.zrangebyscore(self.delayed_key, "-inf", self._now_ms())
        promoted = 0
        for payload in due:
            if await self.client.zrem(self.delayed_key, payload):
                await self.client.lpush(self.waiting_key, payload)
                promoted += 1
        return promoted

    async def dequeue(self, timeout_s: float | None = None) -> HealthCheckJob | None:
        """
        Block up to timeout_s for the next waiting job.

        The job stays in the active list until ack() is called for it.
        """
        timeout_s = self.settings.worker_poll_interval_s if timeout_s is None else timeout_s
        payload = await self.client.blmove(
            self.waiting_key, self.active_key, timeout_s, src="RIGHT", dest="LEFT"
        )
        if payload is None:
            return None
        return HealthCheckJob.model_validate_json(payload)

    async def ack(self, job: HealthCheckJob) -> bool:
        """Drop a settled job from the active list."""
        for payload in await self.client.lrange(self.active_key, 0, -1):
            if HealthCheckJob.model_validate_json(payload).id == job.id:
                return bool(await self.client.lrem(self.active_key, 1, payload))
        return False

    async def recover_stalled(self) -> int:
        """
        Move jobs left in the active list by a dead worker back to waiting.

        They go to the consuming end, so they run before newer jobs.
        Only call this while no other worker process is consuming the queue.
        """
        recovered = 0
        while await self.client.lmove(
            self.active_key, self.waiting_key, src="RIGHT", dest="RIGHT"
        ) is not None:
            recovered += 1
        if recovered:
            logger.warning("Recovered stalled health check jobs", count=recovered)
        return recovered

    # =========================================================================
    # Bookkeeping
    # =========================================================================

    async def record_completed(self, job: HealthCheckJob, result: HealthCheckJobResult) -> None:
        await self.client.lpush(self.completed_key, result.model_dump_json())
        await self.client.ltrim(self.completed_key, 0, self.settings.queue_keep_completed - 1)

    async def record_failed(self, job: HealthCheckJob, error: str) -> None:
        """Keep a bounded history of failed attempts."""
        record = FailedJobRecord(job=job, error=error)
        await self.client.lpush(self.failed_key, record.model_dump_json())
        await self.client.ltrim(self.failed_key, 0, self.settings.queue_keep_failed - 1)

    async def move_to_dead(self, job: HealthCheckJob, error: str) -> None:
        record = FailedJobRecord(job=job, error=error)
        await self.client.lpush(self.dead_key, record.model_dump_json())
        logger.error(
            "Health check job moved to dead set",
            job_id=str(job.id),
            service_id=str(job.service_id),
            attempts=job.attempts_made,
            error=error,
        )

    async def list_dead(self, limit: int = 50) -> list[FailedJobRecord]:
        payloads = await self.client.lrange(self.dead_key, 0, limit - 1)
        return [FailedJobRecord.model_validate_json(p) for p in payloads]

    async def requeue_dead(self, job_id: UUID) -> HealthCheckJob | None:
        """Manually resubmit a dead job with a fresh attempt count."""
        for payload in await self.client.lrange(self.dead_key, 0, -1):
            record = FailedJobRecord.model_validate_json(payload)
            if record.job.id != job_id:
                continue
            if not await self.client.lrem(self.dead_key, 1, payload):
                return None
            job = record.job.model_copy(update={"attempts_made": 0})
            await self.enqueue(job)
            return job
        return None

    async def stats(self) -> dict[str, int]:
        """Job counts per queue state."""
        return {
            JobState.WAITING.value: await self.client.llen(self.waiting_key),
            JobState.DELAYED.value: await self.client.zcard(self.delayed_key),
            JobState.ACTIVE.value: await self.client.llen(self.active_key),
            JobState.COMPLETED.value: await self.client.llen(self.completed_key),
            JobState.FAILED.value: await self.client.llen(self.failed_key),
            JobState.DEAD.value: await self.client.llen(self.dead_key),
        }
