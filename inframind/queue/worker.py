"""
Health Check Worker Pool

A fixed number of asyncio worker slots pull jobs from the shared queue.
Each job body runs inside an explicit retry wrapper with exponential
backoff; a job that exhausts its attempts goes to the dead set.

A job is acknowledged only once it is completed or dead, so jobs held
by a worker that died are picked up again on the next start.
"""

import asyncio

import structlog
from tenacity import AsyncRetrying, RetryCallState, stop_after_attempt, wait_exponential

from inframind.config import Settings, get_settings
from inframind.models.job import HealthCheckJob, HealthCheckJobResult
from inframind.queue.job_queue import HealthCheckQueue
from inframind.queue.processor import HealthCheckProcessor

logger = structlog.get_logger(__name__)


class HealthCheckWorker:
    """
    Bounded worker pool for health-check jobs.

    Jobs for different services are independent. Nothing here serializes
    jobs for the same service; that is left to the admission check.
    """

    def __init__(
        self,
        queue: HealthCheckQueue,
        processor: HealthCheckProcessor,
        settings: Settings | None = None,
    ):
        self.queue = queue
        self.processor = processor
        self.settings = settings or get_settings()
        self.concurrency = self.settings.worker_concurrency
        self._stopping = asyncio.Event()
        self._tasks: list[asyncio.Task] = []

    @property
    def is_running(self) -> bool:
        return any(not t.done() for t in self._tasks)

    def _retrying(self, job: HealthCheckJob) -> AsyncRetrying:
        def log_retry(retry_state: RetryCallState) -> None:
            error = retry_state.outcome.exception() if retry_state.outcome else None
            logger.warning(
                "Health check attempt failed, retrying",
                job_id=str(job.id),
                attempt=retry_state.attempt_number,
                max_attempts=self.settings.job_max_attempts,
                retry_in_s=retry_state.next_action.sleep if retry_state.next_action else None,
                error=str(error),
            )

        return AsyncRetrying(
            stop=stop_after_attempt(self.settings.job_max_attempts),
            wait=wait_exponential(
                multiplier=self.settings.job_backoff_base_ms / 1000,
                max=self.settings.job_backoff_max_ms / 1000,
            ),
            before_sleep=log_retry,
            reraise=True,
        )

    async def handle(self, job: HealthCheckJob) -> HealthCheckJobResult | None:
        """
        Run a job with bounded retries.

        Returns:
            The job result, or None if the job was dead-lettered
        """
        try:
            async for attempt in self._retrying(job):
                with attempt:
                    job.attempts_made = attempt.retry_state.attempt_number
                    try:
                        result = await self.processor.process(job)
                    except Exception as e:
                        await self.queue.record_failed(job, str(e))
                        raise
        except Exception as e:
            await self.queue.move_to_dead(job, str(e))
            await self.queue.ack(job)
            return None

        await self.queue.record_completed(job, result)
        await self.queue.ack(job)
        logger.info(
            "Job completed",
            job_id=str(job.id),
            health_run_id=str(result.health_run_id),
            status=result.status.value,
            risk_level=result.risk_level.value,
        )
        return result

    async def _slot(self, index: int) -> None:
        log = logger.bind(slot=index)
        log.debug("Worker slot started")
        while not self._stopping.is_set():
            try:
                await self.queue.promote_due()
                job = await self.queue.dequeue()
            except Exception as e:
                log.error("Queue poll failed", error=str(e))
                await asyncio.sleep(self.settings.worker_poll_interval_s)
                continue
            if job is None:
                continue
            try:
                await self.handle(job)
            except Exception as e:
                log.error("Job bookkeeping failed", job_id=str(job.id), error=str(e))
        log.debug("Worker slot stopped")

    async def start(self) -> None:
        if self.is_running:
            logger.warning("Worker already running")
            return
        self._stopping.clear()
        await self.queue.recover_stalled()
        self._tasks = [
            asyncio.create_task(self._slot(i), name=f"health-check-worker-{i}")
            for i in range(self.concurrency)
        ]
        logger.info("Health check worker started", concurrency=self.concurrency)

    async def stop(self) -> None:
        """Stop pulling new jobs and wait for in-flight ones to settle."""
        self._stopping.set()
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks = []
        logger.info("Health check worker stopped")

    async def run_forever(self) -> None:
        await self.start()
        await self._stopping.wait()
        await self.stop()

    def request_stop(self) -> None:
        self._stopping.set()
