"""
Health Check Admission

Entry point for "run a health check for service S". Admission returns
as soon as the job is queued; the check itself always runs on a worker.

The one-running-run-per-service rule is a read-then-write check with
no lock, so two simultaneous admissions for the same service can both
pass. Admission is rare and externally triggered, which keeps that
window small.
"""

from uuid import UUID

import structlog

from inframind.config import Settings, get_settings
from inframind.errors import ConflictError, ReferenceNotFoundError
from inframind.models.job import HealthCheckJob, JobHandle, JobState
from inframind.queue.job_queue import HealthCheckQueue
from inframind.storage.repositories.health_run_repo import HealthRunRepository
from inframind.storage.repositories.service_repo import ServiceRepository

logger = structlog.get_logger(__name__)


class HealthCheckAdmission:
    """Admits health-check requests onto the queue."""

    def __init__(
        self,
        queue: HealthCheckQueue,
        service_repo: ServiceRepository,
        run_repo: HealthRunRepository,
        settings: Settings | None = None,
    ):
        self.queue = queue
        self.service_repo = service_repo
        self.run_repo = run_repo
        self.settings = settings or get_settings()

    async def request_health_check(self, service_id: UUID) -> JobHandle:
        """
        Create a RUNNING run for the service and queue a job for it.

        Raises:
            ReferenceNotFoundError: the service does not exist
            ConflictError: the service already has a RUNNING run
        """
        service = await self.service_repo.get_by_id(service_id)
        if service is None:
            raise ReferenceNotFoundError("Service", service_id)

        await self._ensure_no_running_run(service_id)

        run = await self.run_repo.create_running(service_id)
        try:
            return await self._queue_job(service_id, run.id)
        except Exception as e:
            # Never leave a RUNNING run without a job behind it
            logger.error(
                "Failed to queue health check",
                service_id=str(service_id),
                health_run_id=str(run.id),
                error=str(e),
            )
            await self.run_repo.mark_unhealthy(run.id)
            raise

    async def enqueue(self, service_id: UUID, health_run_id: UUID) -> JobHandle:
        """
        Queue a job for an already-created RUNNING run.

        Raises:
            ConflictError: another RUNNING run exists for the service
        """
        await self._ensure_no_running_run(service_id, exclude_id=health_run_id)
        return await self._queue_job(service_id, health_run_id)

    async def _ensure_no_running_run(
        self,
        service_id: UUID,
        exclude_id: UUID | None = None,
    ) -> None:
        running = await self.run_repo.get_running_for_service(service_id, exclude_id=exclude_id)
        if running is not None:
            logger.info(
                "Health check already running",
                service_id=str(service_id),
                health_run_id=str(running.id),
            )
            raise ConflictError(service_id, running.id)

    async def _queue_job(self, service_id: UUID, health_run_id: UUID) -> JobHandle:
        job = HealthCheckJob(service_id=service_id, health_run_id=health_run_id)
        delay_ms = self.settings.job_enqueue_delay_ms
        await self.queue.enqueue(job, delay_ms=delay_ms)
        return JobHandle(
            job_id=job.id,
            service_id=service_id,
            health_run_id=health_run_id,
            state=JobState.DELAYED if delay_ms > 0 else JobState.WAITING,
        )
