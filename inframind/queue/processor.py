"""
Health Check Processor

The job body: load the service and run, probe, classify, persist the
terminal run, then generate and persist the report.
"""

from datetime import datetime, timezone

import structlog

from inframind.engine.risk_engine import HeuristicReportGenerator, ReportGenerator
from inframind.errors import ReferenceNotFoundError
from inframind.models.job import HealthCheckJob, HealthCheckJobResult
from inframind.models.report import PredictionReport
from inframind.services.health_check import HealthCheckService
from inframind.storage.database import Database, get_database
from inframind.storage.repositories.health_run_repo import HealthRunRepository
from inframind.storage.repositories.report_repo import PredictionReportRepository
from inframind.storage.repositories.service_repo import ServiceRepository

logger = structlog.get_logger(__name__)


class HealthCheckProcessor:
    """
    Executes one attempt of a health-check job.

    Any failure forces the run into terminal UNHEALTHY before the error
    propagates to the retry wrapper, so no failed attempt leaves a run
    stuck in RUNNING.
    """

    def __init__(
        self,
        db: Database | None = None,
        service_repo: ServiceRepository | None = None,
        run_repo: HealthRunRepository | None = None,
        report_repo: PredictionReportRepository | None = None,
        health_check: HealthCheckService | None = None,
        report_generator: ReportGenerator | None = None,
    ):
        self._db = db
        self._service_repo = service_repo
        self._run_repo = run_repo
        self._report_repo = report_repo
        self.health_check = health_check or HealthCheckService()
        self.report_generator = report_generator or HeuristicReportGenerator()

    async def _get_db(self) -> Database:
        if self._db is None:
            self._db = await get_database()
        return self._db

    async def _get_service_repo(self) -> ServiceRepository:
        if self._service_repo is None:
            self._service_repo = ServiceRepository(await self._get_db())
        return self._service_repo

    async def _get_run_repo(self) -> HealthRunRepository:
        if self._run_repo is None:
            self._run_repo = HealthRunRepository(await self._get_db())
        return self._run_repo

    async def _get_report_repo(self) -> PredictionReportRepository:
        if self._report_repo is None:
            self._report_repo = PredictionReportRepository(await self._get_db())
        return self._report_repo

    async def process(self, job: HealthCheckJob) -> HealthCheckJobResult:
        """
        Run the health check for a job.

        Returns:
            HealthCheckJobResult with run id, terminal status, report id and risk level

        Raises:
            ReferenceNotFoundError: service or run missing
            PersistenceError: a store write failed
        """
        log = logger.bind(
            job_id=str(job.id),
            service_id=str(job.service_id),
            health_run_id=str(job.health_run_id),
            attempt=job.attempts_made,
        )
        log.info("Starting health check")

        run_repo = await self._get_run_repo()
        try:
            return await self._run(job, run_repo, log)
        except Exception as e:
            log.error("Health check failed", error=str(e), error_type=type(e).__name__)
            await run_repo.mark_unhealthy(job.health_run_id, datetime.now(timezone.utc))
            raise

    async def _run(
        self,
        job: HealthCheckJob,
        run_repo: HealthRunRepository,
        log: structlog.stdlib.BoundLogger,
    ) -> HealthCheckJobResult:
        service_repo = await self._get_service_repo()
        service = await service_repo.get_by_id(job.service_id)
        if service is None:
            raise ReferenceNotFoundError("Service", job.service_id)

        run = await run_repo.get_by_id(job.health_run_id)
        if run is None:
            raise ReferenceNotFoundError("Health run", job.health_run_id)

        result = await self.health_check.perform(service)

        await run_repo.complete(
            run.id,
            status=result.summary_status,
            metrics=result.metrics,
            raw_results=result.raw_results,
            finished_at=datetime.now(timezone.utc),
        )
        log.info("Health check completed", summary_status=result.summary_status.value)

        content = self.report_generator.generate(service, result.metrics)
        report_repo = await self._get_report_repo()
        report = await report_repo.create(
            PredictionReport(
                service_id=service.id,
                health_run_id=run.id,
                **content.model_dump(),
            )
        )
        log.info("Report generated", report_id=str(report.id), risk_level=report.risk_level.value)

        return HealthCheckJobResult(
            health_run_id=run.id,
            status=result.summary_status,
            report_id=report.id,
            risk_level=report.risk_level,
        )
