"""
Prediction Report Repository

Reports are insert-only; there is no update path.
"""

from typing import Any
from uuid import UUID

import structlog

from inframind.errors import PersistenceError
from inframind.models.report import GeneratedConfigs, PredictionReport, RiskLevel
from inframind.storage.database import WRITE_ERRORS, Database, json_field

logger = structlog.get_logger(__name__)


class PredictionReportRepository:
    """Repository for PredictionReport records."""

    def __init__(self, db: Database):
        self.db = db

    async def create(self, report: PredictionReport) -> PredictionReport:
        """Persist a report. health_run_id is unique, so a run gets at most one."""
        query = """
            INSERT INTO prediction_reports (
                id, service_id, health_run_id, title, summary, risk_level,
                timeline, warnings, suggestions, generated_configs
            ) VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10)
            RETURNING *
        """
        try:
            row = await self.db.fetchrow(
                query,
                report.id,
                report.service_id,
                report.health_run_id,
                report.title,
                report.summary,
                report.risk_level.value,
                report.timeline,
                report.warnings,
                report.suggestions,
                report.generated_configs.model_dump(mode="json"),
            )
        except WRITE_ERRORS as e:
            raise PersistenceError(
                f"Failed to store report for health run {report.health_run_id}: {e}"
            ) from e

        logger.info(
            "Prediction report created",
            report_id=str(row["id"]),
            health_run_id=str(report.health_run_id),
            risk_level=report.risk_level.value,
        )
        return self._row_to_report(row)

    async def get_by_id(self, report_id: UUID) -> PredictionReport | None:
        row = await self.db.fetchrow("SELECT * FROM prediction_reports WHERE id = $1", report_id)
        return self._row_to_report(row) if row else None

    async def get_by_health_run(self, health_run_id: UUID) -> PredictionReport | None:
        """Get the report linked to a run, if one was generated."""
        row = await self.db.fetchrow(
            "SELECT * FROM prediction_reports WHERE health_run_id = $1", health_run_id
        )
        return self._row_to_report(row) if row else None

    async def list_recent(
        self,
        service_id: UUID | None = None,
        risk_level: RiskLevel | None = None,
        limit: int = 20,
    ) -> list[PredictionReport]:
        """List reports newest first, optionally filtered."""
        conditions = ["1=1"]
        params: list[Any] = []

        if service_id is not None:
            params.append(service_id)
            conditions.append(f"service_id = ${len(params)}")
        if risk_level is not None:
            params.append(risk_level.value)
            conditions.append(f"risk_level = ${len(params)}")

        params.append(limit)
        query = f"""
            SELECT * FROM prediction_reports
            WHERE {' AND '.join(conditions)}
            ORDER BY created_at DESC
            LIMIT ${len(params)}
        """
        rows = await self.db.fetch(query, *params)
        return [self._row_to_report(row) for row in rows]

    def _row_to_report(self, row: Any) -> PredictionReport:
        """Convert database row to PredictionReport model."""
        return PredictionReport(
            id=row["id"],
            service_id=row["service_id"],
            health_run_id=row["health_run_id"],
            title=row["title"],
            summary=row["summary"],
            risk_level=RiskLevel(row["risk_level"]),
            timeline=json_field(row["timeline"], []),
            warnings=json_field(row["warnings"], []),
            suggestions=json_field(row["suggestions"], []),
            generated_configs=GeneratedConfigs.model_validate(
                json_field(row["generated_configs"], {})
            ),
            created_at=row["created_at"],
        )
