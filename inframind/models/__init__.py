"""
Pydantic Models

Core data structures:
- Service: a probed HTTP service and its latency SLO
- HealthRun: one probe burst with metrics and terminal status
- PredictionReport: heuristic reliability report for a run
- HealthCheckJob: queue work item and its result records
"""

from inframind.models.service import (
    Service,
    ServiceCreate,
    ServiceEnvironment,
)
from inframind.models.health_run import (
    HealthMetrics,
    HealthRun,
    ProbeOutcome,
    RunStatus,
)
from inframind.models.report import (
    GeneratedConfigs,
    PredictionReport,
    ReportContent,
    RiskLevel,
)
from inframind.models.job import (
    FailedJobRecord,
    HealthCheckJob,
    HealthCheckJobResult,
    JobHandle,
    JobState,
)
from inframind.models.health import DependencyHealth, DependencyStatus

__all__ = [
    # Service
    "Service",
    "ServiceCreate",
    "ServiceEnvironment",
    # Health runs
    "HealthMetrics",
    "HealthRun",
    "ProbeOutcome",
    "RunStatus",
    # Reports
    "GeneratedConfigs",
    "PredictionReport",
    "ReportContent",
    "RiskLevel",
    # Jobs
    "FailedJobRecord",
    "HealthCheckJob",
    "HealthCheckJobResult",
    "JobHandle",
    "JobState",
    # Dependency health
    "DependencyHealth",
    "DependencyStatus",
]
