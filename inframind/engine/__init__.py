"""
Analysis Engine - pure functions over probe results

- metrics: burst outcomes -> HealthMetrics
- classifier: HealthMetrics + SLO -> healthy/degraded/unhealthy
- risk_engine: HealthMetrics + Service -> heuristic reliability report
- infra_configs: risk level -> NGINX / Docker / Kubernetes snippets
"""

from inframind.engine.metrics import aggregate_outcomes
from inframind.engine.classifier import classify_status
from inframind.engine.risk_engine import (
    HeuristicReportGenerator,
    ReportGenerator,
    determine_risk_level,
    risk_score,
)
from inframind.engine.infra_configs import generate_infra_configs

__all__ = [
    "aggregate_outcomes",
    "classify_status",
    "HeuristicReportGenerator",
    "ReportGenerator",
    "determine_risk_level",
    "risk_score",
    "generate_infra_configs",
]
