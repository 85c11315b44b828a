"""
Repository Pattern - Data Access Objects

Each repository handles persistence for its entity:
- ServiceRepository: probed services
- HealthRunRepository: probe bursts and their terminal state
- PredictionReportRepository: insert-only reliability reports
"""

from inframind.storage.repositories.service_repo import ServiceRepository
from inframind.storage.repositories.health_run_repo import HealthRunRepository
from inframind.storage.repositories.report_repo import PredictionReportRepository

__all__ = [
    "ServiceRepository",
    "HealthRunRepository",
    "PredictionReportRepository",
]
