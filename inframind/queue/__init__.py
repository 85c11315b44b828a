"""
Job Orchestration

- HealthCheckQueue: Redis-backed work queue (waiting/delayed/active/completed/failed/dead)
- HealthCheckAdmission: conflict-checked admission onto the queue
- HealthCheckProcessor: the job body (probe -> classify -> persist -> report)
- HealthCheckWorker: bounded worker pool with retry and backoff
"""

from inframind.queue.job_queue import HealthCheckQueue
from inframind.queue.admission import HealthCheckAdmission
from inframind.queue.processor import HealthCheckProcessor
from inframind.queue.worker import HealthCheckWorker

__all__ = [
    "HealthCheckQueue",
    "HealthCheckAdmission",
    "HealthCheckProcessor",
    "HealthCheckWorker",
]
