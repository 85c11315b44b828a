"""
Probe and Check Services

- ProbeExecutor: concurrent HTTP probe bursts via httpx
- HealthCheckService: burst -> metrics -> status for one service
- PostgresHealthCheck / RedisHealthCheck: our own dependency checks
"""

from inframind.services.probe_executor import ProbeExecutor
from inframind.services.health_check import HealthCheckResult, HealthCheckService
from inframind.services.health import BaseHealthCheck, PostgresHealthCheck, RedisHealthCheck

__all__ = [
    "ProbeExecutor",
    "HealthCheckResult",
    "HealthCheckService",
    "BaseHealthCheck",
    "PostgresHealthCheck",
    "RedisHealthCheck",
]
