"""
Mock modules for testing.

Provides in-memory implementations of Redis and the repositories to
enable testing without a database or queue server.
"""

from tests.mocks.http import (
    RecordingTransport,
    failing_transport,
    ok_transport,
    sequence_transport,
    slow_transport,
)
from tests.mocks.redis import MockRedis
from tests.mocks.repositories import (
    MockHealthRunRepository,
    MockPredictionReportRepository,
    MockServiceRepository,
)

__all__ = [
    "RecordingTransport",
    "failing_transport",
    "ok_transport",
    "sequence_transport",
    "slow_transport",
    "MockRedis",
    "MockServiceRepository",
    "MockHealthRunRepository",
    "MockPredictionReportRepository",
]
