"""
InfraMind Health Prober

Entry points for the health-check worker pool and the web API.
"""

import asyncio
import logging
import signal
import sys

import structlog
import uvicorn

from inframind.config import Settings, get_settings
from inframind.queue.job_queue import HealthCheckQueue
from inframind.queue.processor import HealthCheckProcessor
from inframind.queue.worker import HealthCheckWorker
from inframind.storage.database import close_database, get_database
from inframind.storage.redis_client import close_redis, get_redis


def configure_logging(settings: Settings) -> None:
    """Configure structured logging for the process."""
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
    )
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


logger = structlog.get_logger(__name__)


async def run_worker(settings: Settings | None = None) -> None:
    """Connect stores, run the worker pool until signalled, then clean up."""
    settings = settings or get_settings()

    try:
        db = await get_database()
        redis = await get_redis()
    except Exception as e:
        logger.error("Failed to initialize connections", error=str(e))
        raise

    queue = HealthCheckQueue(redis.client, settings)
    worker = HealthCheckWorker(queue, HealthCheckProcessor(db=db), settings)

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, worker.request_stop)
        except NotImplementedError:  # Windows
            pass

    try:
        await worker.run_forever()
    finally:
        await close_redis()
        await close_database()
        logger.info("Shutdown complete")


def main() -> None:
    """Run the health-check worker pool."""
    settings = get_settings()
    configure_logging(settings)
    logger.info(
        "InfraMind worker starting",
        concurrency=settings.worker_concurrency,
        burst_size=settings.probe_burst_size,
        timeout_ms=settings.probe_timeout_ms,
        max_attempts=settings.job_max_attempts,
    )
    asyncio.run(run_worker(settings))


def serve_api() -> None:
    """Run the web API with uvicorn."""
    settings = get_settings()
    configure_logging(settings)
    logger.info("InfraMind API starting", host=settings.host, port=settings.port)
    uvicorn.run(
        "inframind.api.web:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
