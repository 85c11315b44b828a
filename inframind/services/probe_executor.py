"""
Probe Executor

Fires a burst of concurrent GET requests at one health endpoint and
collects one outcome per request. Every received status code is a
valid outcome here; only network failures and timeouts are errors.
"""

import asyncio
import time
from datetime import datetime, timezone

import httpx
import structlog

from inframind.config import Settings, get_settings
from inframind.models.health_run import ProbeOutcome

logger = structlog.get_logger(__name__)


class ProbeExecutor:
    """
    Issues probe bursts with httpx.

    Each probe is timed independently from dispatch to completion. A
    probe that hits the per-request ceiling is recorded with its latency
    pinned to the ceiling. The burst only returns once every probe has
    settled, so the result always holds exactly burst_size outcomes.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.settings = settings or get_settings()
        self._transport = transport

    @property
    def default_headers(self) -> dict[str, str]:
        return {
            "User-Agent": self.settings.probe_user_agent,
            "X-Health-Check": "true",
        }

    async def run_burst(
        self,
        url: str,
        burst_size: int | None = None,
        timeout_ms: int | None = None,
        headers: dict[str, str] | None = None,
    ) -> list[ProbeOutcome]:
        """
        Probe a URL burst_size times concurrently.

        Args:
            url: Fully-formed health endpoint URL
            burst_size: Number of concurrent probes (defaults to settings)
            timeout_ms: Hard per-probe ceiling in milliseconds (defaults to settings)
            headers: Extra headers merged over the identifying defaults

        Returns:
            Unordered list of exactly burst_size outcomes
        """
        if burst_size is None:
            burst_size = self.settings.probe_burst_size
        if timeout_ms is None:
            timeout_ms = self.settings.probe_timeout_ms
        if burst_size < 1:
            raise ValueError("burst_size must be at least 1")
        if timeout_ms <= 0:
            raise ValueError("timeout_ms must be positive")

        logger.debug("Starting probe burst", url=url, burst_size=burst_size, timeout_ms=timeout_ms)

        async with httpx.AsyncClient(
            headers={**self.default_headers, **(headers or {})},
            timeout=httpx.Timeout(timeout_ms / 1000),
            limits=httpx.Limits(max_connections=burst_size, max_keepalive_connections=0),
            follow_redirects=False,
            transport=self._transport,
        ) as client:
            settled = await asyncio.gather(
                *[self._probe(client, url, timeout_ms) for _ in range(burst_size)],
                return_exceptions=True,
            )

        outcomes: list[ProbeOutcome] = []
        for result in settled:
            if isinstance(result, ProbeOutcome):
                outcomes.append(result)
            else:
                # _probe converts failures itself; this keeps the count exact regardless
                outcomes.append(ProbeOutcome(
                    url=url,
                    error=str(result) or type(result).__name__,
                    timestamp=datetime.now(timezone.utc),
                ))

        logger.debug("Probe burst settled", url=url, outcomes=len(outcomes))
        return outcomes

    async def _probe(
        self,
        client: httpx.AsyncClient,
        url: str,
        timeout_ms: int,
    ) -> ProbeOutcome:
        timestamp = datetime.now(timezone.utc)
        start_time = time.perf_counter()
        try:
            response = await asyncio.wait_for(client.get(url), timeout=timeout_ms / 1000)
            return ProbeOutcome(
                url=url,
                status_code=response.status_code,
                latency_ms=(time.perf_counter() - start_time) * 1000,
                timestamp=timestamp,
            )
        except (asyncio.TimeoutError, httpx.TimeoutException):
            return ProbeOutcome(
                url=url,
                latency_ms=float(timeout_ms),
                error=f"timeout of {timeout_ms}ms exceeded",
                timestamp=timestamp,
            )
        except Exception as e:
            return ProbeOutcome(
                url=url,
                latency_ms=(time.perf_counter() - start_time) * 1000,
                error=str(e) or type(e).__name__,
                timestamp=timestamp,
            )
