"""
Metrics Aggregator

Reduces the outcomes of one probe burst to a HealthMetrics summary.
The reduction is pure and order-independent: the same multiset of
outcomes always yields the same metrics.
"""

import math
from collections import Counter
from typing import Iterable

from inframind.models.health_run import HealthMetrics, ProbeOutcome

# Reserved histogram bucket for outcomes that never received a status
ERROR_BUCKET = "error"

TIMEOUT_MARKERS = ("timeout", "abort")


def is_success(outcome: ProbeOutcome) -> bool:
    """A probe succeeds only on a 2xx status."""
    return outcome.status_code is not None and 200 <= outcome.status_code < 300


def is_error(outcome: ProbeOutcome) -> bool:
    """Transport errors and every non-2xx status count as errors."""
    if outcome.error:
        return True
    return outcome.status_code is not None and not 200 <= outcome.status_code < 300


def is_timeout(outcome: ProbeOutcome) -> bool:
    if not outcome.error:
        return False
    text = outcome.error.lower()
    return any(marker in text for marker in TIMEOUT_MARKERS)


def p95(sorted_latencies: list[float]) -> float:
    """
    Element at floor(0.95 * n) of an ascending list, clamped to the last index.

    For [10, 20, ..., 100] this is index 9, i.e. 100.
    """
    if not sorted_latencies:
        return 0.0
    index = math.floor(len(sorted_latencies) * 0.95)
    return sorted_latencies[min(index, len(sorted_latencies) - 1)]


def status_code_histogram(outcomes: Iterable[ProbeOutcome]) -> dict[str, int]:
    counts: Counter[str] = Counter()
    for outcome in outcomes:
        if outcome.status_code is not None:
            counts[str(outcome.status_code)] += 1
        elif outcome.error:
            counts[ERROR_BUCKET] += 1
    return dict(sorted(counts.items()))


def aggregate_outcomes(outcomes: list[ProbeOutcome]) -> HealthMetrics:
    """
    Compute burst metrics.

    Args:
        outcomes: All outcomes of one burst, in any order

    Returns:
        HealthMetrics with avg/p95 latency, success/error rates,
        timeout count and status-code histogram
    """
    total = len(outcomes)
    latencies = sorted(o.latency_ms for o in outcomes if o.latency_ms is not None)

    success_count = sum(1 for o in outcomes if is_success(o))
    error_count = sum(1 for o in outcomes if is_error(o))

    return HealthMetrics(
        avg_latency_ms=sum(latencies) / len(latencies) if latencies else 0.0,
        p95_latency_ms=p95(latencies),
        success_rate=success_count / total if total else 0.0,
        error_rate=error_count / total if total else 0.0,
        timeout_count=sum(1 for o in outcomes if is_timeout(o)),
        status_code_counts=status_code_histogram(outcomes),
    )
