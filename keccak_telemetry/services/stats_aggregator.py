import asyncio
from datetime import datetime, timezone
from typing import Any, Callable, List, Optional

from keccak_telemetry.core.logger import get_logger
from keccak_telemetry.domain.errors import StatsQueryFailed, StoreUnavailable
from keccak_telemetry.domain.models import DayStats
from keccak_telemetry.domain.validators import DEFAULT_DAYS, MAX_DAYS, clamp_days
from keccak_telemetry.infrastructure.redis.health import STORE_ERRORS, StoreHealthTracker
from keccak_telemetry.infrastructure.redis.repository import TelemetryRepository
from keccak_telemetry.metrics.bucketing import enumerate_day_buckets
from keccak_telemetry.metrics.registry import (
    STATS_QUERIES_TOTAL,
    STATS_QUERY_FAILURES_TOTAL,
)

logger = get_logger("telemetry.stats")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class StatsAggregator:
    """Reads back per-day counters and unique session counts.

    Days are fetched concurrently but returned today first. A failure on any
    day fails the whole query; partial results are never returned.
    """

    def __init__(
        self,
        tracker: StoreHealthTracker,
        repository: Optional[TelemetryRepository],
        clock: Callable[[], datetime] = _utcnow,
        default_days: int = DEFAULT_DAYS,
        max_days: int = MAX_DAYS,
    ):
        self.tracker = tracker
        self.repo = repository
        self.clock = clock
        self.default_days = default_days
        self.max_days = max_days

    def clamp(self, days: Any) -> int:
        return clamp_days(days, default=self.default_days, maximum=self.max_days)

    async def collect(self, days: Any) -> List[DayStats]:
        if self.repo is None or not self.tracker.available:
            raise StoreUnavailable(self.tracker.last_error)

        buckets = enumerate_day_buckets(self.clamp(days), self.clock())
        STATS_QUERIES_TOTAL.inc()
        try:
            results = await asyncio.gather(*(self.repo.read_day(d) for d in buckets))
        except STORE_ERRORS as exc:
            self.tracker.record_error(exc)
            STATS_QUERY_FAILURES_TOTAL.inc()
            logger.error(
                "stats_query_failed",
                extra={"days": len(buckets), "error_type": type(exc).__name__},
            )
            raise StatsQueryFailed(str(exc) or type(exc).__name__) from exc

        self.tracker.mark_ok()
        return [
            DayStats(date=day, events=events, uniqueSessions=sessions)
            for day, (events, sessions) in zip(buckets, results)
        ]
