import time
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from keccak_telemetry.core.logger import get_logger
from keccak_telemetry.domain.validators import is_valid_session_id
from keccak_telemetry.infrastructure.redis.health import STORE_ERRORS, StoreHealthTracker
from keccak_telemetry.infrastructure.redis.repository import TelemetryRepository
from keccak_telemetry.metrics.bucketing import day_bucket
from keccak_telemetry.metrics.registry import (
    EVENTS_DROPPED_TOTAL,
    EVENTS_RECEIVED_TOTAL,
    EVENTS_STORED_TOTAL,
    INGEST_LATENCY_SECONDS,
)

logger = get_logger("telemetry.ingestor")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class EventIngestor:
    """Writes validated events into today's bucket.

    Ingestion never fails the caller: an unavailable store or a failed
    transaction both come back as ``False``.
    """

    def __init__(
        self,
        tracker: StoreHealthTracker,
        repository: Optional[TelemetryRepository],
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.tracker = tracker
        self.repo = repository
        self.clock = clock

    async def ingest(self, event_name: str, session_id: Any = None) -> bool:
        EVENTS_RECEIVED_TOTAL.inc()
        if self.repo is None or not self.tracker.available:
            EVENTS_DROPPED_TOTAL.inc()
            logger.debug(
                "event_not_stored",
                extra={"event_name": event_name, "reason": "store_unavailable"},
            )
            return False

        sid = session_id if is_valid_session_id(session_id) else None
        day = day_bucket(0, self.clock())
        start_time = time.perf_counter()
        try:
            await self.repo.record_event(day, event_name, sid)
        except STORE_ERRORS as exc:
            self.tracker.record_error(exc)
            EVENTS_DROPPED_TOTAL.inc()
            logger.warning(
                "event_store_failed",
                extra={
                    "event_name": event_name,
                    "error_type": type(exc).__name__,
                    "error": str(exc),
                },
            )
            return False
        finally:
            INGEST_LATENCY_SECONDS.observe(time.perf_counter() - start_time)

        self.tracker.mark_ok()
        EVENTS_STORED_TOTAL.inc()
        logger.debug(
            "event_stored",
            extra={"event_name": event_name, "day": day, "with_sid": sid is not None},
        )
        return True
