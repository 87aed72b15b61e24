from typing import Dict, Optional, Tuple

from redis.asyncio import Redis

from .constants import RedisKeys


class TelemetryRepository:
    """Redis-backed storage for day-bucketed telemetry.

    Notes:
        - One hash of event counters and one set of session ids per UTC day.
        - Every write refreshes the TTL of the keys it touches; keys are
          never deleted explicitly.
        - Event writes go through a MULTI/EXEC pipeline so counters, the
          ``_total`` field and the session add land together.
    """

    def __init__(self, redis: Redis, ttl_seconds: int, prefix: str = RedisKeys.DEFAULT_PREFIX):
        self.r = redis
        self.ttl_seconds = ttl_seconds
        self.prefix = prefix

    def events_key(self, day: str) -> str:
        return RedisKeys.events_key(day, self.prefix)

    def sessions_key(self, day: str) -> str:
        return RedisKeys.sessions_key(day, self.prefix)

    # Writes
    async def record_event(
        self, day: str, event_name: str, session_id: Optional[str] = None
    ) -> None:
        events_key = self.events_key(day)
        pipe = self.r.pipeline(transaction=True)
        pipe.hincrby(events_key, event_name, 1)
        pipe.hincrby(events_key, RedisKeys.TOTAL_FIELD, 1)
        pipe.expire(events_key, self.ttl_seconds)
        if session_id is not None:
            sessions_key = self.sessions_key(day)
            pipe.sadd(sessions_key, session_id)
            pipe.expire(sessions_key, self.ttl_seconds)
        await pipe.execute()

    # Reads
    async def read_day(self, day: str) -> Tuple[Dict[str, int], int]:
        """Event counters and unique session count for one day."""
        pipe = self.r.pipeline(transaction=False)
        pipe.hgetall(self.events_key(day))
        pipe.scard(self.sessions_key(day))
        counters, session_count = await pipe.execute()
        return self._convert_counts(counters or {}), int(session_count or 0)

    def _convert_counts(self, data: Dict[str, str]) -> Dict[str, int]:
        out: Dict[str, int] = {}
        for k, v in data.items():
            try:
                out[k] = int(v)
            except (TypeError, ValueError):
                continue
        return out
