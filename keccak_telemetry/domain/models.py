from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class EventPayload(BaseModel):
    """Decoded body of ``POST /api/events``.

    Fields stay untyped so that a wrong-typed value is reported as an invalid
    event name (or ignored, for the session id) instead of a schema error.
    """

    event: Any = Field(None, description="Event name, validated by the ingestor")
    session_id: Any = Field(
        None, alias="sessionId", description="Opaque per-visit identifier"
    )

    model_config = ConfigDict(extra="ignore")


class HealthState(BaseModel):
    """Point-in-time view of the Redis connection."""

    enabled: bool
    connected: bool
    last_error: Optional[str] = None


class RedisHealth(BaseModel):
    enabled: bool
    connected: bool
    pingMs: Optional[int] = None
    lastError: Optional[str] = None


class HealthResponse(BaseModel):
    status: str = "ok"
    service: str
    timestamp: str = Field(default_factory=lambda: iso_timestamp())
    redis: RedisHealth


class EventAccepted(BaseModel):
    ok: bool = True
    stored: bool
    redisEnabled: bool


class DayStats(BaseModel):
    """Aggregated counters for a single UTC day."""

    date: str
    events: Dict[str, int] = Field(default_factory=dict)
    uniqueSessions: int = 0


class StatsResponse(BaseModel):
    days: int
    stats: List[DayStats]


def iso_timestamp(now: Optional[datetime] = None) -> str:
    now = now or datetime.now(timezone.utc)
    return now.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace(
        "+00:00", "Z"
    )
