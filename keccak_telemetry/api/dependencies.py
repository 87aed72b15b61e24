from typing import Optional

from fastapi import Depends, Header, Query, Request

from keccak_telemetry.core.config import Settings, get_settings
from keccak_telemetry.infrastructure.redis.health import StoreHealthTracker
from keccak_telemetry.services.admin_gate import authorize, resolve_supplied_token
from keccak_telemetry.services.event_ingestor import EventIngestor
from keccak_telemetry.services.stats_aggregator import StatsAggregator


def get_tracker(request: Request) -> StoreHealthTracker:
    return request.app.state.tracker  # type: ignore[return-value]


def get_ingestor(request: Request) -> EventIngestor:
    return request.app.state.ingestor  # type: ignore[return-value]


def get_aggregator(request: Request) -> StatsAggregator:
    return request.app.state.aggregator  # type: ignore[return-value]


def require_admin(
    x_admin_token: Optional[str] = Header(None, alias="x-admin-token"),
    token: Optional[str] = Query(None),
    settings: Settings = Depends(get_settings),
) -> None:
    """Admin gate for the stats endpoint; runs before any store access."""
    authorize(settings.admin_token, resolve_supplied_token(x_admin_token, token))
