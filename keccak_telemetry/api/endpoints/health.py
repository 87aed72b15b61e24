from fastapi import APIRouter, Depends

from keccak_telemetry.api.dependencies import get_tracker
from keccak_telemetry.core.config import Settings, get_settings
from keccak_telemetry.domain.models import HealthResponse, RedisHealth
from keccak_telemetry.infrastructure.redis.health import StoreHealthTracker

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health(
    tracker: StoreHealthTracker = Depends(get_tracker),
    settings: Settings = Depends(get_settings),
):
    ping_ms = await tracker.probe()
    state = tracker.snapshot()
    return HealthResponse(
        service=settings.service_name,
        redis=RedisHealth(
            enabled=state.enabled,
            connected=state.connected,
            pingMs=ping_ms,
            lastError=state.last_error,
        ),
    )
