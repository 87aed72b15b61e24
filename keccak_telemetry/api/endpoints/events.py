from fastapi import APIRouter, Depends, Request, status

from keccak_telemetry.api.body import read_event_payload
from keccak_telemetry.api.dependencies import get_ingestor
from keccak_telemetry.core.config import Settings, get_settings
from keccak_telemetry.domain.errors import InvalidEventName
from keccak_telemetry.domain.models import EventAccepted
from keccak_telemetry.domain.validators import is_valid_event_name
from keccak_telemetry.infrastructure.redis.constants import RedisKeys
from keccak_telemetry.services.event_ingestor import EventIngestor

router = APIRouter()


@router.post(
    "/events",
    status_code=status.HTTP_202_ACCEPTED,
    response_model=EventAccepted,
    summary="Record a telemetry event",
    response_description="Event accepted; `stored` tells whether it reached Redis",
)
async def post_event(
    request: Request,
    ingestor: EventIngestor = Depends(get_ingestor),
    settings: Settings = Depends(get_settings),
):
    payload = await read_event_payload(request, settings.max_body_bytes)
    # "_total" is the reserved per-day sum field
    if not is_valid_event_name(payload.event) or payload.event == RedisKeys.TOTAL_FIELD:
        raise InvalidEventName()

    stored = await ingestor.ingest(payload.event, payload.session_id)
    return EventAccepted(stored=stored, redisEnabled=ingestor.tracker.enabled)
