from typing import Optional

from fastapi import APIRouter, Depends, Query

from keccak_telemetry.api.dependencies import get_aggregator, require_admin
from keccak_telemetry.domain.models import StatsResponse
from keccak_telemetry.services.stats_aggregator import StatsAggregator

router = APIRouter()


@router.get(
    "/stats",
    response_model=StatsResponse,
    dependencies=[Depends(require_admin)],
)
async def get_stats(
    days: Optional[str] = Query(None, description="Number of days, clamped to 1..30"),
    aggregator: StatsAggregator = Depends(get_aggregator),
):
    stats = await aggregator.collect(days)
    return StatsResponse(days=len(stats), stats=stats)
