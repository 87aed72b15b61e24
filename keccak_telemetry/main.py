from contextlib import asynccontextmanager

from fastapi import FastAPI
from prometheus_fastapi_instrumentator import Instrumentator

from keccak_telemetry import __version__
from keccak_telemetry.api.errors import register_exception_handlers
from keccak_telemetry.api.router import api_router
from keccak_telemetry.core.config import settings
from keccak_telemetry.core.logger import configure_logging, get_logger
from keccak_telemetry.infrastructure.redis.health import StoreHealthTracker
from keccak_telemetry.infrastructure.redis.repository import TelemetryRepository
from keccak_telemetry.services.event_ingestor import EventIngestor
from keccak_telemetry.services.stats_aggregator import StatsAggregator

logger = get_logger("telemetry.main")


def init_state(app: FastAPI, tracker: StoreHealthTracker) -> None:
    """Wire the tracker, ingestor and aggregator onto ``app.state``."""
    repo = None
    if tracker.client is not None:
        repo = TelemetryRepository(
            tracker.client,
            settings.day_bucket_ttl_seconds,
            prefix=settings.redis_key_prefix,
        )
    app.state.tracker = tracker
    app.state.ingestor = EventIngestor(tracker, repo)
    app.state.aggregator = StatsAggregator(
        tracker,
        repo,
        default_days=settings.stats_default_days,
        max_days=settings.stats_max_days,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    logger.info(
        "telemetry_service_starting",
        extra={
            "redis_enabled": settings.redis_enabled,
            "admin_configured": bool(settings.admin_token),
        },
    )
    tracker = StoreHealthTracker.from_settings(settings)
    init_state(app, tracker)
    if tracker.enabled and not await tracker.connect():
        logger.warning("store_unavailable_at_start", extra={"error": tracker.last_error})
    tracker.start()
    try:
        yield
    finally:
        logger.info("telemetry_service_stopping")
        await tracker.close()


app = FastAPI(title="Keccak Model Telemetry", version=__version__, lifespan=lifespan)
register_exception_handlers(app)
app.include_router(api_router)

instrumentator = Instrumentator(
    should_group_status_codes=True,
    should_ignore_untemplated=True,
    excluded_handlers=["/docs", "/openapi.json", "/metrics"],
)
instrumentator.instrument(app).expose(app)
