from datetime import datetime, timezone

import fakeredis
import fakeredis.aioredis
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from redis.exceptions import ConnectionError as RedisConnectionError

from keccak_telemetry.core.config import Settings, get_settings
from keccak_telemetry.infrastructure.redis.health import StoreHealthTracker
from keccak_telemetry.infrastructure.redis.repository import TelemetryRepository

FIXED_NOW = datetime(2026, 3, 1, 12, 30, tzinfo=timezone.utc)
ADMIN_TOKEN = "s3cret-admin"
TTL_SECONDS = 120 * 24 * 60 * 60


class _BrokenPipeline:
    """Pipeline stand-in that queues anything and fails on execute."""

    def __getattr__(self, name):
        return lambda *args, **kwargs: self

    async def execute(self):
        raise RedisConnectionError("Connection refused")


class FlakyRedis:
    """Delegates to fakeredis; raises ConnectionError while ``down``."""

    def __init__(self, inner, down: bool = False):
        self.inner = inner
        self.down = down
        self.ping_calls = 0
        self.closed = False

    async def ping(self):
        self.ping_calls += 1
        if self.down:
            raise RedisConnectionError("Connection refused")
        return await self.inner.ping()

    def pipeline(self, transaction: bool = True):
        if self.down:
            return _BrokenPipeline()
        return self.inner.pipeline(transaction=transaction)

    async def aclose(self):
        self.closed = True
        await self.inner.aclose()

    def __getattr__(self, name):
        return getattr(self.inner, name)


@pytest.fixture
def fixed_clock():
    return lambda: FIXED_NOW


@pytest_asyncio.fixture
async def fake_redis():
    # Fresh server per test so buckets never leak between tests
    r = fakeredis.aioredis.FakeRedis(server=fakeredis.FakeServer(), decode_responses=True)
    yield r
    await r.aclose()


@pytest.fixture
def flaky_redis(fake_redis):
    return FlakyRedis(fake_redis)


@pytest.fixture
def repo(flaky_redis):
    return TelemetryRepository(flaky_redis, TTL_SECONDS)


@pytest_asyncio.fixture
async def tracker(flaky_redis):
    t = StoreHealthTracker(flaky_redis, reconnect_base_delay=0.01, reconnect_max_delay=0.05)
    await t.connect()
    yield t
    await t.close()


@pytest.fixture
def disabled_tracker():
    return StoreHealthTracker(None)


@pytest.fixture
def admin_settings():
    return Settings(admin_token=ADMIN_TOKEN, redis_url="redis://fake:6379/0")


@pytest_asyncio.fixture
async def api_client(tracker, fixed_clock, admin_settings):
    """HTTP client against the app wired to a fakeredis-backed tracker."""
    from keccak_telemetry.main import app, init_state

    init_state(app, tracker)
    app.state.ingestor.clock = fixed_clock
    app.state.aggregator.clock = fixed_clock
    app.dependency_overrides[get_settings] = lambda: admin_settings
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as client:
        yield client
    app.dependency_overrides.clear()
