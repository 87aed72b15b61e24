import asyncio

import pytest

from keccak_telemetry.core.config import Settings
from keccak_telemetry.infrastructure.redis.health import StoreHealthTracker, StoreStatus


def test_disabled_tracker_snapshot():
    tracker = StoreHealthTracker(None)
    assert tracker.status is StoreStatus.DISABLED
    state = tracker.snapshot()
    assert state.enabled is False
    assert state.connected is False
    assert state.last_error is None


@pytest.mark.asyncio
async def test_disabled_tracker_never_transitions():
    tracker = StoreHealthTracker(None)
    assert await tracker.connect() is False
    assert await tracker.probe() is None
    tracker.record_error(RuntimeError("ignored"))
    tracker.mark_ok()
    tracker.start()
    assert tracker.status is StoreStatus.DISABLED
    assert tracker.last_error is None
    await tracker.close()


def test_from_settings_without_url_is_disabled():
    tracker = StoreHealthTracker.from_settings(Settings(redis_url=""))
    assert tracker.enabled is False
    assert tracker.client is None


def test_from_settings_with_url_starts_connecting():
    tracker = StoreHealthTracker.from_settings(
        Settings(redis_url="redis://localhost:6399/0", redis_socket_timeout_seconds=1.5)
    )
    assert tracker.enabled is True
    assert tracker.status is StoreStatus.CONNECTING
    assert tracker.snapshot().connected is False


@pytest.mark.asyncio
async def test_connect_success(flaky_redis):
    tracker = StoreHealthTracker(flaky_redis)
    assert await tracker.connect() is True
    assert tracker.status is StoreStatus.CONNECTED
    assert tracker.snapshot().connected is True


@pytest.mark.asyncio
async def test_connect_failure_records_error(flaky_redis):
    flaky_redis.down = True
    tracker = StoreHealthTracker(flaky_redis)
    assert await tracker.connect() is False
    assert tracker.status is StoreStatus.ERRORED
    assert tracker.last_error == "Connection refused"
    assert tracker.available is False


@pytest.mark.asyncio
async def test_probe_reports_latency_and_detects_outage(tracker, flaky_redis):
    ping_ms = await tracker.probe()
    assert isinstance(ping_ms, int)
    assert ping_ms >= 0

    flaky_redis.down = True
    assert await tracker.probe() is None
    assert tracker.status is StoreStatus.ERRORED
    assert tracker.snapshot().last_error == "Connection refused"

    # unavailable trackers do not ping at all
    calls = flaky_redis.ping_calls
    assert await tracker.probe() is None
    assert flaky_redis.ping_calls == calls


@pytest.mark.asyncio
async def test_errored_recovers_on_success(tracker, flaky_redis):
    tracker.record_error(ConnectionError("boom"))
    assert tracker.status is StoreStatus.ERRORED
    tracker.mark_ok()
    assert tracker.status is StoreStatus.CONNECTED
    assert tracker.last_error is None


@pytest.mark.asyncio
async def test_supervisor_reconnects_after_outage(flaky_redis):
    flaky_redis.down = True
    tracker = StoreHealthTracker(
        flaky_redis,
        reconnect_attempts=50,
        reconnect_base_delay=0.01,
        reconnect_max_delay=0.02,
    )
    await tracker.connect()
    assert tracker.status is StoreStatus.ERRORED

    tracker.start()
    await asyncio.sleep(0.05)
    flaky_redis.down = False

    async def _wait_connected():
        while not tracker.available:
            await asyncio.sleep(0.01)

    await asyncio.wait_for(_wait_connected(), timeout=2)
    assert tracker.last_error is None
    await tracker.close()


@pytest.mark.asyncio
async def test_close_is_idempotent(flaky_redis):
    tracker = StoreHealthTracker(flaky_redis, health_interval=0.01)
    await tracker.connect()
    tracker.start()
    await tracker.close()
    await tracker.close()
    assert flaky_redis.closed is True
    assert tracker.available is False
    # a closed tracker does not restart its supervisor
    tracker.start()
    assert tracker._supervisor is None


class _UnexpectedFailureRedis:
    """Ping raises a non-store error once, then answers."""

    def __init__(self):
        self.calls = 0

    async def ping(self):
        self.calls += 1
        if self.calls == 1:
            raise RuntimeError("unexpected reply")
        return True

    async def aclose(self):
        return None


@pytest.mark.asyncio
async def test_supervisor_survives_unexpected_errors():
    client = _UnexpectedFailureRedis()
    tracker = StoreHealthTracker(
        client,  # type: ignore[arg-type]
        reconnect_base_delay=0.01,
        reconnect_max_delay=0.01,
        health_interval=0.01,
    )
    tracker.start()

    async def _wait_connected():
        while not tracker.available:
            await asyncio.sleep(0.01)

    await asyncio.wait_for(_wait_connected(), timeout=2)
    assert client.calls >= 2
    await tracker.close()
