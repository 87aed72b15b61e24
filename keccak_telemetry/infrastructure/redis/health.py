import asyncio
import time
from enum import Enum
from typing import Optional

import redis.asyncio as redis
from redis.exceptions import RedisError

from keccak_telemetry.core.config import Settings
from keccak_telemetry.core.logger import get_logger
from keccak_telemetry.domain.models import HealthState
from keccak_telemetry.metrics.registry import STORE_ERRORS_TOTAL
from keccak_telemetry.utils.retry import retry_async

logger = get_logger("telemetry.store")

# Failures that mean "the store is unreachable or misbehaving"
STORE_ERRORS = (RedisError, OSError, asyncio.TimeoutError)


class StoreStatus(str, Enum):
    DISABLED = "disabled"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    ERRORED = "errored"


class StoreHealthTracker:
    """Owns the Redis client and its health state.

    Notes:
        - ``DISABLED`` is terminal: no url was configured, nothing is ever
          sent to Redis.
        - ``CONNECTING`` and ``ERRORED`` are both "unavailable" to callers;
          only ``CONNECTED`` lets store calls through.
        - Components that perform their own I/O report the outcome through
          ``mark_ok`` / ``record_error``; everything else reads ``snapshot``.
    """

    def __init__(
        self,
        client: Optional[redis.Redis] = None,
        *,
        reconnect_attempts: int = 6,
        reconnect_base_delay: float = 0.5,
        reconnect_max_delay: float = 30.0,
        health_interval: float = 5.0,
    ):
        self.client = client
        self.enabled = client is not None
        self.status = StoreStatus.CONNECTING if self.enabled else StoreStatus.DISABLED
        self.last_error: Optional[str] = None
        self.reconnect_attempts = reconnect_attempts
        self.reconnect_base_delay = reconnect_base_delay
        self.reconnect_max_delay = reconnect_max_delay
        self.health_interval = health_interval
        self._supervisor: Optional[asyncio.Task] = None
        self._closed = False

    @classmethod
    def from_settings(cls, settings: Settings) -> "StoreHealthTracker":
        client = None
        if settings.redis_enabled:
            client = redis.Redis.from_url(
                settings.redis_url,
                decode_responses=True,
                socket_timeout=settings.redis_socket_timeout_seconds,
                socket_connect_timeout=settings.redis_connect_timeout_seconds,
            )
        return cls(
            client,
            reconnect_attempts=settings.redis_reconnect_attempts,
            reconnect_base_delay=settings.redis_reconnect_base_delay_seconds,
            reconnect_max_delay=settings.redis_reconnect_max_delay_seconds,
            health_interval=settings.redis_health_interval_seconds,
        )

    @property
    def available(self) -> bool:
        return self.status is StoreStatus.CONNECTED

    def snapshot(self) -> HealthState:
        return HealthState(
            enabled=self.enabled,
            connected=self.available,
            last_error=self.last_error,
        )

    # State transitions
    def mark_ok(self) -> None:
        if self.status in (StoreStatus.CONNECTING, StoreStatus.ERRORED):
            self.status = StoreStatus.CONNECTED
            self.last_error = None
            logger.info("store_connected")

    def record_error(self, exc: BaseException) -> None:
        if self.status is StoreStatus.DISABLED:
            return
        was_connected = self.available
        self.status = StoreStatus.ERRORED
        self.last_error = str(exc) or type(exc).__name__
        STORE_ERRORS_TOTAL.inc()
        logger.warning(
            "store_error",
            extra={
                "error_type": type(exc).__name__,
                "error": self.last_error,
                "was_connected": was_connected,
            },
        )

    # I/O
    async def connect(self) -> bool:
        """Single connection attempt; never raises on store failures."""
        if self.client is None:
            return False
        try:
            await self.client.ping()
        except STORE_ERRORS as exc:
            self.record_error(exc)
            return False
        self.mark_ok()
        return True

    async def probe(self) -> Optional[int]:
        """Round-trip PING latency in ms, or None when the store is unavailable."""
        if self.client is None or not self.available:
            return None
        started = time.perf_counter()
        try:
            await self.client.ping()
        except STORE_ERRORS as exc:
            self.record_error(exc)
            return None
        self.mark_ok()
        return round((time.perf_counter() - started) * 1000)

    # Background reconnection
    def start(self) -> None:
        if self.client is None or self._supervisor is not None or self._closed:
            return
        self._supervisor = asyncio.create_task(
            self._supervise(), name="redis-supervisor"
        )

    async def _supervise(self) -> None:
        while True:
            try:
                await self._supervise_once()
            except Exception:  # noqa: BLE001
                logger.exception("store_supervisor_error")
                await asyncio.sleep(self.reconnect_max_delay)

    async def _supervise_once(self) -> None:
        if self.available:
            await asyncio.sleep(self.health_interval)
            await self.probe()
            return
        try:
            await retry_async(
                self._ping,
                retries=self.reconnect_attempts,
                base_delay=self.reconnect_base_delay,
                max_delay=self.reconnect_max_delay,
                jitter=0.2,
                retry_on=STORE_ERRORS,
                on_retry=self._on_retry,
            )
        except STORE_ERRORS as exc:
            self.record_error(exc)
            logger.warning(
                "store_reconnect_exhausted",
                extra={"attempts": self.reconnect_attempts, "error": str(exc)},
            )
            await asyncio.sleep(self.reconnect_max_delay)
        else:
            self.mark_ok()

    async def _ping(self) -> None:
        await self.client.ping()  # type: ignore[union-attr]

    def _on_retry(self, attempt: int, exc: BaseException, sleep_for: float) -> None:
        self.record_error(exc)
        logger.info(
            "store_reconnect_retry",
            extra={
                "attempt": attempt,
                "error": str(exc),
                "sleep_for": round(sleep_for, 2),
            },
        )

    async def close(self) -> None:
        """Stop the supervisor and release the client. Safe to call twice."""
        if self._closed:
            return
        self._closed = True
        if self._supervisor is not None:
            self._supervisor.cancel()
            try:
                await self._supervisor
            except asyncio.CancelledError:  # expected during shutdown
                logger.debug("store_supervisor_cancelled")
            self._supervisor = None
        if self.client is None:
            return
        try:
            await self.client.aclose()
        except STORE_ERRORS:
            logger.debug("store_close_failed", exc_info=True)
        if self.status is not StoreStatus.DISABLED:
            self.status = StoreStatus.CONNECTING
        logger.info("store_closed")
