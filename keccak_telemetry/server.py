"""Process entrypoint: uvicorn with single-shot shutdown signals."""

from __future__ import annotations

from types import FrameType
from typing import Optional

import uvicorn

from keccak_telemetry.core.config import settings
from keccak_telemetry.core.logger import configure_logging, get_logger

logger = get_logger("telemetry.server")


class TelemetryServer(uvicorn.Server):
    """First SIGINT/SIGTERM drains in-flight requests; later ones are ignored."""

    def handle_exit(self, sig: int, frame: Optional[FrameType]) -> None:
        if self.should_exit:
            logger.info("shutdown_in_progress", extra={"signal": sig})
            return
        logger.info("signal_received", extra={"signal": sig, "action": "drain"})
        self.should_exit = True


def build_server(host: Optional[str] = None, port: Optional[int] = None) -> TelemetryServer:
    config = uvicorn.Config(
        "keccak_telemetry.main:app",
        host=host or settings.host,
        port=port or settings.port,
        log_config=None,
        proxy_headers=True,
    )
    return TelemetryServer(config)


def main() -> None:  # pragma: no cover - small wrapper
    configure_logging()
    server = build_server()
    logger.info(
        "telemetry_listening", extra={"host": server.config.host, "port": server.config.port}
    )
    try:
        server.run()
    except KeyboardInterrupt:  # noqa: PIE786
        logger.info("keyboard_interrupt_shutdown")


if __name__ == "__main__":  # pragma: no cover
    main()
