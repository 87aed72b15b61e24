from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from keccak_telemetry.core.logger import get_logger
from keccak_telemetry.domain.errors import BodyTooLarge, TelemetryError

logger = get_logger("api.errors")


async def telemetry_error_handler(request: Request, exc: TelemetryError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.warning(
            "request_failed",
            extra={"path": request.url.path, "error": exc.code},
        )
    headers = {"Connection": "close"} if isinstance(exc, BodyTooLarge) else None
    return JSONResponse(
        status_code=exc.status_code, content=exc.payload(), headers=headers
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(TelemetryError, telemetry_error_handler)  # type: ignore[arg-type]
