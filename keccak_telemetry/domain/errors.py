"""Error taxonomy for the telemetry API.

Every error carries the HTTP status and the machine-readable ``error`` code
rendered by the API layer:

- ValidationError: malformed client input, never touches the store.
- AuthError: admin policy decisions for the stats endpoint.
- StoreFault: Redis connection or command failures.
"""

from typing import Any, Dict, Optional


class TelemetryError(Exception):
    status_code: int = 500
    code: str = "internal_error"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.code)

    def payload(self) -> Dict[str, Any]:
        return {"error": self.code}


# Validation
class ValidationError(TelemetryError):
    status_code = 400


class InvalidJson(ValidationError):
    code = "invalid_json"


class BodyTooLarge(ValidationError):
    code = "body_too_large"


class InvalidEventName(ValidationError):
    code = "invalid_event_name"


# Auth
class AuthError(TelemetryError):
    pass


class AdminNotConfigured(AuthError):
    status_code = 403
    code = "admin_token_not_configured"


class Unauthorized(AuthError):
    status_code = 401
    code = "unauthorized"


# Store
class StoreFault(TelemetryError):
    pass


class StoreUnavailable(StoreFault):
    status_code = 503
    code = "redis_unavailable"

    def __init__(self, last_error: Optional[str] = None):
        super().__init__(last_error or self.code)
        self.last_error = last_error

    def payload(self) -> Dict[str, Any]:
        return {"error": self.code, "lastError": self.last_error}


class StatsQueryFailed(StoreFault):
    status_code = 500
    code = "stats_query_failed"

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail

    def payload(self) -> Dict[str, Any]:
        return {"error": self.code, "detail": self.detail}
