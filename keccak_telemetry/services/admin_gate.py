import hmac
from typing import Optional

from keccak_telemetry.domain.errors import AdminNotConfigured, Unauthorized


def resolve_supplied_token(
    header_token: Optional[str], query_token: Optional[str]
) -> Optional[str]:
    """Header wins over the query parameter when both are present."""
    return header_token or query_token or None


def authorize(configured_token: Optional[str], supplied_token: Optional[str]) -> None:
    if not configured_token:
        raise AdminNotConfigured()
    if supplied_token is None or not hmac.compare_digest(
        supplied_token.encode("utf-8"), configured_token.encode("utf-8")
    ):
        raise Unauthorized()
