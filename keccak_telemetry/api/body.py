"""Bounded JSON body decoding for the ingestion endpoint."""

import json
from typing import Any

from fastapi import Request

from keccak_telemetry.domain.errors import BodyTooLarge, InvalidJson
from keccak_telemetry.domain.models import EventPayload


async def read_body(request: Request, max_bytes: int) -> bytes:
    """Read the request body incrementally, aborting past ``max_bytes``."""
    declared = request.headers.get("content-length")
    if declared is not None and declared.isdigit() and int(declared) > max_bytes:
        raise BodyTooLarge()

    chunks = []
    total = 0
    async for chunk in request.stream():
        total += len(chunk)
        if total > max_bytes:
            raise BodyTooLarge()
        chunks.append(chunk)
    return b"".join(chunks)


def parse_event_payload(raw: bytes) -> EventPayload:
    """Decode the body into an EventPayload; an empty body is ``{}``."""
    if not raw:
        return EventPayload()
    try:
        data: Any = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, ValueError, RecursionError) as exc:
        raise InvalidJson() from exc
    if not isinstance(data, dict):
        return EventPayload()
    return EventPayload.model_validate(data)


async def read_event_payload(request: Request, max_bytes: int) -> EventPayload:
    return parse_event_payload(await read_body(request, max_bytes))
