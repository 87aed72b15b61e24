"""Prometheus instruments for the telemetry service.

Thin wrappers around prometheus_client primitives with service name
prefixing and basic naming validation. Keeps the default registry so the
HTTP instrumentator and these instruments are exposed together.
"""

from __future__ import annotations

import re

from prometheus_client import Counter, Histogram

SERVICE_PREFIX = "keccak"

_NAME_RE = re.compile(r"^[a-z_][a-z0-9_]*$")


def _validate(name: str) -> str:
    if not _NAME_RE.match(name):  # pragma: no cover - simple guard
        raise ValueError(
            f"Invalid metric name '{name}'. Use snake_case alphanumerics/underscores."
        )
    return name


def _prefix(name: str, service: str | None) -> str:
    if service and not name.startswith(service + "_"):
        return f"{service}_{name}"
    return name


def get_counter(
    name: str, documentation: str, service: str | None = SERVICE_PREFIX
) -> Counter:
    return Counter(_validate(_prefix(name, service)), documentation)


def get_histogram(
    name: str,
    documentation: str,
    service: str | None = SERVICE_PREFIX,
    buckets: list[float] | None = None,
) -> Histogram:
    full_name = _validate(_prefix(name, service))
    if buckets is None:
        return Histogram(full_name, documentation)
    return Histogram(full_name, documentation, buckets=buckets)


# Ingestion
EVENTS_RECEIVED_TOTAL = get_counter(
    "events_received_total", "Events that passed validation."
)
EVENTS_STORED_TOTAL = get_counter(
    "events_stored_total", "Events written to Redis."
)
EVENTS_DROPPED_TOTAL = get_counter(
    "events_dropped_total", "Accepted events not stored (Redis unavailable or failed)."
)
INGEST_LATENCY_SECONDS = get_histogram(
    "ingest_latency_seconds", "Latency of the ingest transaction."
)

# Store
STORE_ERRORS_TOTAL = get_counter(
    "store_errors_total", "Redis operation failures recorded into health state."
)

# Stats
STATS_QUERIES_TOTAL = get_counter(
    "stats_queries_total", "Authorized stats queries."
)
STATS_QUERY_FAILURES_TOTAL = get_counter(
    "stats_query_failures_total", "Stats queries that failed while reading Redis."
)


__all__ = [
    "get_counter",
    "get_histogram",
    "EVENTS_RECEIVED_TOTAL",
    "EVENTS_STORED_TOTAL",
    "EVENTS_DROPPED_TOTAL",
    "INGEST_LATENCY_SECONDS",
    "STORE_ERRORS_TOTAL",
    "STATS_QUERIES_TOTAL",
    "STATS_QUERY_FAILURES_TOTAL",
]
