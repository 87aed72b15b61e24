from datetime import datetime, timedelta, timezone

from keccak_telemetry.metrics.bucketing import day_bucket, enumerate_day_buckets, utc_today


def test_day_bucket_uses_utc_date():
    # 23:30 at UTC-5 is already the next day in UTC
    local = datetime(2026, 1, 31, 23, 30, tzinfo=timezone(timedelta(hours=-5)))
    assert day_bucket(0, local) == "2026-02-01"


def test_day_bucket_offsets_cross_month_and_year():
    now = datetime(2026, 1, 1, 0, 5, tzinfo=timezone.utc)
    assert day_bucket(1, now) == "2025-12-31"
    assert day_bucket(31, now) == "2025-12-01"


def test_enumerate_orders_today_first():
    now = datetime(2024, 3, 2, 8, 0, tzinfo=timezone.utc)
    assert enumerate_day_buckets(3, now) == ["2024-03-02", "2024-03-01", "2024-02-29"]


def test_enumerate_zero_days_is_empty():
    assert enumerate_day_buckets(0) == []


def test_utc_today_defaults_to_now():
    assert utc_today() == datetime.now(timezone.utc).date()
