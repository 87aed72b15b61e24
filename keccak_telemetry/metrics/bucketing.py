from datetime import date, datetime, timedelta, timezone
from typing import List, Optional


def utc_today(now: Optional[datetime] = None) -> date:
    now = now or datetime.now(timezone.utc)
    return now.astimezone(timezone.utc).date()


def day_bucket(days_back: int = 0, now: Optional[datetime] = None) -> str:
    """``YYYY-MM-DD`` of the UTC day ``days_back`` days before ``now``."""
    return (utc_today(now) - timedelta(days=days_back)).isoformat()


def enumerate_day_buckets(days: int, now: Optional[datetime] = None) -> List[str]:
    """Day buckets for offsets ``0..days-1``, today first."""
    today = utc_today(now)
    return [(today - timedelta(days=i)).isoformat() for i in range(days)]
