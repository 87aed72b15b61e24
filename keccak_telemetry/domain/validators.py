import math
import re
from typing import Any

EVENT_NAME_RE = re.compile(r"^[A-Za-z0-9_:-]{1,64}$")
SESSION_ID_RE = re.compile(r"^[A-Za-z0-9-]{6,80}$")
_LEADING_INT_RE = re.compile(r"^\s*([+-]?\d+)")

DEFAULT_DAYS = 7
MIN_DAYS = 1
MAX_DAYS = 30


def is_valid_event_name(value: Any) -> bool:
    return isinstance(value, str) and EVENT_NAME_RE.fullmatch(value) is not None


def is_valid_session_id(value: Any) -> bool:
    return isinstance(value, str) and SESSION_ID_RE.fullmatch(value) is not None


def clamp_days(
    value: Any,
    default: int = DEFAULT_DAYS,
    maximum: int = MAX_DAYS,
) -> int:
    """Normalise a requested day count into ``[1, maximum]``.

    Strings are read up to their first non-digit ("3abc" -> 3). Anything that
    does not yield a finite number falls back to ``default``.
    """
    if isinstance(value, bool) or value is None:
        return default
    if isinstance(value, str):
        match = _LEADING_INT_RE.match(value)
        if not match:
            return default
        value = int(match.group(1))
    if not isinstance(value, (int, float)):
        return default
    if isinstance(value, float) and not math.isfinite(value):
        return default
    return min(maximum, max(MIN_DAYS, math.floor(value)))
