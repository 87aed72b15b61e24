class RedisKeys:
    """Centralised Redis key pattern definitions"""

    # Day buckets
    EVENT_COUNTER_HASH = "{prefix}:events:{date}"
    SESSION_SET = "{prefix}:sessions:{date}"

    # Reserved hash field holding the sum of all event counters of a day
    TOTAL_FIELD = "_total"

    DEFAULT_PREFIX = "keccak"

    @classmethod
    def day_key(cls, namespace: str, day: str, prefix: str = DEFAULT_PREFIX) -> str:
        """Generate the bucket key for a namespace ("events" | "sessions")."""
        patterns = {
            "events": cls.EVENT_COUNTER_HASH,
            "sessions": cls.SESSION_SET,
        }
        pattern = patterns.get(namespace)
        if not pattern:
            raise ValueError(f"Unknown bucket namespace: {namespace}")
        return pattern.format(prefix=prefix, date=day)

    @classmethod
    def events_key(cls, day: str, prefix: str = DEFAULT_PREFIX) -> str:
        return cls.day_key("events", day, prefix)

    @classmethod
    def sessions_key(cls, day: str, prefix: str = DEFAULT_PREFIX) -> str:
        return cls.day_key("sessions", day, prefix)
