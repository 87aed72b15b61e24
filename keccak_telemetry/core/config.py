from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Service
    service_name: str = "keccak-model"
    host: str = "0.0.0.0"
    port: int = 3000

    # Redis (empty url disables telemetry storage)
    redis_url: str = ""
    redis_key_prefix: str = "keccak"
    redis_socket_timeout_seconds: float = 2.0
    redis_connect_timeout_seconds: float = 2.0
    redis_reconnect_base_delay_seconds: float = 0.5
    redis_reconnect_max_delay_seconds: float = 30.0
    redis_reconnect_attempts: int = 6
    redis_health_interval_seconds: float = 5.0

    # Day buckets
    day_bucket_ttl_days: int = 120

    # Ingestion
    max_body_bytes: int = 64 * 1024

    # Stats
    admin_token: str = ""
    stats_default_days: int = 7
    stats_max_days: int = 30

    # Logging
    app_log_level: str = "INFO"
    app_log_redaction_patterns: list[str] = [
        "password",
        "token",
        "secret",
        "authorization",
        "cookie",
    ]
    app_environment: str = "production"

    @property
    def redis_enabled(self) -> bool:
        return bool(self.redis_url)

    @property
    def day_bucket_ttl_seconds(self) -> int:
        return self.day_bucket_ttl_days * 24 * 60 * 60


settings = Settings()


@lru_cache
def get_settings() -> Settings:
    """Settings dependency (overridable in tests)."""
    return settings
