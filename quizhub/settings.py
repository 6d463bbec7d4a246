from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # App
    app_env: str = "dev"
    log_level: str = "INFO"

    # Remote cache
    redis_url: str = "redis://redis:6379/0"
    redis_max_reconnect_attempts: int = 20
    redis_backoff_base_ms: int = 500
    redis_backoff_max_ms: int = 5000
    redis_max_reconnect_cycles: int = 0  # 0 -> unlimited
    redis_health_check_interval_seconds: float = 5.0
    redis_socket_timeout_seconds: float = 2.0

    # One-time tokens
    otp_ttl_seconds: int = 600
    otp_code_width: int = 6

    # Rate limits (sliding windows)
    otp_request_limit: int = 5
    otp_request_window_seconds: int = 86400
    login_attempt_limit: int = 10
    login_attempt_window_seconds: int = 86400
    message_daily_limit: int = 3
    message_window_seconds: int = 86400

    # Read-through caches
    stats_ttl_seconds: int = 300

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
