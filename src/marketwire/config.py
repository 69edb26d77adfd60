"""Application configuration via environment variables.

Uses pydantic-settings to load config from env vars with MARKETWIRE_ prefix.
No YAML files, no file-based config — just env vars (12-factor app style).

Learn: the bounded-log capacities and the presence TTL live here so that
every manager reads the same numbers. The defaults match what the web and
mobile clients expect (100 chat messages, 100 notifications, 1000 searches,
5 minute presence window).
"""

from pydantic import model_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """All app configuration. Set via MARKETWIRE_* env vars."""

    # Redis
    redis_url: str = "redis://localhost:6379/0"
    redis_connect_timeout: float = 10.0
    redis_health_check_interval: int = 30

    # Server
    environment: str = "development"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 8000

    # CORS
    cors_origins: list[str] = [
        "http://localhost:3000",
        "http://localhost:3001",
    ]

    # Bounded logs
    chat_log_capacity: int = 100
    notification_log_capacity: int = 100
    search_log_capacity: int = 1000
    suggestion_capacity: int = 100  # members kept in the suggestion index

    # Presence
    presence_ttl_seconds: int = 300

    # Rate limiting (fixed window per client IP)
    rate_limit_requests: int = 100
    rate_limit_window_seconds: int = 900

    model_config = {"env_prefix": "MARKETWIRE_"}

    @model_validator(mode="after")
    def validate_limits(self):
        """Reject capacities and windows that would make a log unbounded or empty."""
        for name in (
            "chat_log_capacity",
            "notification_log_capacity",
            "search_log_capacity",
            "suggestion_capacity",
            "presence_ttl_seconds",
            "rate_limit_requests",
            "rate_limit_window_seconds",
        ):
            if getattr(self, name) <= 0:
                raise ValueError(f"MARKETWIRE_{name.upper()} must be a positive integer")
        return self


# Singleton: import this everywhere
settings = Settings()
