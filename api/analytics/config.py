from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    database_url: str = "sqlite+aiosqlite:///./analytics.db"
    redis_url: str = "redis://localhost:6379"
    app_name: str = "Site Analytics"
    debug: bool = False

    # Bearer token for GET /api/analytics/stats; empty disables the endpoint
    analytics_secret: str = ""
    allowed_origins: list[str] = [
        "https://umesh-malik.com",
        "https://www.umesh-malik.com",
        "https://umesh-malik.in",
        "https://www.umesh-malik.in",
    ]
    # Built site to serve for non-API paths (None = API only)
    static_dir: Optional[str] = None

    max_path_length: int = 200
    max_source_length: int = 50
    max_session_id_length: int = 100
    max_batch_paths: int = 50
    max_stats_days: int = 90
    top_pages_limit: int = 20

    live_window_seconds: int = 60
    stale_session_seconds: int = 120
    dedup_retention_hours: int = 48
    event_retention_days: int = 0  # 0 keeps events forever
    sweep_interval_seconds: int = 300

    # Per client IP, per minute
    event_rate_limit: int = 120


settings = Settings()
