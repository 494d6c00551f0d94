"""Search-engine submitter configuration via Pydantic Settings.

All settings are configurable via environment variables or .env file.
"""

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class SubmitterSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    indexnow_key: str = ""
    indexnow_endpoint: str = "https://api.indexnow.org/indexnow"
    site_url: str = "https://umesh-malik.com"
    site_url_alt: str = "https://umesh-malik.in"

    # Google Indexing API: service account JSON inline (CI) or from a file (local)
    google_indexing_endpoint: str = "https://indexing.googleapis.com/v3/urlNotifications:publish"
    google_service_account: str = Field(
        default="",
        validation_alias=AliasChoices("SERVICE_ACCOUNT", "GOOGLE_SERVICE_ACCOUNT"),
    )
    google_service_account_file: str = "service_account.json"
    # Pause between publish calls; the API quota is 200 requests a day
    google_request_delay: float = 0.1

    # Repository layout, relative to the repo root the CLI runs in
    posts_dir: str = "portfolio/src/lib/posts"

    max_urls_per_request: int = 10000
    request_timeout: float = 10.0


settings = SubmitterSettings()
