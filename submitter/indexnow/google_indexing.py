"""Google Indexing API client.

Google takes one URL per `urlNotifications:publish` call, authorised by an
OAuth access token minted from a service account. Like IndexNowClient, every
URL reports its outcome instead of raising.
"""

import asyncio
import json
from pathlib import Path
from typing import Optional

import google.auth.exceptions
import google.auth.transport.requests
import httpx
import structlog
from google.oauth2 import service_account

from indexnow.client import SiteClient, SubmissionResult
from indexnow.config import settings

log = structlog.get_logger(__name__)

INDEXING_SCOPE = "https://www.googleapis.com/auth/indexing"
NOTIFICATION_TYPES = ("URL_UPDATED", "URL_DELETED")


class ServiceAccountError(Exception):
    """No usable service account credentials."""


def load_service_account_info() -> dict:
    """Service account JSON from SERVICE_ACCOUNT, else from the local key file."""
    info = _read_service_account()
    if not isinstance(info, dict):
        raise ServiceAccountError("Service account JSON must be an object")
    return info


def _read_service_account():
    if settings.google_service_account:
        try:
            return json.loads(settings.google_service_account)
        except json.JSONDecodeError as exc:
            raise ServiceAccountError(f"Failed to parse SERVICE_ACCOUNT: {exc}") from exc

    path = Path(settings.google_service_account_file)
    if path.is_file():
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise ServiceAccountError(f"Failed to read {path}: {exc}") from exc

    raise ServiceAccountError(
        "No service account found. Set SERVICE_ACCOUNT (JSON string) "
        f"or place {settings.google_service_account_file} in the working directory."
    )


def get_access_token(info: dict) -> str:
    """Exchange the service account for a short-lived Indexing API token."""
    try:
        credentials = service_account.Credentials.from_service_account_info(
            info, scopes=[INDEXING_SCOPE]
        )
        credentials.refresh(google.auth.transport.requests.Request())
    except (ValueError, google.auth.exceptions.GoogleAuthError) as exc:
        raise ServiceAccountError(f"Google authentication failed: {exc}") from exc
    return credentials.token


class GoogleIndexingClient(SiteClient):
    def __init__(
        self, access_token: str, transport: Optional[httpx.AsyncBaseTransport] = None
    ) -> None:
        super().__init__(transport)
        self.access_token = access_token

    async def publish(
        self, domain: str, paths: list[str], notification_type: str = "URL_UPDATED"
    ) -> list[SubmissionResult]:
        """Notify Google about each path on `domain`. Returns one result per URL."""
        results = []
        for i, path in enumerate(paths):
            if i and settings.google_request_delay > 0:
                await asyncio.sleep(settings.google_request_delay)

            full_url = f"https://{domain}{path}"
            result = SubmissionResult(domain=domain, url_count=1)
            try:
                resp = await self.client.post(
                    settings.google_indexing_endpoint,
                    json={"url": full_url, "type": notification_type},
                    headers={"Authorization": f"Bearer {self.access_token}"},
                )
            except httpx.HTTPError as exc:
                result.detail = str(exc) or exc.__class__.__name__
                log.error("google_publish_failed", url=full_url, error=result.detail)
                results.append(result)
                continue

            result.status_code = resp.status_code
            if resp.is_success:
                result.detail = f"notifyTime: {_notify_time(resp)}"
                log.info("google_published", url=full_url, type=notification_type)
            else:
                result.detail = resp.text
                log.error(
                    "google_publish_failed", url=full_url, status_code=resp.status_code
                )
            results.append(result)
        return results


def _notify_time(resp: httpx.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        return "N/A"
    if not isinstance(body, dict):
        return "N/A"
    latest = (body.get("urlNotificationMetadata") or {}).get("latestUpdate") or {}
    return latest.get("notifyTime") or "N/A"
