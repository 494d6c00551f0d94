"""HTTP clients for IndexNow and the site's own sitemaps.

SiteClient wraps httpx.AsyncClient and reads the sitemaps. IndexNowClient
batches submissions (IndexNow accepts up to 10,000 URLs per request) and
every batch reports its outcome instead of raising, so one failing domain
never blocks the next. The Google Indexing client lives in google_indexing.py.
"""

import re
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlparse

import httpx
import structlog

from indexnow.config import settings

log = structlog.get_logger(__name__)

SITEMAP_PATHS = ("/sitemap.xml", "/blog-sitemap.xml")

_LOC = re.compile(r"<loc>([^<]+)</loc>")

STATUS_MEANINGS = {
    200: "OK - URLs submitted successfully",
    202: "Accepted - URLs received, validation pending",
    400: "Bad Request - Invalid format",
    403: "Forbidden - Key not valid",
    422: "Unprocessable - URLs don't match host",
    429: "Too Many Requests - Rate limited",
}


@dataclass
class SubmissionResult:
    domain: str
    url_count: int
    status_code: Optional[int] = None
    detail: str = ""

    @property
    def ok(self) -> bool:
        return self.status_code is not None and 200 <= self.status_code < 300


def extract_sitemap_paths(xml: str) -> list[str]:
    """Path component of every <loc> entry; unparseable entries kept verbatim."""
    paths = []
    for loc in _LOC.findall(xml):
        parsed = urlparse(loc.strip())
        paths.append(parsed.path if parsed.scheme and parsed.netloc else loc.strip())
    return paths


def chunked(items: list[str], size: int) -> list[list[str]]:
    return [items[i : i + size] for i in range(0, len(items), size)]


class SiteClient:
    """Thin wrapper around httpx.AsyncClient that can read the site's sitemaps.

    Base for the search-engine clients, which all need the same sitemap
    fallback when git reports no changes.
    """

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None) -> None:
        self.client = httpx.AsyncClient(
            timeout=httpx.Timeout(settings.request_timeout, connect=5.0),
            transport=transport,
            follow_redirects=True,
        )

    async def fetch_sitemap_paths(self, domain: str) -> list[str]:
        """All page paths listed in the domain's sitemaps.

        A sitemap that fails to load is skipped with a warning.
        """
        paths: list[str] = []
        for sitemap in SITEMAP_PATHS:
            url = f"https://{domain}{sitemap}"
            try:
                resp = await self.client.get(url)
            except httpx.HTTPError as exc:
                log.warning("sitemap_fetch_failed", url=url, error=str(exc))
                continue
            if resp.status_code != 200:
                log.warning("sitemap_fetch_failed", url=url, status_code=resp.status_code)
                continue
            paths.extend(extract_sitemap_paths(resp.text))
        return paths

    async def close(self) -> None:
        """Close the underlying httpx client and release connections."""
        await self.client.aclose()


class IndexNowClient(SiteClient):
    """Batched IndexNow submissions keyed by the site's IndexNow key."""

    def __init__(self, key: str, transport: Optional[httpx.AsyncBaseTransport] = None) -> None:
        super().__init__(transport)
        self.key = key

    def build_payload(self, domain: str, urls: list[str]) -> dict:
        return {
            "host": domain,
            "key": self.key,
            "keyLocation": f"https://{domain}/{self.key}.txt",
            "urlList": urls,
        }

    async def submit(self, domain: str, paths: list[str]) -> list[SubmissionResult]:
        """POST `paths` for `domain` in batches. Returns one result per batch."""
        full_urls = [f"https://{domain}{p}" for p in paths]
        results = []
        for batch in chunked(full_urls, settings.max_urls_per_request):
            result = SubmissionResult(domain=domain, url_count=len(batch))
            try:
                resp = await self.client.post(
                    settings.indexnow_endpoint,
                    json=self.build_payload(domain, batch),
                    headers={"Content-Type": "application/json; charset=utf-8"},
                )
            except httpx.HTTPError as exc:
                result.detail = str(exc) or exc.__class__.__name__
                log.error("indexnow_submit_failed", domain=domain, error=result.detail)
            else:
                result.status_code = resp.status_code
                result.detail = STATUS_MEANINGS.get(resp.status_code, resp.reason_phrase)
                log.info(
                    "indexnow_submitted",
                    domain=domain,
                    status_code=resp.status_code,
                    url_count=len(batch),
                )
            results.append(result)
        return results
