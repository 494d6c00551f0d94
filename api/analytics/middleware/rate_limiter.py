"""Fixed-window rate limiting backed by Redis.

Keyed by client IP and the current minute. Fails open: if Redis is down or
not configured, requests pass and a warning is logged.
"""

import time
from typing import Annotated

import structlog
from fastapi import Depends, HTTPException, Request

from analytics.config import settings
from analytics.metrics import events_rejected
from analytics.services.ingest import is_bot

log = structlog.get_logger(__name__)

WINDOW_SECONDS = 60


def _client_ip(request: Request) -> str:
    forwarded = request.headers.get("CF-Connecting-IP") or request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


async def check_event_rate(request: Request) -> None:
    # Crawler beacons are dropped by the handler and must not spend quota
    if is_bot(request.headers.get("User-Agent")):
        return

    redis = getattr(request.app.state, "redis", None)
    if redis is None:
        return

    window = int(time.time()) // WINDOW_SECONDS
    key = f"ratelimit:event:{_client_ip(request)}:{window}"
    try:
        count = await redis.incr(key)
        if count == 1:
            await redis.expire(key, WINDOW_SECONDS)
    except Exception as exc:
        log.warning("rate_limiter_unavailable", error=str(exc))
        return

    if count > settings.event_rate_limit:
        events_rejected.labels(reason="rate_limited").inc()
        raise HTTPException(
            status_code=429,
            detail="Too Many Requests",
            headers={"Retry-After": str(WINDOW_SECONDS)},
        )


EventRateLimit = Annotated[None, Depends(check_event_rate)]
