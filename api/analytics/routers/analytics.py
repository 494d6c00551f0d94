"""Analytics endpoints.

POST /api/analytics/event  -- record a pageview or heartbeat (204)
GET  /api/analytics/live   -- live visitors, optionally per path (public)
GET  /api/analytics/reads  -- unique reads for one post (public)
POST /api/analytics/reads  -- unique reads for up to 50 posts (public)
GET  /api/analytics/stats  -- pageview dashboard (bearer token)
"""

from datetime import datetime, timezone
from typing import Optional

import structlog
from fastapi import APIRouter, HTTPException, Request, Response
from pydantic import ValidationError

from analytics.dependencies import DbSession, StatsAuth
from analytics.metrics import bot_events_dropped, events_rejected
from analytics.middleware.rate_limiter import EventRateLimit
from analytics.schemas.analytics import (
    EventBody,
    LiveResponse,
    ReadCountResponse,
    ReadCountsResponse,
    ReadsBatchBody,
    StatsResponse,
)
from analytics.services.ingest import clean_event, is_bot, record_event
from analytics.services.queries import (
    count_live,
    get_read_count,
    get_read_counts,
    get_stats,
)

log = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/analytics", tags=["analytics"])


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@router.post("/event", status_code=204, response_class=Response)
async def track_event(
    request: Request,
    db: DbSession,
    _rate: EventRateLimit,
) -> Response:
    """Record a beacon from the site.

    Crawlers get a 204 and nothing is stored, so they can't tell the
    difference. The crawler check runs before the body is parsed, so even a
    malformed crawler beacon is acknowledged. Heartbeats keep the live session
    fresh but never count as views.
    """
    if is_bot(request.headers.get("User-Agent")):
        bot_events_dropped.inc()
        log.debug("bot_event_dropped", user_agent=request.headers.get("User-Agent"))
        return Response(status_code=204)

    try:
        body = EventBody.model_validate(await request.json())
    except (ValueError, ValidationError):
        events_rejected.labels(reason="malformed").inc()
        raise HTTPException(status_code=400, detail="Bad Request")

    event = clean_event(body)
    if event is None:
        events_rejected.labels(reason="invalid").inc()
        raise HTTPException(status_code=400, detail="Bad Request")

    await record_event(db, event, _utcnow())
    return Response(status_code=204)


@router.get("/live", response_model=LiveResponse)
async def live_visitors(db: DbSession, path: Optional[str] = None) -> LiveResponse:
    count = await count_live(db, _utcnow(), path)
    return LiveResponse(count=count)


@router.get("/reads", response_model=ReadCountResponse)
async def read_count(db: DbSession, path: Optional[str] = None) -> ReadCountResponse:
    if not path:
        raise HTTPException(status_code=400, detail="Bad Request: path required")
    return ReadCountResponse(path=path, count=await get_read_count(db, path))


@router.post("/reads", response_model=ReadCountsResponse)
async def read_counts(body: ReadsBatchBody, db: DbSession) -> ReadCountsResponse:
    if not body.paths:
        raise HTTPException(status_code=400, detail="Bad Request: paths array required")
    return ReadCountsResponse(counts=await get_read_counts(db, body.paths))


@router.get("/stats", response_model=StatsResponse)
async def stats(_auth: StatsAuth, db: DbSession, days: int = 7) -> StatsResponse:
    """Pageview dashboard over the last `days` days (clamped to 1..90)."""
    data = await get_stats(db, days, _utcnow().date())
    return StatsResponse(**data)
