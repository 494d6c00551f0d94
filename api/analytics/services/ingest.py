"""Event ingestion service.

Turns a raw beacon into a fixed sequence of parameterized writes:

1. Upsert the live session marker (heartbeats keep it alive)
2. Append the event row
3. For blog post pageviews, claim the (path, session, day) reader slot and,
   only if the claim is new, bump the post's read counter

All statements share one transaction, so a failed request leaves no
partial state behind.
"""

import re
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

import structlog
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from analytics.config import settings
from analytics.metrics import events_recorded, reads_counted
from analytics.models.event import Event
from analytics.schemas.analytics import EventBody

log = structlog.get_logger(__name__)

PAGEVIEW = "pageview"
HEARTBEAT = "heartbeat"

_UNSAFE_CHARS = re.compile(r"[^\w\-/.:@]", re.ASCII)

# Must be /blog/<slug>, not /blog, /blog/, /blog/category/*, /blog/tag/*
_BLOG_POST_PATH = re.compile(r"^/blog/[^/]+$")

BOT_PATTERN = re.compile(
    r"bot|crawl|spider|slurp|baiduspider|yandex|duckduck|facebookexternalhit|"
    r"twitterbot|linkedinbot|embedly|quora|pinterest|redditbot|applebot|semrush|"
    r"ahrefs|mj12bot|dotbot|petalbot|bytespider|gptbot|claude|chatgpt|anthropic|"
    r"google-extended|ccbot|ia_archiver|archive\.org|lighthouse|pagespeed|"
    r"headlesschrome|phantomjs",
    re.IGNORECASE,
)


@dataclass(frozen=True)
class CleanEvent:
    path: str
    source: str
    session_id: str
    type: str


def sanitize(value: str, max_len: int) -> str:
    """Truncate, then drop every character outside [A-Za-z0-9_-/.:@]."""
    return _UNSAFE_CHARS.sub("", value[:max_len])


def is_blog_post_path(path: str) -> bool:
    return bool(_BLOG_POST_PATH.match(path))


def is_bot(user_agent: Optional[str]) -> bool:
    return bool(user_agent) and BOT_PATTERN.search(user_agent) is not None


def day_key(now: datetime) -> str:
    return now.strftime("%Y-%m-%d")


def clean_event(body: EventBody) -> Optional[CleanEvent]:
    """Validate and sanitize a beacon. Returns None when it must be rejected."""
    if not body.path or not body.source or not body.session_id:
        return None

    path = sanitize(body.path, settings.max_path_length)
    source = sanitize(body.source, settings.max_source_length)
    session_id = sanitize(body.session_id, settings.max_session_id_length)
    if not path or not source or not session_id:
        return None

    event_type = HEARTBEAT if body.type == HEARTBEAT else PAGEVIEW
    return CleanEvent(path=path, source=source, session_id=session_id, type=event_type)


async def _touch_live_session(session: AsyncSession, event: CleanEvent, epoch: int) -> None:
    await session.execute(
        text(
            "INSERT INTO live_sessions (session_id, path, last_seen) "
            "VALUES (:session_id, :path, :last_seen) "
            "ON CONFLICT (session_id) "
            "DO UPDATE SET path = excluded.path, last_seen = excluded.last_seen"
        ),
        {"session_id": event.session_id, "path": event.path, "last_seen": epoch},
    )


async def _count_read(session: AsyncSession, event: CleanEvent, date: str) -> bool:
    """Increment the post's read counter once per (path, session, day)."""
    claimed = await session.execute(
        text(
            "INSERT INTO reader_dedup (path, session_id, date) "
            "VALUES (:path, :session_id, :date) "
            "ON CONFLICT (path, session_id, date) DO NOTHING"
        ),
        {"path": event.path, "session_id": event.session_id, "date": date},
    )
    if claimed.rowcount != 1:
        return False

    await session.execute(
        text(
            "INSERT INTO reads (path, count) VALUES (:path, 1) "
            "ON CONFLICT (path) DO UPDATE SET count = reads.count + 1"
        ),
        {"path": event.path},
    )
    return True


async def record_event(session: AsyncSession, event: CleanEvent, now: datetime) -> bool:
    """Persist one event. Returns True when it counted as a new read."""
    date = day_key(now)

    await _touch_live_session(session, event, int(now.timestamp()))
    session.add(
        Event(
            date=date,
            path=event.path,
            source=event.source,
            session_id=event.session_id,
            type=event.type,
        )
    )

    read_counted = False
    if event.type == PAGEVIEW and is_blog_post_path(event.path):
        read_counted = await _count_read(session, event, date)

    await session.commit()

    events_recorded.labels(type=event.type).inc()
    if read_counted:
        reads_counted.inc()
        log.debug("read_counted", path=event.path)

    return read_counted
