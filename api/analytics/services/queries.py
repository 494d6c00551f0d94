"""Read-side queries: live visitors, read counters and the stats dashboard."""

from datetime import date as date_cls, datetime, timedelta
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from analytics.config import settings
from analytics.models.event import Event
from analytics.models.live_session import LiveSession
from analytics.models.read_count import ReadCount
from analytics.services.ingest import PAGEVIEW


def clamp_days(days: int) -> int:
    return max(1, min(days, settings.max_stats_days))


def date_keys(today: date_cls, days: int) -> list[str]:
    """Last `days` UTC dates ending today, oldest first."""
    return [(today - timedelta(days=i)).isoformat() for i in range(days - 1, -1, -1)]


async def count_live(
    session: AsyncSession, now: datetime, path: Optional[str] = None
) -> int:
    """Sessions seen within the live window, optionally currently on `path`."""
    cutoff = int(now.timestamp()) - settings.live_window_seconds
    stmt = select(func.count()).select_from(LiveSession).where(LiveSession.last_seen >= cutoff)
    if path:
        stmt = stmt.where(LiveSession.path == path)
    result = await session.execute(stmt)
    return result.scalar_one()


async def get_read_count(session: AsyncSession, path: str) -> int:
    result = await session.execute(select(ReadCount.count).where(ReadCount.path == path))
    return result.scalar_one_or_none() or 0


async def get_read_counts(session: AsyncSession, paths: list[str]) -> dict[str, int]:
    """Read counts for up to MAX_BATCH_PATHS paths; unknown paths report 0."""
    wanted = list(dict.fromkeys(paths[: settings.max_batch_paths]))
    if not wanted:
        return {}

    result = await session.execute(
        select(ReadCount.path, ReadCount.count).where(ReadCount.path.in_(wanted))
    )
    found = {row.path: row.count for row in result.all()}
    return {p: found.get(p, 0) for p in wanted}


async def get_stats(session: AsyncSession, days: int, today: date_cls) -> dict:
    """Aggregate pageviews over the last `days` days (heartbeats excluded).

    Returns:
        {"dailyViews": [{"date", "views"}...], "sources": {...},
         "topPages": [{"path", "views"}...], "totalViews": n}
    """
    dates = date_keys(today, clamp_days(days))
    in_window = (Event.type == PAGEVIEW, Event.date.in_(dates))

    daily_result = await session.execute(
        select(Event.date, func.count().label("views"))
        .where(*in_window)
        .group_by(Event.date)
    )
    per_day = {row.date: row.views for row in daily_result.all()}
    daily_views = [{"date": d, "views": per_day.get(d, 0)} for d in dates]

    source_result = await session.execute(
        select(Event.source, func.count().label("views"))
        .where(*in_window)
        .group_by(Event.source)
    )
    sources = {row.source: row.views for row in source_result.all()}

    views = func.count().label("views")
    pages_result = await session.execute(
        select(Event.path, views)
        .where(*in_window)
        .group_by(Event.path)
        .order_by(views.desc(), Event.path)
        .limit(settings.top_pages_limit)
    )
    top_pages = [{"path": row.path, "views": row.views} for row in pages_result.all()]

    return {
        "dailyViews": daily_views,
        "sources": sources,
        "topPages": top_pages,
        "totalViews": sum(per_day.values()),
    }
