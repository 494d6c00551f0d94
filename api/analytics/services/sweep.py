"""Retention sweep.

Removes state that only matters for a short window:
1. Live session markers idle longer than STALE_SESSION_SECONDS
2. Reader dedup rows older than DEDUP_RETENTION_HOURS
3. Raw events older than EVENT_RETENTION_DAYS (only when configured)

Each job runs independently; one failure doesn't block the others.
"""

from datetime import datetime, timedelta

import structlog
from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from analytics.config import settings
from analytics.metrics import sweep_rows_deleted
from analytics.models.event import Event
from analytics.models.live_session import LiveSession
from analytics.models.reader_dedup import ReaderDedup
from analytics.services.ingest import day_key

log = structlog.get_logger(__name__)


async def _prune_live_sessions(session: AsyncSession, now: datetime) -> int:
    cutoff = int(now.timestamp()) - settings.stale_session_seconds
    result = await session.execute(delete(LiveSession).where(LiveSession.last_seen < cutoff))
    return result.rowcount


async def _prune_reader_dedup(session: AsyncSession, now: datetime) -> int:
    cutoff = day_key(now - timedelta(hours=settings.dedup_retention_hours))
    result = await session.execute(delete(ReaderDedup).where(ReaderDedup.date < cutoff))
    return result.rowcount


async def _prune_events(session: AsyncSession, now: datetime) -> int:
    cutoff = day_key(now - timedelta(days=settings.event_retention_days))
    result = await session.execute(delete(Event).where(Event.date < cutoff))
    return result.rowcount


async def run_sweep(session: AsyncSession, now: datetime) -> dict:
    """Execute one sweep and commit. Returns per-table deletion counts."""
    stats: dict = {}
    errors = []

    jobs = [
        ("live_sessions", _prune_live_sessions),
        ("reader_dedup", _prune_reader_dedup),
    ]
    if settings.event_retention_days > 0:
        jobs.append(("events", _prune_events))

    for table, job in jobs:
        try:
            deleted = await job(session, now)
            await session.commit()
        except Exception:
            await session.rollback()
            log.error("sweep_job_failed", table=table, exc_info=True)
            stats[table] = "error"
            errors.append(table)
            continue
        stats[table] = deleted
        sweep_rows_deleted.labels(table=table).inc(deleted)

    if errors:
        log.warning("sweep_partial", failed_jobs=errors, stats=stats)
    else:
        log.info("sweep_completed", stats=stats)

    return stats
