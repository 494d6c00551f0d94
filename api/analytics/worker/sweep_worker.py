"""Sweep worker: periodically prunes stale live sessions and dedup rows.

Started as a background task by the API lifespan. Can also run on its own
(`python -m analytics.worker.sweep_worker`) when the API is deployed with
several replicas and only one process should sweep.
"""

import asyncio
from datetime import datetime, timezone

import structlog

from analytics.config import settings
from analytics.database import async_session_factory
from analytics.services.sweep import run_sweep

log = structlog.get_logger(__name__)


async def run_sweep_cycle() -> dict:
    async with async_session_factory() as session:
        return await run_sweep(session, datetime.now(timezone.utc))


async def sweep_worker_loop() -> None:
    """Background loop that runs the sweep every SWEEP_INTERVAL_SECONDS."""
    interval = settings.sweep_interval_seconds
    log.info("sweep_worker_started", interval_seconds=interval)

    while True:
        try:
            await run_sweep_cycle()
        except Exception:
            log.error("sweep_worker_error", exc_info=True)
        await asyncio.sleep(interval)


if __name__ == "__main__":
    from analytics.logging_config import configure_logging

    configure_logging()
    asyncio.run(sweep_worker_loop())
