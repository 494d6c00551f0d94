import asyncio
from contextlib import asynccontextmanager

import redis.asyncio as aioredis
import structlog
from fastapi import FastAPI, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from analytics.config import settings
from analytics.errors import register_exception_handlers
from analytics.logging_config import configure_logging
from analytics.metrics import metrics_endpoint
from analytics.middleware.logging_middleware import RequestLoggingMiddleware
from analytics.routers import analytics
from analytics.worker.sweep_worker import sweep_worker_loop

log = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Configure structured logging before anything else
    configure_logging()

    # Redis backs the ingestion rate limiter only
    app.state.redis = aioredis.from_url(
        settings.redis_url, encoding="utf-8", decode_responses=True
    )

    app.state.sweep_worker_task = asyncio.create_task(sweep_worker_loop())
    log.info("analytics_started", static_dir=settings.static_dir)
    try:
        yield
    finally:
        app.state.sweep_worker_task.cancel()
        await app.state.redis.aclose()


app = FastAPI(title=settings.app_name, version="0.1.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)
# Register request logging middleware (runs on every request)
app.add_middleware(RequestLoggingMiddleware)

register_exception_handlers(app)

app.include_router(analytics.router)

# Prometheus metrics endpoint
app.get("/metrics")(metrics_endpoint)


@app.get("/health")
async def health_check(response: Response):
    """Liveness of everything the beacon pipeline depends on.

    Returns 200 if all components are healthy, 503 if any component is unhealthy.

    Checks:
    - Database connectivity (SQLite or Postgres, whichever DATABASE_URL names)
    - Redis connectivity (rate limiter; ingestion still works without it)
    - Sweep worker task still running
    """
    from analytics.database import async_session_factory
    from sqlalchemy import text

    checks = {}
    overall_healthy = True

    try:
        async with async_session_factory() as db:
            await db.execute(text("SELECT 1"))
        checks["database"] = {"status": "healthy"}
    except Exception as e:
        checks["database"] = {"status": "unhealthy", "error": str(e)}
        overall_healthy = False

    try:
        await app.state.redis.ping()
        checks["redis"] = {"status": "healthy"}
    except Exception as e:
        checks["redis"] = {"status": "unhealthy", "error": str(e)}
        overall_healthy = False

    try:
        worker = app.state.sweep_worker_task
        if worker.done() or worker.cancelled():
            checks["sweep_worker"] = {
                "status": "unhealthy",
                "error": "Worker task stopped",
            }
            overall_healthy = False
        else:
            checks["sweep_worker"] = {"status": "healthy"}
    except AttributeError:
        checks["sweep_worker"] = {
            "status": "unhealthy",
            "error": "Worker not initialized",
        }
        overall_healthy = False

    response.status_code = 200 if overall_healthy else 503
    return {"status": "healthy" if overall_healthy else "unhealthy", "checks": checks}


# The built site is served for everything the API doesn't handle; must be last
if settings.static_dir:
    app.mount("/", StaticFiles(directory=settings.static_dir, html=True), name="site")
