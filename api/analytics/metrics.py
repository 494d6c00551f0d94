"""Prometheus metrics for the analytics service."""

from fastapi import Response
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest

events_recorded = Counter(
    "site_analytics_events_total",
    "Events persisted, by type",
    ["type"],
)
bot_events_dropped = Counter(
    "site_analytics_bot_events_dropped_total",
    "Events discarded because the user agent looked like a crawler",
)
events_rejected = Counter(
    "site_analytics_events_rejected_total",
    "Events rejected before storage",
    ["reason"],
)
reads_counted = Counter(
    "site_analytics_reads_counted_total",
    "Blog post reads counted after deduplication",
)
sweep_rows_deleted = Counter(
    "site_analytics_sweep_rows_deleted_total",
    "Rows removed by the sweep worker",
    ["table"],
)
request_duration = Histogram(
    "site_analytics_request_duration_seconds",
    "HTTP request latency",
    ["method", "route"],
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0],
)


async def metrics_endpoint() -> Response:
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
