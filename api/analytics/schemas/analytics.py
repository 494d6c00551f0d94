from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class EventBody(BaseModel):
    """Beacon payload sent by the site on page load and on heartbeat."""

    path: Optional[str] = Field(default=None, description="Page path, e.g. /blog/my-post")
    referrer: Optional[str] = Field(default=None, description="document.referrer (not stored)")
    source: Optional[str] = Field(default=None, description="Traffic source label, e.g. google, direct")
    session_id: Optional[str] = Field(default=None, alias="sessionId")
    # Anything other than "heartbeat" (including non-strings) counts as a pageview
    type: Any = Field(default=None, description="'pageview' or 'heartbeat'")

    model_config = ConfigDict(populate_by_name=True)


class ReadsBatchBody(BaseModel):
    paths: Optional[list[str]] = None


class LiveResponse(BaseModel):
    count: int


class ReadCountResponse(BaseModel):
    path: str
    count: int


class ReadCountsResponse(BaseModel):
    counts: dict[str, int]


class DailyViews(BaseModel):
    date: str
    views: int


class PageViews(BaseModel):
    path: str
    views: int


class StatsResponse(BaseModel):
    daily_views: list[DailyViews] = Field(alias="dailyViews")
    sources: dict[str, int]
    top_pages: list[PageViews] = Field(alias="topPages")
    total_views: int = Field(alias="totalViews")

    model_config = ConfigDict(populate_by_name=True)
