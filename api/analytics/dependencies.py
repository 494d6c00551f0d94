import secrets
from typing import Annotated, Optional

from fastapi import Depends, Header, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from analytics.config import settings
from analytics.database import get_db

DbSession = Annotated[AsyncSession, Depends(get_db)]


async def require_stats_token(authorization: Annotated[Optional[str], Header()] = None) -> None:
    """Bearer-token gate for the stats dashboard.

    An unset ANALYTICS_SECRET locks the endpoint rather than opening it.
    """
    expected = f"Bearer {settings.analytics_secret}"
    if (
        not settings.analytics_secret
        or not authorization
        or not secrets.compare_digest(authorization.encode(), expected.encode())
    ):
        raise HTTPException(status_code=401, detail="Unauthorized")


StatsAuth = Annotated[None, Depends(require_stats_token)]
