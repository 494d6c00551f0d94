"""Live session model.

At most one row per browser session, refreshed by every event. Rows idle
longer than the stale threshold are removed by the sweep worker.
"""

from sqlalchemy import BigInteger, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class LiveSession(Base):
    __tablename__ = "live_sessions"
    __table_args__ = (Index("ix_live_sessions_last_seen", "last_seen"),)

    session_id: Mapped[str] = mapped_column(String(100), primary_key=True)
    path: Mapped[str] = mapped_column(String(200), nullable=False)
    # Unix epoch seconds
    last_seen: Mapped[int] = mapped_column(BigInteger, nullable=False)
