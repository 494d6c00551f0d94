"""Reader dedup model.

Marks that a session already counted as a reader of a post on a given day.
Pruned after 48 hours by the sweep worker.
"""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class ReaderDedup(Base):
    __tablename__ = "reader_dedup"

    path: Mapped[str] = mapped_column(String(200), primary_key=True)
    session_id: Mapped[str] = mapped_column(String(100), primary_key=True)
    date: Mapped[str] = mapped_column(String(10), primary_key=True)
