"""Read counter model.

Unique reads per blog post. The count only ever grows; increments are
gated by reader_dedup.
"""

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class ReadCount(Base):
    __tablename__ = "reads"

    path: Mapped[str] = mapped_column(String(200), primary_key=True)
    count: Mapped[int] = mapped_column(Integer, nullable=False, server_default="0")
