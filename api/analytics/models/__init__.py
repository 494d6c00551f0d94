from .base import Base
from .event import Event
from .live_session import LiveSession
from .read_count import ReadCount
from .reader_dedup import ReaderDedup

__all__ = [
    "Base",
    "Event",
    "LiveSession",
    "ReadCount",
    "ReaderDedup",
]
