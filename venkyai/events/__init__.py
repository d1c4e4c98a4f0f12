"""External event feed: topic names and publisher."""

from .topics import EventKind
from .publisher import EventPublisher

__all__ = [
    "EventKind",
    "EventPublisher",
]
