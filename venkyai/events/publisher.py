"""Event publisher for the pub/sub event feed."""

import asyncio
import logging
from typing import Any, Optional
from pubsub import pub

from .topics import EventKind

logger = logging.getLogger(__name__)


class EventPublisher:
    """Publishes external events using pubsub.pub.

    When bound to an event loop, events published from any other thread (or
    from outside the loop) are marshalled onto that loop so delivery stays
    serialized with the rest of the orchestrator.
    """

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        """Initialize event publisher.

        Args:
            loop: Event loop that must deliver the events. None delivers inline.
        """
        self.loop = loop
        logger.info(f"EventPublisher initialized (loop bound: {loop is not None})")

    def publish(self, kind: EventKind, payload: Any = None) -> None:
        """Publish an event to the topic for its kind.

        Args:
            kind: Event kind to publish
            payload: Event payload; None for void events
        """
        if self.loop is not None and not self._on_loop():
            if self.loop.is_closed():
                logger.warning(f"Dropping {kind.topic} event: event loop is closed")
                return
            self.loop.call_soon_threadsafe(self._send, kind, payload)
            return
        self._send(kind, payload)

    def _on_loop(self) -> bool:
        try:
            return asyncio.get_running_loop() is self.loop
        except RuntimeError:
            return False

    @staticmethod
    def _send(kind: EventKind, payload: Any) -> None:
        pub.sendMessage(kind.topic, payload=payload)
        logger.debug(f"Published {kind.topic} event")
