"""Event bus adapter: single ingress for external events."""

import logging
from typing import Any, Callable, Dict, Tuple
from pubsub import pub

from ..events.topics import EventKind
from ..models.session import Session
from .session_controller import SessionController
from .session_store import SessionStore
from .stream_aggregator import StreamAggregator
from .transcription_ingestor import TranscriptionIngestor

logger = logging.getLogger(__name__)


def _void(payload: Any) -> Tuple:
    return ()


def _text(payload: Any) -> Tuple:
    if not isinstance(payload, str):
        raise ValueError(f"expected text, got {type(payload).__name__}")
    return (payload,)


def _flag(payload: Any) -> Tuple:
    if not isinstance(payload, bool):
        raise ValueError(f"expected bool, got {type(payload).__name__}")
    return (payload,)


def _session(payload: Any) -> Tuple:
    if isinstance(payload, Session):
        return (payload,)
    return (Session.from_dict(payload),)


class EventBusAdapter:
    """Subscribes to every external topic and routes each to one handler.

    Deliveries are serialized by the event loop, so handlers need no locking.
    Once teardown begins no handler runs, including deliveries that were
    already marshalled onto the loop.
    """

    def __init__(self,
                 store: SessionStore,
                 aggregator: StreamAggregator,
                 ingestor: TranscriptionIngestor,
                 controller: SessionController):
        self._routes: Dict[EventKind, Tuple[Callable, Callable[[Any], Tuple]]] = {
            EventKind.GENERATION_TOKEN: (aggregator.on_token, _text),
            EventKind.GENERATION_START: (aggregator.on_stream_start, _void),
            EventKind.GENERATION_END: (aggregator.on_stream_end, _text),
            EventKind.VISIBILITY_CHANGE: (store.set_overlay_visible, _flag),
            EventKind.MEETING_DETECTED: (controller.on_meeting_detected, _text),
            EventKind.SESSION_AUTO_STARTED: (controller.on_auto_start, _session),
            EventKind.TRANSCRIPTION_CHUNK: (ingestor.on_chunk, _text),
            EventKind.LIVE_SUGGESTION: (aggregator.on_live_suggestion, _text),
        }
        # pypubsub holds listeners weakly; keep them alive here
        self._listeners: Dict[EventKind, Callable] = {}
        self._subscribed = False
        self._closed = False
        self.delivered = 0
        self.rejected = 0

    @property
    def is_subscribed(self) -> bool:
        return self._subscribed and not self._closed

    def subscribe(self) -> bool:
        """Subscribe all handlers. Only the first call has an effect."""
        if self._closed:
            logger.warning("EventBusAdapter already torn down; not subscribing")
            return False
        if self._subscribed:
            logger.warning("EventBusAdapter already subscribed")
            return False

        for kind in self._routes:
            listener = self._make_listener(kind)
            self._listeners[kind] = listener
            pub.subscribe(listener, kind.topic)

        self._subscribed = True
        logger.info(f"EventBusAdapter subscribed to {len(self._listeners)} topics")
        return True

    def _make_listener(self, kind: EventKind) -> Callable:
        def listener(payload=None):
            self._deliver(kind, payload)
        return listener

    def _deliver(self, kind: EventKind, payload: Any) -> None:
        if self._closed:
            logger.debug(f"Dropping {kind.topic} event after teardown")
            return

        handler, parse = self._routes[kind]
        try:
            args = parse(payload)
        except ValueError as e:
            self.rejected += 1
            logger.warning(f"Ignoring malformed {kind.topic} event: {e}")
            return

        try:
            handler(*args)
        except Exception as e:
            logger.error(f"Handler for {kind.topic} failed: {e}", exc_info=True)
            return
        self.delivered += 1

    def teardown(self) -> None:
        """Unsubscribe every handler. Safe to call repeatedly."""
        if self._closed:
            return
        self._closed = True

        for kind, listener in self._listeners.items():
            try:
                pub.unsubscribe(listener, kind.topic)
            except Exception as e:
                logger.warning(f"Error during unsubscribe from {kind.topic}: {e}")
        self._listeners.clear()
        logger.info(f"EventBusAdapter torn down ({self.delivered} delivered, {self.rejected} rejected)")
