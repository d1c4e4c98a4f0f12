"""Composition root wiring the orchestrator components around one backend."""

import logging
from dataclasses import dataclass
from typing import List, Optional

from ..backend.base import AbstractAssistantBackend
from ..config import VenkyConfig
from ..models.conversation import ConversationItem
from ..models.session import Session
from ..models.transcript import TranscriptEntry
from .capture_scheduler import CaptureScheduler, DEFAULT_INTERVAL_MS
from .event_bus import EventBusAdapter
from .session_controller import SessionController, SessionPhase, DEFAULT_SYSTEM_PROMPT
from .session_store import SessionStore
from .stream_aggregator import StreamAggregator, DEFAULT_SILENCE_SENTINEL
from .transcription_ingestor import TranscriptionIngestor

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OrchestratorSnapshot:
    """Read-only view of orchestrator state for presentation."""
    session: Optional[Session]
    phase: SessionPhase
    transcript: List[TranscriptEntry]
    conversation: List[ConversationItem]
    streaming_text: str
    is_streaming: bool
    is_recording: bool
    is_capturing: bool
    is_loading: bool
    is_transcribing: bool
    overlay_visible: bool


class Orchestrator:
    """Owns the session store, stream aggregator, ingestor, scheduler,
    controller and event bus adapter for one application lifetime."""

    def __init__(self,
                 backend: AbstractAssistantBackend,
                 silence_sentinel: str = DEFAULT_SILENCE_SENTINEL,
                 capture_interval_ms: int = DEFAULT_INTERVAL_MS,
                 system_prompt: str = DEFAULT_SYSTEM_PROMPT):
        self.backend = backend
        self.store = SessionStore()
        self.aggregator = StreamAggregator(silence_sentinel)
        self.ingestor = TranscriptionIngestor(backend, self.store)
        self.scheduler = CaptureScheduler(backend, "screen", capture_interval_ms)
        self.controller = SessionController(
            backend,
            self.store,
            self.aggregator,
            self.ingestor,
            self.scheduler,
            system_prompt=system_prompt,
        )
        self.event_bus = EventBusAdapter(self.store, self.aggregator, self.ingestor, self.controller)

    @classmethod
    def from_config(cls, backend: AbstractAssistantBackend, config: VenkyConfig) -> "Orchestrator":
        return cls(
            backend,
            silence_sentinel=config.get('assistant.silence_sentinel', DEFAULT_SILENCE_SENTINEL),
            capture_interval_ms=config.get('capture.interval_ms', DEFAULT_INTERVAL_MS),
            system_prompt=config.get('assistant.system_prompt', DEFAULT_SYSTEM_PROMPT),
        )

    def start(self) -> None:
        """Subscribe to the event feed. Call from the event loop."""
        self.event_bus.subscribe()
        logger.info("Orchestrator started")

    async def close(self) -> None:
        """Unsubscribe from the feed and release timers and background work."""
        self.event_bus.teardown()
        self.scheduler.stop()
        await self.ingestor.close()
        logger.info("Orchestrator closed")

    async def __aenter__(self) -> "Orchestrator":
        self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    def snapshot(self) -> OrchestratorSnapshot:
        return OrchestratorSnapshot(
            session=self.store.current_session,
            phase=self.controller.phase,
            transcript=list(self.ingestor.transcript),
            conversation=list(self.aggregator.conversation),
            streaming_text=self.aggregator.buffer,
            is_streaming=self.aggregator.is_streaming,
            is_recording=self.controller.is_recording,
            is_capturing=self.controller.is_capturing,
            is_loading=self.controller.is_loading,
            is_transcribing=self.controller.is_transcribing,
            overlay_visible=self.store.overlay_visible,
        )
