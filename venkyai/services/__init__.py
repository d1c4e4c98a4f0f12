"""Services layer: the session and streaming event orchestrator."""

from .session_store import SessionStore
from .stream_aggregator import StreamAggregator, StreamState
from .transcription_ingestor import TranscriptionIngestor
from .capture_scheduler import CaptureScheduler, CaptureTimer
from .session_controller import SessionController, SessionPhase
from .event_bus import EventBusAdapter
from .orchestrator import Orchestrator, OrchestratorSnapshot

__all__ = [
    "SessionStore",
    "StreamAggregator",
    "StreamState",
    "TranscriptionIngestor",
    "CaptureScheduler",
    "CaptureTimer",
    "SessionController",
    "SessionPhase",
    "EventBusAdapter",
    "Orchestrator",
    "OrchestratorSnapshot",
]
