"""Pub/sub topic names for the external event feed."""

from enum import Enum


class EventKind(Enum):
    """External signal kinds and the pypubsub topic each one is published on."""
    GENERATION_TOKEN = "generation.token"
    GENERATION_START = "generation.start"
    GENERATION_END = "generation.end"
    VISIBILITY_CHANGE = "overlay.visibility"
    MEETING_DETECTED = "meeting.detected"
    SESSION_AUTO_STARTED = "session.auto_started"
    TRANSCRIPTION_CHUNK = "transcription.chunk"
    LIVE_SUGGESTION = "suggestion.live"

    @property
    def topic(self) -> str:
        return self.value
