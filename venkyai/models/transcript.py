"""Transcript data models."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class TranscriptRole(Enum):
    """Who produced a transcript entry."""
    TRANSCRIPTION = "transcription"
    USER = "user"
    ASSISTANT = "assistant"


@dataclass(frozen=True)
class TranscriptEntry:
    """Single append-only entry of the session transcript."""
    role: TranscriptRole
    content: str
    timestamp: str = field(default_factory=lambda: datetime.now().strftime("%H:%M:%S"))
