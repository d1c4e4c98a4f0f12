"""Data models for the VenkyAI orchestrator."""

from .session import Session, SessionPurpose, SessionStatus
from .transcript import TranscriptEntry, TranscriptRole
from .conversation import ConversationItem, ConversationKind

__all__ = [
    "Session",
    "SessionPurpose",
    "SessionStatus",
    "TranscriptEntry",
    "TranscriptRole",
    "ConversationItem",
    "ConversationKind",
]
