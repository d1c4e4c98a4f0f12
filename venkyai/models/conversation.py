"""Conversation (chat and suggestion) log models.

Items carry an explicit kind, so user text that happens to start with
"Error: " is still a user message.
"""

from dataclasses import dataclass
from enum import Enum


class ConversationKind(Enum):
    USER = "user"
    ASSISTANT = "assistant"
    ERROR = "error"


@dataclass(frozen=True)
class ConversationItem:
    """One displayable entry of the conversation log."""
    kind: ConversationKind
    text: str

    @classmethod
    def user(cls, text: str) -> "ConversationItem":
        return cls(ConversationKind.USER, text)

    @classmethod
    def assistant(cls, text: str) -> "ConversationItem":
        return cls(ConversationKind.ASSISTANT, text)

    @classmethod
    def error(cls, text: str) -> "ConversationItem":
        return cls(ConversationKind.ERROR, text)
