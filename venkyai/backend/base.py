"""Abstract base class for the assistant backend command surface."""

from abc import ABC, abstractmethod
from typing import List, Dict, Optional

from ..models.session import Session


class AbstractAssistantBackend(ABC):
    """Commands the orchestrator issues to the assistant backend.

    Every command is independently fallible; implementations raise any
    exception to signal failure.
    """

    @abstractmethod
    async def create_session(self, title: str, purpose: str, context: str) -> Session:
        """Create a new session and return it."""
        pass

    @abstractmethod
    async def end_session(self) -> None:
        """End the current session."""
        pass

    @abstractmethod
    async def start_audio_capture(self) -> None:
        """Start microphone capture."""
        pass

    @abstractmethod
    async def stop_audio_capture(self) -> None:
        """Stop microphone capture."""
        pass

    @abstractmethod
    async def stop_system_audio_capture(self) -> None:
        """Stop system (loopback) audio capture."""
        pass

    @abstractmethod
    async def transcribe_audio(self) -> str:
        """Transcribe the audio recorded so far and return the text."""
        pass

    @abstractmethod
    async def capture_screen(self) -> None:
        """Capture the screen once."""
        pass

    @abstractmethod
    async def stream_chat(self, messages: List[Dict[str, str]], system_prompt: Optional[str] = None) -> str:
        """Run a chat completion and return the full response.

        Also emits generation start/token/end events while streaming.

        Args:
            messages: Chat messages as ``{"role": ..., "content": ...}`` dicts
            system_prompt: Optional system prompt prepended to the messages
        """
        pass

    @abstractmethod
    async def add_transcript_entry(self, speaker: str, text: str) -> None:
        """Persist a transcript entry to the backend session store."""
        pass
