"""In-process backend that keeps session and capture state in memory."""

import uuid
import logging
from datetime import datetime
from typing import List, Dict, Optional, Tuple

from .base import AbstractAssistantBackend
from .openai_stream import OpenAIChatStreamer
from ..events import EventKind, EventPublisher
from ..models.session import Session, SessionPurpose

logger = logging.getLogger(__name__)


class InMemoryBackend(AbstractAssistantBackend):
    """Backend with local session bookkeeping and simulated capture devices.

    Session rules follow the assistant daemon: only one session may exist,
    and ending or persisting without a session fails. Chat is delegated to an
    ``OpenAIChatStreamer`` when one is configured, otherwise the canned reply
    is streamed word by word.
    """

    def __init__(self,
                 publisher: EventPublisher,
                 chat_streamer: Optional[OpenAIChatStreamer] = None,
                 reply: str = "Noted."):
        self.publisher = publisher
        self.chat_streamer = chat_streamer
        self.reply = reply

        self.current_session: Optional[Session] = None
        self.transcript: List[Tuple[str, str, str]] = []
        self.ended_sessions: List[Session] = []

        self.is_recording_audio = False
        self.is_recording_system_audio = False
        self.screen_captures = 0
        self.pending_transcriptions: List[str] = []

    async def create_session(self, title: str, purpose: str, context: str) -> Session:
        if self.current_session is not None:
            raise RuntimeError("A session is already active. End it before starting a new one.")

        session = Session(
            id=str(uuid.uuid4()),
            title=title,
            purpose=SessionPurpose.parse(purpose),
        )
        self.current_session = session
        self.transcript = []
        if context:
            logger.debug(f"Session {session.id} context: {len(context)} chars")
        logger.info(f"Created session {session.id}: {title}")
        return session

    async def end_session(self) -> None:
        if self.current_session is None:
            raise RuntimeError("No active session")

        finished = self.current_session.ended()
        self.ended_sessions.append(finished)
        self.current_session = None
        logger.info(f"Ended session {finished.id} ({len(self.transcript)} transcript entries)")

    async def start_audio_capture(self) -> None:
        if self.is_recording_audio:
            raise RuntimeError("Already recording")
        self.is_recording_audio = True

    async def stop_audio_capture(self) -> None:
        if not self.is_recording_audio:
            raise RuntimeError("Not recording")
        self.is_recording_audio = False

    async def stop_system_audio_capture(self) -> None:
        if not self.is_recording_system_audio:
            raise RuntimeError("System audio capture not active")
        self.is_recording_system_audio = False

    def queue_transcription(self, text: str) -> None:
        """Queue text returned by the next ``transcribe_audio`` call."""
        self.pending_transcriptions.append(text)

    async def transcribe_audio(self) -> str:
        if not self.is_recording_audio:
            raise RuntimeError("Not recording")
        if not self.pending_transcriptions:
            return ""
        return self.pending_transcriptions.pop(0)

    async def capture_screen(self) -> None:
        self.screen_captures += 1
        logger.debug(f"Screen capture #{self.screen_captures}")

    async def stream_chat(self, messages: List[Dict[str, str]], system_prompt: Optional[str] = None) -> str:
        if self.chat_streamer is not None:
            return await self.chat_streamer.stream_chat(messages, system_prompt)

        self.publisher.publish(EventKind.GENERATION_START)
        words = self.reply.split(" ")
        for i, word in enumerate(words):
            token = word if i == 0 else f" {word}"
            self.publisher.publish(EventKind.GENERATION_TOKEN, token)
        self.publisher.publish(EventKind.GENERATION_END, self.reply)
        return self.reply

    async def add_transcript_entry(self, speaker: str, text: str) -> None:
        if self.current_session is None:
            raise RuntimeError("No active session")
        self.transcript.append((datetime.now().isoformat(), speaker, text))

    def auto_start(self, title: str) -> Session:
        """Start a session on behalf of the meeting detector.

        Starts both audio captures and announces the session, the way the
        detector does when it finds a meeting window.
        """
        if self.current_session is not None:
            raise RuntimeError("A session is already active")

        session = Session(id=str(uuid.uuid4()), title=title)
        self.current_session = session
        self.transcript = []
        self.is_recording_system_audio = True
        self.is_recording_audio = True
        logger.info(f"Meeting detected: {title}. Auto-started session {session.id}")
        self.publisher.publish(EventKind.SESSION_AUTO_STARTED, session)
        return session
