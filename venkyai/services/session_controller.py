"""Session controller that owns session lifecycle and user-initiated commands."""

import logging
from enum import Enum
from typing import Any, Optional

from ..backend.base import AbstractAssistantBackend
from ..errors import CommandError
from ..models.session import Session, SessionPurpose
from ..models.transcript import TranscriptRole
from .capture_scheduler import CaptureScheduler
from .session_store import SessionStore
from .stream_aggregator import StreamAggregator
from .transcription_ingestor import TranscriptionIngestor

logger = logging.getLogger(__name__)

DEFAULT_SYSTEM_PROMPT = (
    "You are VenkyAI, an AI meeting assistant. Help the user with their meeting, "
    "interview, or sales call. Be concise, helpful, and actionable."
)


class SessionPhase(Enum):
    """Controller view of the session lifecycle.

    AUTO_ADOPTED is entered only from a detector announcement. In that phase
    the capture flags are set although this controller issued no capture
    commands; the backend started capture itself.
    """
    IDLE = "idle"
    ACTIVE = "active"
    AUTO_ADOPTED = "auto_adopted"
    ENDED = "ended"


class SessionController:
    """Orchestrates session start/end and the interactive capture and chat commands."""

    def __init__(self,
                 backend: AbstractAssistantBackend,
                 store: SessionStore,
                 aggregator: StreamAggregator,
                 ingestor: TranscriptionIngestor,
                 scheduler: CaptureScheduler,
                 system_prompt: str = DEFAULT_SYSTEM_PROMPT):
        self.backend = backend
        self.store = store
        self.aggregator = aggregator
        self.ingestor = ingestor
        self.scheduler = scheduler
        self.system_prompt = system_prompt

        self.phase = SessionPhase.IDLE
        self.is_recording = False
        self.is_capturing = False
        self.is_loading = False
        self.is_transcribing = False

    # Session lifecycle

    def open_setup(self) -> None:
        """Show the session setup prompt; start_session closes it."""
        self.store.open_setup()

    async def start_session(self,
                            title: str,
                            purpose: Any = SessionPurpose.MEETING,
                            context: str = "") -> Session:
        """Create a session on the backend and make it current.

        The setup prompt is closed whether or not creation succeeds.

        Raises:
            CommandError: If the backend fails to create the session
        """
        purpose = SessionPurpose.parse(purpose)
        try:
            session = await self.backend.create_session(title, purpose.value, context)
        except Exception as e:
            logger.error(f"Failed to start session '{title}': {e}")
            raise CommandError("create_session", e) from e
        finally:
            self.store.close_setup()

        if isinstance(session, dict):
            session = Session.from_dict(session)

        self.store.replace(session)
        self.store.mark_active()
        self.ingestor.clear()
        self.phase = SessionPhase.ACTIVE
        logger.info(f"Session started: {session.id} '{session.title}' ({session.purpose.value})")
        return session

    async def end_session(self) -> bool:
        """End the current session and release every capture subsystem.

        Local cleanup always runs. The session is marked ended only when the
        backend accepted the end command; otherwise an error item is added.

        Returns:
            True if the backend ended the session
        """
        error: Optional[Exception] = None
        try:
            await self.backend.end_session()
        except Exception as e:
            logger.error(f"Failed to end session: {e}")
            error = e

        await self._stop_audio_captures()
        self.scheduler.stop()
        self.is_recording = False
        self.is_capturing = False
        self.aggregator.reset(clear_log=True)

        if error is not None:
            self.aggregator.add_error(f"Failed to end session: {error}")
            return False

        session = self.store.mark_ended()
        self.phase = SessionPhase.ENDED
        if session is not None:
            logger.info(f"Session ended: {session.id}")
        return True

    async def _stop_audio_captures(self) -> None:
        for name, command in (("stop_audio_capture", self.backend.stop_audio_capture),
                              ("stop_system_audio_capture", self.backend.stop_system_audio_capture)):
            try:
                await command()
            except Exception as e:
                logger.warning(f"{name} failed during session end: {e}")

    def on_auto_start(self, session: Session) -> None:
        """Adopt a session started by the meeting detector."""
        self.store.replace(session)
        self.store.mark_active()
        self.ingestor.clear()
        self.is_recording = True
        self.is_capturing = True
        self.phase = SessionPhase.AUTO_ADOPTED
        self.aggregator.add_assistant_message(f"🚀 Automated session started: {session.title}")
        logger.info(f"🚀 Adopted auto-started session {session.id}: '{session.title}'")

    def on_meeting_detected(self, title: str) -> None:
        logger.info(f"🔍 Meeting detected: {title}")

    # Audio recording

    async def start_recording(self) -> bool:
        if self.is_recording:
            logger.warning("Recording already active")
            return False
        try:
            await self.backend.start_audio_capture()
        except Exception as e:
            logger.error(f"Audio error: {e}")
            self.aggregator.add_error(f"Audio error: {e}")
            return False
        self.is_recording = True
        return True

    async def stop_recording(self) -> bool:
        if not self.is_recording:
            logger.warning("Recording not active")
            return False
        try:
            await self.backend.stop_audio_capture()
        except Exception as e:
            logger.error(f"Audio error: {e}")
            self.aggregator.add_error(f"Audio error: {e}")
            return False
        self.is_recording = False
        return True

    async def toggle_recording(self) -> bool:
        if self.is_recording:
            return await self.stop_recording()
        return await self.start_recording()

    # Screen capture

    def start_capture(self, interval_ms: Optional[int] = None) -> bool:
        started = self.scheduler.start(interval_ms)
        self.is_capturing = True
        return started

    def stop_capture(self) -> None:
        self.scheduler.stop()
        self.is_capturing = False

    def toggle_capture(self, interval_ms: Optional[int] = None) -> bool:
        """Toggle screen capture and return whether it is now active."""
        if self.is_capturing:
            self.stop_capture()
        else:
            self.start_capture(interval_ms)
        return self.is_capturing

    # Transcription and chat

    async def transcribe(self) -> str:
        """Transcribe recorded audio and append it to the transcript.

        Raises:
            CommandError: If transcription or persisting the entry fails
        """
        self.is_transcribing = True
        try:
            try:
                text = await self.backend.transcribe_audio()
            except Exception as e:
                raise CommandError("transcribe_audio", e) from e
            if text:
                await self.ingestor.on_manual_transcription(text)
            return text
        finally:
            self.is_transcribing = False

    async def send_message(self, message: str) -> Optional[str]:
        """Send a chat message and return the assistant response.

        The assistant conversation item arrives through the generation event
        stream. Failures become an error item and return None.
        """
        message = message.strip()
        if not message:
            return None

        self.is_loading = True
        self.aggregator.add_user_message(message)
        self.ingestor.append(TranscriptRole.USER, message)
        try:
            response = await self.backend.stream_chat(
                [{"role": "user", "content": message}],
                self.system_prompt,
            )
            self.ingestor.append(TranscriptRole.ASSISTANT, response)

            if self.store.is_active:
                await self.backend.add_transcript_entry(TranscriptRole.USER.value, message)
                await self.backend.add_transcript_entry(TranscriptRole.ASSISTANT.value, response)
            return response
        except Exception as e:
            logger.error(f"Chat failed: {e}")
            self.aggregator.add_error(str(e))
            return None
        finally:
            self.is_loading = False
