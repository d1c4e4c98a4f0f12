"""Transcription ingestor that appends transcript entries and mirrors them to the backend."""

import asyncio
import logging
from typing import List, Set

from ..backend.base import AbstractAssistantBackend
from ..errors import CommandError
from ..models.transcript import TranscriptEntry, TranscriptRole
from .session_store import SessionStore

logger = logging.getLogger(__name__)


class TranscriptionIngestor:
    """Owns the session transcript log.

    The in-memory log is authoritative for the session; the backend copy is a
    best-effort mirror for passive chunks.
    """

    def __init__(self, backend: AbstractAssistantBackend, store: SessionStore):
        """Initialize transcription ingestor.

        Args:
            backend: Backend that persists transcript entries
            store: Session store, consulted for the active session
        """
        self.backend = backend
        self.store = store
        self.transcript: List[TranscriptEntry] = []
        self._pending: Set[asyncio.Task] = set()

    def append(self, role: TranscriptRole, content: str) -> TranscriptEntry:
        entry = TranscriptEntry(role=role, content=content)
        self.transcript.append(entry)
        return entry

    def clear(self) -> None:
        self.transcript.clear()

    def on_chunk(self, text: str) -> None:
        """Append a background transcription chunk and persist it without waiting."""
        self.append(TranscriptRole.TRANSCRIPTION, text)

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning("No running event loop; transcription chunk not persisted")
            return

        task = loop.create_task(self._persist_chunk(text))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _persist_chunk(self, text: str) -> None:
        try:
            await self.backend.add_transcript_entry(TranscriptRole.TRANSCRIPTION.value, text)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.warning(f"Failed to persist transcription chunk ({len(text)} chars): {e}")

    async def on_manual_transcription(self, text: str) -> TranscriptEntry:
        """Append a manually requested transcription.

        When a session is active the entry is persisted before returning.

        Raises:
            CommandError: If persisting the entry fails
        """
        entry = self.append(TranscriptRole.TRANSCRIPTION, text)
        if self.store.is_active:
            try:
                await self.backend.add_transcript_entry(TranscriptRole.USER.value, text)
            except Exception as e:
                raise CommandError("add_transcript_entry", e) from e
        return entry

    @property
    def pending_persist_count(self) -> int:
        return len(self._pending)

    async def close(self) -> None:
        """Cancel background persists still in flight."""
        pending = list(self._pending)
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
            logger.info(f"Cancelled {len(pending)} pending transcript persists")
