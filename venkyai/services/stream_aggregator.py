"""Accumulates generation tokens and finalizes them into the conversation log."""

import logging
from enum import Enum
from typing import List

from ..models.conversation import ConversationItem

logger = logging.getLogger(__name__)

DEFAULT_SILENCE_SENTINEL = "[SILENCE]"


class StreamState(Enum):
    IDLE = "idle"
    STREAMING = "streaming"


class StreamAggregator:
    """Owns the streaming buffer and the conversation log.

    State machine::

        IDLE --start--> STREAMING --token--> STREAMING --end--> IDLE

    A start received while already streaming discards the partial buffer.
    """

    def __init__(self, silence_sentinel: str = DEFAULT_SILENCE_SENTINEL):
        """Initialize stream aggregator.

        Args:
            silence_sentinel: Marker in a final payload meaning "no suggestion"
        """
        self.silence_sentinel = silence_sentinel
        self.state = StreamState.IDLE
        self.buffer = ""
        self.conversation: List[ConversationItem] = []

    @property
    def is_streaming(self) -> bool:
        return self.state is StreamState.STREAMING

    def on_stream_start(self) -> None:
        if self.is_streaming:
            logger.warning(f"Generation started while streaming; discarding {len(self.buffer)} buffered chars")
        self.buffer = ""
        self.state = StreamState.STREAMING

    def on_token(self, fragment: str) -> None:
        if not self.is_streaming:
            logger.warning("Ignoring generation token received outside a stream")
            return
        self.buffer += fragment

    def on_stream_end(self, final_payload: str) -> None:
        if not self.is_streaming:
            logger.debug("Generation end received without a matching start")
        self.state = StreamState.IDLE
        self.buffer = ""

        if self._is_suggestion(final_payload):
            self.conversation.append(ConversationItem.assistant(final_payload))
        else:
            logger.debug("Final generation payload suppressed (empty or silence)")

    def on_live_suggestion(self, text: str) -> None:
        if self._is_suggestion(text):
            self.conversation.append(ConversationItem.assistant(text))

    def add_user_message(self, text: str) -> None:
        self.conversation.append(ConversationItem.user(text))

    def add_assistant_message(self, text: str) -> None:
        self.conversation.append(ConversationItem.assistant(text))

    def add_error(self, text: str) -> None:
        self.conversation.append(ConversationItem.error(text))

    def reset(self, clear_log: bool = False) -> None:
        """Abort any stream in progress and optionally clear the log."""
        if self.is_streaming:
            logger.info(f"Aborting stream with {len(self.buffer)} buffered chars")
        self.state = StreamState.IDLE
        self.buffer = ""
        if clear_log:
            self.conversation.clear()

    def _is_suggestion(self, text: str) -> bool:
        if not text:
            return False
        return not (self.silence_sentinel and self.silence_sentinel in text)
