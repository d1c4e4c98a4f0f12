"""Assistant backend command surface and implementations."""

from .base import AbstractAssistantBackend
from .memory import InMemoryBackend
from .openai_stream import OpenAIChatStreamer, parse_sse_line

__all__ = [
    "AbstractAssistantBackend",
    "InMemoryBackend",
    "OpenAIChatStreamer",
    "parse_sse_line",
]
