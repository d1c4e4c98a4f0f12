"""OpenAI chat streamer that publishes generation events while streaming."""

import json
import asyncio
import logging
import aiohttp
from typing import List, Dict, Optional, Tuple

from ..events import EventKind, EventPublisher

logger = logging.getLogger(__name__)

DONE_MARKER = "[DONE]"


def parse_sse_line(line: str) -> Tuple[Optional[str], bool]:
    """Parse one server-sent-events line of a chat completion stream.

    Args:
        line: Raw line, with or without trailing newline

    Returns:
        Tuple of (content delta or None, finished flag)
    """
    line = line.strip()
    if not line.startswith("data: "):
        return None, False

    data = line[len("data: "):]
    if data == DONE_MARKER:
        return None, True

    try:
        chunk = json.loads(data)
    except json.JSONDecodeError:
        logger.debug(f"Skipping unparseable stream line: {data[:80]}")
        return None, False

    content_parts = []
    finished = False
    for choice in chunk.get("choices", []):
        content = (choice.get("delta") or {}).get("content")
        if content:
            content_parts.append(content)
        if choice.get("finish_reason"):
            finished = True

    content = "".join(content_parts) if content_parts else None
    return content, finished


class OpenAIChatStreamer:
    """Streams chat completions from OpenAI and publishes each token."""

    def __init__(self,
                 api_key: str,
                 publisher: EventPublisher,
                 model: str = "gpt-4o",
                 base_url: str = "https://api.openai.com/v1/chat/completions"):
        """Initialize chat streamer.

        Args:
            api_key: OpenAI API key
            publisher: Publisher for generation events
            model: Chat model name
            base_url: Chat completions endpoint
        """
        self.api_key = api_key
        self.publisher = publisher
        self.model = model
        self.base_url = base_url

        logger.info(f"OpenAIChatStreamer initialized with model: {model}")

    def build_request(self, messages: List[Dict[str, str]], system_prompt: Optional[str] = None) -> Dict:
        api_messages = []
        if system_prompt:
            api_messages.append({"role": "system", "content": system_prompt})
        for message in messages:
            api_messages.append({"role": message["role"], "content": message["content"]})

        return {
            "model": self.model,
            "messages": api_messages,
            "stream": True,
        }

    async def stream_chat(self,
                          messages: List[Dict[str, str]],
                          system_prompt: Optional[str] = None,
                          cancel_event: Optional[asyncio.Event] = None) -> str:
        """Stream a chat completion, publishing start, token and end events.

        Args:
            messages: Chat messages
            system_prompt: Optional system prompt
            cancel_event: When set, stops delivering tokens and ends the stream
                with what has been received so far

        Returns:
            Full response text

        Raises:
            RuntimeError: If no API key is configured or the API returns an error
        """
        if not self.api_key:
            raise RuntimeError("OpenAI API key not configured")

        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json"
        }
        body = self.build_request(messages, system_prompt)

        full_response = ""
        async with aiohttp.ClientSession() as session:
            async with session.post(self.base_url, headers=headers, json=body) as response:
                if response.status != 200:
                    error_text = await response.text()
                    raise RuntimeError(f"OpenAI error ({response.status}): {error_text}")

                self.publisher.publish(EventKind.GENERATION_START)
                try:
                    async for raw_line in response.content:
                        if cancel_event is not None and cancel_event.is_set():
                            logger.info("Chat stream cancelled")
                            break

                        content, finished = parse_sse_line(raw_line.decode("utf-8", errors="replace"))
                        if content:
                            full_response += content
                            self.publisher.publish(EventKind.GENERATION_TOKEN, content)
                        if finished:
                            break
                finally:
                    self.publisher.publish(EventKind.GENERATION_END, full_response)

        logger.debug(f"Chat stream complete: {len(full_response)} chars")
        return full_response
