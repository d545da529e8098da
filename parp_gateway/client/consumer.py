"""Client for the gateway's chat stream.

Posts a conversation to ``/chat``, decodes the event stream as it arrives
and renders the assistant's reply incrementally. Partial replies are never
discarded: if the stream ends in an ``error`` event the error text is
appended to whatever was received.
"""

import logging
from collections.abc import AsyncIterator, Callable
from dataclasses import dataclass, field
from typing import Any, Optional

import httpx

from ..core.domain.events import EventKind, OutboundEvent
from ..streaming.framing import FrameDecoder

logger = logging.getLogger(__name__)


class ChatRequestRejected(Exception):
    """Gateway refused the request before opening a stream."""

    def __init__(self, status_code: int, message: str):
        super().__init__(f"{status_code}: {message}")
        self.status_code = status_code
        self.message = message


@dataclass
class ChatReply:
    """Rendered result of one chat exchange."""

    text: str = ""
    notices: list[str] = field(default_factory=list)
    error: Optional[str] = None
    completed: bool = False

    def apply(self, event: OutboundEvent) -> None:
        """Fold one event into the rendered reply."""
        if event.kind == EventKind.TOKEN:
            self.text += event.payload
        elif event.kind == EventKind.INFO:
            self.notices.append(event.payload)
        elif event.kind == EventKind.ERROR:
            self.error = event.payload
        elif event.kind == EventKind.DONE:
            self.completed = True

    @property
    def display_text(self) -> str:
        """Text shown to the user, with any error appended."""
        if self.error is None:
            return self.text
        if not self.text:
            return f"⚠️ {self.error}"
        return f"{self.text}\n\n⚠️ {self.error}"


class ChatStreamClient:
    """Async client for the gateway's ``/chat`` endpoint."""

    def __init__(
        self,
        base_url: str,
        access_token: str,
        timeout: float = 120.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """Initialize the client.

        Args:
            base_url: Gateway base URL, e.g. ``http://localhost:8000``
            access_token: Session token sent as a bearer credential
            timeout: Connect and per-read timeout in seconds
            client: Pre-built httpx client (tests, connection reuse)
        """
        self.base_url = base_url.rstrip("/")
        self.access_token = access_token
        self.timeout = timeout
        self._client = client

    async def stream_events(
        self,
        messages: list[dict[str, Any]],
        provider: Optional[str] = None,
        system_prompt: Optional[str] = None,
    ) -> AsyncIterator[OutboundEvent]:
        """Send a conversation and yield events as they are decoded.

        Raises:
            ChatRequestRejected: If the gateway answers with a non-200 status
        """
        body: dict[str, Any] = {"messages": messages}
        if provider:
            body["provider"] = provider
        if system_prompt:
            body["systemPrompt"] = system_prompt

        headers = {"Authorization": f"Bearer {self.access_token}"}
        client = self._client or httpx.AsyncClient(timeout=self.timeout)
        decoder = FrameDecoder()

        try:
            async with client.stream(
                "POST", f"{self.base_url}/chat", json=body, headers=headers
            ) as response:
                if response.status_code != 200:
                    await response.aread()
                    raise ChatRequestRejected(response.status_code, _error_message(response))

                async for text in response.aiter_text():
                    for event in decoder.feed(text):
                        yield event
                for event in decoder.flush():
                    yield event
        finally:
            if self._client is None:
                await client.aclose()

    async def send(
        self,
        messages: list[dict[str, Any]],
        provider: Optional[str] = None,
        system_prompt: Optional[str] = None,
        on_update: Optional[Callable[[ChatReply], None]] = None,
    ) -> ChatReply:
        """Send a conversation and render the full reply.

        Args:
            messages: Conversation history, ``[{"role", "content"}]``
            provider: ``local``, ``hosted`` or ``auto``; gateway default if None
            system_prompt: Custom system directive
            on_update: Called with the reply after every rendered event

        Returns:
            The reply; ``completed`` is False when the stream ended without
            ``done`` (error event or transport closed early)
        """
        reply = ChatReply()
        async for event in self.stream_events(messages, provider, system_prompt):
            reply.apply(event)
            if on_update is not None:
                on_update(reply)
        if not reply.completed and reply.error is None:
            logger.warning("Chat stream closed without a terminal event")
        return reply


def _error_message(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(data, dict) and isinstance(data.get("error"), str):
        return data["error"]
    return response.text
