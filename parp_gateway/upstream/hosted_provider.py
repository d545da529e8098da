"""Hosted OpenAI upstream provider implementation."""

import json
import logging
from collections.abc import AsyncIterator
from contextlib import aclosing
from typing import Any

import httpx

from ..core.errors import MissingCredential
from .base import UpstreamProvider

logger = logging.getLogger(__name__)

DONE_SENTINEL = "[DONE]"


class HostedProvider(UpstreamProvider):
    """Hosted provider speaking OpenAI's Server-Sent-Events chat stream."""

    def __init__(
        self,
        api_key: str | None,
        model: str = "gpt-4o-mini",
        base_url: str = "https://api.openai.com/v1",
        temperature: float = 0.4,
        timeout: float = 60.0,
    ):
        """Initialize hosted provider.

        Args:
            api_key: Bearer credential; may be empty, in which case every
                call fails with MissingCredential before touching the network
            model: Model identifier, e.g. ``gpt-4o-mini``
            base_url: OpenAI-compatible API base URL
            temperature: Sampling temperature
            timeout: Connect and per-read timeout in seconds
        """
        super().__init__(timeout=timeout)
        self.api_key = api_key or ""
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.temperature = temperature

    @property
    def name(self) -> str:
        return "OpenAI"

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/chat/completions"

    async def stream_tokens(self, messages: list[dict[str, str]]) -> AsyncIterator[str]:
        """Stream text deltas from the hosted API."""
        if not self.api_key:
            raise MissingCredential("OPENAI_API_KEY is not set.")

        payload = {
            "model": self.model,
            "messages": messages,
            "stream": True,
            "temperature": self.temperature,
        }
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

        try:
            async with self._client() as client:
                async with client.stream(
                    "POST", self.endpoint, json=payload, headers=headers
                ) as response:
                    await self._raise_for_status(response)

                    async with aclosing(_sse_blocks(response)) as blocks:
                        async for block in blocks:
                            for data in _block_payloads(block):
                                if data == DONE_SENTINEL:
                                    return
                                token = _extract_delta(data)
                                if token:
                                    yield token
        except httpx.HTTPError as e:
            raise self._transport_error(e) from e


async def _sse_blocks(response: httpx.Response) -> AsyncIterator[str]:
    """Yield SSE blocks as they complete, then any unterminated final block."""
    buffer = ""
    async for text in response.aiter_text():
        blocks, buffer = _split_blocks(buffer + text)
        for block in blocks:
            yield block

    tail = _normalize_newlines(buffer).strip("\n")
    if tail:
        yield tail


def _split_blocks(buffer: str) -> tuple[list[str], str]:
    # A trailing \r may be half of a CRLF split across reads.
    held = ""
    if buffer.endswith("\r"):
        buffer, held = buffer[:-1], "\r"
    *blocks, rest = _normalize_newlines(buffer).split("\n\n")
    return blocks, rest + held


def _normalize_newlines(text: str) -> str:
    return text.replace("\r\n", "\n").replace("\r", "\n")


def _block_payloads(block: str) -> list[str]:
    """Return the ``data:`` payloads of one SSE block."""
    payloads = []
    for line in block.split("\n"):
        line = line.strip()
        if line.startswith("data:"):
            payloads.append(line[len("data:"):].strip())
    return payloads


def _extract_delta(data: str) -> str | None:
    try:
        chunk: Any = json.loads(data)
    except json.JSONDecodeError:
        logger.debug(f"Skipping malformed OpenAI block: {data[:200]!r}")
        return None

    try:
        content = chunk["choices"][0]["delta"]["content"]
    except (KeyError, IndexError, TypeError):
        return None
    if isinstance(content, str) and content:
        return content
    return None
