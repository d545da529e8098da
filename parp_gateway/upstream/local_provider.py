"""Local Ollama upstream provider implementation."""

import json
import logging
from collections.abc import AsyncIterator
from typing import Any

import httpx

from .base import UpstreamProvider

logger = logging.getLogger(__name__)


class LocalProvider(UpstreamProvider):
    """Local provider speaking Ollama's newline-delimited JSON chat stream."""

    def __init__(
        self,
        base_url: str = "http://localhost:11434",
        model: str = "gemma2:2b",
        timeout: float = 60.0,
    ):
        """Initialize local provider.

        Args:
            base_url: Ollama server base URL
            model: Model identifier, e.g. ``gemma2:2b``
            timeout: Connect and per-read timeout in seconds
        """
        super().__init__(timeout=timeout)
        self.base_url = base_url.rstrip("/")
        self.model = model

    @property
    def name(self) -> str:
        return "Ollama"

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/api/chat"

    async def stream_tokens(self, messages: list[dict[str, str]]) -> AsyncIterator[str]:
        """Stream text deltas from Ollama."""
        payload = {
            "model": self.model,
            "messages": messages,
            "stream": True,
        }

        try:
            async with self._client() as client:
                async with client.stream("POST", self.endpoint, json=payload) as response:
                    await self._raise_for_status(response)

                    async for line in response.aiter_lines():
                        line = line.strip()
                        if not line:
                            continue

                        chunk = _parse_line(line)
                        if chunk is None:
                            continue

                        token = _extract_token(chunk)
                        if token:
                            yield token
                        if chunk.get("done") is True:
                            return
        except httpx.HTTPError as e:
            raise self._transport_error(e) from e


def _parse_line(line: str) -> dict[str, Any] | None:
    try:
        chunk = json.loads(line)
    except json.JSONDecodeError:
        logger.debug(f"Skipping malformed Ollama line: {line[:200]!r}")
        return None
    if not isinstance(chunk, dict):
        logger.debug(f"Skipping non-object Ollama line: {line[:200]!r}")
        return None
    return chunk


def _extract_token(chunk: dict[str, Any]) -> str | None:
    message = chunk.get("message")
    if not isinstance(message, dict):
        return None
    content = message.get("content")
    if isinstance(content, str) and content:
        return content
    return None
