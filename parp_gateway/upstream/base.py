"""Base upstream provider interface using strategy pattern."""

import logging
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator

import httpx

from ..core.errors import UpstreamError

logger = logging.getLogger(__name__)


class UpstreamProvider(ABC):
    """Abstract base class for streaming LLM backends."""

    def __init__(self, timeout: float = 60.0):
        """Initialize provider.

        Args:
            timeout: Connect and per-read timeout in seconds
        """
        self.timeout = timeout

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable backend name used in messages and logs."""
        pass

    @abstractmethod
    def stream_tokens(self, messages: list[dict[str, str]]) -> AsyncIterator[str]:
        """Stream text deltas for a stitched message sequence.

        Implementations are async generators: lazy, finite and not
        restartable. Closing the generator early releases the upstream
        connection.

        Args:
            messages: System directive followed by the conversation history

        Yields:
            Non-empty text deltas in the order the upstream produced them

        Raises:
            UpstreamError: If the upstream rejects the call or the
                connection fails
            MissingCredential: If a required credential is not configured
        """
        pass

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=httpx.Timeout(self.timeout))

    async def _raise_for_status(self, response: httpx.Response) -> None:
        """Convert an unsuccessful initial response into an UpstreamError."""
        if response.is_success:
            return
        try:
            body = (await response.aread()).decode("utf-8", errors="replace")
        except httpx.HTTPError:
            body = ""
        detail = body or response.reason_phrase
        logger.warning(f"{self.name} rejected request with status {response.status_code}")
        raise UpstreamError(
            f"{self.name} error ({response.status_code}): {detail}",
            status=response.status_code,
            body=body,
        )

    def _transport_error(self, exc: httpx.HTTPError) -> UpstreamError:
        """Wrap a connection-level failure."""
        logger.warning(f"{self.name} transport failure: {exc!r}")
        return UpstreamError(f"{self.name} request failed: {exc}", status=0, body="")
