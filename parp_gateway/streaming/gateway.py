"""Stream gateway - re-publishes upstream token streams as outbound events.

The gateway owns the in-stream half of a chat exchange. Once ``run`` is
iterated the caller has committed to the event protocol: every failure is
reported as a single ``error`` event, never raised.
"""

import logging
from collections.abc import AsyncIterator, Mapping
from contextlib import aclosing

from ..core.domain.events import OutboundEvent, ProviderType
from ..core.domain.state import ChatExchange
from ..core.errors import GatewayError
from ..upstream.base import UpstreamProvider

logger = logging.getLogger(__name__)

FALLBACK_NOTICE = "Local model unavailable, falling back to hosted model."


class _LocalAttemptFailed(Exception):
    """Local attempt failed before producing any token."""

    def __init__(self, cause: Exception):
        super().__init__(str(cause))
        self.cause = cause


class StreamGateway:
    """Selects an upstream provider and streams its output as events."""

    def __init__(
        self,
        providers: Mapping[ProviderType, UpstreamProvider],
        fallback_notice: str = FALLBACK_NOTICE,
    ):
        """Initialize the gateway.

        Args:
            providers: Concrete providers keyed by ``local`` and ``hosted``
            fallback_notice: Payload of the ``info`` event sent on fallback
        """
        missing = {ProviderType.LOCAL, ProviderType.HOSTED} - set(providers)
        if missing:
            raise ValueError(f"Missing providers: {sorted(p.value for p in missing)}")
        self.providers = dict(providers)
        self.fallback_notice = fallback_notice

    async def run(
        self,
        messages: list[dict[str, str]],
        selection: ProviderType,
        exchange: ChatExchange | None = None,
    ) -> AsyncIterator[OutboundEvent]:
        """Stream one exchange.

        Args:
            messages: Stitched sequence (system directive first)
            selection: ``local``, ``hosted`` or ``auto``
            exchange: Request bookkeeping, used for log prefixes

        Yields:
            ``open``, then ``info``/``token`` events in production order,
            then exactly one of ``done`` or ``error``
        """
        prefix = exchange.log_prefix if exchange else "[REQ-?]"
        yield OutboundEvent.open()

        try:
            if selection == ProviderType.AUTO:
                try:
                    async with aclosing(self._attempt_local(messages, prefix)) as tokens:
                        async for token in tokens:
                            yield OutboundEvent.token(token)
                except _LocalAttemptFailed as e:
                    logger.warning(f"{prefix} Local provider failed, falling back: {e.cause}")
                    yield OutboundEvent.info(self.fallback_notice)
                    selection = ProviderType.HOSTED

            if selection != ProviderType.AUTO:
                async with aclosing(self._stream(selection, messages, prefix)) as tokens:
                    async for token in tokens:
                        yield OutboundEvent.token(token)

        except GatewayError as e:
            logger.warning(f"{prefix} Stream failed: {e.message}")
            yield OutboundEvent.error(e.message)
            return
        except Exception as e:
            logger.exception(f"{prefix} Unexpected stream failure")
            yield OutboundEvent.error(str(e) or "Unknown error.")
            return

        logger.info(f"{prefix} Stream completed")
        yield OutboundEvent.done()

    async def _stream(
        self,
        provider_type: ProviderType,
        messages: list[dict[str, str]],
        prefix: str,
    ) -> AsyncIterator[str]:
        provider = self.providers[provider_type]
        logger.info(f"{prefix} Streaming from {provider.name} ({provider_type.value})")
        async with aclosing(provider.stream_tokens(messages)) as tokens:
            async for token in tokens:
                yield token

    async def _attempt_local(
        self,
        messages: list[dict[str, str]],
        prefix: str,
    ) -> AsyncIterator[str]:
        """Stream from local, marking failures that happen before any token."""
        produced = False
        try:
            async for token in self._stream(ProviderType.LOCAL, messages, prefix):
                produced = True
                yield token
        except Exception as e:
            if produced:
                raise
            raise _LocalAttemptFailed(e) from e
