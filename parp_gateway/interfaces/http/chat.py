"""Chat endpoint - authenticated, streaming, provider-agnostic.

Failures before the stream opens (authentication, body parsing) are returned
as JSON error responses with their own status. Once the stream opens the
response is committed to 200 and everything is reported as events.
"""

import json
import logging
from collections.abc import AsyncIterator
from contextlib import aclosing
from typing import Any

from fastapi import APIRouter, Request
from fastapi.responses import StreamingResponse

from ...conversation.normalizer import normalize_messages, stitch_messages
from ...core.config import Settings
from ...core.domain.events import ProviderType
from ...core.domain.state import ChatExchange, GatewayState
from ...core.errors import GatewayError, MalformedRequest
from ...streaming.framing import encode_event
from ...streaming.gateway import StreamGateway
from .security import SessionAuthenticator

logger = logging.getLogger(__name__)

router = APIRouter(tags=["chat"])

STREAM_HEADERS = {
    "Cache-Control": "no-cache, no-transform",
    "Connection": "keep-alive",
}


@router.post("/chat")
async def chat(request: Request) -> StreamingResponse:
    """Stream a chat completion as Server-Sent Events.

    Args:
        request: FastAPI request carrying ``Authorization: Bearer <token>``
            and a JSON body ``{messages, provider?, systemPrompt?}``

    Returns:
        ``text/event-stream`` response with ``open``, ``info``, ``token``,
        ``error`` and ``done`` events

    Raises:
        GatewayError: Before the stream opens; rendered as ``{"error": ...}``
    """
    settings: Settings = request.app.state.settings
    authenticator: SessionAuthenticator = request.app.state.authenticator
    gateway: StreamGateway = request.app.state.gateway

    exchange = ChatExchange()
    logger.info(f"{exchange.log_prefix} Chat request received")

    try:
        exchange.advance(GatewayState.AUTHENTICATING)
        exchange.principal_id = await authenticator.authenticate(
            request.headers.get("authorization")
        )

        exchange.advance(GatewayState.NORMALIZING)
        body = await _read_json_body(request)
        _prepare_exchange(exchange, body, settings)
    except GatewayError as e:
        exchange.advance(GatewayState.TERMINAL)
        logger.info(f"{exchange.log_prefix} Rejected before streaming ({e.status_code}): {e.message}")
        raise

    exchange.advance(GatewayState.STREAMING)
    logger.info(
        f"{exchange.log_prefix} Streaming for user={exchange.principal_id} "
        f"provider={exchange.provider.value} messages={len(exchange.messages)}"
    )

    return StreamingResponse(
        _event_stream(request, gateway, exchange),
        media_type="text/event-stream",
        headers=STREAM_HEADERS,
    )


async def _read_json_body(request: Request) -> Any:
    raw = await request.body()
    try:
        return json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise MalformedRequest("Invalid JSON body.") from e


def _prepare_exchange(exchange: ChatExchange, body: Any, settings: Settings) -> None:
    """Resolve provider, system directive and history from the request body."""
    if not isinstance(body, dict):
        body = {}

    default_provider = ProviderType.parse(settings.llm_provider, ProviderType.LOCAL)
    exchange.provider = ProviderType.parse(body.get("provider"), default_provider)

    system_prompt = body.get("systemPrompt")
    if not isinstance(system_prompt, str) or not system_prompt:
        system_prompt = settings.system_prompt

    history = normalize_messages(body.get("messages"), max_turns=settings.max_history_turns)
    exchange.messages = stitch_messages(system_prompt, history)


async def _event_stream(
    request: Request,
    gateway: StreamGateway,
    exchange: ChatExchange,
) -> AsyncIterator[str]:
    """Encode gateway events, stopping as soon as the client goes away."""
    try:
        async with aclosing(gateway.run(exchange.messages, exchange.provider, exchange)) as events:
            async for event in events:
                if await request.is_disconnected():
                    logger.info(f"{exchange.log_prefix} Client disconnected, abandoning stream")
                    break
                yield encode_event(event)
    finally:
        exchange.advance(GatewayState.TERMINAL)
        logger.info(
            f"{exchange.log_prefix} Exchange closed after {exchange.elapsed_seconds:.2f}s"
        )
