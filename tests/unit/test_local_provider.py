"""Tests for LocalProvider NDJSON parsing and error handling."""

import json

import httpx
import pytest
import respx

from parp_gateway.core.errors import UpstreamError
from parp_gateway.upstream.local_provider import LocalProvider
from tests.conftest import MOCK_OLLAMA_BASE_URL, MOCK_OLLAMA_CHAT_URL


def ndjson(*objects: object) -> bytes:
    """Build an Ollama NDJSON stream body."""
    return "".join(json.dumps(obj) + "\n" for obj in objects).encode()


async def collect(provider: LocalProvider, messages: list[dict[str, str]]) -> list[str]:
    return [token async for token in provider.stream_tokens(messages)]


@pytest.fixture
def provider() -> LocalProvider:
    return LocalProvider(base_url=MOCK_OLLAMA_BASE_URL, model="gemma2:2b", timeout=5.0)


# ─────────────────────────────────────────────────────────────────────
# NDJSON streaming
# ─────────────────────────────────────────────────────────────────────


class TestNDJSONStreaming:
    @pytest.mark.asyncio
    @respx.mock
    async def test_streams_message_content(self, provider, sample_messages):
        respx.post(MOCK_OLLAMA_CHAT_URL).mock(
            return_value=httpx.Response(200, content=ndjson(
                {"message": {"content": "Hel"}},
                {"message": {"content": "lo"}},
                {"done": True},
            ))
        )

        assert await collect(provider, sample_messages) == ["Hel", "lo"]

    @pytest.mark.asyncio
    @respx.mock
    async def test_done_flag_ends_stream(self, provider, sample_messages):
        respx.post(MOCK_OLLAMA_CHAT_URL).mock(
            return_value=httpx.Response(200, content=ndjson(
                {"message": {"content": "last"}, "done": True},
                {"message": {"content": "ignored"}},
            ))
        )

        assert await collect(provider, sample_messages) == ["last"]

    @pytest.mark.asyncio
    @respx.mock
    async def test_skips_malformed_and_empty_lines(self, provider, sample_messages):
        body = (
            b'{"message": {"content": "a"}}\n'
            b"\n"
            b"not json at all\n"
            b'{"message": {"content": "b"\n'
            b"[1, 2, 3]\n"
            b'{"message": {"content": ""}}\n'
            b'{"message": "flat string"}\n'
            b'{"message": {"content": 7}}\n'
            b'{"message": {"content": "c"}}\n'
            b'{"done": true}\n'
        )
        respx.post(MOCK_OLLAMA_CHAT_URL).mock(return_value=httpx.Response(200, content=body))

        assert await collect(provider, sample_messages) == ["a", "c"]

    @pytest.mark.asyncio
    @respx.mock
    async def test_parses_unterminated_last_line(self, provider, sample_messages):
        respx.post(MOCK_OLLAMA_CHAT_URL).mock(
            return_value=httpx.Response(200, content=b'{"message": {"content": "tail"}}')
        )

        assert await collect(provider, sample_messages) == ["tail"]

    @pytest.mark.asyncio
    @respx.mock
    async def test_sends_model_messages_and_stream_flag(self, sample_messages):
        route = respx.post(MOCK_OLLAMA_CHAT_URL).mock(
            return_value=httpx.Response(200, content=ndjson({"done": True}))
        )
        provider = LocalProvider(base_url=MOCK_OLLAMA_BASE_URL + "/", model="llama3.2")

        await collect(provider, sample_messages)

        assert route.called
        sent = json.loads(route.calls.last.request.content)
        assert sent == {"model": "llama3.2", "messages": sample_messages, "stream": True}


# ─────────────────────────────────────────────────────────────────────
# Error handling
# ─────────────────────────────────────────────────────────────────────


class TestErrorHandling:
    @pytest.mark.asyncio
    @respx.mock
    async def test_error_status_raises_upstream_error(self, provider, sample_messages):
        respx.post(MOCK_OLLAMA_CHAT_URL).mock(
            return_value=httpx.Response(404, content=b'{"error":"model \'gemma2:2b\' not found"}')
        )

        with pytest.raises(UpstreamError) as exc_info:
            await collect(provider, sample_messages)

        assert exc_info.value.status == 404
        assert "not found" in exc_info.value.body
        assert exc_info.value.message.startswith("Ollama error (404): ")

    @pytest.mark.asyncio
    @respx.mock
    async def test_empty_error_body_uses_reason_phrase(self, provider, sample_messages):
        respx.post(MOCK_OLLAMA_CHAT_URL).mock(return_value=httpx.Response(503))

        with pytest.raises(UpstreamError, match=r"Ollama error \(503\): Service Unavailable"):
            await collect(provider, sample_messages)

    @pytest.mark.asyncio
    @respx.mock
    async def test_connection_refused(self, provider, sample_messages):
        respx.post(MOCK_OLLAMA_CHAT_URL).mock(side_effect=httpx.ConnectError("Connection refused"))

        with pytest.raises(UpstreamError) as exc_info:
            await collect(provider, sample_messages)

        assert exc_info.value.status == 0
        assert "Connection refused" in exc_info.value.message

    @pytest.mark.asyncio
    @respx.mock
    async def test_timeout(self, provider, sample_messages):
        respx.post(MOCK_OLLAMA_CHAT_URL).mock(side_effect=httpx.ReadTimeout("timed out"))

        with pytest.raises(UpstreamError, match="timed out"):
            await collect(provider, sample_messages)
