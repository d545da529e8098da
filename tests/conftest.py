"""Shared test fixtures for the chat gateway tests."""

from collections.abc import AsyncIterator
from typing import Optional

import pytest

from parp_gateway.core.config import Settings
from parp_gateway.core.errors import Unauthenticated, UpstreamError
from parp_gateway.upstream.base import UpstreamProvider


# ─────────────────────────────────────────────────────────────────────
# MOCK DATA
# ─────────────────────────────────────────────────────────────────────

MOCK_SUPABASE_URL = "https://project.supabase.test"
MOCK_SUPABASE_USER_URL = f"{MOCK_SUPABASE_URL}/auth/v1/user"
MOCK_OLLAMA_BASE_URL = "http://ollama.test:11434"
MOCK_OLLAMA_CHAT_URL = f"{MOCK_OLLAMA_BASE_URL}/api/chat"
MOCK_OPENAI_CHAT_URL = "https://api.openai.com/v1/chat/completions"

VALID_TOKEN = "valid-token"
MOCK_USER_ID = "user-123"
TEST_SYSTEM_PROMPT = "You are a test assistant."


def make_settings(**overrides) -> Settings:
    """Build settings isolated from the host environment's .env file."""
    values = dict(
        environment="development",
        log_level="INFO",
        supabase_url=MOCK_SUPABASE_URL,
        supabase_anon_key="anon-key",
        llm_provider="local",
        ollama_base_url=MOCK_OLLAMA_BASE_URL,
        ollama_model="gemma2:2b",
        openai_api_key="sk-test",
        openai_model="gpt-4o-mini",
        openai_base_url="https://api.openai.com/v1",
        upstream_timeout_seconds=5.0,
        max_history_turns=20,
        system_prompt=TEST_SYSTEM_PROMPT,
    )
    values.update(overrides)
    return Settings(_env_file=None, **values)


# ─────────────────────────────────────────────────────────────────────
# FAKE COLLABORATORS
# ─────────────────────────────────────────────────────────────────────

class FakeUserStore:
    """User store accepting a single known token."""

    def __init__(self, valid_token: str = VALID_TOKEN, user_id: str = MOCK_USER_ID):
        self.valid_token = valid_token
        self.user_id = user_id
        self.calls: list[str] = []

    async def verify(self, token: str) -> str:
        self.calls.append(token)
        if token != self.valid_token:
            raise Unauthenticated("Invalid session.")
        return self.user_id


class FakeProvider(UpstreamProvider):
    """Scripted provider: yields tokens, then optionally fails."""

    def __init__(
        self,
        name: str,
        tokens: Optional[list[str]] = None,
        error: Optional[Exception] = None,
    ):
        super().__init__(timeout=1.0)
        self._name = name
        self.tokens = tokens or []
        self.error = error
        self.calls: list[list[dict[str, str]]] = []
        self.closed = False

    @property
    def name(self) -> str:
        return self._name

    async def stream_tokens(self, messages: list[dict[str, str]]) -> AsyncIterator[str]:
        self.calls.append(messages)
        try:
            for token in self.tokens:
                yield token
            if self.error is not None:
                raise self.error
        finally:
            self.closed = True


def upstream_down(name: str = "Ollama") -> UpstreamError:
    return UpstreamError(f"{name} error (503): unavailable", status=503, body="unavailable")


# ─────────────────────────────────────────────────────────────────────
# FIXTURES
# ─────────────────────────────────────────────────────────────────────

@pytest.fixture
def settings() -> Settings:
    """Return settings with every collaborator configured."""
    return make_settings()


@pytest.fixture
def user_store() -> FakeUserStore:
    """Return a user store that accepts VALID_TOKEN."""
    return FakeUserStore()


@pytest.fixture
def sample_messages() -> list[dict[str, str]]:
    """Return a stitched message sequence."""
    return [
        {"role": "system", "content": TEST_SYSTEM_PROMPT},
        {"role": "user", "content": "What is TOE readiness?"},
    ]
