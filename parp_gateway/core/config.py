"""Application configuration using pydantic-settings."""

from functools import lru_cache
from typing import Literal

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_SYSTEM_PROMPT = """You are PARP AI - a savvy, knowledgeable Kenyan digital advisor. You specialize in AI adoption for public services, freelancing (online writing, coding), and the digital economy in Kenya.

Your Persona:
- Friendly, professional but approachable.
- Code-switch naturally between English, Kiswahili, and Sheng slang (e.g., using terms like "buda", "maneno", "ganji", "kujijenga").
- Match the user's language. If they speak formally, reply formally. If they use Sheng, reply in Sheng.

Context:
- Reference the "Kenya National AI Strategy 2025-2030".
- Use examples relevant to Kenya (e.g., M-Pesa, eCitizen, Ajira Digital, Nairobi tech scene).

Goal: Help users understand their "TOE" (Technology, Organization, Environment) readiness for AI."""


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Instances are frozen: the gateway reads them at request time but never
    mutates them, so one instance is built at startup and passed around.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
        frozen=True,
    )

    # Application Configuration
    environment: Literal["development", "staging", "production"] = "development"
    log_level: str = "INFO"
    debug: bool = True

    # Identity Service (Supabase auth)
    supabase_url: str = Field(
        default="",
        validation_alias=AliasChoices("SUPABASE_URL", "NEXT_PUBLIC_SUPABASE_URL"),
        description="Base URL of the Supabase project used to verify sessions",
    )
    supabase_anon_key: str = Field(
        default="",
        validation_alias=AliasChoices("SUPABASE_ANON_KEY", "NEXT_PUBLIC_SUPABASE_ANON_KEY"),
        description="Anonymous (public) API key of the Supabase project",
    )
    auth_timeout_seconds: float = Field(
        default=10.0,
        description="Timeout for session verification calls",
    )

    # Provider Selection
    llm_provider: str = Field(
        default="local",
        description="Default provider when a request names none (local, hosted, auto)",
    )

    # Local Upstream (Ollama)
    ollama_base_url: str = Field(
        default="http://localhost:11434",
        description="Base URL of the local Ollama server",
    )
    ollama_model: str = Field(
        default="gemma2:2b",
        description="Model served by the local backend",
    )

    # Hosted Upstream (OpenAI)
    openai_api_key: str = Field(
        default="",
        description="OpenAI API key for hosted inference",
    )
    openai_model: str = Field(
        default="gpt-4o-mini",
        description="Model requested from the hosted backend",
    )
    openai_base_url: str = Field(
        default="https://api.openai.com/v1",
        description="Base URL of the OpenAI-compatible API",
    )
    openai_temperature: float = Field(
        default=0.4,
        description="Sampling temperature sent to the hosted backend",
    )

    # Streaming Configuration
    upstream_timeout_seconds: float = Field(
        default=60.0,
        description="Connect and per-read timeout for upstream calls",
    )
    max_history_turns: int = Field(
        default=20,
        description="Rolling window of conversation messages kept per request",
    )
    system_prompt: str = Field(
        default=DEFAULT_SYSTEM_PROMPT,
        description="System directive used when the caller supplies none",
    )

    # FastAPI Configuration
    fastapi_host: str = "0.0.0.0"
    fastapi_port: int = 8000
    fastapi_reload: bool = True

    @property
    def supabase_configured(self) -> bool:
        """Whether the identity service endpoint and key are both set."""
        return bool(self.supabase_url and self.supabase_anon_key)

    @property
    def hosted_configured(self) -> bool:
        """Whether an API key for the hosted backend is set."""
        return bool(self.openai_api_key)

    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment == "development"

    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.environment == "production"


@lru_cache
def get_settings() -> Settings:
    """Return the process-wide settings, built on first use."""
    return Settings()
