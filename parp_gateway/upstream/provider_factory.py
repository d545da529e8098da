"""Factory for creating upstream providers."""

from ..core.config import Settings
from ..core.domain.events import ProviderType
from .base import UpstreamProvider
from .hosted_provider import HostedProvider
from .local_provider import LocalProvider


class UpstreamProviderFactory:
    """Factory for creating upstream providers from settings."""

    @staticmethod
    def create_provider(provider_type: ProviderType, settings: Settings) -> UpstreamProvider:
        """Create an upstream provider instance.

        Args:
            provider_type: Concrete backend to create (``auto`` is a policy
                and has no provider of its own)
            settings: Application settings

        Returns:
            Upstream provider instance

        Raises:
            ValueError: If provider_type is not a concrete backend
        """
        if provider_type == ProviderType.LOCAL:
            return LocalProvider(
                base_url=settings.ollama_base_url,
                model=settings.ollama_model,
                timeout=settings.upstream_timeout_seconds,
            )

        elif provider_type == ProviderType.HOSTED:
            return HostedProvider(
                api_key=settings.openai_api_key,
                model=settings.openai_model,
                base_url=settings.openai_base_url,
                temperature=settings.openai_temperature,
                timeout=settings.upstream_timeout_seconds,
            )

        else:
            raise ValueError(f"Unsupported provider type: {provider_type}")

    @staticmethod
    def create_all(settings: Settings) -> dict[ProviderType, UpstreamProvider]:
        """Create one provider per concrete backend.

        Returns:
            Mapping of ``local`` and ``hosted`` to their providers
        """
        return {
            provider_type: UpstreamProviderFactory.create_provider(provider_type, settings)
            for provider_type in (ProviderType.LOCAL, ProviderType.HOSTED)
        }
