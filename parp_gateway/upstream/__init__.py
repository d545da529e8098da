"""Upstream LLM backends."""

from .base import UpstreamProvider
from .hosted_provider import HostedProvider
from .local_provider import LocalProvider
from .provider_factory import UpstreamProviderFactory

__all__ = ["HostedProvider", "LocalProvider", "UpstreamProvider", "UpstreamProviderFactory"]
