"""User store collaborator - verifies session tokens with Supabase auth."""

import logging
from typing import Protocol

import httpx

from ...core.errors import Unauthenticated

logger = logging.getLogger(__name__)

INVALID_SESSION = "Invalid session."


class UserStore(Protocol):
    """Contract for the identity service."""

    async def verify(self, token: str) -> str:
        """Return the principal id for a session token.

        Raises:
            Unauthenticated: If the token is rejected
        """
        ...


class SupabaseUserStore:
    """User store backed by the Supabase auth REST API."""

    def __init__(self, url: str, anon_key: str, timeout: float = 10.0):
        """Initialize the store.

        Args:
            url: Supabase project URL
            anon_key: Project anonymous key, sent as the ``apikey`` header
            timeout: Request timeout in seconds
        """
        self.url = url.rstrip("/")
        self.anon_key = anon_key
        self.timeout = timeout

    async def verify(self, token: str) -> str:
        """Look up the user owning ``token``."""
        headers = {
            "apikey": self.anon_key,
            "Authorization": f"Bearer {token}",
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(f"{self.url}/auth/v1/user", headers=headers)
        except httpx.HTTPError as e:
            logger.warning(f"Identity service unreachable: {e!r}")
            raise Unauthenticated(INVALID_SESSION) from e

        if not response.is_success:
            logger.info(f"Identity service rejected token with status {response.status_code}")
            raise Unauthenticated(INVALID_SESSION)

        try:
            user = response.json()
        except ValueError as e:
            logger.warning("Identity service returned a non-JSON body")
            raise Unauthenticated(INVALID_SESSION) from e

        user_id = user.get("id") if isinstance(user, dict) else None
        if not isinstance(user_id, str) or not user_id:
            raise Unauthenticated(INVALID_SESSION)
        return user_id
