"""Bearer-token authentication for the chat endpoint.

This module extracts the caller's session token from the Authorization
header and verifies it against the identity service.
"""

import logging
import re
from typing import Optional

from ...core.config import Settings
from ...core.errors import MisconfiguredService, Unauthenticated
from .user_store import SupabaseUserStore, UserStore

logger = logging.getLogger(__name__)

BEARER_PATTERN = re.compile(r"^Bearer\s+(.+)$", re.IGNORECASE)


def extract_bearer_token(authorization: Optional[str]) -> str:
    """Extract the token from an Authorization header value.

    Args:
        authorization: Header value, e.g. ``"Bearer abc.def"``

    Returns:
        The trimmed token

    Raises:
        Unauthenticated: If the header is absent or not a bearer credential
    """
    if not authorization:
        raise Unauthenticated("Missing auth token.")

    match = BEARER_PATTERN.match(authorization)
    token = match.group(1).strip() if match else ""
    if not token:
        raise Unauthenticated("Missing auth token.")
    return token


class SessionAuthenticator:
    """Verifies session tokens against the user store."""

    def __init__(self, settings: Settings, user_store: Optional[UserStore] = None):
        """Initialize the authenticator.

        Args:
            settings: Application settings
            user_store: Identity service client; defaults to Supabase built
                from settings
        """
        self.settings = settings
        self._user_store = user_store

    @property
    def user_store(self) -> UserStore:
        if self._user_store is None:
            self._user_store = SupabaseUserStore(
                url=self.settings.supabase_url,
                anon_key=self.settings.supabase_anon_key,
                timeout=self.settings.auth_timeout_seconds,
            )
        return self._user_store

    async def authenticate(self, authorization: Optional[str]) -> str:
        """Verify the caller.

        Args:
            authorization: Authorization header value

        Returns:
            Verified principal id

        Raises:
            Unauthenticated: If the token is missing, malformed or rejected
            MisconfiguredService: If the identity service is not configured
        """
        token = extract_bearer_token(authorization)

        if not self.settings.supabase_configured:
            logger.error("Supabase URL or anon key missing; cannot verify sessions")
            raise MisconfiguredService(
                "Supabase environment variables are not configured on the server."
            )

        principal_id = await self.user_store.verify(token)
        logger.debug(f"Authenticated principal {principal_id}")
        return principal_id
