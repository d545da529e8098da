"""HTTP interface: the chat route and its authentication."""

from .chat import router
from .security import SessionAuthenticator, extract_bearer_token
from .user_store import SupabaseUserStore, UserStore

__all__ = [
    "SessionAuthenticator",
    "SupabaseUserStore",
    "UserStore",
    "extract_bearer_token",
    "router",
]
