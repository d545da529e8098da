"""Domain models for the chat gateway.

This module contains the data structures shared by the normalizer,
the upstream adapters, the stream gateway and the HTTP surface.
"""

# Event models - Outbound stream and provider selection
from .events import (
    EventKind,
    OutboundEvent,
    ProviderType,
)

# Message models - Conversation history
from .messages import (
    CLIENT_ROLES,
    ConversationMessage,
    MessageRole,
)

# State models - Per-request exchange
from .state import (
    ChatExchange,
    GatewayState,
)

__all__ = [
    # Event models
    "EventKind",
    "OutboundEvent",
    "ProviderType",

    # Message models
    "CLIENT_ROLES",
    "ConversationMessage",
    "MessageRole",

    # State models
    "ChatExchange",
    "GatewayState",
]
