"""State models for a single chat exchange.

Every request to the gateway moves through the same deterministic states.
The exchange record is per-request and never persisted.
"""

import uuid
from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from .events import ProviderType


class GatewayState(str, Enum):
    """The 5 states of a chat exchange."""

    INIT = "init"
    AUTHENTICATING = "authenticating"
    NORMALIZING = "normalizing"
    STREAMING = "streaming"
    TERMINAL = "terminal"


_TRANSITIONS: dict[GatewayState, frozenset[GatewayState]] = {
    GatewayState.INIT: frozenset({GatewayState.AUTHENTICATING}),
    GatewayState.AUTHENTICATING: frozenset({GatewayState.NORMALIZING, GatewayState.TERMINAL}),
    GatewayState.NORMALIZING: frozenset({GatewayState.STREAMING, GatewayState.TERMINAL}),
    GatewayState.STREAMING: frozenset({GatewayState.TERMINAL}),
    GatewayState.TERMINAL: frozenset(),
}


class ChatExchange(BaseModel):
    """Bookkeeping for one request through the gateway."""

    request_id: str = Field(
        default_factory=lambda: str(uuid.uuid4())[:8],
        description="Short identifier used as a log prefix",
    )
    state: GatewayState = Field(
        default=GatewayState.INIT,
        description="Current position in the state machine",
    )
    principal_id: str | None = Field(None, description="Verified user id")
    provider: ProviderType | None = Field(None, description="Resolved provider selection")
    messages: list[dict[str, Any]] = Field(
        default_factory=list,
        description="Stitched sequence sent upstream",
    )
    started_at: datetime = Field(default_factory=datetime.utcnow)

    def advance(self, target: GatewayState) -> None:
        """Move to the next state.

        Raises:
            ValueError: If the transition is not allowed
        """
        if target not in _TRANSITIONS[self.state]:
            raise ValueError(f"Invalid transition {self.state.value} -> {target.value}")
        self.state = target

    @property
    def log_prefix(self) -> str:
        return f"[REQ-{self.request_id}]"

    @property
    def elapsed_seconds(self) -> float:
        """Seconds since the request was received."""
        return (datetime.utcnow() - self.started_at).total_seconds()
