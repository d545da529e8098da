"""Outbound event and provider selection models.

An exchange on the ``/chat`` endpoint is a sequence of OutboundEvents:
one ``open``, any number of ``info`` and ``token`` events, and exactly one
terminal ``done`` or ``error``.
"""

from enum import Enum

from pydantic import BaseModel, Field


class EventKind(str, Enum):
    """Kinds of events emitted on the outbound stream."""

    OPEN = "open"
    INFO = "info"
    TOKEN = "token"
    ERROR = "error"
    DONE = "done"

    @property
    def is_terminal(self) -> bool:
        """Whether this kind ends an exchange."""
        return self in (EventKind.DONE, EventKind.ERROR)


class OutboundEvent(BaseModel):
    """A single event on the gateway's outbound stream."""

    kind: EventKind = Field(..., description="Event kind")
    payload: str = Field(default="", description="Event data")

    @classmethod
    def open(cls) -> "OutboundEvent":
        return cls(kind=EventKind.OPEN, payload="ok")

    @classmethod
    def info(cls, message: str) -> "OutboundEvent":
        return cls(kind=EventKind.INFO, payload=message)

    @classmethod
    def token(cls, text: str) -> "OutboundEvent":
        return cls(kind=EventKind.TOKEN, payload=text)

    @classmethod
    def error(cls, message: str) -> "OutboundEvent":
        return cls(kind=EventKind.ERROR, payload=message)

    @classmethod
    def done(cls) -> "OutboundEvent":
        return cls(kind=EventKind.DONE, payload="ok")


class ProviderType(str, Enum):
    """Upstream provider selection.

    ``auto`` is a policy rather than a backend: try local, and fall back
    to hosted once if local fails before producing any token.
    """

    LOCAL = "local"
    HOSTED = "hosted"
    AUTO = "auto"

    @classmethod
    def parse(cls, value: object, default: "ProviderType") -> "ProviderType":
        """Resolve a client- or config-supplied provider name.

        Args:
            value: Raw value, e.g. ``"hosted"``, ``"OpenAI"`` or ``None``
            default: Selection used when the value is absent or empty

        Returns:
            The matching provider type. Unknown names select ``auto``.
        """
        if not isinstance(value, str) or not value.strip():
            return default
        name = value.strip().lower()
        name = _PROVIDER_ALIASES.get(name, name)
        try:
            return cls(name)
        except ValueError:
            return cls.AUTO


_PROVIDER_ALIASES = {
    "ollama": "local",
    "openai": "hosted",
}
