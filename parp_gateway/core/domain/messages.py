"""Conversation message models.

These models describe the dialogue history a client submits with each chat
request, after it has been cleaned by the conversation normalizer.
"""

from enum import Enum

from pydantic import BaseModel, Field, field_validator


class MessageRole(str, Enum):
    """Roles a message may carry in the stitched sequence."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


CLIENT_ROLES = frozenset({MessageRole.USER, MessageRole.ASSISTANT})


class ConversationMessage(BaseModel):
    """A single turn of dialogue history."""

    role: MessageRole = Field(..., description="Who produced the message")
    content: str = Field(..., min_length=1, description="Trimmed message text")

    @field_validator("content", mode="before")
    @classmethod
    def strip_content(cls, v: str) -> str:
        """Trim surrounding whitespace."""
        if isinstance(v, str):
            return v.strip()
        return v

    def to_wire(self) -> dict[str, str]:
        """Render as an OpenAI/Ollama chat message."""
        return {"role": self.role.value, "content": self.content}
