"""Consumer side of the chat stream."""

from .consumer import ChatReply, ChatRequestRejected, ChatStreamClient

__all__ = ["ChatReply", "ChatRequestRejected", "ChatStreamClient"]
