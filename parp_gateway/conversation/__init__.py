"""Conversation history handling."""

from .normalizer import MAX_TURNS, normalize_messages, stitch_messages

__all__ = ["MAX_TURNS", "normalize_messages", "stitch_messages"]
