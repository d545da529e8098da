"""Conversation normalization.

Client-supplied history is untrusted: roles may be anything, content may be
missing or not a string. Normalization never fails; it only drops entries.
"""

import logging
from collections.abc import Mapping
from typing import Any

from ..core.domain.messages import CLIENT_ROLES, ConversationMessage, MessageRole

logger = logging.getLogger(__name__)

MAX_TURNS = 20

_CLIENT_ROLE_NAMES = frozenset(role.value for role in CLIENT_ROLES)


def normalize_messages(raw: Any, max_turns: int = MAX_TURNS) -> list[ConversationMessage]:
    """Clean and bound a client-supplied message list.

    Args:
        raw: Arbitrary decoded JSON, expected to be a list of
            ``{"role": ..., "content": ...}`` objects
        max_turns: Size of the rolling window; oldest entries are dropped first

    Returns:
        At most ``max_turns`` messages in their original relative order
    """
    if not isinstance(raw, list):
        return []

    cleaned: list[ConversationMessage] = []
    for entry in raw:
        if not isinstance(entry, Mapping):
            continue

        role = entry.get("role")
        if not isinstance(role, str) or role not in _CLIENT_ROLE_NAMES:
            continue

        content = entry.get("content")
        if not isinstance(content, str):
            continue
        content = content.strip()
        if not content:
            continue

        cleaned.append(ConversationMessage(role=MessageRole(role), content=content))

    if max_turns <= 0:
        return []

    dropped = len(cleaned) - max_turns
    if dropped > 0:
        logger.debug(f"Dropping {dropped} oldest message(s) beyond the {max_turns}-turn window")
        cleaned = cleaned[dropped:]
    return cleaned


def stitch_messages(
    system_prompt: str,
    history: list[ConversationMessage],
) -> list[dict[str, str]]:
    """Prepend the system directive to the normalized history.

    Returns:
        Wire-format messages, system directive first
    """
    stitched = [{"role": MessageRole.SYSTEM.value, "content": system_prompt}]
    stitched.extend(message.to_wire() for message in history)
    return stitched
