"""Event-stream framing for the gateway's outbound events.

Each event is one frame::

    event: token
    data: Hello

Frames are separated by a blank line. A multi-line payload is written as
one ``data:`` line per payload line and rejoined with ``\\n`` on decode.
"""

import logging

from ..core.domain.events import EventKind, OutboundEvent

logger = logging.getLogger(__name__)

FRAME_SEPARATOR = "\n\n"


def _normalize_newlines(text: str) -> str:
    return text.replace("\r\n", "\n").replace("\r", "\n")


def encode_event(event: OutboundEvent) -> str:
    """Serialize an event as one frame, including its trailing blank line."""
    payload = _normalize_newlines(event.payload)
    data_lines = "".join(f"data: {line}\n" for line in payload.split("\n"))
    return f"event: {event.kind.value}\n{data_lines}\n"


def decode_frame(frame: str) -> OutboundEvent | None:
    """Decode a single frame (without its separator).

    Returns:
        The event, or None if the frame names no recognized kind
    """
    kind: str | None = None
    data: list[str] = []

    for line in frame.split("\n"):
        if line.startswith("event:"):
            kind = _field_value(line, "event:").strip()
        elif line.startswith("data:"):
            data.append(_field_value(line, "data:"))

    if not kind:
        return None
    try:
        event_kind = EventKind(kind)
    except ValueError:
        logger.debug(f"Discarding frame with unknown event kind: {kind!r}")
        return None
    return OutboundEvent(kind=event_kind, payload="\n".join(data))


def _field_value(line: str, prefix: str) -> str:
    value = line[len(prefix):]
    if value.startswith(" "):
        value = value[1:]
    return value


class FrameDecoder:
    """Incremental decoder for the gateway's event stream.

    Feed it text as it arrives; complete frames are decoded and returned,
    a trailing partial frame is kept until the next feed.
    """

    def __init__(self) -> None:
        self._buffer = ""

    def feed(self, text: str) -> list[OutboundEvent]:
        """Add received text and return the events it completes."""
        frames, self._buffer = split_frames(self._buffer + text)
        return [event for event in map(decode_frame, frames) if event is not None]

    def flush(self) -> list[OutboundEvent]:
        """Decode whatever remains buffered at end of stream."""
        remainder, self._buffer = _normalize_newlines(self._buffer), ""
        if not remainder.strip():
            return []
        event = decode_frame(remainder.rstrip("\n"))
        return [event] if event is not None else []


def split_frames(buffer: str) -> tuple[list[str], str]:
    """Split complete frames off a raw text buffer.

    A trailing ``\\r`` may be the first half of a CRLF split across reads,
    so it stays unnormalized in the remainder until more text arrives.

    Returns:
        Complete frames (newlines normalized) and the unconsumed remainder
    """
    held = ""
    if buffer.endswith("\r"):
        buffer, held = buffer[:-1], "\r"
    *frames, rest = _normalize_newlines(buffer).split(FRAME_SEPARATOR)
    return frames, rest + held
