"""Outbound event streaming: orchestration and framing."""

from .framing import FrameDecoder, decode_frame, encode_event
from .gateway import FALLBACK_NOTICE, StreamGateway

__all__ = ["FALLBACK_NOTICE", "FrameDecoder", "StreamGateway", "decode_frame", "encode_event"]
