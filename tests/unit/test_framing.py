"""Unit tests for event-stream framing."""

import pytest

from parp_gateway.core.domain.events import EventKind, OutboundEvent
from parp_gateway.streaming.framing import FrameDecoder, decode_frame, encode_event


class TestEncodeEvent:
    """Test cases for encode_event."""

    def test_single_line_payload(self) -> None:
        assert encode_event(OutboundEvent.token("Hel")) == "event: token\ndata: Hel\n\n"

    def test_open_frame(self) -> None:
        assert encode_event(OutboundEvent.open()) == "event: open\ndata: ok\n\n"

    def test_carriage_returns_normalized(self) -> None:
        frame = encode_event(OutboundEvent.token("a\r\nb\rc"))

        assert "\r" not in frame
        assert frame == "event: token\ndata: a\ndata: b\ndata: c\n\n"

    def test_payload_blank_lines_never_end_the_frame(self) -> None:
        frame = encode_event(OutboundEvent.token("para one\n\npara two"))

        assert frame.count("\n\n") == 1
        assert frame.endswith("\n\n")


class TestDecodeFrame:
    """Test cases for decode_frame."""

    def test_strips_exactly_one_space(self) -> None:
        event = decode_frame("event: token\ndata:   indented")

        assert event.payload == "  indented"

    def test_data_without_space(self) -> None:
        assert decode_frame("event:token\ndata:x").payload == "x"

    def test_multiple_data_lines_joined(self) -> None:
        event = decode_frame("event: error\ndata: line one\ndata: line two")

        assert event == OutboundEvent(kind=EventKind.ERROR, payload="line one\nline two")

    def test_last_event_line_wins(self) -> None:
        assert decode_frame("event: info\nevent: token\ndata: x").kind == EventKind.TOKEN

    def test_frame_without_kind_is_discarded(self) -> None:
        assert decode_frame("data: orphan") is None

    def test_unknown_kind_is_discarded(self) -> None:
        assert decode_frame("event: ping\ndata: x") is None

    def test_ignores_comments_and_other_fields(self) -> None:
        event = decode_frame(": keepalive\nid: 7\nevent: done\ndata: ok")

        assert event == OutboundEvent.done()


class TestRoundTrip:
    """Encoding then decoding preserves payloads."""

    @pytest.mark.parametrize("payload", [
        "plain",
        "line one\nline two",
        "trailing newline\n",
        "\nleading newline",
        "para one\n\npara two",
        " leading space",
        "",
        "data: looks like a field",
    ])
    def test_payload_preserved(self, payload: str) -> None:
        decoder = FrameDecoder()

        events = decoder.feed(encode_event(OutboundEvent.token(payload)))

        assert events == [OutboundEvent.token(payload)]


class TestFrameDecoder:
    """Test cases for incremental decoding."""

    def test_buffers_partial_frames(self) -> None:
        decoder = FrameDecoder()

        assert decoder.feed("event: tok") == []
        assert decoder.feed("en\ndata: Hel") == []
        assert decoder.feed("\n\nevent: token\ndata: lo\n") == [OutboundEvent.token("Hel")]
        assert decoder.feed("\n") == [OutboundEvent.token("lo")]

    def test_every_split_point(self) -> None:
        stream = "".join(encode_event(e) for e in [
            OutboundEvent.open(),
            OutboundEvent.token("Hel"),
            OutboundEvent.token("lo\nworld"),
            OutboundEvent.done(),
        ])

        for cut in range(len(stream) + 1):
            decoder = FrameDecoder()
            events = decoder.feed(stream[:cut]) + decoder.feed(stream[cut:])
            assert [e.kind for e in events] == [
                EventKind.OPEN, EventKind.TOKEN, EventKind.TOKEN, EventKind.DONE
            ]
            assert events[2].payload == "lo\nworld"

    def test_flush_decodes_unterminated_frame(self) -> None:
        decoder = FrameDecoder()

        assert decoder.feed("event: error\ndata: boom") == []
        assert decoder.flush() == [OutboundEvent.error("boom")]
        assert decoder.flush() == []

    def test_crlf_stream(self) -> None:
        decoder = FrameDecoder()

        events = decoder.feed("event: token\r\ndata: hi\r\n\r\n")

        assert events == [OutboundEvent.token("hi")]

    def test_crlf_split_inside_multiline_payload(self) -> None:
        decoder = FrameDecoder()

        first = decoder.feed("event: token\r\ndata: line1\r")
        second = decoder.feed("\ndata: line2\r\n\r\n")

        assert first == []
        assert second == [OutboundEvent.token("line1\nline2")]

    def test_every_split_point_with_crlf(self) -> None:
        stream = "".join(encode_event(e) for e in [
            OutboundEvent.open(),
            OutboundEvent.token("lo\nworld"),
            OutboundEvent.done(),
        ]).replace("\n", "\r\n")

        for cut in range(len(stream) + 1):
            decoder = FrameDecoder()
            events = decoder.feed(stream[:cut]) + decoder.feed(stream[cut:])
            assert events == [
                OutboundEvent.open(),
                OutboundEvent.token("lo\nworld"),
                OutboundEvent.done(),
            ]

    def test_flush_with_trailing_carriage_return(self) -> None:
        decoder = FrameDecoder()

        assert decoder.feed("event: error\r\ndata: boom\r") == []
        assert decoder.flush() == [OutboundEvent.error("boom")]
