"""Tests for the event-stream decoder."""

from __future__ import annotations

from collections.abc import AsyncIterator

import pytest

from dify_lib_python.errors import StreamDecodeError
from dify_lib_python.pipeline import SSEDecoder
from dify_lib_python.types.events import StreamEvent


async def chunks(*parts: bytes) -> AsyncIterator[bytes]:
    for part in parts:
        yield part


async def decode_all(*parts: bytes) -> list[StreamEvent]:
    return [event async for event in SSEDecoder().decode(chunks(*parts))]


STREAM = (
    b'data: {"event": "message", "answer": "Hi"}\n\n'
    b": ping\n\n"
    b'event: message_end\nid: 7\ndata: {"metadata": {}}\n\n'
    + 'data: {"event": "message", "answer": "über ✓"}\n\n'.encode()
    + b"data: [DONE]\n\n"
)


class TestSSEDecoder:
    """Tests for SSEDecoder."""

    @pytest.mark.asyncio
    async def test_named_event_then_done(self) -> None:
        """Test an event line and a done sentinel yield exactly one event."""
        events = await decode_all(b'event: message\ndata: {"text":"hi"}\n\ndata: [DONE]\n\n')

        assert len(events) == 1
        assert events[0].event == "message"
        assert events[0].name == "message"
        assert events[0].data == {"text": "hi"}

    @pytest.mark.asyncio
    async def test_event_name_from_payload(self) -> None:
        """Test the payload's event key names unnamed events."""
        events = await decode_all(b'data: {"event": "agent_thought", "id": "t1"}\n\n')

        assert events[0].event is None
        assert events[0].name == "agent_thought"
        assert events[0].get("id") == "t1"

    @pytest.mark.asyncio
    async def test_every_split_point_gives_same_events(self) -> None:
        """Test chunk boundaries never change the decoded events."""
        expected = await decode_all(STREAM)
        assert [e.data for e in expected] == [
            {"event": "message", "answer": "Hi"},
            {"metadata": {}},
            {"event": "message", "answer": "über ✓"},
        ]

        for i in range(1, len(STREAM)):
            events = await decode_all(STREAM[:i], STREAM[i:])
            assert events == expected, f"split at {i}"

    @pytest.mark.asyncio
    async def test_byte_by_byte(self) -> None:
        """Test one-byte chunks, including inside multi-byte characters."""
        expected = await decode_all(STREAM)
        events = await decode_all(*(STREAM[i : i + 1] for i in range(len(STREAM))))
        assert events == expected

    @pytest.mark.asyncio
    async def test_crlf_line_endings(self) -> None:
        """Test CRLF endings decode like LF endings."""
        crlf = STREAM.replace(b"\n", b"\r\n")

        assert await decode_all(crlf) == await decode_all(STREAM)
        assert await decode_all(crlf[:5], crlf[5:40], crlf[40:]) == await decode_all(STREAM)

    @pytest.mark.asyncio
    async def test_long_line_in_small_chunks(self) -> None:
        """Test a large event split into many small chunks decodes intact."""
        answer = "QUJD" * 25_000
        body = f'data: {{"event": "tts_message", "audio": "{answer}"}}\n\n'.encode()

        events = await decode_all(*(body[i : i + 7] for i in range(0, len(body), 7)))

        assert len(events) == 1
        assert events[0].data["audio"] == answer

    @pytest.mark.asyncio
    async def test_invalid_utf8_is_replaced(self) -> None:
        """Test undecodable bytes become U+FFFD instead of failing the stream."""
        events = await decode_all(b'data: {"answer": "\xff\xfe"}\n\n', b'data: {"b": 2}\n\n')

        assert events[0].data == {"answer": "\ufffd\ufffd"}
        assert events[1].data == {"b": 2}

    @pytest.mark.asyncio
    async def test_event_and_id_fields(self) -> None:
        """Test event and id fields attach to their event only."""
        events = await decode_all(
            b'event: message_end\nid: 7\ndata: {"a": 1}\n\ndata: {"b": 2}\n\n'
        )

        assert (events[0].event, events[0].id) == ("message_end", "7")
        assert (events[1].event, events[1].id) == (None, None)

    @pytest.mark.asyncio
    async def test_keepalives_and_blank_lines_are_dropped(self) -> None:
        """Test comment-only blocks and repeated blank lines yield nothing."""
        events = await decode_all(b": keep-alive\n\n\n\n: ping\n\ndata: {\"a\": 1}\n\n\n")

        assert [e.data for e in events] == [{"a": 1}]

    @pytest.mark.asyncio
    async def test_multiline_data_is_joined(self) -> None:
        """Test consecutive data lines join with a newline."""
        events = await decode_all(b'data: {"a":\ndata: 1}\n\n')

        assert events[0].data == {"a": 1}

    @pytest.mark.asyncio
    async def test_field_without_space(self) -> None:
        """Test only one optional space after the colon is stripped."""
        events = await decode_all(b'data:{"a": 1}\n\nevent:  x\ndata: {}\n\n')

        assert events[0].data == {"a": 1}
        assert events[1].event == " x"

    @pytest.mark.asyncio
    async def test_raw_keeps_comments_and_unknown_lines(self) -> None:
        """Test retry and unknown fields are kept in raw text only."""
        events = await decode_all(b'retry: 1000\nfoo: bar\ndata: {"a": 1}\n\n')

        assert events[0].data == {"a": 1}
        assert events[0].raw == 'retry: 1000\nfoo: bar\ndata: {"a": 1}'

    @pytest.mark.asyncio
    async def test_invalid_json_raises(self) -> None:
        """Test a completed event with invalid JSON raises StreamDecodeError."""
        decoder = SSEDecoder()
        stream = decoder.decode(chunks(b'data: {"a": 1}\n\ndata: {oops}\n\ndata: {"b": 2}\n\n'))

        first = await stream.__anext__()
        assert first.data == {"a": 1}
        with pytest.raises(StreamDecodeError) as exc_info:
            await stream.__anext__()

        assert exc_info.value.raw == "data: {oops}"
        assert exc_info.value.__cause__ is not None

    @pytest.mark.asyncio
    async def test_empty_data_is_invalid(self) -> None:
        """Test an empty data payload is not valid JSON."""
        with pytest.raises(StreamDecodeError):
            await decode_all(b"data:\n\n")

    @pytest.mark.asyncio
    async def test_truncated_tail_is_discarded(self) -> None:
        """Test an unterminated malformed tail ends the stream silently."""
        events = await decode_all(b'data: {"text":"partial')

        assert events == []

    @pytest.mark.asyncio
    async def test_valid_tail_is_flushed(self) -> None:
        """Test a complete tail without its blank line is still emitted."""
        events = await decode_all(b'data: {"a": 1}\n\ndata: {"b": 2}')

        assert [e.data for e in events] == [{"a": 1}, {"b": 2}]

    @pytest.mark.asyncio
    async def test_nothing_after_done(self) -> None:
        """Test events after the done sentinel are never read."""
        events = await decode_all(b'data: [DONE]\n\ndata: {"late": true}\n\n')

        assert events == []

    @pytest.mark.asyncio
    async def test_custom_done_signal(self) -> None:
        """Test a custom terminal payload."""
        decoder = SSEDecoder(done_signal='"end"')
        events = [e async for e in decoder.decode(chunks(b'data: {"a": 1}\n\ndata: "end"\n\n'))]

        assert [e.data for e in events] == [{"a": 1}]

    @pytest.mark.asyncio
    async def test_decoding_is_lazy(self) -> None:
        """Test the decoder only pulls chunks as events are requested."""
        pulled: list[int] = []

        async def tracked() -> AsyncIterator[bytes]:
            for i in range(3):
                pulled.append(i)
                yield f'data: {{"n": {i}}}\n\n'.encode()

        stream = SSEDecoder().decode(tracked())
        event = await stream.__anext__()
        await stream.aclose()

        assert event.data == {"n": 0}
        assert pulled == [0]
