"""Unit tests for the stream module."""
import json

import pytest
from hypothesis import given
from hypothesis import strategies as st

from agentchat.stream import (
    Citation,
    FrameDecoder,
    StreamFrame,
    iter_frames,
    parse_frame,
)


def _event(payload: dict) -> str:
    return f"data: {json.dumps(payload, ensure_ascii=False)}\n\n"


async def _collect(chunks):
    async def source():
        for chunk in chunks:
            yield chunk

    return [frame async for frame in iter_frames(source())]


class TestParseFrame:
    """Tests for parsing one payload."""

    def test_session_frame(self):
        """Test that a session payload sets only the session id."""
        frame = parse_frame('{"sessionId": "s1"}')
        assert frame == StreamFrame(session_id="s1")
        assert frame.has_session
        assert not frame.has_delta

    def test_combined_frame(self):
        """Test that one payload may carry a session id and a delta."""
        frame = parse_frame('{"sessionId": "s1", "delta": "Hi"}')
        assert frame.session_id == "s1"
        assert frame.delta == "Hi"

    def test_empty_fields_count_as_absent(self):
        """Test that empty session and delta strings are not acted on."""
        frame = parse_frame('{"sessionId": "", "delta": ""}')
        assert frame is not None
        assert not frame.has_session
        assert not frame.has_delta

    def test_citations_frame(self):
        """Test parsing a citations payload with camelCase fields."""
        frame = parse_frame(
            '{"citations": [{"chunkId": "c1", "path": "docs/a.md", "startPos": "3", "endPos": "9"}]}'
        )
        assert frame.citations == (
            Citation(chunk_id="c1", path="docs/a.md", start_pos="3", end_pos="9"),
        )

    def test_unknown_fields_ignored(self):
        """Test that extra fields do not make a frame malformed."""
        frame = parse_frame('{"delta": "x", "usage": {"tokens": 3}}')
        assert frame.delta == "x"

    @pytest.mark.parametrize("payload", [
        "{not json",
        "[1, 2]",
        '"just a string"',
        '{"delta": 5}',
        '{"sessionId": ["s1"]}',
        "",
    ])
    def test_malformed_payload(self, payload: str):
        """Test that malformed payloads are rejected."""
        assert parse_frame(payload) is None


class TestFrameDecoder:
    """Tests for FrameDecoder."""

    def test_decode_full_body(self):
        """Test decoding a complete body in one chunk."""
        body = (
            _event({"sessionId": "s1"})
            + _event({"delta": "Hi"})
            + _event({"delta": " there"})
            + "data: [DONE]\n\n"
        )
        decoder = FrameDecoder()
        frames = decoder.feed(body.encode())

        assert [f.session_id for f in frames] == ["s1", None, None]
        assert [f.delta for f in frames] == [None, "Hi", " there"]
        assert decoder.done

    def test_line_split_across_chunks(self):
        """Test that a line split mid-prefix is completed by the next chunk."""
        decoder = FrameDecoder()
        assert decoder.feed(b"da") == []
        assert decoder.feed(b'ta: {"delta": "abc"}') == []
        frames = decoder.feed(b"\n\n")
        assert [f.delta for f in frames] == ["abc"]

    def test_multibyte_character_split_across_chunks(self):
        """Test that a character split between chunks is not corrupted."""
        body = _event({"delta": "café 你好"}).encode()
        split_at = body.index("é".encode()) + 1
        decoder = FrameDecoder()
        frames = decoder.feed(body[:split_at]) + decoder.feed(body[split_at:])
        assert [f.delta for f in frames] == ["café 你好"]

    def test_lines_without_prefix_ignored(self):
        """Test that comments, keepalives and other fields are skipped."""
        body = (
            ": keepalive\n\n"
            "event: message\n"
            + _event({"delta": "a"})
            + "data:{\"delta\": \"no space\"}\n\n"
            + "id: 7\n\n"
        )
        frames = FrameDecoder().feed(body.encode())
        assert [f.delta for f in frames] == ["a"]

    def test_crlf_line_endings(self):
        """Test that a trailing carriage return is trimmed from payloads."""
        body = b'data: {"delta": "a"}\r\n\r\ndata: [DONE]\r\n\r\n'
        decoder = FrameDecoder()
        frames = decoder.feed(body)
        assert [f.delta for f in frames] == ["a"]
        assert decoder.done

    def test_malformed_line_skipped(self):
        """Test that a malformed frame does not stop the stream."""
        body = _event({"delta": "a"}) + "data: {broken\n\n" + _event({"delta": "b"})
        frames = FrameDecoder().feed(body.encode())
        assert [f.delta for f in frames] == ["a", "b"]

    def test_nothing_after_sentinel(self):
        """Test that frames after the sentinel are never produced."""
        decoder = FrameDecoder()
        frames = decoder.feed(
            (_event({"delta": "a"}) + "data: [DONE]\n\n" + _event({"delta": "late"})).encode()
        )
        assert [f.delta for f in frames] == ["a"]
        assert decoder.feed(_event({"delta": "later"}).encode()) == []

    def test_sentinel_with_whitespace(self):
        """Test that the sentinel is recognised after trimming."""
        decoder = FrameDecoder()
        decoder.feed(b"data:  [DONE]  \n")
        assert decoder.done

    def test_incomplete_trailing_line_kept_pending(self):
        """Test that an unterminated line is not dispatched."""
        decoder = FrameDecoder()
        assert decoder.feed(b'data: {"delta": "a"}') == []
        assert not decoder.done

    @given(
        deltas=st.lists(st.text(min_size=1), min_size=1, max_size=8),
        data=st.data(),
    )
    def test_chunk_boundaries_do_not_matter(self, deltas: list[str], data):
        """Property test: any split of the body yields the same frames."""
        body = (
            _event({"sessionId": "s1"})
            + "".join(_event({"delta": d}) for d in deltas)
            + "data: [DONE]\n\n"
        ).encode()
        cuts = sorted(set(data.draw(
            st.lists(st.integers(min_value=0, max_value=len(body)), max_size=20)
        )))
        chunks = [body[a:b] for a, b in zip([0, *cuts], [*cuts, len(body)], strict=True)]

        decoder = FrameDecoder()
        frames = [frame for chunk in chunks for frame in decoder.feed(chunk)]

        assert frames[0].session_id == "s1"
        assert [f.delta for f in frames[1:]] == deltas
        assert decoder.done


class TestIterFrames:
    """Tests for the async frame iterator."""

    @pytest.mark.asyncio
    async def test_yields_frames_in_order(self):
        """Test lazily decoding a chunked body."""
        frames = await _collect([
            b'data: {"sessionId": "s1"}\n\ndata: {"del',
            b'ta": "Hi"}\n\ndata: {"delta": " there"}\n\n',
            b"data: [DONE]\n\n",
        ])
        assert [f.session_id for f in frames] == ["s1", None, None]
        assert "".join(f.delta or "" for f in frames) == "Hi there"

    @pytest.mark.asyncio
    async def test_stops_reading_at_sentinel(self):
        """Test that no chunk is pulled after the sentinel."""
        pulled = []

        async def source():
            for chunk in (_event({"delta": "a"}).encode() + b"data: [DONE]\n\n", b"never"):
                pulled.append(chunk)
                yield chunk

        frames = [frame async for frame in iter_frames(source())]
        assert [f.delta for f in frames] == ["a"]
        assert len(pulled) == 1

    @pytest.mark.asyncio
    async def test_end_of_input_without_sentinel(self):
        """Test that the stream also ends when the body ends."""
        frames = await _collect([_event({"delta": "a"}).encode()])
        assert [f.delta for f in frames] == ["a"]

    @pytest.mark.asyncio
    async def test_trailing_fragment_dropped(self):
        """Test that an unterminated last line is never dispatched."""
        frames = await _collect([_event({"delta": "a"}).encode(), b'data: {"delta": "b"}'])
        assert [f.delta for f in frames] == ["a"]
