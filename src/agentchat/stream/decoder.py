"""Incremental decoder for the chat event stream.

Hides the framing details of the wire format:
- Multi-byte characters split across chunks
- Lines split across chunks
- Event prefix, termination sentinel and JSON payloads
"""

import codecs
import json
from collections.abc import AsyncIterable, AsyncIterator

from pydantic import ValidationError

from .models import DATA_PREFIX, DONE_SENTINEL, StreamFrame


def parse_frame(payload: str) -> StreamFrame | None:
    """Parse the payload of one data line.

    Args:
        payload: Line text with the prefix stripped and whitespace trimmed

    Returns:
        The parsed frame, or None if the payload is not a valid frame object
    """
    try:
        data = json.loads(payload)
    except json.JSONDecodeError:
        return None
    if not isinstance(data, dict):
        return None
    try:
        return StreamFrame.model_validate(data)
    except ValidationError:
        return None


class FrameDecoder:
    """Turns raw byte chunks into stream frames.

    Feed chunks in arrival order. Decoding is stateful: bytes of an
    incomplete character and text of an incomplete line are carried over
    to the next chunk. Once the termination sentinel is seen the decoder
    is done and ignores everything after it, including lines already
    buffered.

    Usage:
        decoder = FrameDecoder()
        for chunk in chunks:
            for frame in decoder.feed(chunk):
                handle(frame)
            if decoder.done:
                break
    """

    def __init__(self, encoding: str = "utf-8") -> None:
        self._decoder = codecs.getincrementaldecoder(encoding)(errors="replace")
        self._buffer = ""
        self._done = False

    @property
    def done(self) -> bool:
        """Whether the termination sentinel has been seen."""
        return self._done

    def feed(self, chunk: bytes) -> list[StreamFrame]:
        """Decode one chunk and return the frames completed by it."""
        if self._done:
            return []

        self._buffer += self._decoder.decode(chunk)
        *lines, self._buffer = self._buffer.split("\n")

        frames: list[StreamFrame] = []
        for line in lines:
            # Comments, keepalives and blank separators
            if not line.startswith(DATA_PREFIX):
                continue

            payload = line[len(DATA_PREFIX):].strip()
            if payload == DONE_SENTINEL:
                self._done = True
                self._buffer = ""
                break

            frame = parse_frame(payload)
            if frame is not None:
                frames.append(frame)

        return frames


async def iter_frames(
    chunks: AsyncIterable[bytes],
    encoding: str = "utf-8"
) -> AsyncIterator[StreamFrame]:
    """Lazily decode an async byte stream into frames.

    Stops at the termination sentinel or at end of input, whichever
    comes first. A trailing fragment without a newline is dropped.

    Args:
        chunks: Byte chunks in arrival order
        encoding: Text encoding of the stream

    Yields:
        Frames in the order their lines arrived
    """
    decoder = FrameDecoder(encoding)
    async for chunk in chunks:
        for frame in decoder.feed(chunk):
            yield frame
        if decoder.done:
            return
