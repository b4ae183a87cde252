"""Chat event stream decoding.

Turns the byte body of a streaming chat response into parsed frames.
"""

from .decoder import FrameDecoder, iter_frames, parse_frame
from .models import DATA_PREFIX, DONE_SENTINEL, Citation, StreamFrame

__all__ = [
    "DATA_PREFIX",
    "DONE_SENTINEL",
    "Citation",
    "FrameDecoder",
    "StreamFrame",
    "iter_frames",
    "parse_frame",
]
