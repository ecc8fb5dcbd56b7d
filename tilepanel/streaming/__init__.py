"""Live streaming of panel offsets to WebSocket viewers."""

from .frame_delta import OffsetFrame, OffsetFrameDecoder, OffsetFrameEncoder
from .stream_server import PanelStreamer, StreamManager, StreamServer

__all__ = [
    "OffsetFrame",
    "OffsetFrameDecoder",
    "OffsetFrameEncoder",
    "PanelStreamer",
    "StreamManager",
    "StreamServer",
]
