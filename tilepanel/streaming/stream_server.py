"""WebSocket streaming of panel offset frames.

Broadcasts encoded offset frames to connected viewers while the panel
animates, and lets viewers pause/resume the animation.

Usage:
    async with StreamManager(host='localhost', port=8765) as stream:
        streamer = PanelStreamer(panel, stream.server)
        ...
"""

import asyncio
import json
import logging
import time
from typing import Any, Callable, Dict, List, Optional, Set

import websockets
from websockets.asyncio.server import ServerConnection, serve

from ..animation.panel import AnimatingPanel
from .frame_delta import OffsetFrameEncoder

logger = logging.getLogger(__name__)


class StreamServer:
    """WebSocket server broadcasting frames to all connected viewers.

    Control messages from viewers: pause, resume, stop, ping.
    """

    def __init__(
        self,
        host: str = "localhost",
        port: int = 8765,
        max_fps: float = 60.0,
    ):
        """
        Args:
            host: Server host address
            port: Server port
            max_fps: Maximum streaming frame rate (frames per second)
        """
        if max_fps <= 0:
            raise ValueError(f"max_fps must be > 0, got {max_fps}")
        self.host = host
        self.port = port
        self.max_fps = max_fps
        self.min_frame_interval = 1.0 / max_fps

        self.clients: Set[ServerConnection] = set()

        # Control state
        self.paused = False
        self.stop_requested = False
        self._control_listeners: List[Callable[[str], None]] = []
        self._connect_listeners: List[Callable[[ServerConnection], None]] = []

        self.server = None

        # Statistics
        self.frames_sent = 0
        self.frames_skipped = 0
        self.bytes_sent = 0
        self.last_frame_time = 0.0
        self.start_time = 0.0

    async def start(self):
        """Start listening for viewers."""
        self.start_time = time.time()
        self.server = await serve(
            self._handle_client,
            self.host,
            self.port,
            ping_interval=20,
            ping_timeout=10,
        )
        logger.info("Streaming server started on ws://%s:%d", self.host, self.port)

    async def stop(self):
        """Stop the server and disconnect all viewers."""
        if self.server:
            self.server.close()
            await self.server.wait_closed()
            self.server = None
            logger.info("Streaming server stopped")

        if self.clients:
            await asyncio.gather(
                *[client.close() for client in self.clients],
                return_exceptions=True,
            )
            self.clients.clear()

    def add_control_listener(self, listener: Callable[[str], None]):
        """Call ``listener(command)`` for pause/resume/stop commands."""
        self._control_listeners.append(listener)

    def add_connect_listener(self, listener: Callable[[ServerConnection], None]):
        """Call ``listener(websocket)`` after a viewer connected and was welcomed."""
        self._connect_listeners.append(listener)

    async def _handle_client(self, websocket: ServerConnection):
        self.clients.add(websocket)
        client_addr = websocket.remote_address
        logger.info("Viewer connected: %s", client_addr)

        try:
            await websocket.send(json.dumps({
                "type": "welcome",
                "fps": self.max_fps,
                "paused": self.paused,
            }))
            for listener in list(self._connect_listeners):
                listener(websocket)

            async for message in websocket:
                try:
                    data = json.loads(message)
                except json.JSONDecodeError:
                    logger.warning("Invalid JSON from %s: %r", client_addr, message)
                    continue
                await self._handle_client_message(websocket, data)

        except websockets.exceptions.ConnectionClosed:
            logger.info("Viewer disconnected: %s", client_addr)
        finally:
            self.clients.discard(websocket)

    async def _handle_client_message(self, websocket, data: Dict):
        """Apply one control message from a viewer."""
        msg_type = data.get("type") if isinstance(data, dict) else None

        if msg_type == "pause":
            self.paused = True
            logger.info("Animation paused by viewer")
        elif msg_type == "resume":
            self.paused = False
            logger.info("Animation resumed by viewer")
        elif msg_type == "stop":
            self.stop_requested = True
            logger.info("Stop requested by viewer")
        elif msg_type == "ping":
            await websocket.send(json.dumps({"type": "pong"}))
            return
        else:
            logger.warning("Unknown message type: %s", msg_type)
            return

        for listener in list(self._control_listeners):
            listener(msg_type)
        await self._broadcast_control_state()

    async def _broadcast_control_state(self):
        await self._broadcast(json.dumps({
            "type": "control_state",
            "paused": self.paused,
            "stop_requested": self.stop_requested,
        }))

    def reserve_frame(self, force: bool = False) -> bool:
        """Claim the next frame slot under the rate limit.

        Returns:
            False if a frame was sent less than one frame interval ago
        """
        current_time = time.time()
        if not force and current_time - self.last_frame_time < self.min_frame_interval:
            self.frames_skipped += 1
            return False
        self.last_frame_time = current_time
        return True

    async def broadcast_frame(self, frame_data: Dict[str, Any], force: bool = False) -> bool:
        """Send a frame to every viewer, subject to the frame rate limit.

        Args:
            frame_data: JSON-serializable frame
            force: Bypass rate limiting (keyframes, final frames)

        Returns:
            True if the frame was sent
        """
        if not self.clients:
            return False
        if not self.reserve_frame(force):
            return False

        message = json.dumps({
            "type": "frame",
            "data": frame_data,
            "timestamp": self.last_frame_time,
        })
        await self._broadcast(message)

        self.frames_sent += 1
        self.bytes_sent += len(message)
        return True

    async def broadcast_status(self, status: str, message: str = ""):
        """Send a status message ("info", "settled", "complete", ...)."""
        await self._broadcast(json.dumps({
            "type": "status",
            "status": status,
            "message": message,
        }))

    async def _broadcast(self, message: str):
        if not self.clients:
            return

        disconnected = set()
        for client in list(self.clients):
            try:
                await client.send(message)
            except websockets.exceptions.ConnectionClosed:
                disconnected.add(client)

        self.clients -= disconnected

    def get_stats(self) -> Dict[str, Any]:
        uptime = time.time() - self.start_time if self.start_time else 0
        return {
            "clients_connected": len(self.clients),
            "frames_sent": self.frames_sent,
            "frames_skipped": self.frames_skipped,
            "bytes_sent": self.bytes_sent,
            "uptime_seconds": uptime,
            "avg_fps": self.frames_sent / uptime if uptime > 0 else 0,
        }


class PanelStreamer:
    """Forwards a panel's frames to a StreamServer.

    Pause detaches the panel from its scheduler; resume re-attaches it, so
    a paused panel costs nothing per frame and continues where it stopped.
    Must be created inside the running event loop.
    """

    def __init__(self, panel: AnimatingPanel, server: StreamServer,
                 encoder: Optional[OffsetFrameEncoder] = None):
        self.panel = panel
        self.server = server
        self.encoder = encoder or OffsetFrameEncoder()
        self._loop = asyncio.get_running_loop()
        self._pending: Set[asyncio.Task] = set()

        panel.add_frame_listener(self._on_frame)
        server.add_control_listener(self._on_control)
        server.add_connect_listener(self._on_connect)

    def _on_frame(self, panel: AnimatingPanel):
        # Nobody to send to: the next viewer starts from a keyframe anyway
        if not self.server.clients:
            return
        # Rate-limit before encoding: deltas are relative to the last sent frame
        settled = not panel.is_animating
        if not self.server.reserve_frame(force=settled):
            return
        frame = self.encoder.encode(panel.snapshot())
        if frame.has_changes():
            self._schedule(self.server.broadcast_frame(frame.to_dict(), force=True))
        if settled:
            self._schedule(self.server.broadcast_status("settled"))

    def _on_connect(self, websocket: ServerConnection):
        """Resynchronize every viewer with a keyframe of the current state."""
        self.encoder.reset()
        frame = self.encoder.encode(self.panel.snapshot())
        self._schedule(self.server.broadcast_frame(frame.to_dict(), force=True))

    def _on_control(self, command: str):
        if command == "pause":
            self.panel.detach()
        elif command == "resume":
            self.panel.attach()
        elif command == "stop":
            self.panel.detach()

    def _schedule(self, coro):
        task = self._loop.create_task(coro)
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def drain(self):
        """Wait for every queued broadcast to finish."""
        while self._pending:
            await asyncio.gather(*list(self._pending))

    def close(self):
        self.panel.remove_frame_listener(self._on_frame)


class StreamManager:
    """Async context manager for the streaming server lifecycle."""

    def __init__(self, host: str = "localhost", port: int = 8765, max_fps: float = 60.0):
        self.server = StreamServer(host, port, max_fps)
        self.url = f"ws://{host}:{port}"

    async def __aenter__(self):
        await self.server.start()
        logger.info("Streaming available at %s", self.url)
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.server.stop()

    def is_paused(self) -> bool:
        return self.server.paused

    def is_stop_requested(self) -> bool:
        return self.server.stop_requested
