"""
Frame scheduling

A FrameTickSource delivers one callback per rendered frame. The
FrameScheduler sits between a source and the animating panel so the panel
is only attached to the render loop while something is moving.

Sources:
- ManualTickSource: the host (or a test) advances frames explicitly
- AsyncioTickSource: frames are paced by an asyncio task at a fixed rate

All dispatch happens on the thread that drives the source. Handlers may
subscribe or unsubscribe while a frame is being dispatched; stopping from
inside a tick is the normal way an animation ends.
"""

import asyncio
import logging
import time
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)

TickHandler = Callable[[float], None]


class SchedulerDisposedError(RuntimeError):
    """Raised when a disposed scheduler is used again."""


class FrameTickSource:
    """Base class for per-frame tick sources.

    Handlers are called with a monotonic timestamp in seconds.
    """

    def __init__(self):
        self._handlers: List[TickHandler] = []

    def subscribe(self, handler: TickHandler):
        """Add ``handler``. Subscribing an existing handler is a no-op."""
        if handler in self._handlers:
            return
        if not self._handlers:
            self._on_active()
        self._handlers.append(handler)

    def unsubscribe(self, handler: TickHandler):
        """Remove ``handler``. Unknown handlers are ignored."""
        if handler not in self._handlers:
            return
        self._handlers.remove(handler)
        if not self._handlers:
            self._on_idle()

    @property
    def has_subscribers(self) -> bool:
        return bool(self._handlers)

    def _fire(self, timestamp: float):
        # Snapshot: handlers routinely unsubscribe themselves mid-frame
        for handler in list(self._handlers):
            handler(timestamp)

    def _on_active(self):
        """Called when the first handler subscribes."""

    def _on_idle(self):
        """Called when the last handler unsubscribes."""


class ManualTickSource(FrameTickSource):
    """Tick source advanced by explicit calls, with a simulated clock."""

    def __init__(self, frame_interval: float = 1.0 / 60.0, start_time: float = 0.0):
        super().__init__()
        if frame_interval <= 0:
            raise ValueError(f"frame_interval must be > 0, got {frame_interval}")
        self.frame_interval = frame_interval
        self.now = start_time
        self.frames_fired = 0

    def advance(self, frames: int = 1) -> int:
        """Fire up to ``frames`` ticks, stopping early once nobody listens.

        Returns:
            Number of ticks actually fired
        """
        fired = 0
        for _ in range(frames):
            if not self._handlers:
                break
            self.now += self.frame_interval
            self.frames_fired += 1
            fired += 1
            self._fire(self.now)
        return fired

    def run_until_idle(self, max_frames: int = 10000) -> int:
        """Fire ticks until every handler has unsubscribed.

        Returns:
            Number of ticks fired. Equal to ``max_frames`` if subscribers
            remain after the limit.
        """
        fired = self.advance(max_frames)
        if self._handlers:
            logger.warning(
                "Tick source still has %d subscriber(s) after %d frames",
                len(self._handlers), max_frames,
            )
        return fired


class AsyncioTickSource(FrameTickSource):
    """Fires ticks from an asyncio task at ``fps`` while anyone is subscribed.

    The first subscription must happen inside a running event loop.
    """

    def __init__(self, fps: float = 60.0):
        super().__init__()
        if fps <= 0:
            raise ValueError(f"fps must be > 0, got {fps}")
        self.fps = fps
        self.frame_interval = 1.0 / fps
        self._task: Optional[asyncio.Task] = None

    def _on_active(self):
        loop = asyncio.get_running_loop()
        if self._task is None or self._task.done():
            self._task = loop.create_task(self._run())
            self._task.add_done_callback(self._on_task_done)

    def _on_task_done(self, task: asyncio.Task):
        if self._task is task:
            self._task = None
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            # The frame loop is gone, so nobody is subscribed any more
            self._handlers.clear()
            logger.error("Frame task stopped by handler error: %r", error, exc_info=error)

    def _on_idle(self):
        if self._task is not None:
            self._task.cancel()
            self._task = None

    async def _run(self):
        loop = asyncio.get_running_loop()
        while True:
            await asyncio.sleep(self.frame_interval)
            self._fire(loop.time())

    def close(self):
        """Drop all handlers and cancel the frame task."""
        self._handlers.clear()
        self._on_idle()


class FrameScheduler:
    """Attaches rendering handlers to a tick source only while listening.

    ``start_listening`` and ``stop_listening`` are idempotent. After
    ``dispose`` every operation raises SchedulerDisposedError.
    """

    def __init__(self, tick_source: FrameTickSource):
        self.tick_source = tick_source
        self._rendering_handlers: List[TickHandler] = []
        self._listening_changed: List[Callable[[bool], None]] = []
        self._is_listening = False
        self._disposed = False

        # Per-session frame statistics
        self.frame_count = 0
        self._session_frames = 0
        self._session_start = 0.0

    @property
    def is_listening(self) -> bool:
        return self._is_listening

    @property
    def is_disposed(self) -> bool:
        return self._disposed

    def add_rendering_handler(self, handler: TickHandler):
        self._require_not_disposed()
        self._rendering_handlers.append(handler)

    def remove_rendering_handler(self, handler: TickHandler):
        self._require_not_disposed()
        if handler in self._rendering_handlers:
            self._rendering_handlers.remove(handler)

    def add_listening_changed_handler(self, handler: Callable[[bool], None]):
        """Register ``handler(is_listening)``, called on every state transition."""
        self._require_not_disposed()
        self._listening_changed.append(handler)

    def start_listening(self):
        """Subscribe to the tick source if not already subscribed."""
        self._require_not_disposed()
        if self._is_listening:
            return
        self.tick_source.subscribe(self._on_tick)
        self._session_frames = 0
        self._session_start = time.monotonic()
        self._set_listening(True)

    def stop_listening(self):
        """Unsubscribe from the tick source if subscribed."""
        self._require_not_disposed()
        if not self._is_listening:
            return
        self._set_listening(False)
        self.tick_source.unsubscribe(self._on_tick)

        if logger.isEnabledFor(logging.DEBUG):
            seconds = time.monotonic() - self._session_start
            logger.debug(
                "Stopped listening: %d frames in %.3fs (%.1f fps)",
                self._session_frames,
                seconds,
                self._session_frames / seconds if seconds > 0 else 0.0,
            )

    def dispose(self):
        """Stop listening and release every handler.

        Raises:
            SchedulerDisposedError: If already disposed
        """
        self._require_not_disposed()
        self.stop_listening()
        self._rendering_handlers.clear()
        self._listening_changed.clear()
        self._disposed = True

    def _set_listening(self, value: bool):
        if value == self._is_listening:
            return
        self._is_listening = value
        for handler in list(self._listening_changed):
            handler(value)

    def _on_tick(self, timestamp: float):
        self._require_not_disposed()
        self.frame_count += 1
        self._session_frames += 1
        try:
            for handler in list(self._rendering_handlers):
                handler(timestamp)
        except Exception:
            # A failed frame leaves the scheduler stopped; start_listening resumes
            self.stop_listening()
            raise

    def _require_not_disposed(self):
        if self._disposed:
            raise SchedulerDisposedError("This scheduler has been disposed")
