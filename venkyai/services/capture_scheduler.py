"""Periodic capture scheduling with an owned, cancellable timer."""

import asyncio
import logging
from contextlib import contextmanager
from typing import Awaitable, Callable, Iterator, Optional, Set

from ..backend.base import AbstractAssistantBackend

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL_MS = 5000


class CaptureTimer:
    """A single periodic trigger running on the event loop.

    The first trigger fires one interval after creation. Each trigger runs as
    its own task, so a slow capture never delays the cadence, and a failing
    trigger is logged without stopping the timer.
    """

    def __init__(self,
                 name: str,
                 interval_ms: int,
                 trigger: Callable[[], Awaitable[None]]):
        if interval_ms <= 0:
            raise ValueError(f"Capture interval must be positive, got {interval_ms}ms")

        self.name = name
        self.interval_ms = interval_ms
        self.trigger = trigger
        self.fired = 0
        self.failures = 0

        self._inflight: Set[asyncio.Task] = set()
        self._task = asyncio.get_running_loop().create_task(self._run())
        self._task.set_name(f"capture_timer_{name}")

    @property
    def active(self) -> bool:
        return not self._task.done()

    async def _run(self) -> None:
        interval = self.interval_ms / 1000.0
        while True:
            await asyncio.sleep(interval)
            task = asyncio.get_running_loop().create_task(self._fire())
            self._inflight.add(task)
            task.add_done_callback(self._inflight.discard)

    async def _fire(self) -> None:
        self.fired += 1
        try:
            await self.trigger()
        except asyncio.CancelledError:
            raise
        except Exception as e:
            self.failures += 1
            logger.warning(f"{self.name} capture #{self.fired} failed: {e}")

    def cancel(self) -> None:
        self._task.cancel()
        for task in list(self._inflight):
            task.cancel()


class CaptureScheduler:
    """Runs at most one periodic capture timer for one capture kind."""

    def __init__(self,
                 backend: AbstractAssistantBackend,
                 kind: str = "screen",
                 default_interval_ms: int = DEFAULT_INTERVAL_MS):
        """Initialize capture scheduler.

        Args:
            backend: Backend that receives capture commands
            kind: Capture kind name, used in logs
            default_interval_ms: Interval used when ``start`` is given none
        """
        self.backend = backend
        self.kind = kind
        self.default_interval_ms = default_interval_ms
        self.timer: Optional[CaptureTimer] = None

    @property
    def is_running(self) -> bool:
        return self.timer is not None and self.timer.active

    def start(self, interval_ms: Optional[int] = None) -> bool:
        """Start the periodic capture.

        Must be called from the event loop.

        Returns:
            True if a timer was started, False if one was already running
        """
        if self.is_running:
            logger.warning(f"{self.kind} capture already active")
            return False

        interval_ms = interval_ms or self.default_interval_ms
        self.timer = CaptureTimer(self.kind, interval_ms, self.backend.capture_screen)
        logger.info(f"Started {self.kind} capture every {interval_ms}ms")
        return True

    def stop(self) -> None:
        """Cancel the running timer, if any. Safe to call repeatedly."""
        if self.timer is None:
            return

        timer = self.timer
        self.timer = None
        timer.cancel()
        logger.info(f"Stopped {self.kind} capture after {timer.fired} triggers ({timer.failures} failed)")

    @contextmanager
    def running(self, interval_ms: Optional[int] = None) -> Iterator["CaptureScheduler"]:
        """Run the capture for the duration of a ``with`` block."""
        started = self.start(interval_ms)
        try:
            yield self
        finally:
            if started:
                self.stop()
