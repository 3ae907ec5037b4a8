"""Tick scheduling for the lesson simulation."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, Set

logger = logging.getLogger(__name__)

TickCallback = Callable[[], Awaitable[None]]


@dataclass
class ClockConfig:
    tick_seconds: float = 2.0  # real seconds per tick before scaling
    time_scale: float = 1.0  # multiplier; 2.0 = 2x speed


class SimulationClock:
    """Cancellable repeating task that fires a coroutine every scaled interval.

    Each firing runs as its own task so a slow callback never delays the timer;
    callers guard against overlapping work themselves.
    """

    def __init__(self, config: ClockConfig | None = None):
        self.config = config or ClockConfig()
        self._tick = 0
        self._task: Optional[asyncio.Task] = None
        self._on_tick: Optional[TickCallback] = None
        self._inflight: Set[asyncio.Task] = set()

    @property
    def tick(self) -> int:
        return self._tick

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def interval(self) -> float:
        return self.config.tick_seconds / self.config.time_scale

    def set_time_scale(self, scale: float) -> None:
        """Change speed; a running clock is rescheduled at the new interval."""
        self.config.time_scale = max(0.1, scale)
        if self.is_running and self._on_tick is not None:
            self.start(self._on_tick)

    async def step(self, on_tick: TickCallback) -> None:
        """Advance one tick and await the callback."""
        self._tick += 1
        await on_tick()

    def start(self, on_tick: TickCallback) -> None:
        """(Re)start ticking; at most one timer task exists at a time."""
        self._cancel_timer()
        self._on_tick = on_tick
        self._task = asyncio.get_running_loop().create_task(self._loop())

    async def _loop(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            if self._on_tick is None:
                continue
            task = asyncio.ensure_future(self.step(self._on_tick))
            self._inflight.add(task)
            task.add_done_callback(self._tick_done)

    def _tick_done(self, task: asyncio.Task) -> None:
        self._inflight.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("tick failed", exc_info=exc)

    def _cancel_timer(self) -> None:
        if self._task is not None:
            self._task.cancel()
        self._task = None

    def stop(self) -> None:
        self._cancel_timer()
        self._on_tick = None
