"""Cancellable countdowns that drive phase transitions."""

from __future__ import annotations

import asyncio
import inspect
import logging
from typing import Awaitable, Callable, Optional, Union

LOGGER = logging.getLogger("neurospell.timers")

ExpiryCallback = Callable[[], Union[None, Awaitable[None]]]


class PhaseTimer:
    """Owns at most one running countdown.

    Re-arming or cancelling bumps a generation counter, so an expiry that was
    already scheduled for an older countdown is dropped.
    """

    def __init__(self, tick_seconds: float = 1.0, on_tick: Callable[[int], None] | None = None) -> None:
        self.tick_seconds = tick_seconds
        self.on_tick = on_tick
        self.remaining = 0
        self._generation = 0
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def arm(self, seconds: int, on_expire: ExpiryCallback) -> int:
        self.cancel()
        generation = self._generation
        self._task = asyncio.get_running_loop().create_task(self._run(generation, seconds, on_expire))
        return generation

    def cancel(self) -> None:
        self._generation += 1
        task, self._task = self._task, None
        if task is not None and task is not asyncio.current_task():
            task.cancel()

    def is_current(self, generation: int) -> bool:
        return generation == self._generation

    async def _run(self, generation: int, seconds: int, on_expire: ExpiryCallback) -> None:
        remaining = max(int(seconds), 0)
        while remaining > 0:
            self._set_remaining(generation, remaining)
            await asyncio.sleep(self.tick_seconds)
            remaining -= 1
        if not self.is_current(generation):
            return
        self._set_remaining(generation, 0)
        # The expiry may arm the next phase; it must not cancel the task it runs in.
        self._task = None
        try:
            result = on_expire()
            if inspect.isawaitable(result):
                await result
        except Exception:
            LOGGER.exception("Phase expiry callback failed")

    def _set_remaining(self, generation: int, value: int) -> None:
        if not self.is_current(generation):
            return
        self.remaining = value
        if self.on_tick:
            self.on_tick(value)
