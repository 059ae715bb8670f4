"""Shared plumbing for the acquisition state machines."""

from __future__ import annotations

import asyncio
from typing import Any, Generic, TypeVar

from ..eeg.collector import Collector
from ..eeg.registry import ListenerRegistry
from .timers import PhaseTimer

S = TypeVar("S")


class Orchestrator(Generic[S]):
    """Publishes session snapshots on ``changes`` after every transition.

    ``_epoch`` is bumped whenever the flow is reset so that work finishing
    after the reset can tell it has been superseded.
    """

    name = "orchestrator"

    def __init__(self, collector: Collector, *, tick_seconds: float = 1.0) -> None:
        self.collector = collector
        self.changes: ListenerRegistry[S] = ListenerRegistry(f"{self.name}-changes")
        self._timer = PhaseTimer(tick_seconds, on_tick=self._on_tick)
        self._epoch = 0

    @property
    def state(self) -> Any:
        raise NotImplementedError

    def snapshot(self) -> S:
        raise NotImplementedError

    def _on_tick(self, remaining: int) -> None:
        raise NotImplementedError

    def _publish(self) -> None:
        self.changes.emit(self.snapshot())

    def _holds_collector(self) -> bool:
        return self.collector.active and self.collector.owner == self.name

    def _release_collector(self) -> None:
        if self._holds_collector():
            self.collector.stop()
        self.collector.release(self.name)

    async def wait_for(self, *states: Any, timeout: float | None = None) -> S:
        if self.state in states:
            return self.snapshot()
        future: asyncio.Future = asyncio.get_running_loop().create_future()

        def on_change(snapshot: S) -> None:
            if self.state in states and not future.done():
                future.set_result(snapshot)

        with self.changes.subscription(on_change):
            return await asyncio.wait_for(future, timeout)
