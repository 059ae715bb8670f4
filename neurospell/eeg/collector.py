"""Buffers stream samples for one acquisition window at a time."""

from __future__ import annotations

import logging
from typing import Protocol

from ..errors import AcquisitionBusy
from .registry import ListenerRegistry
from .types import Sample

LOGGER = logging.getLogger("neurospell.collector")


class SampleSource(Protocol):
    samples: ListenerRegistry[Sample]


class Collector:
    """One window open at a time, and one flow reserving the device at a time.

    A flow reserves the collector for its whole run (countdowns and rests
    included), not only while its window is open.
    """

    def __init__(self, source: SampleSource) -> None:
        self.source = source
        self._buffer: list[Sample] = []
        self._handle: int | None = None
        self._window = 0
        self.owner: str | None = None
        self.reserved_by: str | None = None

    @property
    def active(self) -> bool:
        return self._handle is not None

    def reserve(self, owner: str) -> None:
        holder = self.reserved_by or (self.owner if self.active else None)
        if holder is not None and holder != owner:
            raise AcquisitionBusy(f"acquisition window is held by {holder}")
        self.reserved_by = owner

    def release(self, owner: str) -> None:
        if self.reserved_by == owner:
            self.reserved_by = None

    def start(self, owner: str = "default") -> None:
        if self.reserved_by is not None and self.reserved_by != owner:
            raise AcquisitionBusy(f"acquisition window is held by {self.reserved_by}")
        if self.active and self.owner != owner:
            raise AcquisitionBusy(f"acquisition window is held by {self.owner}")
        if self.active:
            LOGGER.warning("Collector restarted by %s without stop; previous buffer discarded", owner)
        self._detach()
        self._window += 1
        window = self._window
        self._buffer = []
        self.owner = owner

        def on_sample(sample: Sample) -> None:
            # Late deliveries from a closed window are dropped.
            if window == self._window and self._handle is not None:
                self._buffer.append(sample)

        self._handle = self.source.samples.subscribe(on_sample)
        LOGGER.info("Collection started (%s)", owner)

    def stop(self) -> tuple[Sample, ...]:
        if not self.active:
            return ()
        self._detach()
        self._window += 1
        LOGGER.info("Collection stopped (%s): %d samples", self.owner, len(self._buffer))
        self.owner = None
        return tuple(self._buffer)

    def _detach(self) -> None:
        if self._handle is not None:
            self.source.samples.unsubscribe(self._handle)
            self._handle = None
