"""Starts the recording flow when the trained start symbol shows up in the stream."""

from __future__ import annotations

import logging

from ..eeg.collector import SampleSource
from ..eeg.types import Sample, Segment
from ..errors import AcquisitionBusy, InvalidTransition
from ..metrics import START_SYMBOL_DETECTIONS
from ..services.classifier import ClassifierFacade
from .recording import RecordingOrchestrator, RecordingStatus

LOGGER = logging.getLogger("neurospell.watcher")


class StartSymbolWatcher:
    def __init__(
        self,
        source: SampleSource,
        classifier: ClassifierFacade,
        recording: RecordingOrchestrator,
        segment_length: int,
    ) -> None:
        self.source = source
        self.classifier = classifier
        self.recording = recording
        self.segment_length = segment_length
        self._handle: int | None = None
        self._window: list[Sample] = []

    @property
    def enabled(self) -> bool:
        return self._handle is not None

    def enable(self) -> None:
        if self.enabled:
            return
        self._window = []
        self._handle = self.source.samples.subscribe(self._on_sample)
        LOGGER.info("Watching for the start symbol")

    def disable(self) -> None:
        if self._handle is not None:
            self.source.samples.unsubscribe(self._handle)
            self._handle = None
        self._window = []

    def _on_sample(self, sample: Sample) -> None:
        if self.recording.state is not RecordingStatus.IDLE:
            self._window = []
            return
        self._window.append(sample)
        if len(self._window) < self.segment_length:
            return
        segment = Segment.from_samples(self._window)
        self._window = []
        if not self.classifier.detect_start_symbol(segment):
            return
        START_SYMBOL_DETECTIONS.inc()
        LOGGER.info("Start symbol detected; starting recording")
        try:
            self.recording.start()
        except (InvalidTransition, AcquisitionBusy) as exc:
            LOGGER.info("Start symbol ignored: %s", exc)
