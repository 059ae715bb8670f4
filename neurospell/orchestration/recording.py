"""Manual record/stop flow: get-ready countdown -> collection -> batch processing."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, replace
from enum import Enum

from ..config import PipelineConfig
from ..eeg.collector import Collector
from ..eeg.segmenter import Segmenter
from ..errors import AcquisitionBusy, InvalidTransition, PipelineFailure
from ..metrics import PIPELINE_DURATION, PIPELINE_RUNS
from ..services.classifier import ClassifierFacade
from ..services.refiner import TextRefiner
from .base import Orchestrator
from .timers import PhaseTimer

LOGGER = logging.getLogger("neurospell.recording")


class RecordingStatus(str, Enum):
    IDLE = "idle"
    GETTING_READY = "getting_ready"
    COLLECTING = "collecting"
    PROCESSING = "processing"
    DATA_PROCESSED = "data_processed"


@dataclass(slots=True)
class RecordingSession:
    status: RecordingStatus = RecordingStatus.IDLE
    countdown_seconds: int = 0
    progress_percent: int = 0
    error: str | None = None
    raw_symbols: str = ""
    text: str = ""
    # 1-based letter being written; each letter gets one segment of time.
    current_letter: int = 0
    letter_countdown: int = 0


class RecordingOrchestrator(Orchestrator[RecordingSession]):
    name = "recording"

    def __init__(
        self,
        collector: Collector,
        segmenter: Segmenter,
        classifier: ClassifierFacade,
        refiner: TextRefiner,
        config: PipelineConfig,
        *,
        tick_seconds: float = 1.0,
    ) -> None:
        super().__init__(collector, tick_seconds=tick_seconds)
        self.segmenter = segmenter
        self.classifier = classifier
        self.refiner = refiner
        self.config = config
        self.session = RecordingSession()
        self._letter_timer = PhaseTimer(tick_seconds, on_tick=self._on_letter_tick)

    @property
    def state(self) -> RecordingStatus:
        return self.session.status

    @property
    def letter_seconds(self) -> int:
        return max(int(round(self.config.segment_seconds)), 1)

    def snapshot(self) -> RecordingSession:
        return replace(self.session)

    def _on_tick(self, remaining: int) -> None:
        self.session.countdown_seconds = remaining
        self._publish()

    def _on_letter_tick(self, remaining: int) -> None:
        # Expiry rolls straight over to the next letter instead of showing 0.
        if remaining == 0 or self.session.status is not RecordingStatus.COLLECTING:
            return
        self.session.letter_countdown = remaining
        self._publish()

    def start(self) -> RecordingSession:
        if self.session.status is not RecordingStatus.IDLE:
            raise InvalidTransition(f"cannot start recording while {self.session.status.value}")
        self.collector.reserve(self.name)
        self.session = RecordingSession(
            status=RecordingStatus.GETTING_READY,
            countdown_seconds=self.config.get_ready_seconds,
        )
        LOGGER.info("Get ready: collection starts in %ss", self.config.get_ready_seconds)
        self._publish()
        self._timer.arm(self.config.get_ready_seconds, self._begin_collection)
        return self.snapshot()

    def _begin_collection(self) -> None:
        if self.session.status is not RecordingStatus.GETTING_READY:
            return
        try:
            self.collector.start(self.name)
        except AcquisitionBusy as exc:
            self._fail(str(exc))
            return
        self.session.status = RecordingStatus.COLLECTING
        self.session.countdown_seconds = 0
        self._next_letter()

    def _next_letter(self) -> None:
        if self.session.status is not RecordingStatus.COLLECTING:
            return
        self.session.current_letter += 1
        self.session.letter_countdown = self.letter_seconds
        LOGGER.debug("Letter %d", self.session.current_letter)
        self._publish()
        self._letter_timer.arm(self.letter_seconds, self._next_letter)

    async def stop(self) -> RecordingSession:
        if self.session.status is not RecordingStatus.COLLECTING:
            raise InvalidTransition(f"cannot stop recording while {self.session.status.value}")
        self._timer.cancel()
        self._letter_timer.cancel()
        epoch = self._epoch
        self.session.status = RecordingStatus.PROCESSING
        started = time.perf_counter()
        try:
            text = await self._process(epoch)
        except PipelineFailure as exc:
            PIPELINE_RUNS.labels(flow=self.name, status="error").inc()
            LOGGER.error("Recording pipeline failed: %s", exc, exc_info=exc.__cause__)
            if epoch == self._epoch:
                self._fail(str(exc))
            return self.snapshot()
        finally:
            PIPELINE_DURATION.observe(time.perf_counter() - started)
        if epoch != self._epoch:
            LOGGER.info("Discarding result of a superseded recording")
            return self.snapshot()
        PIPELINE_RUNS.labels(flow=self.name, status="success").inc()
        self.collector.release(self.name)
        self.session.text = text
        self.session.status = RecordingStatus.DATA_PROCESSED
        self._progress(epoch, 100)
        return self.snapshot()

    async def _process(self, epoch: int) -> str:
        self._progress(epoch, 10)
        samples = self.collector.stop()
        LOGGER.info("Collected %d EEG samples", len(samples))
        self._progress(epoch, 30)
        try:
            recording = self.segmenter.process_recording(samples)
        except Exception as exc:
            raise PipelineFailure(f"segmentation failed: {exc}") from exc
        self._progress(epoch, 50)
        try:
            symbols = self.classifier.process_all_segments(recording.segments, recording.sub_segments)
        except Exception as exc:
            raise PipelineFailure(f"classification failed: {exc}") from exc
        if epoch == self._epoch:
            self.session.raw_symbols = symbols
        self._progress(epoch, 70)
        try:
            text = await self.refiner.refine(symbols)
        except Exception as exc:
            raise PipelineFailure(f"refinement failed: {exc}") from exc
        self._progress(epoch, 90)
        return text

    def _progress(self, epoch: int, percent: int) -> None:
        if epoch != self._epoch:
            return
        self.session.progress_percent = percent
        self._publish()

    def _fail(self, message: str) -> None:
        self._timer.cancel()
        self._letter_timer.cancel()
        self._release_collector()
        self.session = RecordingSession(error=message)
        self._publish()

    def reset(self) -> RecordingSession:
        self._timer.cancel()
        self._letter_timer.cancel()
        self._epoch += 1
        self._release_collector()
        self.session = RecordingSession()
        self._publish()
        return self.snapshot()
