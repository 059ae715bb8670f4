"""Supervised letter-by-letter acquisition feeding start-symbol training."""

from __future__ import annotations

import logging
import random
import time
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Dict, List, Optional, Set

from ..config import PipelineConfig
from ..eeg.collector import Collector
from ..eeg.segmenter import Segmenter
from ..eeg.types import Segment
from ..errors import AcquisitionBusy, InvalidTransition, TrainingExhausted
from ..metrics import PIPELINE_DURATION, PIPELINE_RUNS
from ..services.classifier import ClassifierFacade
from .base import Orchestrator

LOGGER = logging.getLogger("neurospell.training")


class TrainingPhase(str, Enum):
    INITIAL = "initial"
    TRAINING = "training"
    REST = "rest"
    PROCESSING = "processing"
    COMPLETE = "complete"


@dataclass(slots=True)
class TrainingSession:
    phase: TrainingPhase = TrainingPhase.INITIAL
    current_letter: Optional[str] = None
    used_letters: Set[str] = field(default_factory=set)
    draw_order: List[str] = field(default_factory=list)
    countdown_seconds: int = 0
    error: Optional[str] = None


class TrainingOrchestrator(Orchestrator[TrainingSession]):
    name = "training"

    def __init__(
        self,
        collector: Collector,
        segmenter: Segmenter,
        classifier: ClassifierFacade,
        config: PipelineConfig,
        *,
        tick_seconds: float = 1.0,
        rng: random.Random | None = None,
    ) -> None:
        super().__init__(collector, tick_seconds=tick_seconds)
        self.segmenter = segmenter
        self.classifier = classifier
        self.config = config
        self.alphabet = config.alphabet
        self._rng = rng or random.Random()
        self.session = TrainingSession()
        self.training_set: Dict[str, List[Segment]] = {}

    @property
    def state(self) -> TrainingPhase:
        return self.session.phase

    def snapshot(self) -> TrainingSession:
        return replace(
            self.session,
            used_letters=set(self.session.used_letters),
            draw_order=list(self.session.draw_order),
        )

    def _on_tick(self, remaining: int) -> None:
        self.session.countdown_seconds = remaining
        self._publish()

    @property
    def remaining_letters(self) -> List[str]:
        return [letter for letter in self.alphabet if letter not in self.session.used_letters]

    def start(self) -> TrainingSession:
        if self.session.phase is not TrainingPhase.INITIAL:
            raise InvalidTransition(f"cannot start training while {self.session.phase.value}")
        self.collector.reserve(self.name)
        self.session = TrainingSession()
        self.training_set = {}
        try:
            letter = self._draw_letter()
        except TrainingExhausted as exc:
            self._fail(str(exc))
            return self.snapshot()
        self._enter_training(letter)
        return self.snapshot()

    def _draw_letter(self) -> str:
        remaining = self.remaining_letters
        if not remaining:
            raise TrainingExhausted("No letters left to train")
        return self._rng.choice(remaining)

    def _enter_training(self, letter: str) -> None:
        self._timer.cancel()
        try:
            self.collector.start(self.name)
        except AcquisitionBusy as exc:
            self._fail(str(exc))
            return
        self.session.current_letter = letter
        self.session.used_letters.add(letter)
        self.session.draw_order.append(letter)
        self.session.phase = TrainingPhase.TRAINING
        self.session.countdown_seconds = self.config.training_seconds
        LOGGER.info("Training letter %s (%d/%d)", letter, len(self.session.draw_order), len(self.alphabet))
        self._publish()
        self._timer.arm(self.config.training_seconds, self._on_training_expired)

    def _on_training_expired(self) -> None:
        if self.session.phase is not TrainingPhase.TRAINING:
            return
        self._timer.cancel()
        letter = self.session.current_letter
        samples = self.collector.stop()
        segments = self.segmenter.to_segments(samples)
        # One example per letter window: the first full segment.
        if letter is not None and segments:
            self.training_set.setdefault(letter, []).append(segments[0])
        LOGGER.info("Letter %s: %d samples, %d segments", letter, len(samples), len(segments))
        if self.remaining_letters:
            self.session.phase = TrainingPhase.REST
            self.session.countdown_seconds = self.config.rest_seconds
            self._publish()
            self._timer.arm(self.config.rest_seconds, self._on_rest_expired)
        else:
            self._enter_processing()

    def _on_rest_expired(self) -> None:
        if self.session.phase is not TrainingPhase.REST:
            return
        self._timer.cancel()
        try:
            letter = self._draw_letter()
        except TrainingExhausted:
            self._enter_processing()
            return
        self._enter_training(letter)

    def _enter_processing(self) -> None:
        self._timer.cancel()
        self.session.phase = TrainingPhase.PROCESSING
        self.session.current_letter = None
        self.session.countdown_seconds = self.config.processing_seconds
        self._publish()
        self._timer.arm(self.config.processing_seconds, self._on_processing_expired)

    def _on_processing_expired(self) -> None:
        if self.session.phase is not TrainingPhase.PROCESSING:
            return
        self._timer.cancel()
        segments = [segment for letter in self.session.draw_order for segment in self.training_set.get(letter, [])]
        started = time.perf_counter()
        if segments:
            try:
                self.classifier.train_start_symbol(segments)
            except Exception as exc:
                PIPELINE_RUNS.labels(flow=self.name, status="error").inc()
                LOGGER.exception("Start symbol training failed")
                self._fail(f"Training failed: {exc}")
                return
            finally:
                PIPELINE_DURATION.observe(time.perf_counter() - started)
        else:
            LOGGER.warning("No segments were collected; start symbol detector left unchanged")
        PIPELINE_RUNS.labels(flow=self.name, status="success").inc()
        self.collector.release(self.name)
        self.session.phase = TrainingPhase.COMPLETE
        self.session.countdown_seconds = 0
        self._publish()

    def _fail(self, message: str) -> None:
        self._timer.cancel()
        self._release_collector()
        self.session = TrainingSession(error=message)
        self.training_set = {}
        self._publish()

    def reset(self) -> TrainingSession:
        self._timer.cancel()
        self._epoch += 1
        self._release_collector()
        self.session = TrainingSession()
        self.training_set = {}
        self._publish()
        return self.snapshot()
