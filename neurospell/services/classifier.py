"""Symbol classification, per-segment vote aggregation and start-symbol training."""

from __future__ import annotations

import logging
import random
from typing import Dict, Iterable, Optional, Sequence

import numpy as np

from ..errors import ClassificationUnavailable
from ..metrics import SEGMENTS_CLASSIFIED
from ..eeg.types import ClassificationResult, Segment
from ..store.model_store import ModelStore
from .models import CentroidDetector, StartSymbolDetector, SymbolClassifier, SymbolModel

LOGGER = logging.getLogger("neurospell.classifier")

SYMBOL_MODEL_KEY = "symbol-classifier"
START_SYMBOL_KEY = "start-symbol-model"


def aggregate(results: Iterable[ClassificationResult]) -> str:
    """Majority vote; ties go to the symbol seen first."""
    counts: Dict[str, int] = {}
    for result in results:
        counts[result.symbol] = counts.get(result.symbol, 0) + 1
    if not counts:
        raise ValueError("cannot aggregate an empty result list")
    # dicts keep first-seen order and max() keeps the first maximal key.
    return max(counts, key=counts.__getitem__)


class ClassifierFacade:
    def __init__(
        self,
        alphabet: str,
        store: ModelStore,
        *,
        threshold: float = 0.7,
        random_fallback: bool = False,
        rng: random.Random | None = None,
    ) -> None:
        self.alphabet = alphabet
        self.store = store
        self.threshold = threshold
        self.random_fallback = random_fallback
        self._rng = rng or random.Random()
        self._model: Optional[SymbolModel] = None
        self._detector: Optional[StartSymbolDetector] = None
        self._fallback_warned = False

    @property
    def model_loaded(self) -> bool:
        return self._model is not None

    @property
    def detector_loaded(self) -> bool:
        return self._detector is not None

    def load_symbol_model(self, model: SymbolModel) -> None:
        if model.alphabet != self.alphabet:
            raise ValueError("model alphabet does not match the configured alphabet")
        self._model = model

    def load_start_symbol_detector(self, detector: StartSymbolDetector) -> None:
        self._detector = detector

    def load_models(self) -> Dict[str, bool]:
        found = {SYMBOL_MODEL_KEY: False, START_SYMBOL_KEY: False}
        model = self.store.load_named(SYMBOL_MODEL_KEY)
        if isinstance(model, SymbolClassifier):
            try:
                self.load_symbol_model(model)
                found[SYMBOL_MODEL_KEY] = True
            except ValueError as exc:
                LOGGER.error("Stored symbol model rejected: %s", exc)
        elif model is not None:
            LOGGER.error("Stored symbol model rejected: unexpected %s", type(model).__name__)
        detector = self.store.load_named(START_SYMBOL_KEY)
        if isinstance(detector, CentroidDetector):
            self._detector = detector
            found[START_SYMBOL_KEY] = True
        elif detector is not None:
            LOGGER.error("Stored start symbol model rejected: unexpected %s", type(detector).__name__)
        if not found[START_SYMBOL_KEY]:
            LOGGER.info("No saved start symbol model found")
        return found

    def classify(self, sub_segment: Segment) -> ClassificationResult:
        if self._model is None:
            if not self.random_fallback:
                raise ClassificationUnavailable("Symbol model not loaded")
            if not self._fallback_warned:
                LOGGER.warning(
                    "Random classification fallback enabled (set CLASSIFIER_RANDOM_FALLBACK=0 "
                    "and store a '%s' model to classify for real).",
                    SYMBOL_MODEL_KEY,
                )
                self._fallback_warned = True
            return ClassificationResult(
                symbol=self._rng.choice(self.alphabet),
                confidence=self._rng.random(),
                timestamp=sub_segment.start_time,
            )
        probabilities = np.asarray(self._model.predict_proba(sub_segment.to_array()), dtype=np.float64)
        if probabilities.shape != (len(self.alphabet),):
            raise ValueError(f"model returned {probabilities.shape} scores for {len(self.alphabet)} symbols")
        index = int(np.argmax(probabilities))
        return ClassificationResult(
            symbol=self.alphabet[index],
            confidence=float(probabilities[index]),
            timestamp=sub_segment.start_time,
        )

    def classify_many(self, sub_segments: Sequence[Segment]) -> list[ClassificationResult]:
        return [self.classify(sub_segment) for sub_segment in sub_segments]

    def process_all_segments(
        self, segments: Sequence[Segment], sub_segments_per_segment: Sequence[Sequence[Segment]]
    ) -> str:
        if len(segments) != len(sub_segments_per_segment):
            raise ValueError("segments and sub-segment lists must be parallel")
        symbols: list[str] = []
        for sub_segments in sub_segments_per_segment:
            symbols.append(aggregate(self.classify_many(sub_segments)))
            SEGMENTS_CLASSIFIED.inc()
        sequence = "".join(symbols)
        LOGGER.info("Classified %d segments into %r", len(segments), sequence)
        return sequence

    def detect_start_symbol(self, segment: Segment) -> bool:
        if self._detector is None:
            return False
        try:
            return self._detector.probability(segment.to_array()) > self.threshold
        except ValueError as exc:
            LOGGER.error("Start symbol detection error: %s", exc)
            return False

    def train_start_symbol(self, segments: Sequence[Segment]) -> StartSymbolDetector:
        if self._model is None:
            raise ClassificationUnavailable("Base model not loaded")
        if not segments:
            raise ValueError("no segments to train the start symbol on")
        LOGGER.info("Training start symbol detector on %d segments", len(segments))
        # Every collected segment is a positive example.
        detector = CentroidDetector.fit([segment.to_array() for segment in segments])
        self._detector = detector
        self.store.save_named(START_SYMBOL_KEY, detector)
        return detector
