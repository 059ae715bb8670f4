"""scikit-learn models behind the classifier facade.

Both models work on the same summary features: per-channel mean and
standard deviation of a ``(samples, channels)`` window, standardised
with a ``StandardScaler`` fitted on the training windows.
"""

from __future__ import annotations

from typing import Mapping, Protocol, Sequence

import numpy as np
from sklearn.neighbors import KNeighborsClassifier
from sklearn.pipeline import Pipeline, make_pipeline
from sklearn.preprocessing import StandardScaler


class SymbolModel(Protocol):
    alphabet: str

    def predict_proba(self, window: np.ndarray) -> np.ndarray:
        """Probability per alphabet symbol, in alphabet order."""


class StartSymbolDetector(Protocol):
    def probability(self, window: np.ndarray) -> float:
        """Positive-class probability for one segment."""


def window_features(window: np.ndarray) -> np.ndarray:
    data = np.asarray(window, dtype=np.float64)
    if data.ndim != 2 or data.shape[0] == 0:
        raise ValueError(f"expected a (samples, channels) window, got shape {data.shape}")
    return np.concatenate([data.mean(axis=0), data.std(axis=0)])


def _feature_matrix(windows: Sequence[np.ndarray]) -> np.ndarray:
    return np.stack([window_features(window) for window in windows])


class SymbolClassifier:
    """Distance-weighted k-nearest-neighbour vote over scaled window features."""

    def __init__(self, alphabet: str, pipeline: Pipeline) -> None:
        unknown = [str(label) for label in pipeline.classes_ if label not in alphabet]
        if unknown:
            raise ValueError(f"labels outside the alphabet: {''.join(unknown)}")
        self.alphabet = alphabet
        self.pipeline = pipeline

    @property
    def labels(self) -> list[str]:
        return [str(label) for label in self.pipeline.classes_]

    @classmethod
    def fit(
        cls,
        alphabet: str,
        examples: Mapping[str, Sequence[np.ndarray]],
        *,
        neighbors: int = 5,
    ) -> "SymbolClassifier":
        unknown = [label for label in examples if label not in alphabet]
        if unknown:
            raise ValueError(f"labels outside the alphabet: {''.join(unknown)}")
        windows: list[np.ndarray] = []
        labels: list[str] = []
        for symbol in alphabet:
            for window in examples.get(symbol, ()):
                windows.append(window)
                labels.append(symbol)
        if not windows:
            raise ValueError("no labeled windows to fit")
        pipeline = make_pipeline(
            StandardScaler(),
            KNeighborsClassifier(n_neighbors=min(neighbors, len(windows)), weights="distance"),
        )
        pipeline.fit(_feature_matrix(windows), labels)
        return cls(alphabet, pipeline)

    def predict_proba(self, window: np.ndarray) -> np.ndarray:
        scores = self.pipeline.predict_proba(window_features(window).reshape(1, -1))[0]
        proba = np.zeros(len(self.alphabet), dtype=np.float64)
        for label, score in zip(self.labels, scores):
            proba[self.alphabet.index(label)] = score
        return proba


class CentroidDetector:
    """One-class detector: closeness to the mean of the positive examples in scaled space."""

    def __init__(self, scaler: StandardScaler, spread: float, examples: int = 0) -> None:
        self.scaler = scaler
        self.spread = max(float(spread), 1e-6)
        self.examples = examples

    @classmethod
    def fit(cls, windows: Sequence[np.ndarray]) -> "CentroidDetector":
        if not windows:
            raise ValueError("no positive examples to fit")
        features = _feature_matrix(windows)
        scaler = StandardScaler().fit(features)
        # the scaler centres on the example mean, so the centroid is the origin
        spread = float(np.linalg.norm(scaler.transform(features), axis=1).mean())
        return cls(scaler, spread, examples=len(windows))

    def probability(self, window: np.ndarray) -> float:
        scaled = self.scaler.transform(window_features(window).reshape(1, -1))[0]
        distance = float(np.linalg.norm(scaled))
        # 0.8 at one spread from the centroid, 0.5 at two.
        return 1.0 / (1.0 + (distance / (2.0 * self.spread)) ** 2)
