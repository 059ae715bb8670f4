"""Dataclasses shared across EEG helpers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence, Tuple

import numpy as np


@dataclass(frozen=True, slots=True)
class Sample:
    """One timestamped multi-channel reading (timestamp in epoch milliseconds)."""

    timestamp: int
    channels: Tuple[float, ...]
    quality: float = 100.0


@dataclass(frozen=True, slots=True)
class Segment:
    """Contiguous window of samples; also used for overlapping sub-segments."""

    samples: Tuple[Sample, ...]
    start_time: int
    end_time: int

    @classmethod
    def from_samples(cls, samples: Sequence[Sample]) -> "Segment":
        if not samples:
            raise ValueError("a segment needs at least one sample")
        window = tuple(samples)
        return cls(samples=window, start_time=window[0].timestamp, end_time=window[-1].timestamp)

    def __len__(self) -> int:
        return len(self.samples)

    def to_array(self) -> np.ndarray:
        """Model input layout: one row per sample, one column per channel."""
        return np.asarray([sample.channels for sample in self.samples], dtype=np.float32)


SubSegment = Segment


@dataclass(frozen=True, slots=True)
class ClassificationResult:
    symbol: str
    confidence: float
    timestamp: int


@dataclass(slots=True)
class SegmentedRecording:
    """Segments plus their sub-segments; index i refers to the same segment in both."""

    segments: List[Segment]
    sub_segments: List[List[Segment]]

    @property
    def sub_segment_total(self) -> int:
        return sum(len(items) for items in self.sub_segments)
