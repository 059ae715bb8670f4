"""Fixed-window segmenter: recordings -> 2 s segments -> overlapping 250 ms sub-segments."""

from __future__ import annotations

import logging
from typing import Sequence

from ..config import PipelineConfig
from .types import Sample, Segment, SegmentedRecording

LOGGER = logging.getLogger("neurospell.segmenter")


class Segmenter:
    """Stateless apart from the three window sizes (all in samples)."""

    def __init__(self, segment_length: int, *, sub_window_length: int, slide: int) -> None:
        if segment_length <= 0 or sub_window_length <= 0 or slide <= 0:
            raise ValueError("window sizes must be positive")
        if sub_window_length > segment_length:
            raise ValueError("sub-window cannot be longer than the segment")
        self.segment_length = segment_length
        self.sub_window_length = sub_window_length
        self.slide = slide

    @classmethod
    def from_config(cls, config: PipelineConfig) -> "Segmenter":
        return cls(
            config.segment_length,
            sub_window_length=config.sub_window_length,
            slide=config.slide_samples,
        )

    @property
    def sub_segments_per_segment(self) -> int:
        return (self.segment_length - self.sub_window_length) // self.slide + 1

    def to_segments(self, samples: Sequence[Sample]) -> list[Segment]:
        segments: list[Segment] = []
        # A short trailing chunk never becomes a segment.
        for offset in range(0, len(samples) - self.segment_length + 1, self.segment_length):
            segments.append(Segment.from_samples(samples[offset : offset + self.segment_length]))
        return segments

    def to_sub_segments(self, segment: Segment) -> list[Segment]:
        samples = segment.samples
        last_start = len(samples) - self.sub_window_length
        return [
            Segment.from_samples(samples[offset : offset + self.sub_window_length])
            for offset in range(0, last_start + 1, self.slide)
        ]

    def process_recording(self, samples: Sequence[Sample]) -> SegmentedRecording:
        segments = self.to_segments(samples)
        sub_segments = [self.to_sub_segments(segment) for segment in segments]
        recording = SegmentedRecording(segments=segments, sub_segments=sub_segments)
        LOGGER.debug(
            "Segmented %d samples into %d segments (%d sub-segments)",
            len(samples),
            len(segments),
            recording.sub_segment_total,
        )
        return recording
