"""Stream ingestion, buffering and windowing."""

from .collector import Collector
from .segmenter import Segmenter
from .stream import LinkState, StreamLink
from .types import ClassificationResult, Sample, Segment, SegmentedRecording, SubSegment

__all__ = [
    "ClassificationResult",
    "Collector",
    "LinkState",
    "Sample",
    "Segment",
    "SegmentedRecording",
    "Segmenter",
    "StreamLink",
    "SubSegment",
]
