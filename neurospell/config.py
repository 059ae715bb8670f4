"""Static pipeline constants (windowing, countdowns, alphabet)."""

from __future__ import annotations

from dataclasses import dataclass, replace

# Arabic letter set used as the classifier label space and the training draw pool.
DEFAULT_ALPHABET = "ءأبثةتجحخدذرزسشصضطظعغفقكلمنهوى"


@dataclass(frozen=True, slots=True)
class PipelineConfig:
    sample_rate: int = 128
    segment_seconds: float = 2.0
    sub_window_seconds: float = 0.25
    slide_samples: int = 4
    get_ready_seconds: int = 2
    training_seconds: int = 10
    rest_seconds: int = 2
    processing_seconds: int = 4
    start_symbol_threshold: float = 0.7
    alphabet: str = DEFAULT_ALPHABET

    def __post_init__(self) -> None:
        if len(set(self.alphabet)) != len(self.alphabet):
            raise ValueError("alphabet characters must be distinct")

    @property
    def segment_length(self) -> int:
        return int(self.sample_rate * self.segment_seconds)

    @property
    def sub_window_length(self) -> int:
        return int(self.sample_rate * self.sub_window_seconds)

    def with_overrides(self, **changes) -> "PipelineConfig":
        return replace(self, **changes)


CONFIG = PipelineConfig()
