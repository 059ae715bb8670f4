"""Timer-driven acquisition flows."""

from .recording import RecordingOrchestrator, RecordingSession, RecordingStatus
from .training import TrainingOrchestrator, TrainingPhase, TrainingSession

__all__ = [
    "RecordingOrchestrator",
    "RecordingSession",
    "RecordingStatus",
    "TrainingOrchestrator",
    "TrainingPhase",
    "TrainingSession",
]
