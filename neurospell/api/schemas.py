"""Pydantic schemas for the control API."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from ..orchestration.recording import RecordingSession
from ..orchestration.training import TrainingSession


class RecordingResponse(BaseModel):
    status: str
    countdown_seconds: int = 0
    progress_percent: int = 0
    error: Optional[str] = None
    raw_symbols: str = ""
    text: str = ""
    current_letter: int = 0
    letter_countdown: int = 0

    @classmethod
    def from_session(cls, session: RecordingSession) -> "RecordingResponse":
        return cls(
            status=session.status.value,
            countdown_seconds=session.countdown_seconds,
            progress_percent=session.progress_percent,
            error=session.error,
            raw_symbols=session.raw_symbols,
            text=session.text,
            current_letter=session.current_letter,
            letter_countdown=session.letter_countdown,
        )


class TrainingResponse(BaseModel):
    phase: str
    current_letter: Optional[str] = None
    used_letters: List[str] = Field(default_factory=list)
    remaining: int = 0
    countdown_seconds: int = 0
    error: Optional[str] = None

    @classmethod
    def from_session(cls, session: TrainingSession, alphabet: str) -> "TrainingResponse":
        return cls(
            phase=session.phase.value,
            current_letter=session.current_letter,
            used_letters=list(session.draw_order),
            remaining=len(alphabet) - len(session.used_letters),
            countdown_seconds=session.countdown_seconds,
            error=session.error,
        )


class StreamResponse(BaseModel):
    state: str
    connected: bool
    session_id: Optional[str] = None


class WatcherResponse(BaseModel):
    enabled: bool
    detector_loaded: bool


class HealthResponse(BaseModel):
    ok: bool
    stream: str
    symbol_model: bool
    start_symbol_model: bool
    refiner: str
    timestamp: datetime
