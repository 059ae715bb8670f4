"""Manual recording endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from ...context import AppContext
from ..deps import get_context
from ..schemas import RecordingResponse

router = APIRouter(prefix="/v1/recording", tags=["recording"])


@router.get("", response_model=RecordingResponse)
async def recording_state(context: AppContext = Depends(get_context)):
    return RecordingResponse.from_session(context.recording.snapshot())


@router.post("/start", response_model=RecordingResponse)
async def start_recording(context: AppContext = Depends(get_context)):
    return RecordingResponse.from_session(context.recording.start())


@router.post("/stop", response_model=RecordingResponse)
async def stop_recording(context: AppContext = Depends(get_context)):
    session = await context.recording.stop()
    return RecordingResponse.from_session(session)


@router.post("/reset", response_model=RecordingResponse)
async def reset_recording(context: AppContext = Depends(get_context)):
    return RecordingResponse.from_session(context.recording.reset())
