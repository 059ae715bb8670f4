"""Device link and health endpoints."""

from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from ...context import AppContext
from ..deps import get_context
from ..schemas import HealthResponse, StreamResponse

router = APIRouter(tags=["stream"])


def _stream(context: AppContext) -> StreamResponse:
    link = context.stream
    return StreamResponse(state=link.state.value, connected=link.is_connected, session_id=link.session_id)


@router.get("/healthz", response_model=HealthResponse)
async def health(context: AppContext = Depends(get_context)):
    return HealthResponse(
        ok=True,
        stream=context.stream.state.value,
        symbol_model=context.classifier.model_loaded,
        start_symbol_model=context.classifier.detector_loaded,
        refiner="mock" if context.refiner.mock else "openai",
        timestamp=datetime.now(timezone.utc),
    )


@router.get("/v1/stream", response_model=StreamResponse)
async def stream_state(context: AppContext = Depends(get_context)):
    return _stream(context)


@router.post("/v1/stream/connect", response_model=StreamResponse)
async def connect_stream(context: AppContext = Depends(get_context)):
    await context.stream.connect()
    return _stream(context)


@router.post("/v1/stream/disconnect", response_model=StreamResponse)
async def disconnect_stream(context: AppContext = Depends(get_context)):
    await context.stream.disconnect()
    return _stream(context)
