"""Start-symbol training endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from ...context import AppContext
from ..deps import get_context
from ..schemas import TrainingResponse, WatcherResponse

router = APIRouter(prefix="/v1", tags=["training"])


def _training(context: AppContext, session) -> TrainingResponse:
    return TrainingResponse.from_session(session, context.config.alphabet)


def _watcher(context: AppContext) -> WatcherResponse:
    return WatcherResponse(
        enabled=context.watcher.enabled,
        detector_loaded=context.classifier.detector_loaded,
    )


@router.get("/training", response_model=TrainingResponse)
async def training_state(context: AppContext = Depends(get_context)):
    return _training(context, context.training.snapshot())


@router.post("/training/start", response_model=TrainingResponse)
async def start_training(context: AppContext = Depends(get_context)):
    return _training(context, context.training.start())


@router.post("/training/reset", response_model=TrainingResponse)
async def reset_training(context: AppContext = Depends(get_context)):
    return _training(context, context.training.reset())


@router.post("/start-symbol/watch", response_model=WatcherResponse)
async def enable_watcher(context: AppContext = Depends(get_context)):
    context.watcher.enable()
    return _watcher(context)


@router.delete("/start-symbol/watch", response_model=WatcherResponse)
async def disable_watcher(context: AppContext = Depends(get_context)):
    context.watcher.disable()
    return _watcher(context)
