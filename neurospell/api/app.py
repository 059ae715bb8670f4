"""FastAPI application factory."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from ..context import AppContext
from ..errors import AcquisitionBusy, ConnectivityError, InvalidTransition, StreamProtocolError
from ..settings import AppSettings, get_settings
from .metrics import observe_requests, router as metrics_router
from .routers import recording, stream, training

LOGGER = logging.getLogger("neurospell.api")


def create_app(settings: Optional[AppSettings] = None, *, context: Optional[AppContext] = None) -> FastAPI:
    settings = settings or (context.settings if context else get_settings())

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.context = context or AppContext(settings)
        if settings.stream_autoconnect:
            try:
                await app.state.context.stream.connect()
            except (ConnectivityError, StreamProtocolError) as exc:
                LOGGER.warning("Start-up connect failed: %s", exc)
        try:
            yield
        finally:
            await app.state.context.aclose()

    app = FastAPI(title=settings.app_name, version=settings.version, lifespan=lifespan)

    @app.exception_handler(InvalidTransition)
    @app.exception_handler(AcquisitionBusy)
    async def conflict_handler(request: Request, exc: Exception) -> JSONResponse:
        return JSONResponse(status_code=409, content={"detail": str(exc)})

    @app.exception_handler(ConnectivityError)
    @app.exception_handler(StreamProtocolError)
    async def unavailable_handler(request: Request, exc: Exception) -> JSONResponse:
        return JSONResponse(status_code=503, content={"detail": str(exc)})

    app.include_router(stream.router)
    app.include_router(recording.router)
    app.include_router(training.router)
    app.include_router(metrics_router)
    return observe_requests(app)
