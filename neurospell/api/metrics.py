"""Scrape endpoint plus HTTP and flow-state gauges for the control API."""

from __future__ import annotations

import time

from fastapi import APIRouter, Depends, FastAPI, Request, Response
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Gauge, Histogram, generate_latest

from ..context import AppContext
from ..orchestration.recording import RecordingStatus
from ..orchestration.training import TrainingPhase
from .deps import get_context

HTTP_REQUESTS = Counter(
    "neurospell_http_requests_total",
    "Control API calls by route and outcome",
    labelnames=("route", "method", "status"),
)

HTTP_LATENCY = Histogram(
    "neurospell_http_request_seconds",
    "Control API handling time",
    labelnames=("route",),
)

FLOW_STATE = Gauge(
    "neurospell_flow_state",
    "1 for the state each flow is currently in",
    labelnames=("flow", "state"),
)

STREAM_CONNECTED = Gauge(
    "neurospell_stream_connected",
    "Whether the device link is up",
)

router = APIRouter(tags=["metrics"])


def record_flow_states(context: AppContext) -> None:
    for status in RecordingStatus:
        FLOW_STATE.labels(flow="recording", state=status.value).set(
            1 if context.recording.state is status else 0
        )
    for phase in TrainingPhase:
        FLOW_STATE.labels(flow="training", state=phase.value).set(
            1 if context.training.state is phase else 0
        )
    STREAM_CONNECTED.set(1 if context.stream.is_connected else 0)


@router.get("/metrics")
async def scrape(context: AppContext = Depends(get_context)) -> Response:
    # Flow gauges are sampled at scrape time rather than on every transition.
    record_flow_states(context)
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


def observe_requests(app: FastAPI) -> FastAPI:
    @app.middleware("http")
    async def count_request(request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        route = getattr(request.scope.get("route"), "path", "unmatched")
        HTTP_REQUESTS.labels(route=route, method=request.method, status=str(response.status_code)).inc()
        HTTP_LATENCY.labels(route=route).observe(time.perf_counter() - started)
        return response

    return app
