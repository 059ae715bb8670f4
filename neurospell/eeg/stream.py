"""Websocket link to the EEG device server (JSON-RPC handshake + sample fan-out)."""

from __future__ import annotations

import asyncio
import itertools
import json
import logging
import time
from contextlib import suppress
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Iterable, Optional

import websockets
from websockets.exceptions import ConnectionClosed, WebSocketException

from ..errors import ConnectivityError, StreamProtocolError
from ..metrics import SAMPLES_RECEIVED
from .registry import ListenerRegistry
from .types import Sample

LOGGER = logging.getLogger("neurospell.stream")

MAX_QUALITY = 100.0
CONNECT_FAILED = "Failed to connect to EEG device. Please check the connection and try again."
CONNECTION_CLOSED = "Connection to EEG device closed or refused. Make sure the device server is running."


class LinkState(str, Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    AUTHORIZING = "authorizing"
    CREATING_SESSION = "creating_session"
    SUBSCRIBING = "subscribing"
    STREAMING = "streaming"


class StreamLink:
    """Negotiates authorize -> createSession -> subscribe, then emits Samples.

    Replies are matched to requests by JSON-RPC id through a table of pending
    futures. Transport failures are reported on ``status`` / ``errors``; the
    link never reconnects on its own.
    """

    def __init__(
        self,
        url: str,
        *,
        client_id: str | None = None,
        client_secret: str | None = None,
        streams: Iterable[str] = ("eeg",),
        connector: Callable[[str], Awaitable[Any]] | None = None,
        clock: Callable[[], float] = time.time,
        request_timeout: float = 10.0,
    ) -> None:
        self.url = url
        self.client_id = client_id
        self.client_secret = client_secret
        self.streams = list(streams)
        self.request_timeout = request_timeout
        self.samples: ListenerRegistry[Sample] = ListenerRegistry("samples")
        self.status: ListenerRegistry[bool] = ListenerRegistry("status")
        self.errors: ListenerRegistry[str] = ListenerRegistry("errors")
        self.state = LinkState.DISCONNECTED
        self.session_id: Optional[str] = None
        self._connector = connector or websockets.connect
        self._clock = clock
        self._ws: Any = None
        self._reader: asyncio.Task | None = None
        self._pending: Dict[int, asyncio.Future] = {}
        self._ids = itertools.count(1)

    @property
    def is_connected(self) -> bool:
        return self._ws is not None and self.state is not LinkState.DISCONNECTED

    async def connect(self) -> str | None:
        if self._ws is not None:
            return self.session_id
        self.state = LinkState.CONNECTING
        try:
            self._ws = await self._connector(self.url)
        except (OSError, WebSocketException, asyncio.TimeoutError) as exc:
            self.state = LinkState.DISCONNECTED
            self.status.emit(False)
            self.errors.emit(CONNECT_FAILED)
            raise ConnectivityError(f"{self.url}: {exc}") from exc
        LOGGER.info("Connected to %s", self.url)
        self.status.emit(True)
        self._reader = asyncio.create_task(self._read_loop(self._ws))
        try:
            session_id = await self._handshake()
        except (ConnectivityError, StreamProtocolError):
            await self.disconnect()
            raise
        self.session_id = session_id
        self.state = LinkState.STREAMING
        LOGGER.info("Subscribed session %s to %s", session_id, ", ".join(self.streams))
        return session_id

    async def _handshake(self) -> str:
        self.state = LinkState.AUTHORIZING
        auth = await self._request("authorize", self._auth_params())
        token = auth.get("cortexToken") if isinstance(auth, dict) else None
        if not token:
            raise StreamProtocolError("authorize reply carried no token")

        self.state = LinkState.CREATING_SESSION
        session = await self._request("createSession", {"cortexToken": token, "status": "open"})
        session_id = session.get("id") if isinstance(session, dict) else None
        if not session_id:
            raise StreamProtocolError("createSession reply carried no session id")

        self.state = LinkState.SUBSCRIBING
        await self._request(
            "subscribe",
            {"cortexToken": token, "session": session_id, "streams": self.streams},
        )
        return str(session_id)

    def _auth_params(self) -> Dict[str, str]:
        params: Dict[str, str] = {}
        if self.client_id:
            params["clientId"] = self.client_id
        if self.client_secret:
            params["clientSecret"] = self.client_secret
        return params

    async def _request(self, method: str, params: Dict[str, Any]) -> Any:
        ws = self._ws
        if ws is None:
            raise ConnectivityError("not connected")
        request_id = next(self._ids)
        future = asyncio.get_running_loop().create_future()
        self._pending[request_id] = future
        message = {"jsonrpc": "2.0", "method": method, "params": params, "id": request_id}
        try:
            try:
                await ws.send(json.dumps(message))
            except ConnectionClosed as exc:
                raise ConnectivityError(str(exc)) from exc
            try:
                return await asyncio.wait_for(future, self.request_timeout)
            except asyncio.TimeoutError as exc:
                raise ConnectivityError(f"{method} timed out") from exc
        finally:
            self._pending.pop(request_id, None)

    async def _read_loop(self, ws: Any) -> None:
        try:
            async for raw in ws:
                self.handle_message(raw)
        except (ConnectionClosed, OSError) as exc:
            LOGGER.warning("Stream closed: %s", exc)
        if ws is self._ws:
            self._drop(CONNECTION_CLOSED)

    def handle_message(self, raw: str | bytes) -> None:
        try:
            data = json.loads(raw)
        except (TypeError, ValueError):
            LOGGER.debug("Ignoring non-JSON frame")
            return
        if not isinstance(data, dict):
            return
        request_id = data.get("id")
        if isinstance(request_id, int) and request_id in self._pending:
            self._resolve(self._pending[request_id], data)
            return
        payload = data.get("eeg")
        if isinstance(payload, list):
            SAMPLES_RECEIVED.inc()
            self.samples.emit(self._to_sample(data, payload))

    def _resolve(self, future: asyncio.Future, data: Dict[str, Any]) -> None:
        if future.done():
            return
        error = data.get("error")
        if error:
            message = error.get("message") if isinstance(error, dict) else str(error)
            future.set_exception(StreamProtocolError(message or "request rejected"))
        else:
            future.set_result(data.get("result"))

    def _to_sample(self, data: Dict[str, Any], payload: list) -> Sample:
        stamp = data.get("time")
        if isinstance(stamp, (int, float)) and not isinstance(stamp, bool):
            timestamp = int(round(float(stamp) * 1000))
        else:
            timestamp = int(self._clock() * 1000)
        channels = tuple(
            float(value) for value in payload if isinstance(value, (int, float)) and not isinstance(value, bool)
        )
        quality = data.get("quality")
        if not isinstance(quality, (int, float)):
            quality = MAX_QUALITY
        return Sample(timestamp=timestamp, channels=channels, quality=float(quality))

    def _drop(self, message: str) -> None:
        self._ws = None
        self._reader = None
        self.state = LinkState.DISCONNECTED
        self.session_id = None
        self._fail_pending(message)
        self.status.emit(False)
        self.errors.emit(message)

    def _fail_pending(self, message: str) -> None:
        for future in self._pending.values():
            if not future.done():
                future.set_exception(ConnectivityError(message))

    async def disconnect(self) -> None:
        ws, reader = self._ws, self._reader
        self._ws = None
        self._reader = None
        self.session_id = None
        was_connected = self.state is not LinkState.DISCONNECTED
        self.state = LinkState.DISCONNECTED
        self._fail_pending("disconnected")
        if reader is not None and reader is not asyncio.current_task():
            reader.cancel()
            with suppress(asyncio.CancelledError):
                await reader
        if ws is not None:
            with suppress(WebSocketException, OSError):
                await ws.close()
        if was_connected:
            LOGGER.info("Disconnected from %s", self.url)
            self.status.emit(False)
