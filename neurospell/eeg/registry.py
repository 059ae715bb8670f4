"""Observer registry keyed by subscription handle."""

from __future__ import annotations

import itertools
import logging
from contextlib import contextmanager
from typing import Callable, Dict, Generic, Iterator, TypeVar

T = TypeVar("T")

LOGGER = logging.getLogger("neurospell.registry")


class ListenerRegistry(Generic[T]):
    """Callbacks are invoked in subscription order; a failing listener never blocks the others."""

    def __init__(self, name: str) -> None:
        self.name = name
        self._listeners: Dict[int, Callable[[T], None]] = {}
        self._handles = itertools.count(1)

    def subscribe(self, callback: Callable[[T], None]) -> int:
        handle = next(self._handles)
        self._listeners[handle] = callback
        return handle

    def unsubscribe(self, handle: int) -> bool:
        return self._listeners.pop(handle, None) is not None

    @contextmanager
    def subscription(self, callback: Callable[[T], None]) -> Iterator[int]:
        handle = self.subscribe(callback)
        try:
            yield handle
        finally:
            self.unsubscribe(handle)

    def emit(self, value: T) -> None:
        for handle, callback in list(self._listeners.items()):
            try:
                callback(value)
            except Exception:
                LOGGER.exception("%s listener %s failed", self.name, handle)

    def clear(self) -> None:
        self._listeners.clear()

    def __contains__(self, handle: object) -> bool:
        return handle in self._listeners

    def __len__(self) -> int:
        return len(self._listeners)
