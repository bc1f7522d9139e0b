"""Change-notification base for the state managers."""
from __future__ import annotations

import logging
from typing import Callable, Generic, TypeVar

logger = logging.getLogger(__name__)

S = TypeVar("S")

Listener = Callable[[S], None]


class Observable(Generic[S]):
    def __init__(self) -> None:
        self._listeners: list[Listener[S]] = []

    def snapshot(self) -> S:
        raise NotImplementedError

    def subscribe(self, listener: Listener[S]) -> Callable[[], None]:
        """Register a listener; returns a callable that removes it."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _emit(self) -> None:
        if not self._listeners:
            return
        snap = self.snapshot()
        for listener in list(self._listeners):
            try:
                listener(snap)
            except Exception:
                logger.exception("State listener failed")
