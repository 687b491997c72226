"""Minimal observer primitives used to publish player state."""

from __future__ import annotations

import threading
from typing import Callable, Generic, List, TypeVar

from playdeck.backend.common.logging import get_logger

log = get_logger(__name__)

T = TypeVar("T")

Unsubscribe = Callable[[], None]


class Signal(Generic[T]):
    """Fire-and-forget observer list. Late subscribers miss earlier emissions."""

    def __init__(self, name: str = "signal") -> None:
        self.name = name
        self._lock = threading.Lock()
        self._subscribers: List[Callable[[T], None]] = []

    def subscribe(self, callback: Callable[[T], None]) -> Unsubscribe:
        with self._lock:
            self._subscribers.append(callback)

        def _unsubscribe() -> None:
            with self._lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return _unsubscribe

    def emit(self, value: T) -> None:
        with self._lock:
            subscribers = list(self._subscribers)
        for callback in subscribers:
            try:
                callback(value)
            except Exception:  # noqa: BLE001
                log.exception("subscriber_failed", extra={"signal": self.name})

    def __len__(self) -> int:
        with self._lock:
            return len(self._subscribers)


class Observable(Signal[T]):
    """Holds a current value and replays it synchronously to new subscribers.

    ``accept`` is the only mutation entry point. Subscribers are only notified
    when the value actually changes unless ``force`` is given.
    """

    def __init__(self, initial: T, name: str = "observable") -> None:
        super().__init__(name)
        self._value = initial

    @property
    def value(self) -> T:
        return self._value

    def subscribe(self, callback: Callable[[T], None]) -> Unsubscribe:
        unsubscribe = super().subscribe(callback)
        callback(self._value)
        return unsubscribe

    def accept(self, value: T, *, force: bool = False) -> bool:
        if not force and value == self._value:
            return False
        self._value = value
        self.emit(value)
        return True
