"""Narrow observer primitives shared by the network layer and the session manager.

The network client raises ``unauthorized`` when any request is rejected while a
token is persisted; the front end raises ``focus`` when the view regains
visibility. Neither side imports the other.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Generic, TypeVar

from muusmart.core.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class UnauthorizedEvent:
    status: int
    message: str
    url: str | None = None


@dataclass(frozen=True, slots=True)
class FocusEvent:
    source: str = "visibility"


class Subscription:
    """Handle returned by ``Signal.connect``; ``cancel()`` may be called any number of times."""

    def __init__(self, signal: Signal, callback: Callable) -> None:
        self._signal: Signal | None = signal
        self._callback = callback

    @property
    def active(self) -> bool:
        return self._signal is not None

    def cancel(self) -> None:
        if self._signal is None:
            return
        self._signal._disconnect(self._callback)
        self._signal = None


class Signal(Generic[T]):
    def __init__(self, name: str) -> None:
        self.name = name
        self._receivers: list[Callable[[T], None]] = []

    @property
    def receiver_count(self) -> int:
        return len(self._receivers)

    def connect(self, callback: Callable[[T], None]) -> Subscription:
        self._receivers.append(callback)
        return Subscription(self, callback)

    def emit(self, payload: T) -> None:
        # Copy: a receiver may cancel its own (or another) subscription while running.
        for callback in list(self._receivers):
            try:
                callback(payload)
            except Exception:
                logger.exception("signal_receiver_failed", signal=self.name)

    def _disconnect(self, callback: Callable[[T], None]) -> None:
        try:
            self._receivers.remove(callback)
        except ValueError:
            pass


@dataclass
class SessionEvents:
    """Process-wide signals the session manager listens to."""

    unauthorized: Signal[UnauthorizedEvent] = field(
        default_factory=lambda: Signal("unauthorized")
    )
    focus: Signal[FocusEvent] = field(default_factory=lambda: Signal("focus"))

    def on_unauthorized(self, callback: Callable[[UnauthorizedEvent], None]) -> Subscription:
        return self.unauthorized.connect(callback)

    def on_focus(self, callback: Callable[[FocusEvent], None]) -> Subscription:
        return self.focus.connect(callback)
