"""Event stream and cooperative signals for one sync run.

Every stage reports through :class:`SyncCallbacks`; the caller picks the events
it cares about by passing handlers.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from modelcat.errors import ModelcatError

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from modelcat.domain.model import ModelRecord

log = logging.getLogger(__name__)


class SyncCancelledError(ModelcatError):
    """Raised when a sync observes its cancellation signal."""

    def __init__(self, stage: str) -> None:
        self.stage = stage
        super().__init__(f"Sync cancelled during {stage}")


@dataclass(frozen=True, slots=True)
class ProgressEvent:
    current: int
    total: int
    source: str | None = None


@dataclass(frozen=True, slots=True)
class LogEvent:
    message: str
    level: int = logging.INFO


@dataclass(frozen=True, slots=True)
class PartialModelsEvent:
    """Records of one fetcher, delivered before the whole fan-out has finished."""

    source: str
    models: tuple[ModelRecord, ...]


@dataclass(frozen=True, slots=True)
class CancelledEvent:
    stage: str


type SyncEvent = ProgressEvent | LogEvent | PartialModelsEvent | CancelledEvent
type EventHandler[E] = Callable[[E], None]
type ConfirmLlmCheck = Callable[[int, float], bool]


class _Flag:
    __slots__ = ("_event",)

    def __init__(self) -> None:
        self._event = threading.Event()

    def set(self) -> None:
        self._event.set()

    def clear(self) -> None:
        self._event.clear()

    def is_set(self) -> bool:
        return self._event.is_set()


class CancellationSignal(_Flag):
    """Set from any thread (e.g. a SIGINT handler) to stop the sync at its next checkpoint."""


class SkipSignal(_Flag):
    """Set to drain the remaining model-based safety batches as safe."""


@dataclass(slots=True, kw_only=True)
class SyncCallbacks:
    on_event: EventHandler[SyncEvent] | None = None
    on_progress: EventHandler[ProgressEvent] | None = None
    on_log: EventHandler[LogEvent] | None = None
    on_partial_models: EventHandler[PartialModelsEvent] | None = None
    on_cancelled: EventHandler[CancelledEvent] | None = None
    confirm_llm_check: ConfirmLlmCheck | None = None
    cancellation: CancellationSignal = field(default_factory=CancellationSignal)
    skip: SkipSignal = field(default_factory=SkipSignal)

    def emit(self, event: SyncEvent) -> None:
        if self.on_event is not None:
            self.on_event(event)
        match event:
            case ProgressEvent():
                if self.on_progress is not None:
                    self.on_progress(event)
            case LogEvent():
                if self.on_log is not None:
                    self.on_log(event)
            case PartialModelsEvent():
                if self.on_partial_models is not None:
                    self.on_partial_models(event)
            case CancelledEvent():
                if self.on_cancelled is not None:
                    self.on_cancelled(event)

    def log(
        self,
        message: str,
        *,
        level: int = logging.INFO,
        logger: logging.Logger | None = None,
    ) -> None:
        """Write ``message`` to the module logger and forward it as a :class:`LogEvent`."""

        (logger or log).log(level, message)
        self.emit(LogEvent(message=message, level=level))

    def progress(self, current: int, total: int, *, source: str | None = None) -> None:
        self.emit(ProgressEvent(current=current, total=total, source=source))

    def partial_models(self, source: str, models: Sequence[ModelRecord]) -> None:
        self.emit(PartialModelsEvent(source=source, models=tuple(models)))

    def cancelled(self, stage: str) -> None:
        self.emit(CancelledEvent(stage=stage))

    def is_cancelled(self) -> bool:
        return self.cancellation.is_set()

    def should_skip(self) -> bool:
        return self.skip.is_set()


__all__ = [
    "CancellationSignal",
    "CancelledEvent",
    "ConfirmLlmCheck",
    "EventHandler",
    "LogEvent",
    "PartialModelsEvent",
    "ProgressEvent",
    "SkipSignal",
    "SyncCallbacks",
    "SyncCancelledError",
    "SyncEvent",
]
