"""Progress, status and completion notifications for a running search."""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from circlefinder.detection.base import DetectedCircle

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProgressEvent:
    current: int
    total: int
    message: Optional[str] = None

    @property
    def percent_complete(self) -> float:
        return self.current * 100.0 / self.total if self.total > 0 else 0.0


@dataclass(frozen=True)
class StatusEvent:
    message: str
    is_warning_or_error: bool = False


@dataclass(frozen=True)
class CompletionEvent:
    circle: Optional[DetectedCircle]
    parameters: Dict[str, Any] = field(default_factory=dict)
    result_info: Dict[str, Any] = field(default_factory=dict)


class SearchEvents:
    """
    Three notification channels a caller may subscribe to.

    Handlers run on whichever thread emits the event, which during the
    parallel phase is a worker thread. A handler that does I/O or touches
    UI state has to take care of its own locking. An exception raised by
    a handler is logged and the remaining handlers still run.
    """

    def __init__(self):
        self.on_progress: List[Callable[[ProgressEvent], None]] = []
        self.on_status: List[Callable[[StatusEvent], None]] = []
        self.on_completed: List[Callable[[CompletionEvent], None]] = []

    def subscribe_progress(self, handler: Callable[[ProgressEvent], None]):
        self.on_progress.append(handler)

    def subscribe_status(self, handler: Callable[[StatusEvent], None]):
        self.on_status.append(handler)

    def subscribe_completed(self, handler: Callable[[CompletionEvent], None]):
        self.on_completed.append(handler)

    def emit_progress(self, current: int, total: int, message: str = None):
        self._dispatch(self.on_progress, ProgressEvent(current, total, message))

    def emit_status(self, message: str, is_warning_or_error: bool = False):
        self._dispatch(self.on_status, StatusEvent(message, is_warning_or_error))

    def emit_completed(self, circle: Optional[DetectedCircle],
                       parameters: Dict[str, Any], result_info: Dict[str, Any]):
        self._dispatch(self.on_completed, CompletionEvent(circle, parameters, result_info))

    @staticmethod
    def _dispatch(handlers, event):
        # Subscriber errors are logged, never raised into the search
        for handler in handlers:
            try:
                handler(event)
            except Exception:
                logger.exception(f"Search event handler {handler!r} failed on {type(event).__name__}")


class LoggingReporter:
    """Forwards every search event to a logger."""

    def __init__(self, logger: logging.Logger = None):
        self.logger = logger or logging.getLogger('circlefinder')

    def attach(self, events: SearchEvents) -> "LoggingReporter":
        events.subscribe_progress(self.progress)
        events.subscribe_status(self.status)
        events.subscribe_completed(self.completed)
        return self

    def progress(self, event: ProgressEvent):
        self.logger.info(f"{event.message or 'Progress'} ({event.percent_complete:.0f}%)")

    def status(self, event: StatusEvent):
        if event.is_warning_or_error:
            self.logger.warning(event.message)
        else:
            self.logger.info(event.message)

    def completed(self, event: CompletionEvent):
        info = event.result_info
        if event.circle is None:
            self.logger.info(
                f"Search finished without a match after {info.get('combinations_tested', 0)} combinations")
        else:
            self.logger.info(
                f"Search finished: center=({event.circle.x:.1f}, {event.circle.y:.1f}), "
                f"diameter={event.circle.diameter:.1f}px, score={info.get('score', 0.0):.4f}")
