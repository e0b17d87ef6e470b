"""
Event-driven notifications for recording sessions.

The controller and orchestrator publish these events; a UI (or the CLI)
subscribes to render state, the live transcript and the silence countdown.
"""
import logging
from abc import ABC
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

logger = logging.getLogger("events")


class EventType(str, Enum):
    """Types of session events."""
    STATE_CHANGED = "state_changed"
    TRANSCRIPT_UPDATED = "transcript_updated"
    SILENCE_WARNING = "silence_warning"
    SILENCE_CLEARED = "silence_cleared"
    AUTO_SUBMIT = "auto_submit"
    ASSESSMENT_COMPLETED = "assessment_completed"
    ERROR_OCCURRED = "error_occurred"


@dataclass
class SessionEvent(ABC):
    """Base class for all session events."""
    event_type: EventType
    session_id: str
    timestamp: float
    data: Dict[str, Any]


@dataclass
class StateChangedEvent(SessionEvent):
    """Event fired on every session state transition."""
    def __init__(self, session_id: str, timestamp: float, state: str, previous_state: Optional[str]):
        super().__init__(
            event_type=EventType.STATE_CHANGED,
            session_id=session_id,
            timestamp=timestamp,
            data={"state": state, "previous_state": previous_state}
        )


@dataclass
class TranscriptUpdatedEvent(SessionEvent):
    """Event fired when final transcript text is appended."""
    def __init__(self, session_id: str, timestamp: float, text: str, segment: str):
        super().__init__(
            event_type=EventType.TRANSCRIPT_UPDATED,
            session_id=session_id,
            timestamp=timestamp,
            data={"text": text, "segment": segment}
        )


@dataclass
class SilenceWarningEvent(SessionEvent):
    """Event fired when the auto-stop countdown starts or advances."""
    def __init__(self, session_id: str, timestamp: float, countdown_remaining: int):
        super().__init__(
            event_type=EventType.SILENCE_WARNING,
            session_id=session_id,
            timestamp=timestamp,
            data={"countdown_remaining": countdown_remaining}
        )


@dataclass
class SilenceClearedEvent(SessionEvent):
    """Event fired when speech or the user cancels the countdown."""
    def __init__(self, session_id: str, timestamp: float, cause: str):
        super().__init__(
            event_type=EventType.SILENCE_CLEARED,
            session_id=session_id,
            timestamp=timestamp,
            data={"cause": cause}
        )


@dataclass
class AutoSubmitEvent(SessionEvent):
    """Event fired when the session stopped itself and should be submitted."""
    def __init__(self, session_id: str, timestamp: float, reason: str, elapsed_seconds: int):
        super().__init__(
            event_type=EventType.AUTO_SUBMIT,
            session_id=session_id,
            timestamp=timestamp,
            data={"reason": reason, "elapsed_seconds": elapsed_seconds}
        )


@dataclass
class AssessmentCompletedEvent(SessionEvent):
    """Event fired when an answer has been assessed."""
    def __init__(self, session_id: str, timestamp: float, level: int, overall_score: int,
                 passed: bool, analysis_method: str):
        super().__init__(
            event_type=EventType.ASSESSMENT_COMPLETED,
            session_id=session_id,
            timestamp=timestamp,
            data={
                "level": level,
                "overall_score": overall_score,
                "passed": passed,
                "analysis_method": analysis_method
            }
        )


@dataclass
class ErrorOccurredEvent(SessionEvent):
    """Event fired when an error occurs."""
    def __init__(self, session_id: str, timestamp: float, error_type: str,
                 error_message: str, component: str):
        super().__init__(
            event_type=EventType.ERROR_OCCURRED,
            session_id=session_id,
            timestamp=timestamp,
            data={
                "error_type": error_type,
                "error_message": error_message,
                "component": component
            }
        )


EventHandler = Callable[[SessionEvent], None]


class SessionEventBus:
    """
    Synchronous publish/subscribe between the recording pipeline and its observers.

    Handlers run on the emitting thread, in subscription order: typed handlers
    first, then catch-all handlers. A handler that raises is logged and
    skipped; the controller never sees observer failures.
    """

    def __init__(self):
        self._by_type: Dict[EventType, List[EventHandler]] = {}
        self._catch_all: List[EventHandler] = []

    def subscribe(self, event_type: EventType, handler: EventHandler) -> None:
        """
        Call `handler` for every event of `event_type`.

        Args:
            event_type: Event type to receive
            handler: Callable taking the event
        """
        self._by_type.setdefault(event_type, []).append(handler)
        logger.debug(f"Handler registered for {event_type.value}")

    def subscribe_all(self, handler: EventHandler) -> None:
        self._catch_all.append(handler)
        logger.debug("Catch-all handler registered")

    def unsubscribe(self, event_type: EventType, handler: EventHandler) -> None:
        handlers = self._by_type.get(event_type, [])
        if handler in handlers:
            handlers.remove(handler)
            logger.debug(f"Handler removed from {event_type.value}")
        else:
            logger.warning(f"No such handler registered for {event_type.value}")

    def emit(self, event: SessionEvent) -> None:
        logger.debug(f"{event.event_type.value} for session {event.session_id}")
        targets = list(self._by_type.get(event.event_type, [])) + list(self._catch_all)
        for handler in targets:
            try:
                handler(event)
            except Exception as e:
                logger.error(
                    f"Handler {getattr(handler, '__qualname__', handler)} failed on "
                    f"{event.event_type.value}: {e}"
                )

    def clear_handlers(self) -> None:
        self._by_type.clear()
        self._catch_all.clear()


class EventLogger:
    """Writes one log line per session event."""

    def __init__(self, log_level: int = logging.INFO):
        self.log_level = log_level
        self.logger = logging.getLogger("session_events")

    def handle_event(self, event: SessionEvent) -> None:
        self.logger.log(
            self.log_level,
            f"[{event.session_id}] {event.event_type.value} {event.data}"
        )


class SessionMetrics:
    """Session and assessment counters, fed from the event bus."""

    def __init__(self):
        self.reset()

    def handle_event(self, event: SessionEvent) -> None:
        """Fold one event into the counters."""
        if event.event_type == EventType.STATE_CHANGED:
            self._warning_open = False
            if event.data["state"] == "recording":
                self.sessions_started += 1
            elif event.data["state"] == "recorded":
                self.sessions_recorded += 1
            elif event.data["state"] == "failed":
                self.sessions_failed += 1
        elif event.event_type == EventType.TRANSCRIPT_UPDATED:
            self.transcript_segments += 1
        elif event.event_type == EventType.SILENCE_WARNING:
            # one warning per countdown, not per tick
            if not self._warning_open:
                self.silence_warnings += 1
                self._warning_open = True
        elif event.event_type == EventType.SILENCE_CLEARED:
            self._warning_open = False
        elif event.event_type == EventType.AUTO_SUBMIT:
            self._warning_open = False
            self.auto_submits += 1
        elif event.event_type == EventType.ASSESSMENT_COMPLETED:
            self.assessments_completed += 1
            if event.data["passed"]:
                self.assessments_passed += 1
        elif event.event_type == EventType.ERROR_OCCURRED:
            self.errors_occurred += 1

    def get_metrics(self) -> Dict[str, int]:
        """Counter values as a plain dict."""
        return {
            "sessions_started": self.sessions_started,
            "sessions_recorded": self.sessions_recorded,
            "sessions_failed": self.sessions_failed,
            "transcript_segments": self.transcript_segments,
            "silence_warnings": self.silence_warnings,
            "auto_submits": self.auto_submits,
            "assessments_completed": self.assessments_completed,
            "assessments_passed": self.assessments_passed,
            "errors_occurred": self.errors_occurred
        }

    def reset(self) -> None:
        """Zero every counter."""
        self.sessions_started = 0
        self.sessions_recorded = 0
        self.sessions_failed = 0
        self.transcript_segments = 0
        self.silence_warnings = 0
        self.auto_submits = 0
        self.assessments_completed = 0
        self.assessments_passed = 0
        self.errors_occurred = 0
        self._warning_open = False
