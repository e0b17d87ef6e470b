"""Recording sessions.

The session state machine, silence detection, session events and the asyncio
runner that drives a live recording.
"""

from .interfaces import (
    TranscriptSegment, CaptureHandle, CaptureDevice,
    TranscriptionSubscription, Transcriber
)
from .session import RecordingSession, SessionState, StopReason
from .silence import SilenceDetector, SilenceCheck
from .events import (
    SessionEventBus, EventLogger, SessionMetrics, EventType, SessionEvent,
    StateChangedEvent, TranscriptUpdatedEvent, SilenceWarningEvent,
    SilenceClearedEvent, AutoSubmitEvent, AssessmentCompletedEvent,
    ErrorOccurredEvent
)
from .controller import RecordingSessionController
from .runner import SessionRunner

__all__ = [
    # Platform interfaces
    "TranscriptSegment", "CaptureHandle", "CaptureDevice",
    "TranscriptionSubscription", "Transcriber",

    # Session
    "RecordingSession", "SessionState", "StopReason",
    "SilenceDetector", "SilenceCheck",
    "RecordingSessionController", "SessionRunner",

    # Events
    "SessionEventBus", "EventLogger", "SessionMetrics", "EventType", "SessionEvent",
    "StateChangedEvent", "TranscriptUpdatedEvent", "SilenceWarningEvent",
    "SilenceClearedEvent", "AutoSubmitEvent", "AssessmentCompletedEvent",
    "ErrorOccurredEvent",
]
