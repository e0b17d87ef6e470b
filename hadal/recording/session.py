"""
The recording session record owned by the session controller.
"""
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from ..assessment.models import AssessmentRequest, LevelConfig
from .interfaces import CaptureHandle


class SessionState(str, Enum):
    """Lifecycle states of a recording session."""
    IDLE = "idle"
    RECORDING = "recording"
    PROCESSING = "processing"
    RECORDED = "recorded"
    FAILED = "failed"


class StopReason(str, Enum):
    """Why a recording ended."""
    MANUAL = "manual"
    MAX_DURATION = "max_duration"
    SILENCE = "silence"
    TRANSCRIPTION_ERROR = "transcription_error"


@dataclass
class RecordingSession:
    """Mutable state of one recording attempt."""
    level_config: LevelConfig
    session_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    state: SessionState = SessionState.IDLE
    started_at: Optional[float] = None
    elapsed_seconds: int = 0
    transcript_segments: List[str] = field(default_factory=list)
    last_speech_at: Optional[float] = None
    silence_warning_active: bool = False
    silence_countdown_remaining: Optional[int] = None
    capture_handle: Optional[CaptureHandle] = None
    stop_reason: Optional[StopReason] = None
    error: Optional[str] = None

    @property
    def accumulated_transcript(self) -> str:
        return " ".join(self.transcript_segments)

    @property
    def holds_capture(self) -> bool:
        return self.capture_handle is not None and not self.capture_handle.released

    @property
    def min_duration_reached(self) -> bool:
        return self.elapsed_seconds >= self.level_config.min_duration_seconds

    def append_transcript(self, text: str) -> bool:
        """Append final transcript text; blank text is ignored."""
        text = (text or "").strip()
        if not text:
            return False
        self.transcript_segments.append(text)
        return True

    def to_request(self, prompt_text: str) -> AssessmentRequest:
        """Build the assessment request for this session's answer."""
        return AssessmentRequest(
            prompt_text=prompt_text,
            transcript=self.accumulated_transcript,
            level_config=self.level_config,
            recording_duration_seconds=float(self.elapsed_seconds),
        )
