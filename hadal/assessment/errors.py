"""
Error taxonomy for recording sessions and answer assessment.

Recording errors are raised to the caller. Scoring errors are recovered
inside the enforcement engine and never leave `EnforcementPolicyEngine.assess`.
"""
from typing import Optional


class HadalError(Exception):
    """Base class for all Hadal errors."""


class RecordingError(HadalError):
    """Base class for recording-session errors surfaced to the UI."""


class DeviceUnavailable(RecordingError):
    """Capture permission was denied or no input device is present."""


class TranscriptionUnavailable(RecordingError):
    """The platform cannot provide live speech-to-text."""


class SessionAlreadyActive(RecordingError):
    """A start was requested while a session is already recording."""


class StopRejected(RecordingError):
    """A manual stop was requested before the level's minimum duration."""

    def __init__(self, elapsed_seconds: int, min_duration_seconds: int):
        self.elapsed_seconds = elapsed_seconds
        self.min_duration_seconds = min_duration_seconds
        super().__init__(
            f"Recording must last at least {min_duration_seconds}s "
            f"({min_duration_seconds - elapsed_seconds}s remaining)"
        )

    @property
    def remaining_seconds(self) -> int:
        return max(0, self.min_duration_seconds - self.elapsed_seconds)


class ScoringFailure(HadalError):
    """The primary scoring engine raised or exceeded its time budget."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause


class FallbackFailure(HadalError):
    """The fallback scorer failed as well; a failsafe result is produced."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause


class InvalidSubmission(HadalError, ValueError):
    """Submission input did not match the assessment contract."""
