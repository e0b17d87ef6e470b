"""
Silence detection for auto-submitting a finished answer.

The detector is driven by an external clock: the session controller calls
`check()` once per second. After `threshold_seconds` without speech, and only
once the level's minimum duration has been reached, a countdown starts; any
speech or a user cancellation clears it. A countdown that reaches zero asks
for an automatic stop.
"""
import logging
from enum import Enum
from typing import Optional

logger = logging.getLogger("silence_detector")


class SilenceCheck(str, Enum):
    """Outcome of one silence check."""
    NONE = "none"
    WARNING_STARTED = "warning_started"
    COUNTING_DOWN = "counting_down"
    AUTO_STOP = "auto_stop"


class SilenceDetector:
    """Tracks time since last speech and runs the auto-stop countdown."""

    def __init__(self, threshold_seconds: float = 5, countdown_seconds: int = 3):
        if threshold_seconds <= 0 or countdown_seconds <= 0:
            raise ValueError("Silence threshold and countdown must be positive")
        self.threshold_seconds = threshold_seconds
        self.countdown_seconds = countdown_seconds
        self._last_activity_at: Optional[float] = None
        self._countdown_remaining: Optional[int] = None
        self._fired = False

    @property
    def last_activity_at(self) -> Optional[float]:
        return self._last_activity_at

    @property
    def warning_active(self) -> bool:
        return self._countdown_remaining is not None

    @property
    def countdown_remaining(self) -> Optional[int]:
        return self._countdown_remaining

    def arm(self, now: float) -> None:
        """Start watching from `now`, clearing any previous countdown."""
        self._last_activity_at = now
        self._countdown_remaining = None
        self._fired = False

    def record_activity(self, now: float) -> bool:
        """
        Note speech at `now`.

        Returns:
            True if a running countdown was cancelled
        """
        cancelled = self.warning_active
        self._last_activity_at = now
        self._countdown_remaining = None
        if cancelled:
            logger.debug("Silence countdown cancelled by speech")
        return cancelled

    def cancel(self, now: float) -> bool:
        """User dismissed the warning; behaves like fresh speech."""
        cancelled = self.record_activity(now)
        self._fired = False
        return cancelled

    def check(self, now: float, min_duration_reached: bool) -> SilenceCheck:
        if self._fired or self._last_activity_at is None:
            return SilenceCheck.NONE

        if self._countdown_remaining is not None:
            self._countdown_remaining -= 1
            if self._countdown_remaining <= 0:
                self._countdown_remaining = 0
                self._fired = True
                logger.info("Silence countdown elapsed, requesting auto-stop")
                return SilenceCheck.AUTO_STOP
            return SilenceCheck.COUNTING_DOWN

        if not min_duration_reached:
            return SilenceCheck.NONE

        if now - self._last_activity_at > self.threshold_seconds:
            self._countdown_remaining = self.countdown_seconds
            logger.info(
                f"No speech for {now - self._last_activity_at:.1f}s, "
                f"starting {self.countdown_seconds}s countdown"
            )
            return SilenceCheck.WARNING_STARTED
        return SilenceCheck.NONE
