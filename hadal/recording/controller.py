"""
Recording session state machine.

    idle -> recording -> processing -> recorded
    idle -> failed              (microphone or transcription unavailable)
    any  -> idle                (reset)

The controller owns the microphone handle and the live transcription stream
for at most one session at a time. It is driven from a single event loop:
`tick()` once per second and `pump()` whenever transcription results may be
queued. Every way a recording can end (manual stop, maximum duration,
silence, transcription error) goes through the same stop path.
"""
import logging
import time
from typing import Callable, Optional, Union

from ..assessment.errors import (
    DeviceUnavailable,
    SessionAlreadyActive,
    StopRejected,
    TranscriptionUnavailable,
)
from ..assessment.models import LevelConfig
from .events import (
    AutoSubmitEvent,
    ErrorOccurredEvent,
    SessionEventBus,
    SilenceClearedEvent,
    SilenceWarningEvent,
    StateChangedEvent,
    TranscriptUpdatedEvent,
)
from .interfaces import CaptureDevice, Transcriber, TranscriptionSubscription, TranscriptSegment
from .session import RecordingSession, SessionState, StopReason
from .silence import SilenceCheck, SilenceDetector

logger = logging.getLogger("session_controller")


class RecordingSessionController:
    """Drives one recording session at a time through its lifecycle."""

    def __init__(self,
                 capture_device: CaptureDevice,
                 transcriber: Transcriber,
                 event_bus: Optional[SessionEventBus] = None,
                 clock: Callable[[], float] = time.monotonic,
                 silence_threshold_seconds: float = 5,
                 silence_countdown_seconds: int = 3,
                 finish_timeout_seconds: float = 5.0):
        self.capture_device = capture_device
        self.transcriber = transcriber
        self.event_bus = event_bus or SessionEventBus()
        self._clock = clock
        self._silence_threshold_seconds = silence_threshold_seconds
        self._silence_countdown_seconds = silence_countdown_seconds
        self._finish_timeout_seconds = finish_timeout_seconds

        self.session: Optional[RecordingSession] = None
        self._subscription: Optional[TranscriptionSubscription] = None
        self._silence = SilenceDetector(silence_threshold_seconds, silence_countdown_seconds)

    @property
    def state(self) -> SessionState:
        return self.session.state if self.session else SessionState.IDLE

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self, level_config: LevelConfig) -> RecordingSession:
        """
        Begin recording an answer for `level_config`.

        Args:
            level_config: Level whose duration bounds apply to this session

        Returns:
            The new session, in the recording state

        Raises:
            SessionAlreadyActive: If a session is currently recording
            DeviceUnavailable: If the microphone cannot be acquired
            TranscriptionUnavailable: If live transcription cannot be opened
        """
        if self.state == SessionState.RECORDING:
            raise SessionAlreadyActive(f"Session {self.session.session_id} is still recording")

        # a finished or failed session is discarded
        self._release_resources()
        session = RecordingSession(level_config=level_config)
        self.session = session
        self._silence = SilenceDetector(self._silence_threshold_seconds, self._silence_countdown_seconds)

        try:
            session.capture_handle = self.capture_device.acquire()
        except DeviceUnavailable as e:
            self._fail(session, e, "capture")
            raise
        except Exception as e:
            error = DeviceUnavailable(f"Microphone unavailable: {e}")
            self._fail(session, error, "capture")
            raise error from e

        try:
            self._subscription = self.transcriber.open(session.capture_handle)
        except TranscriptionUnavailable as e:
            self._release_resources()
            self._fail(session, e, "transcription")
            raise
        except Exception as e:
            self._release_resources()
            error = TranscriptionUnavailable(f"Live transcription unavailable: {e}")
            self._fail(session, error, "transcription")
            raise error from e

        now = self._clock()
        session.started_at = now
        session.elapsed_seconds = 0
        self._silence.arm(now)
        self._set_state(session, SessionState.RECORDING)
        logger.info(
            f"Recording session {session.session_id} started at level "
            f"{level_config.level_number} ({level_config.min_duration_seconds}-"
            f"{level_config.max_duration_seconds}s)"
        )
        return session

    def tick(self) -> Optional[StopReason]:
        """
        Advance the session by one second.

        Returns:
            The stop reason if this tick ended the session, else None
        """
        session = self.session
        if session is None or session.state != SessionState.RECORDING:
            return None

        session.elapsed_seconds += 1
        if session.elapsed_seconds >= session.level_config.max_duration_seconds:
            logger.info(f"Maximum duration reached for session {session.session_id}")
            self._auto_stop(StopReason.MAX_DURATION)
            return StopReason.MAX_DURATION

        outcome = self._silence.check(self._clock(), session.min_duration_reached)
        if outcome in (SilenceCheck.WARNING_STARTED, SilenceCheck.COUNTING_DOWN):
            session.silence_warning_active = True
            session.silence_countdown_remaining = self._silence.countdown_remaining
            self.event_bus.emit(SilenceWarningEvent(
                session.session_id, self._clock(), session.silence_countdown_remaining
            ))
        elif outcome == SilenceCheck.AUTO_STOP:
            self._auto_stop(StopReason.SILENCE)
            return StopReason.SILENCE
        return None

    def handle_segment(self, segment: TranscriptSegment) -> bool:
        """
        Accept a live transcription result.

        Any segment counts as speech while recording. Only non-empty final
        text is kept; it is still accepted while the stream is being
        finalized after a stop.

        Returns:
            True if text was appended to the transcript
        """
        session = self.session
        if session is None or session.state not in (SessionState.RECORDING, SessionState.PROCESSING):
            return False

        if session.state == SessionState.RECORDING:
            now = self._clock()
            session.last_speech_at = now
            if self._silence.record_activity(now):
                self._clear_warning(session, "speech")

        if segment.is_final and session.append_transcript(segment.text):
            self.event_bus.emit(TranscriptUpdatedEvent(
                session.session_id, self._clock(), session.accumulated_transcript, segment.text.strip()
            ))
            return True
        return False

    def pump(self) -> int:
        """
        Dispatch everything the transcription stream has queued.

        Returns:
            Number of queued items handled
        """
        session = self.session
        if session is None or self._subscription is None:
            return 0

        items = self._subscription.drain()
        stream_error = None
        for item in items:
            if isinstance(item, Exception):
                stream_error = item
                self._report_error(session, item, "transcription")
            else:
                self.handle_segment(item)

        if stream_error is not None and session.state == SessionState.RECORDING:
            logger.warning(
                f"Transcription failed mid-session {session.session_id}, "
                f"stopping with best-effort transcript: {stream_error}"
            )
            session.error = str(stream_error)
            self._stop(StopReason.TRANSCRIPTION_ERROR)
        return len(items)

    def stop(self, reason: Union[StopReason, str] = StopReason.MANUAL) -> Optional[RecordingSession]:
        """
        End the current recording.

        Returns:
            The session (None when idle); stopping a stopped session is a no-op

        Raises:
            StopRejected: If a manual stop comes before the minimum duration
        """
        session = self.session
        if session is None or session.state == SessionState.IDLE:
            return None
        if session.state != SessionState.RECORDING:
            return session

        reason = StopReason(reason)
        if reason == StopReason.MANUAL and not session.min_duration_reached:
            raise StopRejected(session.elapsed_seconds, session.level_config.min_duration_seconds)
        return self._stop(reason)

    def cancel_silence_countdown(self) -> bool:
        """
        Dismiss the silence warning and restart detection from now.

        Returns:
            True if a countdown was running
        """
        session = self.session
        if session is None or session.state != SessionState.RECORDING:
            return False
        cancelled = self._silence.cancel(self._clock())
        if cancelled:
            self._clear_warning(session, "user")
        return cancelled

    def reset(self) -> None:
        """Discard the current session from any state and return to idle."""
        session = self.session
        self._release_resources()
        if session is not None and session.state != SessionState.IDLE:
            self._set_state(session, SessionState.IDLE)
        self.session = None

    def close(self) -> None:
        self.reset()

    def __enter__(self) -> "RecordingSessionController":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _auto_stop(self, reason: StopReason) -> None:
        session = self._stop(reason)
        self.event_bus.emit(AutoSubmitEvent(
            session.session_id, self._clock(), reason.value, session.elapsed_seconds
        ))

    def _stop(self, reason: StopReason) -> RecordingSession:
        session = self.session
        session.stop_reason = reason
        session.silence_warning_active = False
        session.silence_countdown_remaining = None
        self._set_state(session, SessionState.PROCESSING)

        handle = session.capture_handle
        if handle is not None:
            try:
                handle.release()
            except Exception as e:
                self._record_stop_error(session, "release capture", e)

        subscription = self._subscription
        if subscription is not None:
            try:
                subscription.finish(self._finish_timeout_seconds)
                for item in subscription.drain():
                    if isinstance(item, Exception):
                        self._record_stop_error(session, "finalize transcript", item)
                    else:
                        self.handle_segment(item)
            except Exception as e:
                self._record_stop_error(session, "finalize transcript", e)
            finally:
                self._close_subscription()

        self._set_state(session, SessionState.RECORDED)
        logger.info(
            f"Session {session.session_id} recorded after {session.elapsed_seconds}s "
            f"({reason.value}), {len(session.transcript_segments)} segments"
        )
        return session

    def _record_stop_error(self, session: RecordingSession, action: str, error: BaseException) -> None:
        logger.error(f"Failed to {action} for session {session.session_id}: {error}")
        if session.error is None:
            session.error = f"{action}: {error}"

    def _clear_warning(self, session: RecordingSession, cause: str) -> None:
        session.silence_warning_active = False
        session.silence_countdown_remaining = None
        self.event_bus.emit(SilenceClearedEvent(session.session_id, self._clock(), cause))

    def _fail(self, session: RecordingSession, error: Exception, component: str) -> None:
        session.error = str(error)
        self._report_error(session, error, component)
        self._set_state(session, SessionState.FAILED)
        logger.error(f"Session {session.session_id} failed to start: {error}")

    def _report_error(self, session: RecordingSession, error: Exception, component: str) -> None:
        self.event_bus.emit(ErrorOccurredEvent(
            session.session_id, self._clock(), type(error).__name__, str(error), component
        ))

    def _set_state(self, session: RecordingSession, state: SessionState) -> None:
        previous = session.state
        session.state = state
        logger.debug(f"Session {session.session_id}: {previous.value} -> {state.value}")
        self.event_bus.emit(StateChangedEvent(session.session_id, self._clock(), state.value, previous.value))

    def _close_subscription(self) -> None:
        subscription, self._subscription = self._subscription, None
        if subscription is None:
            return
        try:
            subscription.close()
        except Exception as e:
            logger.warning(f"Error closing transcription stream: {e}")

    def _release_resources(self) -> None:
        self._close_subscription()
        session = self.session
        if session is not None and session.capture_handle is not None:
            try:
                session.capture_handle.release()
            except Exception as e:
                logger.warning(f"Error releasing microphone: {e}")
