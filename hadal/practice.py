"""
Practice orchestrator: one question, one recorded answer, one assessment.

Wires a recording session to the enforcement engine, the session event bus
and the attempt log.
"""
import asyncio
import logging
import sys
import threading
import time
from typing import Callable, Dict, Optional, Tuple

from .assessment import (
    AssessmentResult, EnforcementPolicyEngine, EnforcementSettings, InvalidSubmission,
    LevelConfigProvider, StopRejected, get_level_provider
)
from .config import Config, PUMP_INTERVAL_SECONDS, TICK_INTERVAL_SECONDS, TRANSCRIPTION_FINISH_TIMEOUT_SECONDS, get_config
from .infrastructure.data import AttemptLog, AttemptRecord
from .recording import (
    AssessmentCompletedEvent, CaptureDevice, EventLogger, EventType,
    RecordingSessionController, SessionEvent, SessionEventBus, SessionMetrics,
    SessionRunner, SessionState, Transcriber
)
from .utils import setup_logging

logger = logging.getLogger("practice")


class PracticeOrchestrator:
    """
    Runs practice questions end to end.

    Typed or previously transcribed answers go through `assess_text`; live
    answers through `run_question`, which records from the microphone with
    live transcription until the learner stops, the level's maximum duration
    is reached, or silence triggers an automatic stop.
    """

    def __init__(self,
                 config: Optional[Config] = None,
                 engine: Optional[EnforcementPolicyEngine] = None,
                 level_provider: Optional[LevelConfigProvider] = None,
                 attempt_log: Optional[AttemptLog] = None,
                 capture_device: Optional[CaptureDevice] = None,
                 transcriber: Optional[Transcriber] = None,
                 event_bus: Optional[SessionEventBus] = None,
                 clock: Callable[[], float] = time.monotonic,
                 tick_interval: float = TICK_INTERVAL_SECONDS,
                 pump_interval: float = PUMP_INTERVAL_SECONDS,
                 configure_logging: bool = True):
        self.config = config or get_config()
        self.locale = self.config.feedback_locale
        self.log_file = self.config.log_file
        if configure_logging:
            setup_logging(self.log_file, self.config.log_level)

        # Initialize event system
        self.event_bus = event_bus or SessionEventBus()
        self.event_logger = EventLogger()
        self.metrics = SessionMetrics()
        self.event_bus.subscribe_all(self.event_logger.handle_event)
        self.event_bus.subscribe_all(self.metrics.handle_event)

        self.level_provider = level_provider or get_level_provider()
        self.engine = engine or EnforcementPolicyEngine(
            level_provider=self.level_provider,
            settings=EnforcementSettings.from_config(self.config),
        )
        self.attempt_log = attempt_log or AttemptLog(self.config.workdir)

        self._capture_device = capture_device
        self._transcriber = transcriber
        self._clock = clock
        self.tick_interval = tick_interval
        self.pump_interval = pump_interval
        self._controller: Optional[RecordingSessionController] = None
        self._console_attached = False
        self._stdin_reader: Optional[threading.Thread] = None
        self._enter_target: Optional[Tuple[asyncio.AbstractEventLoop, Callable[[], None]]] = None

    @property
    def controller(self) -> RecordingSessionController:
        """Session controller, built on first use with live adapters if none were given."""
        if self._controller is None:
            if self._capture_device is None:
                from .infrastructure.audio.processing import PyAudioCaptureDevice
                self._capture_device = PyAudioCaptureDevice(wav_path=self.config.answer_audio_path)
            if self._transcriber is None:
                from .infrastructure.audio.speech import GoogleLiveTranscriber
                self._transcriber = GoogleLiveTranscriber(
                    language_code=self.config.language_code,
                    project_id=self.config.google_cloud_project,
                    credentials_json=self.config.google_application_credentials,
                )
            self._controller = RecordingSessionController(
                self._capture_device,
                self._transcriber,
                event_bus=self.event_bus,
                clock=self._clock,
                silence_threshold_seconds=self.config.silence_threshold_seconds,
                silence_countdown_seconds=self.config.silence_countdown_seconds,
                finish_timeout_seconds=TRANSCRIPTION_FINISH_TIMEOUT_SECONDS,
            )
        return self._controller

    def assess_text(self,
                    prompt_text: str,
                    transcript: str,
                    level: int,
                    recording_duration_seconds: float = 0.0,
                    user_id: Optional[str] = None,
                    question_id: Optional[str] = None) -> AssessmentResult:
        """
        Assess an answer that is already text.

        Raises:
            InvalidSubmission: If the inputs are out of contract
        """
        result = self.engine.submit(prompt_text, transcript, level, recording_duration_seconds)
        self._complete("text", result, transcript, recording_duration_seconds, user_id, question_id)
        return result

    async def run_question(self,
                           prompt_text: str,
                           level: int,
                           user_id: Optional[str] = None,
                           question_id: Optional[str] = None,
                           interactive: bool = False) -> AssessmentResult:
        """
        Record a live answer and assess it.

        Args:
            prompt_text: Question shown to the learner
            level: Difficulty level 1-4
            user_id: Learner id for the attempt log
            question_id: Question id for the attempt log
            interactive: Print live progress and stop on Enter

        Returns:
            The assessment of the recorded answer

        Raises:
            InvalidSubmission: If the level is not configured
            DeviceUnavailable: If the microphone cannot be opened
            TranscriptionUnavailable: If live transcription cannot start
        """
        if level not in self.level_provider:
            raise InvalidSubmission(f"Level {level} is not configured")
        level_config = self.level_provider.get(level)
        controller = self.controller
        runner = SessionRunner(controller, self.tick_interval, self.pump_interval)

        if interactive:
            print(f"\n🎙️  Level {level} ({level_config.name}) - speak for "
                  f"{level_config.min_duration_seconds}-{level_config.max_duration_seconds}s")
            print(f"❓ {prompt_text}")
            print("⏎  Press Enter to stop recording")
            self._attach_console()

        session = controller.start(level_config)
        if interactive:
            self._watch_stdin(asyncio.get_running_loop(), self._enter_handler(controller))
        try:
            await runner.drive()
        finally:
            self._enter_target = None

        if session.error:
            logger.warning(f"Session {session.session_id} recorded with error: {session.error}")

        result = self.engine.submit(
            prompt_text, session.accumulated_transcript, level, float(session.elapsed_seconds)
        )
        self._complete(
            session.session_id, result, session.accumulated_transcript,
            float(session.elapsed_seconds), user_id, question_id
        )
        return result

    def _complete(self,
                  session_id: str,
                  result: AssessmentResult,
                  transcript: str,
                  duration: float,
                  user_id: Optional[str],
                  question_id: Optional[str]) -> None:
        self.event_bus.emit(AssessmentCompletedEvent(
            session_id, self._clock(), result.level_number, result.overall_score,
            result.passed, result.analysis_method.value
        ))

        if user_id and question_id:
            record = AttemptRecord(
                user_id=user_id,
                level_number=result.level_number,
                question_id=question_id,
                attempt_number=self.attempt_log.next_attempt_number(user_id, result.level_number, question_id),
                transcript=transcript,
                recording_duration_seconds=duration,
                score=result.overall_score,
                passed=result.passed,
                analysis_method=result.analysis_method.value,
            )
            self.attempt_log.append(record)

    def needs_help(self, user_id: str, level: int, question_id: str) -> bool:
        return self.attempt_log.needs_help(user_id, level, question_id)

    def _attach_console(self) -> None:
        if self._console_attached:
            return
        self._console_attached = True
        self.event_bus.subscribe(EventType.TRANSCRIPT_UPDATED, self._print_event)
        self.event_bus.subscribe(EventType.SILENCE_WARNING, self._print_event)
        self.event_bus.subscribe(EventType.SILENCE_CLEARED, self._print_event)
        self.event_bus.subscribe(EventType.AUTO_SUBMIT, self._print_event)
        self.event_bus.subscribe(EventType.ERROR_OCCURRED, self._print_event)

    @staticmethod
    def _print_event(event: SessionEvent) -> None:
        data = event.data
        if event.event_type == EventType.TRANSCRIPT_UPDATED:
            print(f"   🗣️  {data['segment']}")
        elif event.event_type == EventType.SILENCE_WARNING:
            print(f"   🤫 No speech... stopping in {data['countdown_remaining']}s (press Enter to keep going)")
        elif event.event_type == EventType.SILENCE_CLEARED:
            print("   ✅ Listening")
        elif event.event_type == EventType.AUTO_SUBMIT:
            label = "Time is up" if data["reason"] == "max_duration" else "Stopped after silence"
            print(f"   ⏰ {label} ({data['elapsed_seconds']}s)")
        elif event.event_type == EventType.ERROR_OCCURRED:
            print(f"   ⚠️  {data['component']}: {data['error_message']}")

    @staticmethod
    def _enter_handler(controller: RecordingSessionController) -> Callable[[], None]:
        """Enter cancels a silence countdown, otherwise asks the session to stop."""
        def on_enter():
            if controller.state != SessionState.RECORDING:
                return
            if controller.session.silence_warning_active:
                controller.cancel_silence_countdown()
                return
            try:
                controller.stop()
            except StopRejected as e:
                print(f"   ⏳ {e}")
        return on_enter

    def _watch_stdin(self, loop: asyncio.AbstractEventLoop, on_enter: Callable[[], None]) -> None:
        """
        Route Enter presses to `on_enter` on `loop` until the session ends.

        One daemon reader thread serves every question of this orchestrator;
        presses made while no session is recording are dropped.
        """
        self._enter_target = (loop, on_enter)
        if self._stdin_reader is not None:
            return

        def reader():
            while True:
                line = sys.stdin.readline()
                if not line:
                    return
                target = self._enter_target
                if target is None:
                    continue
                target_loop, callback = target
                if not target_loop.is_closed():
                    target_loop.call_soon_threadsafe(callback)

        self._stdin_reader = threading.Thread(target=reader, name="stdin-stop", daemon=True)
        self._stdin_reader.start()

    def display_result(self, result: AssessmentResult) -> None:
        """Print an assessment for the terminal."""
        print("\n" + "=" * 50)
        if result.no_answer:
            print("🔇 NO ANSWER")
        elif result.passed:
            print("🎉 PASSED")
        else:
            print("❌ NOT PASSED")
        print("=" * 50)
        print(f"🔢 Score: {result.overall_score}% (required {result.required_threshold}%)")
        for name, value in result.subscores.to_dict().items():
            print(f"   • {name.title()}: {value}%")
        if result.enforcement_reason:
            print(f"🚫 Reason: {result.enforcement_reason.value}")
        if result.analysis_method.value != "primary":
            print(f"🛟 Scored with: {result.analysis_method.value}")
        print()
        print(result.feedback.render(self.locale))

        if result.progression and result.progression.next_level:
            progression = result.progression
            print(f"\n📈 Next: level {progression.next_level} ({progression.next_level_name}), "
                  f"gap {progression.score_gap} points")

        print(f"\n📁 Full details logged to: {self.log_file}")
        print(f"📊 Session metrics: {self.metrics.get_metrics()}")

    def get_metrics(self) -> Dict[str, int]:
        """Get current session metrics."""
        return self.metrics.get_metrics()

    def close(self) -> None:
        if self._controller is not None:
            self._controller.close()
