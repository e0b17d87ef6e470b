"""
Testing infrastructure: fakes for the platform services and scorers.
"""
import threading
from typing import Any, Dict, Iterator, List, Optional, Sequence

from .assessment.errors import DeviceUnavailable, FallbackFailure, TranscriptionUnavailable
from .assessment.models import (
    AnalysisMethod, AssessmentRequest, AssessmentResult, ScoreBreakdown, Subscores
)
from .assessment.scoring import ScoringEngine
from .recording.interfaces import (
    CaptureDevice, CaptureHandle, DrainItem, Transcriber,
    TranscriptionSubscription, TranscriptSegment
)


class ManualClock:
    """Monotonic clock that only moves when told to."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> float:
        self.now += seconds
        return self.now


class FakeCaptureHandle(CaptureHandle):
    """Capture handle that serves canned audio chunks."""

    def __init__(self, audio_chunks: Sequence[bytes] = ()):
        self.audio_chunks = list(audio_chunks)
        self.release_calls = 0

    def chunks(self) -> Iterator[bytes]:
        for chunk in self.audio_chunks:
            if self.released:
                return
            yield chunk

    def release(self) -> None:
        self.release_calls += 1

    @property
    def released(self) -> bool:
        return self.release_calls > 0


class FakeCaptureDevice(CaptureDevice):
    """Microphone stand-in; set `available=False` to simulate a denied permission."""

    def __init__(self, available: bool = True):
        self.available = available
        self.handles: List[FakeCaptureHandle] = []

    def acquire(self) -> FakeCaptureHandle:
        if not self.available:
            raise DeviceUnavailable("Microphone permission denied [MOCK]")
        handle = FakeCaptureHandle()
        self.handles.append(handle)
        return handle

    @property
    def held_handles(self) -> List[FakeCaptureHandle]:
        return [h for h in self.handles if not h.released]


class FakeSubscription(TranscriptionSubscription):
    """Transcription stream fed by the test; `on_finish` items arrive when the stream is finished."""

    def __init__(self, on_finish: Sequence[DrainItem] = ()):
        self.pending: List[DrainItem] = []
        self.on_finish = list(on_finish)
        self.finished = False
        self.closed = False

    def push(self, item: DrainItem) -> None:
        self.pending.append(item)

    def say(self, text: str, is_final: bool = True) -> None:
        self.push(TranscriptSegment(text=text, is_final=is_final))

    def drain(self) -> List[DrainItem]:
        items, self.pending = self.pending, []
        return items

    def finish(self, timeout: float) -> None:
        self.finished = True
        self.pending.extend(self.on_finish)
        self.on_finish = []

    def close(self) -> None:
        self.closed = True


class ScriptedTranscriber(Transcriber):
    """Hands out FakeSubscriptions; set `available=False` to fail on open."""

    def __init__(self, available: bool = True, on_finish: Sequence[DrainItem] = ()):
        self.available = available
        self.on_finish = list(on_finish)
        self.subscriptions: List[FakeSubscription] = []
        self.sources: List[CaptureHandle] = []

    def open(self, audio_source: CaptureHandle) -> FakeSubscription:
        if not self.available:
            raise TranscriptionUnavailable("Speech recognition not supported [MOCK]")
        subscription = FakeSubscription(on_finish=self.on_finish)
        self.subscriptions.append(subscription)
        self.sources.append(audio_source)
        return subscription

    @property
    def current(self) -> FakeSubscription:
        return self.subscriptions[-1]


class ExplodingScorer:
    """Primary scorer that always raises."""

    def __init__(self, error: Optional[Exception] = None):
        self.error = error or RuntimeError("scoring backend exploded [MOCK]")
        self.calls = 0

    def score(self, request: AssessmentRequest) -> ScoreBreakdown:
        self.calls += 1
        raise self.error


class ExplodingFallback:
    """Fallback scorer that always fails."""

    def score(self, request: AssessmentRequest) -> ScoreBreakdown:
        raise FallbackFailure("fallback exploded [MOCK]")


class SlowScorer:
    """Delegates to the real engine but advances a ManualClock while scoring."""

    def __init__(self, clock: ManualClock, seconds: float, inner: Optional[ScoringEngine] = None):
        self.clock = clock
        self.seconds = seconds
        self.inner = inner or ScoringEngine()

    def score(self, request: AssessmentRequest) -> ScoreBreakdown:
        self.clock.advance(self.seconds)
        return self.inner.score(request)


class HangingScorer:
    """Blocks inside score() until released."""

    def __init__(self):
        self.release = threading.Event()
        self.entered = threading.Event()

    def score(self, request: AssessmentRequest) -> ScoreBreakdown:
        self.entered.set()
        self.release.wait()
        raise RuntimeError("released without a score [MOCK]")


class StaticScorer:
    """Returns a fixed breakdown regardless of input."""

    def __init__(self, relevance: int, grammar: int, fluency: int, pronunciation: int, overall: int):
        self.breakdown = ScoreBreakdown(
            subscores=Subscores(relevance, grammar, fluency, pronunciation),
            overall_score=overall,
        )

    def score(self, request: AssessmentRequest) -> ScoreBreakdown:
        return self.breakdown


class ResultValidator:
    """Helper for checking assessment results against the result contract."""

    RESULT_KEYS = {
        "overallScore", "subscores", "passed", "requiredThreshold", "enforcementReason",
        "analysisMethod", "feedback", "noAnswer", "level", "progression",
    }

    @staticmethod
    def validate_result(result: AssessmentResult) -> List[str]:
        """
        Validate an assessment result and return the issues found.

        Returns:
            List of validation error messages (empty if valid)
        """
        issues = []

        if not 0 <= result.overall_score <= 100:
            issues.append(f"Overall score out of range: {result.overall_score}")
        for name, value in result.subscores.to_dict().items():
            if not 0 <= value <= 100:
                issues.append(f"{name} out of range: {value}")

        if result.enforcement_reason is not None and result.passed:
            issues.append("Result with an enforcement reason must not pass")
        if result.no_answer and (result.passed or result.overall_score != 0):
            issues.append("No-answer result must be a zero, failing result")
        if result.analysis_method == AnalysisMethod.FAILSAFE:
            if result.passed or result.overall_score != 0:
                issues.append("Failsafe result must be a zero, failing result")

        if not result.feedback.summary.en or not result.feedback.summary.so:
            issues.append("Feedback summary missing a locale")
        if not result.feedback.improvements:
            issues.append("Feedback offers no improvement tip")

        payload = result.to_dict()
        missing = ResultValidator.RESULT_KEYS - set(payload)
        if missing:
            issues.append(f"Missing result keys: {sorted(missing)}")
        return issues

    @staticmethod
    def assert_valid_result(result: AssessmentResult) -> None:
        """Assert that a result is valid, raising AssertionError if not."""
        issues = ResultValidator.validate_result(result)
        if issues:
            raise AssertionError(f"Invalid assessment result: {'; '.join(issues)}")


def sample_answers() -> List[Dict[str, Any]]:
    """Canned prompt/answer pairs used across tests."""
    return [
        {
            "prompt": "What is your name?",
            "answer": "My name is Amina and I am from Hargeisa.",
            "level": 1,
            "duration": 35.0,
        },
        {
            "prompt": "What is your name?",
            "answer": "um uh I don't know",
            "level": 1,
            "duration": 31.0,
        },
        {
            "prompt": "Describe your favourite food and explain why you like it.",
            "answer": (
                "My favourite food is rice with goat meat. I think it is delicious because "
                "my mother cooks it for the family, and we eat it together every Friday."
            ),
            "level": 2,
            "duration": 50.0,
        },
    ]
