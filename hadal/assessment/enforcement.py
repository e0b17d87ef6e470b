"""
Enforcement policy: the single entry point that turns a submission into an
AssessmentResult.

Layers, in order: no-answer detection, primary scoring, fallback scoring, and
a failsafe result. The primary scorer runs on a worker thread and is
abandoned once it overruns the time budget, including when it hangs.
Off-topic answers are forced to zero; otherwise the weaker subscores are
raised to a floor before the pass decision is made.
"""
import logging
import threading
import time
from dataclasses import asdict, dataclass, fields, replace
from typing import Any, Callable, Dict, Optional

from .analytics import build_progression
from .errors import InvalidSubmission, ScoringFailure
from .fallback import FallbackScorer
from .feedback import FeedbackGenerator
from .levels import LevelConfigProvider, get_level_provider
from .models import (
    AnalysisMethod,
    AssessmentRequest,
    AssessmentResult,
    EnforcementReason,
    FeedbackContext,
    ScoreBreakdown,
    Subscores,
)
from .schemas import parse_submission
from .scoring import ScoringEngine

logger = logging.getLogger("enforcement")


@dataclass(frozen=True)
class EnforcementSettings:
    """Runtime-tunable policy knobs."""
    min_relevance_threshold: int = 30
    subscore_floor: int = 20
    fallback_pass_threshold: int = 50
    scoring_timeout_seconds: float = 2.0
    enable_floor_smoothing: bool = True
    enable_progression_analytics: bool = True

    @classmethod
    def from_config(cls, config) -> "EnforcementSettings":
        return cls(
            min_relevance_threshold=config.min_relevance_threshold,
            subscore_floor=config.subscore_floor,
            fallback_pass_threshold=config.fallback_pass_threshold,
            scoring_timeout_seconds=config.scoring_timeout_seconds,
        )


class EnforcementPolicyEngine:
    """Applies thresholds, off-topic detection and the fallback chain to scoring."""

    def __init__(self,
                 scoring_engine: Optional[ScoringEngine] = None,
                 fallback_scorer: Optional[FallbackScorer] = None,
                 level_provider: Optional[LevelConfigProvider] = None,
                 settings: Optional[EnforcementSettings] = None,
                 feedback_generator: Optional[FeedbackGenerator] = None,
                 clock: Callable[[], float] = time.monotonic):
        self.scoring_engine = scoring_engine or ScoringEngine()
        self.fallback_scorer = fallback_scorer or FallbackScorer()
        self.level_provider = level_provider or get_level_provider()
        self.settings = settings or EnforcementSettings()
        self.feedback_generator = feedback_generator or FeedbackGenerator()
        self._clock = clock

    def submit(self,
               prompt_text: str,
               transcript: str,
               level: int,
               recording_duration_seconds: float = 0.0) -> AssessmentResult:
        """
        Validate a submission and assess it.

        Raises:
            InvalidSubmission: If any input is out of contract; nothing is scored
        """
        return self.submit_payload({
            "prompt_text": prompt_text,
            "transcript": transcript,
            "level": level,
            "recording_duration_seconds": recording_duration_seconds,
        })

    def submit_payload(self, payload: Dict[str, Any]) -> AssessmentResult:
        """Same as submit(), for a raw dict using either snake_case or camelCase keys."""
        submission = parse_submission(payload)
        if submission.level not in self.level_provider:
            raise InvalidSubmission(f"Level {submission.level} is not configured")

        request = AssessmentRequest(
            prompt_text=submission.prompt_text,
            transcript=submission.transcript,
            level_config=self.level_provider.get(submission.level),
            recording_duration_seconds=submission.recording_duration_seconds,
        )
        return self.assess(request)

    def assess(self, request: AssessmentRequest) -> AssessmentResult:
        """
        Produce exactly one result for a request. Never raises.

        Args:
            request: Prompt, transcript, level and recording duration

        Returns:
            AssessmentResult from the primary, fallback or failsafe path
        """
        try:
            if request.is_empty:
                return self._no_answer_result(request)

            try:
                breakdown = self._score_primary(request)
                method = AnalysisMethod.PRIMARY
                threshold = request.level_config.pass_threshold_percent
            except ScoringFailure as e:
                logger.warning(f"Primary scoring failed ({e}: {e.cause!r}), using fallback scorer")
                try:
                    breakdown = self.fallback_scorer.score(request)
                except Exception as fallback_error:
                    logger.error(f"Fallback scoring failed: {fallback_error!r}")
                    return self._failsafe_result(request)
                method = AnalysisMethod.FALLBACK
                threshold = self.settings.fallback_pass_threshold

            return self._enforce(request, breakdown, method, threshold)

        except Exception as e:
            logger.exception(f"Unexpected assessment error: {e}")
            return self._failsafe_result(request)

    def _score_primary(self, request: AssessmentRequest) -> ScoreBreakdown:
        """Run the primary scorer on a worker thread, abandoning it past the time budget."""
        limit = self.settings.scoring_timeout_seconds
        outcome: Dict[str, Any] = {}

        def work():
            try:
                outcome["breakdown"] = self.scoring_engine.score(request)
            except Exception as e:
                outcome["error"] = e

        started = self._clock()
        worker = threading.Thread(target=work, name="primary-scoring", daemon=True)
        worker.start()
        worker.join(limit)
        if worker.is_alive():
            raise ScoringFailure(f"Primary scoring did not finish within {limit:.2f}s")
        if "error" in outcome:
            raise ScoringFailure("Primary scoring raised", cause=outcome["error"])
        breakdown = outcome["breakdown"]

        elapsed = self._clock() - started
        if elapsed > self.settings.scoring_timeout_seconds:
            raise ScoringFailure(
                f"Primary scoring took {elapsed:.2f}s "
                f"(limit {self.settings.scoring_timeout_seconds:.2f}s)"
            )
        return breakdown

    def _enforce(self,
                 request: AssessmentRequest,
                 breakdown: ScoreBreakdown,
                 method: AnalysisMethod,
                 threshold: int) -> AssessmentResult:
        settings = self.settings
        level_number = request.level_config.level_number
        raw = breakdown.subscores
        relevance = raw.relevance

        if relevance < settings.min_relevance_threshold:
            logger.info(
                f"Off-topic answer at level {level_number}: relevance {relevance} "
                f"< {settings.min_relevance_threshold}"
            )
            subscores = raw
            overall = 0
            passed = False
            reason: Optional[EnforcementReason] = EnforcementReason.OFF_TOPIC
        else:
            subscores = raw.with_floor(settings.subscore_floor) if settings.enable_floor_smoothing else raw
            overall = breakdown.overall_score
            passed = overall >= threshold and relevance >= settings.min_relevance_threshold
            reason = None

        feedback = self.feedback_generator.generate(FeedbackContext(
            passed=passed,
            overall_score=overall,
            required_threshold=threshold,
            relevance=relevance,
            subscores=subscores,
            enforcement_reason=reason,
            level_number=level_number,
            min_relevance_threshold=settings.min_relevance_threshold,
            transcript_length=len(request.transcript.strip()),
        ))

        result = AssessmentResult(
            overall_score=overall,
            subscores=subscores,
            passed=passed,
            required_threshold=threshold,
            feedback=feedback,
            analysis_method=method,
            level_number=level_number,
            enforcement_reason=reason,
            progression=self._progression(level_number, overall, threshold, subscores),
        )
        logger.info(
            f"Assessment ({method.value}) level {level_number}: {overall}% "
            f"vs {threshold}% -> {'PASS' if passed else 'FAIL'}"
        )
        return result

    def _no_answer_result(self, request: AssessmentRequest) -> AssessmentResult:
        level_number = request.level_config.level_number
        threshold = request.level_config.pass_threshold_percent
        logger.info(f"No answer recorded at level {level_number}")
        return AssessmentResult(
            overall_score=0,
            subscores=Subscores(),
            passed=False,
            required_threshold=threshold,
            feedback=self.feedback_generator.no_answer(),
            analysis_method=AnalysisMethod.PRIMARY,
            level_number=level_number,
            no_answer=True,
            progression=self._progression(level_number, 0, threshold, Subscores()),
        )

    def _failsafe_result(self, request: AssessmentRequest) -> AssessmentResult:
        return AssessmentResult(
            overall_score=0,
            subscores=Subscores(),
            passed=False,
            required_threshold=request.level_config.pass_threshold_percent,
            feedback=self.feedback_generator.failsafe(),
            analysis_method=AnalysisMethod.FAILSAFE,
            level_number=request.level_config.level_number,
        )

    def _progression(self, level_number: int, overall: int, threshold: int, subscores: Subscores):
        if not self.settings.enable_progression_analytics or level_number not in self.level_provider:
            return None
        return build_progression(self.level_provider, level_number, overall, threshold, subscores)

    def update_settings(self, **changes: Any) -> EnforcementSettings:
        """
        Replace policy settings at runtime.

        Raises:
            ValueError: If a setting name is unknown
        """
        known = {f.name for f in fields(EnforcementSettings)}
        unknown = set(changes) - known
        if unknown:
            raise ValueError(f"Unknown enforcement settings: {sorted(unknown)}")

        self.settings = replace(self.settings, **changes)
        logger.info(f"Enforcement settings updated: {changes}")
        return self.settings

    def system_status(self) -> Dict[str, Any]:
        """Snapshot of the active policy for diagnostics."""
        return {
            "settings": asdict(self.settings),
            "levels": {
                config.level_number: {
                    "name": config.name,
                    "passThreshold": config.pass_threshold_percent,
                    "minDuration": config.min_duration_seconds,
                    "maxDuration": config.max_duration_seconds,
                }
                for config in self.level_provider
            },
            "scoringEngine": type(self.scoring_engine).__name__,
            "fallbackScorer": type(self.fallback_scorer).__name__,
        }
