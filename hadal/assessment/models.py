"""
Data models for answer assessment.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Tuple


class AnalysisMethod(str, Enum):
    """Which scoring path produced a result."""
    PRIMARY = "primary"
    FALLBACK = "fallback"
    FAILSAFE = "failsafe"


class EnforcementReason(str, Enum):
    """Why the enforcement policy overrode the computed score."""
    OFF_TOPIC = "off_topic"


SUBSCORE_NAMES = ("relevance", "grammar", "fluency", "pronunciation")


@dataclass(frozen=True)
class SubscoreWeights:
    """Percentage weight of each subscore in the overall score."""
    relevance: int
    grammar: int
    fluency: int
    pronunciation: int

    def __post_init__(self):
        total = self.relevance + self.grammar + self.fluency + self.pronunciation
        if total != 100:
            raise ValueError(f"Subscore weights must sum to 100, got {total}")
        if min(self.as_tuple()) < 0:
            raise ValueError("Subscore weights must be non-negative")

    def as_tuple(self) -> Tuple[int, int, int, int]:
        return (self.relevance, self.grammar, self.fluency, self.pronunciation)


@dataclass(frozen=True)
class LevelConfig:
    """Timing bounds, pass threshold and weighting for one difficulty level."""
    level_number: int
    name: str
    min_duration_seconds: int
    max_duration_seconds: int
    pass_threshold_percent: int
    subscore_weights: SubscoreWeights

    def __post_init__(self):
        if self.min_duration_seconds > self.max_duration_seconds:
            raise ValueError(
                f"Level {self.level_number}: min duration exceeds max duration"
            )
        if not 0 <= self.pass_threshold_percent <= 100:
            raise ValueError(
                f"Level {self.level_number}: pass threshold must be 0-100"
            )


@dataclass(frozen=True)
class Subscores:
    """The four quality dimensions, each 0-100."""
    relevance: int = 0
    grammar: int = 0
    fluency: int = 0
    pronunciation: int = 0

    def as_tuple(self) -> Tuple[int, int, int, int]:
        return (self.relevance, self.grammar, self.fluency, self.pronunciation)

    def to_dict(self) -> Dict[str, int]:
        return dict(zip(SUBSCORE_NAMES, self.as_tuple()))

    def with_floor(self, floor: int) -> "Subscores":
        """Raise grammar, fluency and pronunciation to `floor`; relevance is untouched."""
        return Subscores(
            relevance=self.relevance,
            grammar=max(floor, self.grammar),
            fluency=max(floor, self.fluency),
            pronunciation=max(floor, self.pronunciation),
        )


@dataclass(frozen=True)
class ScoreBreakdown:
    """Raw output of a scorer before enforcement."""
    subscores: Subscores
    overall_score: int


@dataclass(frozen=True)
class AssessmentRequest:
    """Everything needed to assess one spoken answer."""
    prompt_text: str
    transcript: str
    level_config: LevelConfig
    recording_duration_seconds: float = 0.0

    @property
    def is_empty(self) -> bool:
        return not (self.transcript or "").strip()


@dataclass(frozen=True)
class LocalizedString:
    """A user-facing message in every supported locale."""
    en: str
    so: str

    def get(self, locale: str = "so") -> str:
        return self.so if locale == "so" else self.en

    def to_dict(self) -> Dict[str, str]:
        return {"en": self.en, "so": self.so}


@dataclass(frozen=True)
class Feedback:
    """Structured, localized feedback for one assessment."""
    summary: LocalizedString
    encouragement: LocalizedString
    improvements: Tuple[LocalizedString, ...] = ()
    strengths: Tuple[LocalizedString, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "summary": self.summary.to_dict(),
            "encouragement": self.encouragement.to_dict(),
            "improvements": [item.to_dict() for item in self.improvements],
            "strengths": [item.to_dict() for item in self.strengths],
        }

    def render(self, locale: str = "so") -> str:
        """Plain-text rendering for terminals and logs."""
        lines = [self.summary.get(locale), self.encouragement.get(locale)]
        lines.extend(f"+ {item.get(locale)}" for item in self.strengths)
        lines.extend(f"- {item.get(locale)}" for item in self.improvements)
        return "\n".join(lines)


@dataclass(frozen=True)
class ProgressionAnalytics:
    """Where this attempt leaves the learner relative to the level ladder."""
    current_level: int
    current_level_name: str
    next_level: Optional[int]
    next_level_name: Optional[str]
    progress_percentage: int
    areas_for_improvement: Tuple[str, ...]
    score_gap: Optional[int] = None
    estimated_attempts: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "currentLevel": self.current_level,
            "currentLevelName": self.current_level_name,
            "nextLevel": self.next_level,
            "nextLevelName": self.next_level_name,
            "progressPercentage": self.progress_percentage,
            "areasForImprovement": list(self.areas_for_improvement),
            "scoreGap": self.score_gap,
            "estimatedAttempts": self.estimated_attempts,
        }


@dataclass(frozen=True)
class AssessmentResult:
    """The single immutable outcome of one submission."""
    overall_score: int
    subscores: Subscores
    passed: bool
    required_threshold: int
    feedback: Feedback
    analysis_method: AnalysisMethod
    level_number: int
    enforcement_reason: Optional[EnforcementReason] = None
    no_answer: bool = False
    progression: Optional[ProgressionAnalytics] = None

    def to_dict(self) -> Dict[str, Any]:
        """Render the external result contract."""
        return {
            "overallScore": self.overall_score,
            "subscores": self.subscores.to_dict(),
            "passed": self.passed,
            "requiredThreshold": self.required_threshold,
            "enforcementReason": self.enforcement_reason.value if self.enforcement_reason else None,
            "analysisMethod": self.analysis_method.value,
            "feedback": self.feedback.to_dict(),
            "noAnswer": self.no_answer,
            "level": self.level_number,
            "progression": self.progression.to_dict() if self.progression else None,
        }


@dataclass
class FeedbackContext:
    """Inputs to feedback generation; carries no scoring logic."""
    passed: bool
    overall_score: int
    required_threshold: int
    relevance: int
    subscores: Subscores
    enforcement_reason: Optional[EnforcementReason] = None
    level_number: int = 1
    min_relevance_threshold: int = 30
    transcript_length: int = 0
