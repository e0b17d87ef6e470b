"""Answer assessment.

Level configuration, heuristic scoring, the fallback scorer and the
enforcement policy that produces the final AssessmentResult.
"""

from .errors import (
    HadalError, RecordingError, DeviceUnavailable, TranscriptionUnavailable,
    SessionAlreadyActive, StopRejected, ScoringFailure, FallbackFailure,
    InvalidSubmission
)
from .models import (
    AnalysisMethod, EnforcementReason, SubscoreWeights, LevelConfig,
    Subscores, ScoreBreakdown, AssessmentRequest, LocalizedString,
    Feedback, ProgressionAnalytics, AssessmentResult, FeedbackContext
)
from .levels import LevelConfigProvider, get_level_provider
from .scoring import ScoringEngine
from .fallback import FallbackScorer
from .feedback import FeedbackGenerator, FeedbackMessages
from .analytics import build_progression
from .schemas import AssessmentSubmission, parse_submission
from .enforcement import EnforcementPolicyEngine, EnforcementSettings

__all__ = [
    # Errors
    "HadalError", "RecordingError", "DeviceUnavailable", "TranscriptionUnavailable",
    "SessionAlreadyActive", "StopRejected", "ScoringFailure", "FallbackFailure",
    "InvalidSubmission",

    # Models
    "AnalysisMethod", "EnforcementReason", "SubscoreWeights", "LevelConfig",
    "Subscores", "ScoreBreakdown", "AssessmentRequest", "LocalizedString",
    "Feedback", "ProgressionAnalytics", "AssessmentResult", "FeedbackContext",

    # Components
    "LevelConfigProvider", "get_level_provider", "ScoringEngine", "FallbackScorer",
    "FeedbackGenerator", "FeedbackMessages", "build_progression",
    "AssessmentSubmission", "parse_submission",
    "EnforcementPolicyEngine", "EnforcementSettings",
]
