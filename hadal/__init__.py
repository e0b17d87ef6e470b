"""
Hadal: spoken-answer practice with automated assessment.

Records a learner's spoken answer with live transcription and silence
detection, then scores it for relevance, grammar, fluency and pronunciation
against a per-level pass threshold, with feedback in English and Somali.
"""

__version__ = "1.0.0"

# Main entry points
from .assessment import (
    AssessmentResult, EnforcementPolicyEngine, EnforcementSettings,
    LevelConfigProvider, ScoringEngine, FallbackScorer
)
from .recording import RecordingSessionController, SessionRunner, SilenceDetector
from .practice import PracticeOrchestrator

__all__ = [
    "AssessmentResult", "EnforcementPolicyEngine", "EnforcementSettings",
    "LevelConfigProvider", "ScoringEngine", "FallbackScorer",
    "RecordingSessionController", "SessionRunner", "SilenceDetector",
    "PracticeOrchestrator",
]
