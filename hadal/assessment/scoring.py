"""
Heuristic answer scoring.

The ScoringEngine turns a transcript into four subscores (relevance, grammar,
fluency, pronunciation) and a weighted overall score. It is pure and
deterministic: the same request always yields the same breakdown.
"""
import logging
import re
from typing import List, Optional

from .models import AssessmentRequest, LevelConfig, ScoreBreakdown, Subscores, SubscoreWeights

logger = logging.getLogger("scoring")


TOKEN_PATTERN = re.compile(r"[a-z0-9']+")
SENTENCE_SPLIT = re.compile(r"[.!?]+")

STOP_WORDS = frozenset([
    "what", "how", "why", "where", "when", "who", "which", "whom", "whose",
    "is", "are", "was", "were", "do", "does", "did", "can", "could", "will", "would",
    "the", "a", "an", "and", "or", "but", "in", "on", "at", "to", "for", "of",
    "with", "by", "from", "about", "tell", "describe", "explain", "please",
    "this", "that", "there", "have", "some",
])

COPULA = re.compile(r"\b(am|is|are|was|were)\b", re.IGNORECASE)
ARTICLE = re.compile(r"\b(the|a|an)\b", re.IGNORECASE)
PRONOUN_CASE_ERROR = re.compile(r"\b(me am|me is|me have)\b", re.IGNORECASE)
AGREEMENT_ERROR = re.compile(r"\b(i are|you is|they is|he are|she are)\b", re.IGNORECASE)

CONNECTIVES = re.compile(
    r"\b(and|but|because|so|then|also|however|therefore|moreover)\b", re.IGNORECASE
)
OPINION_MARKERS = re.compile(
    r"\b(i think|i believe|in my opinion|i feel|i would say)\b", re.IGNORECASE
)
FILLERS = re.compile(r"\b(um|uh|er|ah|like|you know|i mean)\b", re.IGNORECASE)
HESITATIONS = re.compile(r"\b(um|uh|er|ah)\b", re.IGNORECASE)

FILLER_ALLOWANCE = 2
MAX_HESITATION_PENALTY = 20


def tokenize(text: Optional[str]) -> List[str]:
    """Lowercase word tokens; apostrophes stay inside words."""
    return TOKEN_PATTERN.findall((text or "").lower())


def split_sentences(text: str) -> List[str]:
    return [part.strip() for part in SENTENCE_SPLIT.split(text or "") if part.strip()]


def clamp(value: float, low: int = 0, high: int = 100) -> int:
    return int(max(low, min(high, value)))


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for non-negative input."""
    return int(value + 0.5) if value >= 0 else -int(-value + 0.5)


def weighted_overall(subscores: Subscores, weights: SubscoreWeights) -> int:
    """Weighted mean of the subscores, weights given in percent."""
    total = sum(score * weight for score, weight in zip(subscores.as_tuple(), weights.as_tuple()))
    # integer arithmetic keeps .5 boundaries exact
    return (total + 50) // 100


class ScoringEngine:
    """Deterministic multi-factor scorer for a spoken answer transcript."""

    def score(self, request: AssessmentRequest) -> ScoreBreakdown:
        """
        Score one answer.

        Args:
            request: Prompt, transcript, level and recording duration

        Returns:
            ScoreBreakdown with clamped subscores and the weighted overall score
        """
        if request.is_empty:
            logger.debug("Empty transcript, returning zero scores")
            return ScoreBreakdown(subscores=Subscores(), overall_score=0)

        transcript = request.transcript.strip()
        word_count = len(tokenize(transcript))

        subscores = Subscores(
            relevance=self.relevance(request.prompt_text, transcript),
            grammar=self.grammar(transcript),
            fluency=self.fluency(transcript, word_count),
            pronunciation=self.pronunciation(
                transcript, request.recording_duration_seconds, request.level_config
            ),
        )
        overall = weighted_overall(subscores, request.level_config.subscore_weights)
        logger.info(
            f"Scored level {request.level_config.level_number} answer "
            f"({word_count} words): {subscores.to_dict()} -> {overall}"
        )
        return ScoreBreakdown(subscores=subscores, overall_score=overall)

    def relevance(self, prompt_text: str, transcript: str) -> int:
        """Share of the prompt's content words that the answer touches, plus a length bonus."""
        content_tokens = [
            token for token in tokenize(prompt_text)
            if len(token) > 3 and token not in STOP_WORDS
        ]
        answer_tokens = set(tokenize(transcript))

        if not content_tokens:
            score = 50
        else:
            matched = sum(1 for token in content_tokens if self._matches(token, answer_tokens))
            score = round_half_up(matched / len(content_tokens) * 100)

        length = len(transcript.strip())
        if length >= 50:
            score += 10
        if length >= 100:
            score += 10
        return clamp(score)

    @staticmethod
    def _matches(content_token: str, answer_tokens: set) -> bool:
        # prompt word must occur inside an answer word, never the reverse
        return any(content_token in token for token in answer_tokens)

    def grammar(self, transcript: str) -> int:
        text = transcript.strip()
        sentences = split_sentences(text)
        score = 70

        if sentences and all(len(tokenize(sentence)) >= 3 for sentence in sentences):
            score += 10
        if sentences and all(sentence[0].isupper() for sentence in sentences):
            score += 5
        if COPULA.search(text):
            score += 10
        if ARTICLE.search(text):
            score += 5
        if text and text[-1] in ".!?":
            score += 5

        if PRONOUN_CASE_ERROR.search(text):
            score -= 15
        if AGREEMENT_ERROR.search(text):
            score -= 20
        return clamp(score)

    def fluency(self, transcript: str, word_count: int) -> int:
        score = 50
        if word_count >= 20:
            score += 25
        elif word_count >= 10:
            score += 15
        elif word_count >= 5:
            score += 10

        if len(split_sentences(transcript)) >= 2:
            score += 10
        if CONNECTIVES.search(transcript):
            score += 10
        if OPINION_MARKERS.search(transcript):
            score += 10

        fillers = len(FILLERS.findall(transcript))
        if fillers > FILLER_ALLOWANCE:
            score -= 3 * (fillers - FILLER_ALLOWANCE)
        return clamp(score)

    def pronunciation(self, transcript: str, duration_seconds: float, level_config: LevelConfig) -> int:
        """
        Estimate clarity from timing and text shape.

        No acoustic analysis is done; duration inside the level's window and
        a low hesitation count stand in for clear delivery.
        """
        score = 60
        duration = duration_seconds or 0.0
        if level_config.min_duration_seconds <= duration <= level_config.max_duration_seconds:
            score += 20
        elif duration >= level_config.min_duration_seconds / 2:
            score += 10

        word_count = len(tokenize(transcript))
        if word_count > 20:
            score += 15
        elif word_count > 10:
            score += 10
        elif word_count > 5:
            score += 5

        hesitations = len(HESITATIONS.findall(transcript))
        score -= min(5 * hesitations, MAX_HESITATION_PENALTY)
        return clamp(score)
