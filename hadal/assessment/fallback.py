"""
Simplified scorer used when the primary engine fails or runs too long.
"""
import logging

from .errors import FallbackFailure
from .models import AssessmentRequest, ScoreBreakdown, Subscores
from .scoring import round_half_up, tokenize

logger = logging.getLogger("fallback_scorer")

MAX_BASE_SCORE = 70


class FallbackScorer:
    """Word-count driven scorer with plain word-overlap relevance."""

    def score(self, request: AssessmentRequest) -> ScoreBreakdown:
        try:
            answer_tokens = tokenize(request.transcript)
            base = min(MAX_BASE_SCORE, 3 * len(answer_tokens) + 20)

            subscores = Subscores(
                relevance=self.relevance(request.prompt_text, answer_tokens),
                grammar=round_half_up(base * 0.9),
                fluency=round_half_up(base * 0.8),
                pronunciation=round_half_up(base * 0.85),
            )
        except Exception as e:
            raise FallbackFailure("Fallback scoring failed", cause=e)

        logger.info(f"Fallback scored {len(answer_tokens)} words: {subscores.to_dict()} -> {base}")
        return ScoreBreakdown(subscores=subscores, overall_score=base)

    @staticmethod
    def relevance(prompt_text: str, answer_tokens) -> int:
        prompt_tokens = tokenize(prompt_text)
        if not prompt_tokens:
            return 50
        answer_set = set(answer_tokens)
        matched = sum(1 for token in prompt_tokens if token in answer_set)
        return round_half_up(matched / len(prompt_tokens) * 100)
