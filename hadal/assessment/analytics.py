"""
Progression analytics attached to assessment results.
"""
import math
from typing import Optional

from .levels import LevelConfigProvider
from .models import ProgressionAnalytics, Subscores

IMPROVEMENT_CUTOFF = 70
POINTS_PER_ATTEMPT = 10


def build_progression(level_provider: LevelConfigProvider,
                      level_number: int,
                      overall_score: int,
                      required_threshold: int,
                      subscores: Subscores) -> ProgressionAnalytics:
    """
    Describe where an attempt leaves the learner on the level ladder.

    Args:
        level_provider: Source of level names and thresholds
        level_number: Level the attempt was made at
        overall_score: Final overall score of the attempt
        required_threshold: Threshold the attempt was judged against
        subscores: Subscores reported in the result

    Returns:
        ProgressionAnalytics; next-level fields are None at the top level
    """
    current = level_provider.get(level_number)
    next_config = level_provider.next_level(level_number)

    if required_threshold > 0:
        progress = int(round(overall_score / required_threshold * 100))
    else:
        progress = 100

    areas = tuple(
        name for name, score in subscores.to_dict().items() if score < IMPROVEMENT_CUTOFF
    )

    score_gap: Optional[int] = None
    estimated_attempts: Optional[int] = None
    if next_config is not None:
        score_gap = max(0, next_config.pass_threshold_percent - overall_score)
        estimated_attempts = math.ceil(score_gap / POINTS_PER_ATTEMPT)

    return ProgressionAnalytics(
        current_level=current.level_number,
        current_level_name=current.name,
        next_level=next_config.level_number if next_config else None,
        next_level_name=next_config.name if next_config else None,
        progress_percentage=progress,
        areas_for_improvement=areas,
        score_gap=score_gap,
        estimated_attempts=estimated_attempts,
    )
