"""
Progressive difficulty configuration.

One immutable LevelConfig per level, built once from a static table. Level 1
is the most lenient; thresholds rise with each level.
"""
import logging
from typing import Dict, Iterable, Optional, Tuple

from .models import LevelConfig, SubscoreWeights

logger = logging.getLogger("levels")


LEVEL_NAMES = {
    1: "BEGINNER",
    2: "ELEMENTARY",
    3: "INTERMEDIATE",
    4: "ADVANCED",
}

# level: (min seconds, max seconds, pass threshold %, weights R/G/F/P)
LEVEL_TABLE: Dict[int, Tuple[int, int, int, Tuple[int, int, int, int]]] = {
    1: (30, 60, 50, (30, 15, 25, 30)),
    2: (45, 75, 60, (35, 20, 25, 20)),
    3: (60, 90, 70, (40, 25, 20, 15)),
    4: (60, 90, 80, (40, 25, 20, 15)),
}


def build_level_configs(table: Optional[Dict[int, Tuple[int, int, int, Tuple[int, int, int, int]]]] = None
                        ) -> Dict[int, LevelConfig]:
    """Build LevelConfig objects from a (level -> row) table."""
    table = table if table is not None else LEVEL_TABLE
    configs = {}
    for level_number, (min_s, max_s, threshold, weights) in sorted(table.items()):
        configs[level_number] = LevelConfig(
            level_number=level_number,
            name=LEVEL_NAMES.get(level_number, f"LEVEL_{level_number}"),
            min_duration_seconds=min_s,
            max_duration_seconds=max_s,
            pass_threshold_percent=threshold,
            subscore_weights=SubscoreWeights(*weights),
        )
    return configs


class LevelConfigProvider:
    """Read-only lookup of difficulty levels; safe to share between callers."""

    def __init__(self, configs: Optional[Dict[int, LevelConfig]] = None):
        self._configs = dict(configs) if configs is not None else build_level_configs()
        if not self._configs:
            raise ValueError("At least one level must be configured")
        logger.debug(f"Loaded {len(self._configs)} level configurations")

    def get(self, level_number: int) -> LevelConfig:
        """
        Return the configuration for a level.

        Raises:
            KeyError: If the level is not configured
        """
        try:
            return self._configs[level_number]
        except KeyError:
            raise KeyError(f"Unknown level {level_number}; expected one of {self.levels}")

    def __contains__(self, level_number: object) -> bool:
        return level_number in self._configs

    def __iter__(self) -> Iterable[LevelConfig]:
        return iter(self._configs[n] for n in self.levels)

    @property
    def levels(self) -> Tuple[int, ...]:
        return tuple(sorted(self._configs))

    def next_level(self, level_number: int) -> Optional[LevelConfig]:
        """The level after `level_number`, or None at the top of the ladder."""
        later = [n for n in self.levels if n > level_number]
        return self._configs[later[0]] if later else None

    def threshold_for(self, level_number: int) -> int:
        return self.get(level_number).pass_threshold_percent


_default_provider: Optional[LevelConfigProvider] = None


def get_level_provider() -> LevelConfigProvider:
    """Shared provider built from the static table."""
    global _default_provider
    if _default_provider is None:
        _default_provider = LevelConfigProvider()
    return _default_provider
