"""
Fantasy point calculation from raw stat lines.

Stat keys follow Sleeper's vocabulary (``rec``, ``rush_yd``, ``pass_td`` ...).
Keys without a weight in the rule set are ignored, never an error.
"""

import logging
from dataclasses import dataclass, field
from numbers import Number
from typing import Dict, Mapping, Optional

logger = logging.getLogger(__name__)

DEFAULT_RULES: Dict[str, float] = {
    "rec": 1.0,
    "rec_yd": 0.1,
    "rec_td": 6.0,
    "rush_yd": 0.1,
    "rush_td": 6.0,
    "pass_yd": 0.04,
    "pass_td": 4.0,
    "pass_int": -1.0,
    "fum_lost": -1.0,
    "fgm": 3.0,
    "xpm": 1.0,
    "def_td": 6.0,
    "def_sack": 1.0,
    "def_int": 2.0,
    "def_fr": 2.0,
    "def_safe": 2.0,
}


def _is_number(value) -> bool:
    return isinstance(value, Number) and not isinstance(value, bool)


@dataclass(frozen=True)
class ScoringRuleSet:
    weights: Mapping[str, float] = field(default_factory=lambda: dict(DEFAULT_RULES))

    @classmethod
    def from_settings(cls, settings: Optional[Mapping]) -> "ScoringRuleSet":
        """Build a rule set from a league's scoring settings, falling back to defaults."""
        if not settings:
            return cls()

        weights = {str(key): float(value) for key, value in settings.items() if _is_number(value)}
        dropped = len(settings) - len(weights)
        if dropped:
            logger.debug("Ignored %d non-numeric scoring settings", dropped)
        if not weights:
            return cls()
        return cls(weights=weights)

    def weight(self, stat_key: str) -> Optional[float]:
        return self.weights.get(stat_key)

    def __contains__(self, stat_key: str) -> bool:
        return stat_key in self.weights


def score(stats: Optional[Mapping[str, float]], rules: ScoringRuleSet) -> float:
    if not stats:
        return 0.0

    total = 0.0
    for stat_key, count in stats.items():
        weight = rules.weight(stat_key)
        if weight is None or not _is_number(count):
            continue
        total += count * weight
    return total


def score_breakdown(stats: Optional[Mapping[str, float]], rules: ScoringRuleSet) -> Dict[str, float]:
    """Per-stat point contributions, zero entries left out."""
    breakdown: Dict[str, float] = {}
    for stat_key, count in (stats or {}).items():
        weight = rules.weight(stat_key)
        if weight is None or not _is_number(count):
            continue
        contribution = count * weight
        if contribution:
            breakdown[stat_key] = contribution
    return breakdown
