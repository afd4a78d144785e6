"""
Core utilities for the league tracker.

This package hosts the shared pipeline so the Flask app and the scheduled
fetcher script reuse the same provider adapters, scoring, projection and
elimination ranking rules.
"""

from .elimination import EliminationRankingEngine
from .game_status import GameInfo, GameStatusResolver, snapshot_from_scoreboard
from .projections import ProjectionCache, ProjectionService
from .score_fetcher import LeagueReport, ScoreFetcher
from .scoring import ScoringRuleSet, score
from .settings import LeagueConfig, Settings
from .team_codes import TeamCodeNormalizer

__all__ = [
    "EliminationRankingEngine",
    "GameInfo",
    "GameStatusResolver",
    "LeagueConfig",
    "LeagueReport",
    "ProjectionCache",
    "ProjectionService",
    "ScoreFetcher",
    "ScoringRuleSet",
    "Settings",
    "TeamCodeNormalizer",
    "snapshot_from_scoreboard",
    "score",
]
