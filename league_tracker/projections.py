"""
Projected points for the active week.

A player's projection is the first answer from an ordered chain of
strategies: cached value, external provider, the player's own projection,
then a position default. A player with no answer has no projection, which
is not the same thing as a zero projection.
"""

import logging
import threading
import time
from dataclasses import replace
from typing import Callable, Dict, List, Optional, Tuple

from .errors import ProviderError
from .models import Player, Team

logger = logging.getLogger(__name__)

DEFAULT_CACHE_SECONDS = 3600
DEFENSE_DEFAULT_PROJECTION = 5.0

SCORING_FORMAT_FIELDS: Dict[str, str] = {
    "ppr": "pts_ppr",
    "half_ppr": "pts_half_ppr",
    "half": "pts_half_ppr",
    "std": "pts_std",
    "standard": "pts_std",
}


def cache_key(player: Player) -> str:
    """Provider-qualified cache key; ESPN and Sleeper id ranges overlap."""
    if player.source is None:
        return player.player_id
    return f"{player.source.value}:{player.player_id}"


def projection_field(scoring_format: Optional[str]) -> str:
    return SCORING_FORMAT_FIELDS.get((scoring_format or "ppr").lower(), "pts_ppr")


class ProjectionCache:
    """Thread-safe player id -> (value, stored_at) store bound to one week."""

    def __init__(self, ttl_seconds: float = DEFAULT_CACHE_SECONDS, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._entries: Dict[str, Tuple[float, float]] = {}
        self._week: Optional[Tuple[int, int]] = None

    def get(self, key: str) -> Optional[float]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            value, stored_at = entry
            if self._clock() - stored_at >= self.ttl_seconds:
                del self._entries[key]
                return None
            return value

    def put(self, key: str, value: float):
        with self._lock:
            self._entries[key] = (value, self._clock())

    def clear(self):
        with self._lock:
            self._entries.clear()

    def ensure_week(self, week: int, season: int) -> bool:
        """Bind the cache to a week, dropping every entry if the week changed."""
        with self._lock:
            if self._week == (week, season):
                return False
            if self._week is not None:
                logger.info("Projection week changed %s -> %s; clearing %d entries", self._week, (week, season), len(self._entries))
            self._entries.clear()
            self._week = (week, season)
            return True

    @property
    def week(self) -> Optional[Tuple[int, int]]:
        return self._week

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


class SleeperProjectionProvider:
    """Looks up weekly projections from Sleeper's projection table."""

    def __init__(self, client, ttl_seconds: float = DEFAULT_CACHE_SECONDS, clock: Callable[[], float] = time.monotonic):
        self.client = client
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._tables: Dict[Tuple[int, int, str], Tuple[Dict, float]] = {}

    def _table(self, season: int, week: int, season_type: str) -> Dict:
        key = (season, week, season_type)
        with self._lock:
            cached = self._tables.get(key)
            if cached and self._clock() - cached[1] < self.ttl_seconds:
                return cached[0]

        table = self.client.get_projections(season, week, season_type=season_type) or {}
        with self._lock:
            self._tables[key] = (table, self._clock())
        logger.debug("Loaded %d Sleeper projections for %s week %s", len(table), season, week)
        return table

    def projection_for(
        self, player_id: str, week: int, season: int, scoring_format: str = "ppr", season_type: str = "regular"
    ) -> Optional[float]:
        entry = self._table(season, week, season_type).get(str(player_id))
        if not entry:
            return None
        # Some payloads nest the numbers under "stats"
        stats = entry.get("stats", entry)
        value = stats.get(projection_field(scoring_format))
        if value is None:
            return None
        return float(value)


class ProjectionService:
    """Resolves per-player projections and projected team totals."""

    def __init__(
        self,
        provider=None,
        cache: Optional[ProjectionCache] = None,
        scoring_format: str = "ppr",
        week: Optional[int] = None,
        season: Optional[int] = None,
    ):
        self.provider = provider
        self.cache = cache or ProjectionCache()
        self.scoring_format = scoring_format
        self.week = week
        self.season = season
        if week is not None and season is not None:
            self.cache.ensure_week(week, season)

    def set_week(self, week: int, season: int):
        self.week = week
        self.season = season
        self.cache.ensure_week(week, season)

    # ------------------------------------------------------------------ #
    # Fallback chain
    # ------------------------------------------------------------------ #
    def _strategies(self) -> List[Callable[[Player, str], Optional[float]]]:
        return [
            self._from_cache,
            self._from_provider,
            self._from_player,
            self._position_default,
        ]

    def projected_points(self, player: Player, scoring_format: Optional[str] = None) -> Optional[float]:
        fmt = scoring_format or self.scoring_format
        for strategy in self._strategies():
            value = strategy(player, fmt)
            if value is not None:
                return value
        return None

    def _from_cache(self, player: Player, fmt: str) -> Optional[float]:
        return self.cache.get(cache_key(player))

    def _from_provider(self, player: Player, fmt: str) -> Optional[float]:
        if self.provider is None or not player.sleeper_id or self.week is None or self.season is None:
            return None
        try:
            value = self.provider.projection_for(player.sleeper_id, self.week, self.season, fmt)
        except ProviderError as exc:
            logger.warning("Projection lookup failed for %s: %s", player.player_id, exc)
            return None
        if value is None:
            return None
        self.cache.put(cache_key(player), value)
        return value

    def _from_player(self, player: Player, fmt: str) -> Optional[float]:
        if player.projected_points is None or player.projected_points <= 0:
            return None
        self.cache.put(cache_key(player), player.projected_points)
        return player.projected_points

    def _position_default(self, player: Player, fmt: str) -> Optional[float]:
        if player.is_defense:
            return DEFENSE_DEFAULT_PROJECTION
        return None

    # ------------------------------------------------------------------ #
    # Team aggregates
    # ------------------------------------------------------------------ #
    def projected_team_score(self, team: Team, scoring_format: Optional[str] = None) -> float:
        total = 0.0
        for player in team.starters:
            if player.current_points > 0:
                total += player.current_points
            else:
                total += self.projected_points(player, scoring_format) or 0.0
        return total

    def project_team(self, team: Team, scoring_format: Optional[str] = None) -> Team:
        """Rebuild a team with player projections and its projected total filled in."""
        players = tuple(
            replace(player, projected_points=self.projected_points(player, scoring_format))
            for player in team.players
        )
        return replace(team, players=players, projected_score=self.projected_team_score(team, scoring_format))
