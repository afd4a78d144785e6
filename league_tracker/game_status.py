"""
Game status resolution against a snapshot of the NFL scoreboard.

The snapshot is owned by an external poller; this module only reads it. A
team with no entry in the snapshot has no game this week and is on bye.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Dict, Iterable, List, Mapping, Optional, Union

from .models import GameStatusCategory, MatchupStatus, Player, Team
from .team_codes import TeamCodeNormalizer

logger = logging.getLogger(__name__)

FINISHED_STATUSES = {"final", "final overtime", "post", "status_final"}
ACTIVE_STATUSES = {"in", "live", "halftime", "end of period", "delayed", "status_in_progress", "status_halftime"}


@dataclass(frozen=True)
class GameInfo:
    is_live: bool
    is_completed: bool
    status: str = "pre"
    score: Optional[int] = None
    opponent: Optional[str] = None
    opponent_score: Optional[int] = None
    clock: Optional[str] = None
    period: Optional[int] = None
    start_time: Optional[datetime] = None


GameSnapshot = Mapping[str, GameInfo]


def _to_int(value) -> Optional[int]:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _parse_start(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


def snapshot_from_scoreboard(payload: Mapping, normalizer: TeamCodeNormalizer) -> Dict[str, GameInfo]:
    """Build a snapshot keyed by canonical team code from an ESPN scoreboard response."""
    snapshot: Dict[str, GameInfo] = {}

    for event in payload.get("events", []) or []:
        competitions = event.get("competitions") or [{}]
        competitors = competitions[0].get("competitors", []) or []
        if len(competitors) < 2:
            continue

        status = event.get("status") or competitions[0].get("status") or {}
        status_type = status.get("type", {}) or {}
        state = (status_type.get("state") or "").lower()
        name = (status_type.get("name") or "").lower()
        completed = bool(status_type.get("completed")) or state == "post" or name in FINISHED_STATUSES
        live = not completed and (state == "in" or name in ACTIVE_STATUSES)

        codes = [normalizer.normalize(c.get("team", {}).get("abbreviation")) for c in competitors[:2]]
        scores = [_to_int(c.get("score")) for c in competitors[:2]]
        start_time = _parse_start(event.get("date"))

        for index, code in enumerate(codes):
            if not code:
                continue
            other = 1 - index
            snapshot[code] = GameInfo(
                is_live=live,
                is_completed=completed,
                status=state or name or "pre",
                score=scores[index],
                opponent=codes[other],
                opponent_score=scores[other],
                clock=status.get("displayClock"),
                period=_to_int(status.get("period")),
                start_time=start_time,
            )

    logger.debug("Scoreboard snapshot covers %d teams", len(snapshot))
    return snapshot


class GameStatusResolver:
    """Classifies a team's game as bye, pregame, live or complete."""

    def __init__(self, normalizer: TeamCodeNormalizer):
        self.normalizer = normalizer

    def game_for(self, team_code: Optional[str], snapshot: GameSnapshot) -> Optional[GameInfo]:
        canonical = self.normalizer.normalize(team_code)
        if canonical is None:
            return None
        return snapshot.get(canonical)

    def status_of(self, team_code: Optional[str], snapshot: GameSnapshot) -> GameStatusCategory:
        game = self.game_for(team_code, snapshot)
        if game is None:
            return GameStatusCategory.BYE
        if game.is_live:
            return GameStatusCategory.LIVE
        if game.is_completed:
            return GameStatusCategory.COMPLETE
        return GameStatusCategory.PREGAME

    def is_player_yet_to_play(
        self,
        team_code: Optional[str],
        current_points: Optional[float],
        snapshot: GameSnapshot,
        game_date: Optional[Union[date, datetime]] = None,
        today: Optional[date] = None,
    ) -> bool:
        status = self.status_of(team_code, snapshot)
        if status == GameStatusCategory.BYE:
            return False

        if game_date is not None:
            day = game_date.date() if isinstance(game_date, datetime) else game_date
            if day < (today or date.today()):
                return False

        return (current_points or 0.0) == 0.0 and status != GameStatusCategory.COMPLETE

    # ------------------------------------------------------------------ #
    # Roster helpers
    # ------------------------------------------------------------------ #
    def matchup_status(self, players: Iterable[Player], snapshot: GameSnapshot) -> MatchupStatus:
        statuses = [self.status_of(player.team_code, snapshot) for player in players if player.team_code]
        if any(status == GameStatusCategory.LIVE for status in statuses):
            return MatchupStatus.LIVE
        if all(status in (GameStatusCategory.COMPLETE, GameStatusCategory.BYE) for status in statuses):
            return MatchupStatus.COMPLETE
        return MatchupStatus.UPCOMING

    def count_yet_to_play(self, players: Iterable[Player], snapshot: GameSnapshot) -> int:
        return sum(
            1
            for player in players
            if player.is_starter
            and self.is_player_yet_to_play(player.team_code, player.current_points, snapshot)
        )

    def bucket_starters(self, team: Team, snapshot: GameSnapshot) -> Dict[str, List[str]]:
        """Split a team's starters into playing / yet-to-play / finished name lists."""
        buckets: Dict[str, List[str]] = {"currently_playing": [], "yet_to_play": [], "finished_playing": []}

        for player in team.starters:
            status = self.status_of(player.team_code, snapshot)
            if status == GameStatusCategory.LIVE:
                buckets["currently_playing"].append(f"{player.full_name} ({player.current_points:.1f})")
            elif status == GameStatusCategory.COMPLETE:
                buckets["finished_playing"].append(f"{player.full_name} ({player.current_points:.1f})")
            elif status == GameStatusCategory.PREGAME:
                projection = player.projected_points or 0.0
                buckets["yet_to_play"].append(f"{player.full_name} (proj: {projection:.1f})")

        return buckets
