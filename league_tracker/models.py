"""
Normalized league model shared by both providers.

Every record is rebuilt on each refresh and never mutated in place, so the
dataclasses are frozen and their collections are tuples.
"""

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple


class LeagueSource(str, Enum):
    ESPN = "espn"
    SLEEPER = "sleeper"


class GameStatusCategory(str, Enum):
    BYE = "bye"
    PREGAME = "pregame"
    LIVE = "live"
    COMPLETE = "complete"


class MatchupStatus(str, Enum):
    UPCOMING = "upcoming"
    LIVE = "live"
    COMPLETE = "complete"


class EliminationStatus(str, Enum):
    CHAMPION = "champion"
    SAFE = "safe"
    WARNING = "warning"
    DANGER = "danger"
    CRITICAL = "critical"
    ELIMINATED = "eliminated"


DEFENSE_POSITIONS = frozenset({"D/ST", "DST", "DEF"})


def _jsonable(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {key: _jsonable(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(item) for item in value]
    return value


class _Serializable:
    def as_dict(self) -> Dict:
        return _jsonable(asdict(self))


@dataclass(frozen=True)
class TeamRecord(_Serializable):
    wins: int
    losses: int
    ties: int = 0

    @property
    def display(self) -> str:
        if self.ties:
            return f"{self.wins}-{self.losses}-{self.ties}"
        return f"{self.wins}-{self.losses}"


@dataclass(frozen=True)
class Player(_Serializable):
    player_id: str
    first_name: str = ""
    last_name: str = ""
    position: str = ""
    team_code: Optional[str] = None
    current_points: float = 0.0
    projected_points: Optional[float] = None
    is_starter: bool = False
    lineup_slot: Optional[str] = None
    injury_status: Optional[str] = None
    game_status: GameStatusCategory = GameStatusCategory.BYE
    sleeper_id: Optional[str] = None
    espn_id: Optional[str] = None
    source: Optional[LeagueSource] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def is_defense(self) -> bool:
        return self.position.upper() in DEFENSE_POSITIONS


@dataclass(frozen=True)
class Team(_Serializable):
    team_id: str
    name: str
    owner_name: str
    current_score: float = 0.0
    projected_score: Optional[float] = None
    players: Tuple[Player, ...] = ()
    record: Optional[TeamRecord] = None
    owner_id: Optional[str] = None

    @property
    def starters(self) -> Tuple[Player, ...]:
        return tuple(player for player in self.players if player.is_starter)


@dataclass(frozen=True)
class Matchup(_Serializable):
    matchup_id: str
    week: int
    season: int
    teams: Tuple[Team, ...]
    status: MatchupStatus = MatchupStatus.UPCOMING

    @property
    def home(self) -> Optional[Team]:
        return self.teams[0] if self.teams else None

    @property
    def away(self) -> Optional[Team]:
        return self.teams[1] if len(self.teams) > 1 else None


@dataclass(frozen=True)
class TeamRanking(_Serializable):
    team: Team
    rank: int
    weekly_points: float
    status: EliminationStatus
    survival_probability: float
    safety_margin: float
    weeks_alive: int
    is_eliminated: bool = False


@dataclass(frozen=True)
class EliminationEvent(_Serializable):
    week: int
    ranking: TeamRanking
    elimination_score: float
    margin: float
    narrative: str = ""


@dataclass(frozen=True)
class WeekSummary(_Serializable):
    league_id: str
    week: int
    rankings: Tuple[TeamRanking, ...]
    eliminated_this_week: Tuple[TeamRanking, ...]
    cutoff_score: float
    average_score: float
    highest_score: float
    lowest_score: float
    elimination_history: Tuple[EliminationEvent, ...] = ()
    total_survivors: int = field(default=0)

    def _with_status(self, status: EliminationStatus) -> Tuple[TeamRanking, ...]:
        return tuple(ranking for ranking in self.rankings if ranking.status == status)

    @property
    def champion(self) -> Optional[TeamRanking]:
        champions = self._with_status(EliminationStatus.CHAMPION)
        return champions[0] if champions else None

    @property
    def critical_teams(self) -> Tuple[TeamRanking, ...]:
        return self._with_status(EliminationStatus.CRITICAL)

    @property
    def danger_teams(self) -> Tuple[TeamRanking, ...]:
        return self._with_status(EliminationStatus.DANGER)

    @property
    def warning_teams(self) -> Tuple[TeamRanking, ...]:
        return self._with_status(EliminationStatus.WARNING)

    @property
    def safe_teams(self) -> Tuple[TeamRanking, ...]:
        return self._with_status(EliminationStatus.SAFE)

    @property
    def is_scheduled(self) -> bool:
        """True until at least one active team has put up points."""
        return not any(ranking.weekly_points > 0 for ranking in self.rankings)
