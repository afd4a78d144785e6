import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional

from ..errors import ConfigurationError
from ..game_status import GameSnapshot, GameStatusResolver
from ..models import GameStatusCategory, LeagueSource, Matchup, MatchupStatus, Team, TeamRecord
from ..team_codes import TeamCodeNormalizer

logger = logging.getLogger(__name__)

PLACEHOLDER_PREFIXES = ("Team ", "Manager ")


@dataclass
class AdapterResult:
    matchups: List[Matchup] = field(default_factory=list)
    bye_teams: List[Team] = field(default_factory=list)
    team_records: Dict[str, Optional[TeamRecord]] = field(default_factory=dict)
    errors: List[str] = field(default_factory=list)

    @property
    def teams(self) -> List[Team]:
        """Every team in the result, paired teams first."""
        teams: List[Team] = []
        for matchup in self.matchups:
            teams.extend(matchup.teams)
        teams.extend(self.bye_teams)
        return teams


def is_placeholder_name(name: Optional[str]) -> bool:
    if not name:
        return True
    cleaned = name.strip()
    return not cleaned or cleaned.startswith(PLACEHOLDER_PREFIXES) or len(cleaned) <= 4


def resolve_display_name(team_id: str, *candidates: Optional[str]) -> str:
    """Pick the first non-placeholder name, ending with a synthesized "Team {id}" label."""
    for candidate in candidates:
        if not is_placeholder_name(candidate):
            return candidate.strip()
    return f"Team {team_id}"


class LeagueAdapter(ABC):
    """Turns one provider's raw league payload into the shared model."""

    source: LeagueSource

    def __init__(self, normalizer: TeamCodeNormalizer, resolver: Optional[GameStatusResolver] = None):
        self.normalizer = normalizer
        self.resolver = resolver or GameStatusResolver(normalizer)

    @abstractmethod
    def adapt(
        self, payload: Mapping, week: int, year: int, snapshot: Optional[GameSnapshot] = None
    ) -> AdapterResult:
        raise NotImplementedError

    def is_elimination_league(self, payload: Mapping) -> bool:
        return False

    def game_status_of(self, team_code: Optional[str], snapshot: Optional[GameSnapshot]) -> GameStatusCategory:
        if snapshot is None:
            return GameStatusCategory.PREGAME if team_code else GameStatusCategory.BYE
        return self.resolver.status_of(team_code, snapshot)

    def matchup_status_of(self, teams, snapshot: Optional[GameSnapshot]) -> MatchupStatus:
        if snapshot is None:
            return MatchupStatus.UPCOMING
        return self.resolver.matchup_status([player for team in teams for player in team.players], snapshot)


_REGISTRY: Dict[LeagueSource, type] = {}


def register_adapter(cls):
    _REGISTRY[cls.source] = cls
    return cls


def get_adapter(
    source, normalizer: TeamCodeNormalizer, resolver: Optional[GameStatusResolver] = None, **options
) -> LeagueAdapter:
    try:
        adapter_cls = _REGISTRY[LeagueSource(source)]
    except (KeyError, ValueError):
        raise ConfigurationError(f"No adapter registered for league source {source!r}")
    return adapter_cls(normalizer, resolver, **options)
