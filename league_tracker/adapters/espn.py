import logging
from typing import Dict, List, Mapping, Optional

from espn_api.football.constant import PRO_TEAM_MAP

from ..game_status import GameSnapshot
from ..models import LeagueSource, Matchup, Player, Team, TeamRecord
from .base import AdapterResult, LeagueAdapter, register_adapter, resolve_display_name

logger = logging.getLogger(__name__)

ACTUAL_STAT_SOURCE = 0
PROJECTED_STAT_SOURCE = 1

BENCH_SLOTS = {"BN", "IR"}

LINEUP_SLOTS: Dict[int, str] = {
    0: "QB",
    2: "RB",
    3: "RB",
    4: "WR",
    5: "WR",
    6: "TE",
    7: "FLEX",
    16: "D/ST",
    17: "K",
    20: "BN",
    21: "IR",
    22: "FLEX",
    23: "FLEX",
}

DEFAULT_POSITIONS: Dict[int, str] = {
    1: "QB",
    2: "RB",
    3: "WR",
    4: "TE",
    5: "K",
    16: "D/ST",
}


def slot_label(slot_id) -> str:
    try:
        return LINEUP_SLOTS.get(int(slot_id), "BN")
    except (TypeError, ValueError):
        return "BN"


def stat_total(stats: List[Mapping], week: int, source: int = ACTUAL_STAT_SOURCE) -> Optional[float]:
    """appliedTotal of the stat entry for this scoring period and source, if any."""
    for entry in stats or []:
        if entry.get("scoringPeriodId") != week:
            continue
        if entry.get("statSourceId", ACTUAL_STAT_SOURCE) != source:
            continue
        total = entry.get("appliedTotal")
        return float(total) if total is not None else None
    return None


@register_adapter
class EspnAdapter(LeagueAdapter):
    """Adapter for ESPN's mTeam / mRoster / mMatchupScore league views."""

    source = LeagueSource.ESPN

    def __init__(self, normalizer, resolver=None, sleeper_ids: Optional[Mapping[str, str]] = None):
        super().__init__(normalizer, resolver)
        self.sleeper_ids: Dict[str, str] = dict(sleeper_ids or {})

    def adapt(self, payload: Mapping, week: int, year: int, snapshot: Optional[GameSnapshot] = None) -> AdapterResult:
        result = AdapterResult()
        members = {member.get("id"): member for member in payload.get("members", []) or []}
        teams: Dict[str, Team] = {}

        for raw_team in payload.get("teams", []) or []:
            try:
                team = self._build_team(raw_team, members, week, snapshot)
            except (KeyError, TypeError, ValueError) as exc:
                logger.warning("Skipping malformed ESPN team %r: %s", raw_team.get("id"), exc)
                result.errors.append(f"team {raw_team.get('id')}: {exc}")
                continue
            teams[team.team_id] = team
            result.team_records[team.team_id] = team.record

        scheduled = set()
        for entry in payload.get("schedule", []) or []:
            if entry.get("matchupPeriodId") != week:
                continue

            home_id = str((entry.get("home") or {}).get("teamId", ""))
            away_id = str((entry.get("away") or {}).get("teamId", "")) if entry.get("away") else None
            repeated = [team_id for team_id in (home_id, away_id) if team_id in scheduled]
            if repeated:
                result.errors.append(f"schedule {entry.get('id')}: team {repeated[0]!r} already scheduled this week")
                continue
            home = teams.get(home_id)
            if home is None:
                result.errors.append(f"schedule {entry.get('id')}: unknown home team {home_id!r}")
                continue
            scheduled.add(home_id)

            away = teams.get(away_id) if away_id else None
            if away_id and away is None:
                result.errors.append(f"schedule {entry.get('id')}: unknown away team {away_id!r}")
            if away is None:
                result.bye_teams.append(home)
                continue

            scheduled.add(away_id)
            result.matchups.append(
                Matchup(
                    matchup_id=str(entry.get("id", f"{week}-{home_id}-{away_id}")),
                    week=week,
                    season=year,
                    teams=(home, away),
                    status=self.matchup_status_of((home, away), snapshot),
                )
            )

        for team_id, team in teams.items():
            if team_id not in scheduled:
                result.bye_teams.append(team)

        logger.debug(
            "ESPN week %s: %d matchups, %d unpaired teams, %d errors",
            week,
            len(result.matchups),
            len(result.bye_teams),
            len(result.errors),
        )
        return result

    # ------------------------------------------------------------------ #
    # Team & player construction
    # ------------------------------------------------------------------ #
    def _build_team(self, raw_team: Mapping, members: Mapping, week: int, snapshot: Optional[GameSnapshot]) -> Team:
        team_id = str(raw_team["id"])
        owners = raw_team.get("owners") or []
        owner_id = owners[0] if owners else None
        manager = self._manager_name(members.get(owner_id)) if owner_id else None

        players = []
        for entry in (raw_team.get("roster") or {}).get("entries", []) or []:
            player = self._build_player(entry, week, snapshot)
            if player is not None:
                players.append(player)

        team_name = raw_team.get("name") or " ".join(
            part for part in (raw_team.get("location"), raw_team.get("nickname")) if part
        )

        return Team(
            team_id=team_id,
            name=resolve_display_name(team_id, manager, team_name),
            owner_name=manager or "",
            current_score=sum(player.current_points for player in players if player.is_starter),
            players=tuple(players),
            record=self._record(raw_team),
            owner_id=owner_id,
        )

    def _build_player(self, entry: Mapping, week: int, snapshot: Optional[GameSnapshot]) -> Optional[Player]:
        raw_player = (entry.get("playerPoolEntry") or {}).get("player")
        if not raw_player:
            return None

        espn_id = str(raw_player.get("id", entry.get("playerId")))
        slot = slot_label(entry.get("lineupSlotId"))
        position = DEFAULT_POSITIONS.get(raw_player.get("defaultPositionId"))
        if position is None:
            position = slot if slot not in BENCH_SLOTS and slot != "FLEX" else ""

        pro_team = PRO_TEAM_MAP.get(raw_player.get("proTeamId"))
        team_code = self.normalizer.normalize(pro_team) if pro_team and pro_team != "None" else None

        stats = raw_player.get("stats") or []
        injury = raw_player.get("injuryStatus")

        return Player(
            player_id=espn_id,
            first_name=raw_player.get("firstName", ""),
            last_name=raw_player.get("lastName", ""),
            position=position,
            team_code=team_code,
            current_points=stat_total(stats, week) or 0.0,
            projected_points=stat_total(stats, week, PROJECTED_STAT_SOURCE),
            is_starter=slot not in BENCH_SLOTS,
            lineup_slot=slot,
            injury_status=None if injury in (None, "ACTIVE") else injury,
            game_status=self.game_status_of(team_code, snapshot),
            sleeper_id=self.sleeper_ids.get(espn_id),
            espn_id=espn_id,
            source=self.source,
        )

    @staticmethod
    def _manager_name(member: Optional[Mapping]) -> Optional[str]:
        if not member:
            return None
        full = f"{member.get('firstName', '')} {member.get('lastName', '')}".strip()
        return full or member.get("displayName")

    @staticmethod
    def _record(raw_team: Mapping) -> Optional[TeamRecord]:
        overall = (raw_team.get("record") or {}).get("overall")
        if not overall:
            return None
        return TeamRecord(
            wins=int(overall.get("wins", 0)),
            losses=int(overall.get("losses", 0)),
            ties=int(overall.get("ties", 0)),
        )

