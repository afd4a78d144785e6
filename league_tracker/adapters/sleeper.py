import logging
from collections import OrderedDict
from dataclasses import replace
from typing import Dict, List, Mapping, Optional, Sequence

from ..game_status import GameSnapshot
from ..models import LeagueSource, Matchup, Player, Team, TeamRecord
from ..scoring import ScoringRuleSet, score
from .base import AdapterResult, LeagueAdapter, register_adapter, resolve_display_name

logger = logging.getLogger(__name__)

GUILLOTINE_LEAGUE_TYPE = 3
EMPTY_SLOT = "0"


@register_adapter
class SleeperAdapter(LeagueAdapter):
    """Adapter for a bundle of Sleeper league, roster, user, matchup and stat responses.

    The payload is ``{"league", "rosters", "users", "matchups", "players", "stats"}``
    where ``players`` is the player directory keyed by Sleeper id and ``stats``
    holds the week's raw stat lines.
    """

    source = LeagueSource.SLEEPER

    def is_elimination_league(self, payload: Mapping) -> bool:
        settings = (payload.get("league") or {}).get("settings") or {}
        if settings.get("type") == GUILLOTINE_LEAGUE_TYPE:
            return True
        matchups = payload.get("matchups") or []
        return bool(matchups) and all(entry.get("matchup_id") is None for entry in matchups)

    def adapt(self, payload: Mapping, week: int, year: int, snapshot: Optional[GameSnapshot] = None) -> AdapterResult:
        result = AdapterResult()
        league = payload.get("league") or {}
        rules = ScoringRuleSet.from_settings(league.get("scoring_settings"))
        slots = [slot for slot in league.get("roster_positions", []) or [] if slot != "BN"]
        directory = payload.get("players") or {}
        stats = payload.get("stats") or {}
        users = {user.get("user_id"): user for user in payload.get("users", []) or []}

        rosters: Dict[str, Mapping] = {}
        for roster in payload.get("rosters", []) or []:
            if roster.get("roster_id") is None:
                result.errors.append("roster without roster_id skipped")
                continue
            roster_id = str(roster["roster_id"])
            rosters[roster_id] = roster
            result.team_records[roster_id] = self._record(roster)

        groups: "OrderedDict[str, List[Team]]" = OrderedDict()
        seen = set()
        for entry in payload.get("matchups", []) or []:
            roster_id = str(entry.get("roster_id"))
            roster = rosters.get(roster_id)
            if roster is None:
                result.errors.append(f"matchup entry for unknown roster {roster_id!r}")
                continue
            try:
                team = self._build_team(entry, roster, users, directory, stats, rules, slots, snapshot)
            except (KeyError, TypeError, ValueError) as exc:
                logger.warning("Skipping malformed Sleeper matchup entry for roster %s: %s", roster_id, exc)
                result.errors.append(f"roster {roster_id}: {exc}")
                continue
            seen.add(roster_id)

            matchup_id = entry.get("matchup_id")
            if matchup_id is None:
                result.bye_teams.append(team)
            else:
                groups.setdefault(str(matchup_id), []).append(team)

        for matchup_id, teams in groups.items():
            while len(teams) >= 2:
                pair = (teams.pop(0), teams.pop(0))
                result.matchups.append(
                    Matchup(
                        matchup_id=matchup_id,
                        week=week,
                        season=year,
                        teams=pair,
                        status=self.matchup_status_of(pair, snapshot),
                    )
                )
            result.bye_teams.extend(teams)

        # Rosters that never appear in the matchup list still need a Team
        for roster_id, roster in rosters.items():
            if roster_id not in seen:
                result.bye_teams.append(self._empty_team(roster, users))

        logger.debug(
            "Sleeper week %s: %d matchups, %d unpaired teams, %d errors",
            week,
            len(result.matchups),
            len(result.bye_teams),
            len(result.errors),
        )
        return result

    # ------------------------------------------------------------------ #
    # Team & player construction
    # ------------------------------------------------------------------ #
    def _build_team(
        self,
        entry: Mapping,
        roster: Mapping,
        users: Mapping,
        directory: Mapping,
        stats: Mapping,
        rules: ScoringRuleSet,
        slots: Sequence[str],
        snapshot: Optional[GameSnapshot],
    ) -> Team:
        # Starter order follows roster_positions; "0" marks an empty slot
        lineup = [str(pid) if pid else EMPTY_SLOT for pid in entry.get("starters") or []]
        starters = [pid for pid in lineup if pid != EMPTY_SLOT]
        starter_slots = {
            pid: slots[index] for index, pid in enumerate(lineup) if pid != EMPTY_SLOT and index < len(slots)
        }
        player_ids = [str(pid) for pid in entry.get("players") or roster.get("players") or []]
        for pid in starters:
            if pid not in player_ids:
                player_ids.append(pid)
        players_points = entry.get("players_points") or {}

        players: List[Player] = []
        for pid in player_ids:
            info = directory.get(pid)
            if info is None:
                logger.debug("Dropping unknown Sleeper player %s", pid)
                continue

            if pid in stats:
                points = score(stats[pid], rules)
            else:
                points = float(players_points.get(pid) or 0.0)

            is_starter = pid in starters
            team_code = self.normalizer.normalize(info.get("team"))
            espn_id = info.get("espn_id")
            players.append(
                Player(
                    player_id=pid,
                    first_name=info.get("first_name") or "",
                    last_name=info.get("last_name") or "",
                    position=info.get("position") or "",
                    team_code=team_code,
                    current_points=points,
                    is_starter=is_starter,
                    lineup_slot=starter_slots.get(pid, info.get("position")) if is_starter else "BN",
                    injury_status=info.get("injury_status"),
                    game_status=self.game_status_of(team_code, snapshot),
                    sleeper_id=pid,
                    espn_id=str(espn_id) if espn_id is not None else None,
                    source=self.source,
                )
            )

        if stats:
            current = sum(player.current_points for player in players if player.is_starter)
        elif entry.get("points") is not None:
            current = float(entry["points"])
        else:
            current = sum(player.current_points for player in players if player.is_starter)

        return replace(self._empty_team(roster, users), current_score=current, players=tuple(players))

    def _empty_team(self, roster: Mapping, users: Mapping) -> Team:
        roster_id = str(roster["roster_id"])
        owner_id = roster.get("owner_id")
        user = users.get(owner_id) or {}
        manager = user.get("display_name")
        team_name = ((user.get("metadata") or {}).get("team_name")
                     or (roster.get("metadata") or {}).get("team_name"))

        return Team(
            team_id=roster_id,
            name=resolve_display_name(roster_id, manager, team_name),
            owner_name=manager or "",
            record=self._record(roster),
            owner_id=str(owner_id) if owner_id else None,
        )

    @staticmethod
    def _record(roster: Mapping) -> Optional[TeamRecord]:
        settings = roster.get("settings") or {}
        if "wins" not in settings and "losses" not in settings:
            return None
        return TeamRecord(
            wins=int(settings.get("wins") or 0),
            losses=int(settings.get("losses") or 0),
            ties=int(settings.get("ties") or 0),
        )
