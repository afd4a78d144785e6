"""
Weekly ranking for "last place is eliminated" leagues.

Every active team is ranked by its week score. The bottom one team (two in
leagues of eighteen or more) forms the elimination zone. Teams that can no
longer field a lineup have already been eliminated and are reported in the
history instead of the rankings.
"""

import logging
from typing import Iterable, List, Sequence, Tuple

from .models import EliminationEvent, EliminationStatus, Team, TeamRanking, WeekSummary

logger = logging.getLogger(__name__)

LARGE_LEAGUE_SIZE = 18


def elimination_count(team_count: int) -> int:
    return 2 if team_count >= LARGE_LEAGUE_SIZE else 1


def is_fieldable(team: Team) -> bool:
    return bool(team.owner_id) and bool(team.players) and bool(team.starters)


def _clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(high, value))


class EliminationRankingEngine:
    """Builds a WeekSummary from a flat pool of teams."""

    def rank(
        self,
        teams: Iterable[Team],
        week: int,
        league_id: str = "",
        history: Sequence[EliminationEvent] = (),
    ) -> WeekSummary:
        # A team with a recorded elimination stays out even if its roster is intact
        eliminated_ids = {event.ranking.team.team_id for event in history}
        active: List[Team] = []
        graveyard: List[Team] = []
        for team in teams:
            if team.team_id in eliminated_ids or not is_fieldable(team):
                graveyard.append(team)
            else:
                active.append(team)

        # sorted() is stable, so tied scores keep provider order
        ordered = sorted(active, key=lambda team: team.current_score, reverse=True)
        total = len(ordered)
        count = elimination_count(total)
        zone_start = max(total - count, 0)
        scores = [team.current_score for team in ordered]
        cutoff = scores[-1] if scores else 0.0

        rankings: List[TeamRanking] = []
        for index, team in enumerate(ordered):
            rank = index + 1
            in_zone = index >= zone_start
            if in_zone:
                margin = team.current_score - scores[index - 1] if index > 0 else 0.0
                survival = 0.0
            else:
                margin = team.current_score - cutoff
                survival = _clamp((total - rank) / total)

            rankings.append(
                TeamRanking(
                    team=team,
                    rank=rank,
                    weekly_points=team.current_score,
                    status=self._status(rank, total, in_zone),
                    survival_probability=survival,
                    safety_margin=margin,
                    weeks_alive=week,
                )
            )

        events = self._history(history, graveyard, week, total)
        eliminated = tuple(rankings[zone_start:])

        summary = WeekSummary(
            league_id=league_id,
            week=week,
            rankings=tuple(rankings),
            eliminated_this_week=eliminated,
            cutoff_score=cutoff,
            average_score=sum(scores) / total if total else 0.0,
            highest_score=scores[0] if scores else 0.0,
            lowest_score=cutoff,
            elimination_history=events,
            total_survivors=total,
        )
        logger.debug(
            "Ranked %d active teams for week %s (%d in zone, %d in history)",
            total,
            week,
            len(eliminated),
            len(events),
        )
        return summary

    @staticmethod
    def _status(rank: int, total: int, in_zone: bool) -> EliminationStatus:
        if rank == 1:
            return EliminationStatus.CHAMPION
        if in_zone:
            return EliminationStatus.CRITICAL
        if rank > total * 0.75:
            return EliminationStatus.DANGER
        if rank > total * 0.5:
            return EliminationStatus.WARNING
        return EliminationStatus.SAFE

    # ------------------------------------------------------------------ #
    # Elimination history
    # ------------------------------------------------------------------ #
    def _history(
        self,
        history: Sequence[EliminationEvent],
        graveyard: Sequence[Team],
        week: int,
        total: int,
    ) -> Tuple[EliminationEvent, ...]:
        events = list(history)
        recorded = {event.ranking.team.team_id for event in events}

        prior_week = max(week - 1, 0)
        for offset, team in enumerate(graveyard):
            if team.team_id in recorded:
                continue
            ranking = TeamRanking(
                team=team,
                rank=total + offset + 1,
                weekly_points=team.current_score,
                status=EliminationStatus.ELIMINATED,
                survival_probability=0.0,
                safety_margin=0.0,
                weeks_alive=prior_week,
                is_eliminated=True,
            )
            events.append(
                EliminationEvent(
                    week=prior_week,
                    ranking=ranking,
                    elimination_score=team.current_score,
                    margin=0.0,
                    narrative=f"{team.name} was left with no players to field and is out of the league.",
                )
            )
            recorded.add(team.team_id)

        return tuple(events)

    def record_eliminations(self, summary: WeekSummary) -> Tuple[EliminationEvent, ...]:
        """Turn this week's zone into history events once the week is final."""
        events = []
        for ranking in summary.eliminated_this_week:
            eliminated = TeamRanking(
                team=ranking.team,
                rank=ranking.rank,
                weekly_points=ranking.weekly_points,
                status=EliminationStatus.ELIMINATED,
                survival_probability=0.0,
                safety_margin=ranking.safety_margin,
                weeks_alive=ranking.weeks_alive,
                is_eliminated=True,
            )
            events.append(
                EliminationEvent(
                    week=summary.week,
                    ranking=eliminated,
                    elimination_score=ranking.weekly_points,
                    margin=ranking.safety_margin,
                    narrative=(
                        f"{ranking.team.name} was chopped in week {summary.week} with "
                        f"{ranking.weekly_points:.2f} points, {abs(ranking.safety_margin):.2f} short of safety."
                    ),
                )
            )
        return tuple(events)
