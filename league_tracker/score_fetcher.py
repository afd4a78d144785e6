import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import asdict, dataclass, field, replace
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, List, Mapping, Optional, Tuple

from .adapters import AdapterResult, get_adapter
from .clients import EspnClient, ScoreboardClient, SleeperClient
from .elimination import EliminationRankingEngine
from .errors import ProviderError, TrackerError
from .game_status import ACTIVE_STATUSES, GameSnapshot, GameStatusResolver, snapshot_from_scoreboard
from .models import EliminationEvent, LeagueSource, Matchup, Team, WeekSummary
from .projections import ProjectionCache, ProjectionService, SleeperProjectionProvider
from .settings import LeagueConfig, Settings
from .team_codes import TeamCodeNormalizer

logger = logging.getLogger(__name__)


@dataclass
class TeamScore:
    team_id: str
    team_name: str
    owner_name: str
    live_score: float
    projected_score: Optional[float]
    currently_playing: List[str]
    yet_to_play: List[str]
    finished_playing: List[str]
    players_remaining_count: int
    total_starters: int
    record: Optional[str] = None
    rank: Optional[int] = None
    projected_rank: Optional[int] = None

    def as_dict(self) -> Dict:
        return asdict(self)


@dataclass
class LeagueReport:
    config: LeagueConfig
    week: int
    season: int
    name: str = ""
    elimination: bool = False
    result: AdapterResult = field(default_factory=AdapterResult)
    scores: List[TeamScore] = field(default_factory=list)
    summary: Optional[WeekSummary] = None
    api_error: Optional[str] = None

    def as_dict(self) -> Dict:
        return {
            "league_id": self.config.league_id,
            "source": self.config.source.value,
            "name": self.name,
            "week": self.week,
            "season": self.season,
            "elimination": self.elimination,
            "scores": [score.as_dict() for score in self.scores],
            "matchups": [matchup.as_dict() for matchup in self.result.matchups],
            "bye_teams": [team.as_dict() for team in self.result.bye_teams],
            "team_records": {
                team_id: record.as_dict() if record else None
                for team_id, record in self.result.team_records.items()
            },
            "summary": self.summary.as_dict() if self.summary else None,
            "errors": list(self.result.errors),
            "api_error": self.api_error,
        }


class ScoreFetcher:
    """Shared service that pulls every configured league and prepares its standings."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        sleeper: Optional[SleeperClient] = None,
        scoreboard: Optional[ScoreboardClient] = None,
        espn_factory: Optional[Callable[[str, int], EspnClient]] = None,
        normalizer: Optional[TeamCodeNormalizer] = None,
        projections: Optional[ProjectionService] = None,
        engine: Optional[EliminationRankingEngine] = None,
        max_workers: int = 4,
    ):
        self.settings = settings or Settings.from_env()
        self.sleeper = sleeper or SleeperClient()
        self.scoreboard = scoreboard or ScoreboardClient()
        self.espn_factory = espn_factory or self._default_espn_client
        self.normalizer = normalizer or TeamCodeNormalizer()
        self.resolver = GameStatusResolver(self.normalizer)
        self.projections = projections or ProjectionService(
            provider=SleeperProjectionProvider(self.sleeper, ttl_seconds=self.settings.projection_cache_seconds),
            cache=ProjectionCache(ttl_seconds=self.settings.projection_cache_seconds),
            scoring_format=self.settings.scoring_format,
        )
        self.engine = engine or EliminationRankingEngine()
        self.max_workers = max_workers

        self.current_week: int = self.settings.week or 1
        self.season: int = self.settings.season
        self.api_error: Optional[str] = None
        self._scoreboard_payload: Optional[Dict] = None
        self._espn_clients: Dict[Tuple[str, int], EspnClient] = {}
        self._summaries: Dict[Tuple[LeagueSource, str], WeekSummary] = {}
        self._summary_lock = threading.Lock()
        self._cancelled = threading.Event()

    # ------------------------------------------------------------------ #
    # Public API
    # ------------------------------------------------------------------ #
    def build_snapshot(self) -> Optional[Dict]:
        """Return the latest league reports plus metadata, or None once cancelled."""
        if self._cancelled.is_set():
            return None

        game_snapshot = self._refresh_scoreboard()
        self.current_week = self._resolve_week()
        self.projections.set_week(self.current_week, self.season)

        leagues = self.settings.leagues
        workers = max(1, min(self.max_workers, len(leagues)))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = [
                executor.submit(self.refresh_league, config, self.current_week, self.season, game_snapshot)
                for config in leagues
            ]
            reports = [future.result() for future in futures]

        if self._cancelled.is_set():
            logger.info("Refresh cancelled; discarding %d league reports", len(reports))
            return None

        failed = [report for report in reports if report.api_error]
        self.api_error = f"{len(failed)} of {len(reports)} leagues failed to load" if failed else None

        return {
            "leagues": [report.as_dict() for report in reports],
            "last_update": datetime.now(timezone.utc).isoformat(),
            "week": self.current_week,
            "season": self.season,
            "api_error": self.api_error,
        }

    def cancel(self):
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def refresh_league(
        self, config: LeagueConfig, week: int, season: int, game_snapshot: Optional[GameSnapshot] = None
    ) -> LeagueReport:
        report = LeagueReport(config=config, week=week, season=season)
        try:
            if config.source == LeagueSource.SLEEPER:
                payload = self._fetch_sleeper(config.league_id, week, season)
                report.name = (payload.get("league") or {}).get("name") or ""
                adapter = get_adapter(config.source, self.normalizer, self.resolver)
            else:
                payload = self._espn_client(config.league_id, season).fetch_league(week)
                report.name = ((payload.get("settings") or {}).get("name")) or ""
                adapter = get_adapter(
                    config.source, self.normalizer, self.resolver, sleeper_ids=self._espn_sleeper_ids()
                )
        except TrackerError as exc:
            logger.warning("Failed to load %s league %s: %s", config.source.value, config.league_id, exc)
            report.api_error = str(exc)
            return report

        if self._cancelled.is_set():
            return report

        result = adapter.adapt(payload, week, season, game_snapshot)
        report.result = self._project(result)
        report.elimination = config.elimination or adapter.is_elimination_league(payload)
        report.scores = self._team_scores(report.result.teams, game_snapshot or {})
        if report.elimination:
            key = (config.source, config.league_id)
            report.summary = self.engine.rank(
                report.result.teams, week, league_id=config.league_id, history=self._elimination_history(key, week)
            )
            with self._summary_lock:
                self._summaries[key] = report.summary
        return report

    def _elimination_history(self, key: Tuple[LeagueSource, str], week: int) -> Tuple[EliminationEvent, ...]:
        """History from the league's last summary; once the week moves on, its zone is eliminated."""
        with self._summary_lock:
            previous = self._summaries.get(key)
        if previous is None or previous.week > week:
            return ()
        if previous.week < week:
            return previous.elimination_history + self.engine.record_eliminations(previous)
        return previous.elimination_history

    # ------------------------------------------------------------------ #
    # Provider fetches
    # ------------------------------------------------------------------ #
    def _fetch_sleeper(self, league_id: str, week: int, season: int) -> Dict:
        """Fetch every Sleeper sub-resource for one league in parallel."""
        with ThreadPoolExecutor(max_workers=5) as executor:
            league = executor.submit(self.sleeper.get_league, league_id)
            rosters = executor.submit(self.sleeper.get_rosters, league_id)
            users = executor.submit(self.sleeper.get_users, league_id)
            matchups = executor.submit(self.sleeper.get_matchups, league_id, week)
            players = executor.submit(self.sleeper.get_players)
            stats = executor.submit(self.sleeper.get_week_stats, season, week)

            payload = {
                "league": league.result(),
                "rosters": rosters.result(),
                "users": users.result(),
                "matchups": matchups.result(),
                "players": players.result(),
            }
            try:
                payload["stats"] = stats.result()
            except ProviderError as exc:
                logger.warning("Weekly stats unavailable for week %s, using matchup points: %s", week, exc)
                payload["stats"] = {}
        return payload

    def _default_espn_client(self, league_id: str, season: int) -> EspnClient:
        return EspnClient(league_id, season, espn_s2=self.settings.espn_s2, swid=self.settings.espn_swid)

    def _espn_client(self, league_id: str, season: int) -> EspnClient:
        key = (league_id, season)
        if key not in self._espn_clients:
            self._espn_clients[key] = self.espn_factory(league_id, season)
        return self._espn_clients[key]

    def _espn_sleeper_ids(self) -> Mapping[str, str]:
        try:
            return self.sleeper.espn_id_map()
        except ProviderError as exc:
            logger.warning("Sleeper player directory unavailable; ESPN players keep ESPN projections: %s", exc)
            return {}

    # ------------------------------------------------------------------ #
    # Week & game data
    # ------------------------------------------------------------------ #
    def _refresh_scoreboard(self) -> Optional[GameSnapshot]:
        try:
            self._scoreboard_payload = self.scoreboard.fetch()
        except ProviderError as exc:
            logger.warning("Unable to fetch NFL scoreboard: %s", exc)
            self._scoreboard_payload = None
            return None
        return snapshot_from_scoreboard(self._scoreboard_payload, self.normalizer)

    def _resolve_week(self) -> int:
        if self.settings.week:
            return self.settings.week

        if self._scoreboard_payload:
            week = ScoreboardClient.current_week(self._scoreboard_payload)
            if week:
                return week

        try:
            state = self.sleeper.get_nfl_state()
            week = state.get("week") or state.get("display_week")
            if isinstance(week, int) and week > 0:
                return week
        except ProviderError as exc:
            logger.warning("Falling back for current week: %s", exc)

        return self.current_week

    # ------------------------------------------------------------------ #
    # Projection & standings
    # ------------------------------------------------------------------ #
    def _project(self, result: AdapterResult) -> AdapterResult:
        matchups: List[Matchup] = [
            replace(matchup, teams=tuple(self.projections.project_team(team) for team in matchup.teams))
            for matchup in result.matchups
        ]
        bye_teams = [self.projections.project_team(team) for team in result.bye_teams]
        return replace(result, matchups=matchups, bye_teams=bye_teams)

    def _team_scores(self, teams: List[Team], game_snapshot: GameSnapshot) -> List[TeamScore]:
        scores: List[TeamScore] = []
        for team in teams:
            buckets = self.resolver.bucket_starters(team, game_snapshot)
            scores.append(
                TeamScore(
                    team_id=team.team_id,
                    team_name=team.name,
                    owner_name=team.owner_name,
                    live_score=round(team.current_score, 2),
                    projected_score=round(team.projected_score, 2) if team.projected_score is not None else None,
                    currently_playing=buckets["currently_playing"],
                    yet_to_play=buckets["yet_to_play"],
                    finished_playing=buckets["finished_playing"],
                    players_remaining_count=self.resolver.count_yet_to_play(team.players, game_snapshot),
                    total_starters=len(team.starters),
                    record=team.record.display if team.record else None,
                )
            )

        scores.sort(key=lambda score: score.live_score, reverse=True)
        for idx, score in enumerate(scores):
            score.rank = idx + 1

        projected_sorted = sorted(scores, key=lambda score: score.projected_score or 0.0, reverse=True)
        for idx, score in enumerate(projected_sorted):
            score.projected_rank = idx + 1
        return scores

    # ------------------------------------------------------------------ #
    # Game-day cadence helpers
    # ------------------------------------------------------------------ #
    def has_games_today(self, now: Optional[datetime] = None) -> bool:
        """True when a game is scheduled today or last night's game is still going."""
        if self._scoreboard_payload is None:
            return True

        now = now or datetime.now(timezone.utc)
        today = now.date()
        for game in self._scoreboard_payload.get("events", []) or []:
            game_date_str = game.get("date", "")
            if not game_date_str:
                continue

            game_date = datetime.fromisoformat(game_date_str.replace("Z", "+00:00")).date()
            if game_date == today:
                return True

            if game_date == today - timedelta(days=1):
                status_type = (game.get("status") or {}).get("type", {}) or {}
                name = (status_type.get("name") or "").lower()
                state = (status_type.get("state") or "").lower()
                if name in ACTIVE_STATUSES or state in ACTIVE_STATUSES:
                    return True

        return False
