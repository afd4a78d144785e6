"""
Thin transport clients. They fetch raw provider payloads and nothing else;
every failure surfaces as ProviderError.
"""

import logging
import threading
import time
from typing import Any, Dict, List, Optional

import requests
from espn_api.football import League
from espn_api.requests.espn_requests import ESPNAccessDenied, ESPNInvalidLeague, ESPNUnknownError

from .errors import ProviderError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10
USER_AGENT = "League-Tracker/1.0"


class SleeperClient:
    BASE_URL = "https://api.sleeper.app/v1"
    PLAYER_DIRECTORY_SECONDS = 24 * 3600

    def __init__(self, session: Optional[requests.Session] = None, base_url: str = BASE_URL, timeout: int = DEFAULT_TIMEOUT):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({"User-Agent": USER_AGENT})
        self._players: Optional[Dict[str, Any]] = None
        self._players_loaded_at = 0.0
        self._players_lock = threading.Lock()

    def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        url = f"{self.base_url}/{path.lstrip('/')}"
        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
        except requests.RequestException as exc:
            raise ProviderError(f"GET {url} failed: {exc}") from exc

        if not response.ok:
            raise ProviderError(f"GET {url} failed: {response.status_code}", status_code=response.status_code)
        try:
            return response.json()
        except ValueError as exc:
            raise ProviderError(f"GET {url} returned invalid JSON") from exc

    def get_nfl_state(self) -> Dict[str, Any]:
        """Current NFL week, season and season type."""
        return self._get("/state/nfl")

    def get_league(self, league_id: str) -> Dict[str, Any]:
        return self._get(f"/league/{league_id}")

    def get_rosters(self, league_id: str) -> List[Dict[str, Any]]:
        return self._get(f"/league/{league_id}/rosters") or []

    def get_users(self, league_id: str) -> List[Dict[str, Any]]:
        return self._get(f"/league/{league_id}/users") or []

    def get_matchups(self, league_id: str, week: int) -> List[Dict[str, Any]]:
        return self._get(f"/league/{league_id}/matchups/{week}") or []

    def get_week_stats(self, season: int, week: int, season_type: str = "regular") -> Dict[str, Any]:
        return self._get(f"/stats/nfl/{season_type}/{season}/{week}") or {}

    def get_projections(self, season: int, week: int, season_type: str = "regular") -> Dict[str, Any]:
        return self._get(f"/projections/nfl/{season_type}/{season}/{week}") or {}

    def get_players(self) -> Dict[str, Any]:
        """The full player directory. It is several megabytes, so it is kept for a day."""
        with self._players_lock:
            fresh = time.monotonic() - self._players_loaded_at < self.PLAYER_DIRECTORY_SECONDS
            if self._players is not None and fresh:
                return self._players

            self._players = self._get("/players/nfl") or {}
            self._players_loaded_at = time.monotonic()
            logger.info("Loaded Sleeper player directory (%d players)", len(self._players))
            return self._players

    def espn_id_map(self) -> Dict[str, str]:
        """ESPN player id -> Sleeper player id, from the player directory."""
        mapping: Dict[str, str] = {}
        for sleeper_id, info in self.get_players().items():
            espn_id = (info or {}).get("espn_id")
            if espn_id is not None:
                mapping[str(espn_id)] = str(sleeper_id)
        return mapping


class EspnClient:
    """Reads raw league views through espn_api's request layer."""

    VIEWS = ["mTeam", "mRoster", "mMatchupScore", "mSettings"]

    def __init__(self, league_id: int, year: int, espn_s2: Optional[str] = None, swid: Optional[str] = None):
        self.league_id = int(league_id)
        self.year = year
        self.espn_s2 = espn_s2
        self.swid = swid
        self._league: Optional[League] = None

    def _connect(self) -> League:
        if self._league is None:
            self._league = League(
                league_id=self.league_id,
                year=self.year,
                espn_s2=self.espn_s2,
                swid=self.swid,
                fetch_league=False,
            )
        return self._league

    def fetch_league(self, week: int) -> Dict[str, Any]:
        try:
            league = self._connect()
            return league.espn_request.league_get(params={"view": self.VIEWS, "scoringPeriodId": week})
        except ESPNAccessDenied as exc:
            raise ProviderError(f"ESPN league {self.league_id} denied access. Check ESPN_S2/ESPN_SWID.", 401) from exc
        except ESPNInvalidLeague as exc:
            raise ProviderError(f"ESPN league {self.league_id} does not exist", 404) from exc
        except (ESPNUnknownError, requests.RequestException) as exc:
            raise ProviderError(f"ESPN league {self.league_id} request failed: {exc}") from exc


class ScoreboardClient:
    SCOREBOARD_URL = "https://site.api.espn.com/apis/site/v2/sports/football/nfl/scoreboard"

    def __init__(self, url: str = SCOREBOARD_URL, timeout: int = DEFAULT_TIMEOUT):
        self.url = url
        self.timeout = timeout

    def fetch(self, week: Optional[int] = None) -> Dict[str, Any]:
        params = {"week": week} if week else None
        try:
            response = requests.get(self.url, params=params, timeout=self.timeout)
            response.raise_for_status()
            return response.json()
        except requests.HTTPError as exc:
            raise ProviderError(f"NFL scoreboard request failed: {exc}", exc.response.status_code) from exc
        except (requests.RequestException, ValueError) as exc:
            raise ProviderError(f"NFL scoreboard request failed: {exc}") from exc

    @staticmethod
    def current_week(payload: Dict[str, Any]) -> Optional[int]:
        week = (payload.get("week") or {}).get("number")
        return week if isinstance(week, int) else None

    @staticmethod
    def season(payload: Dict[str, Any]) -> Optional[int]:
        year = (payload.get("season") or {}).get("year")
        return year if isinstance(year, int) else None
