"""
League Tracker API
==================
A JSON service over every configured ESPN and Sleeper league:
- Live and projected scores per team
- Head-to-head matchups and bye teams
- Elimination rankings for chopped leagues
- Background refresh, faster on game days
"""

import logging
import threading
from datetime import datetime, timezone
from typing import Dict, Optional

from flask import Flask, abort, jsonify

from league_tracker import ScoreFetcher, Settings

logger = logging.getLogger(__name__)


class FantasyTracker:
    """Flask wrapper around the shared ScoreFetcher service."""

    def __init__(self, fetcher: Optional[ScoreFetcher] = None, start_updates: bool = True):
        self.app = Flask(__name__)
        self.fetcher = fetcher or ScoreFetcher()
        self.settings: Settings = self.fetcher.settings
        self.snapshot: Dict = {}
        self.last_update: Optional[datetime] = None
        self.current_week = self.fetcher.current_week
        self.api_error: Optional[str] = None
        self._lock = threading.Lock()
        self._stop = threading.Event()
        self._setup_routes()
        if start_updates:
            self._start_score_updates()

    # ------------------------------------------------------------------ #
    # Background refresh
    # ------------------------------------------------------------------ #
    def _start_score_updates(self):
        thread = threading.Thread(target=self._update_scores, daemon=True)
        thread.start()

    def _update_scores(self):
        consecutive_failures = 0

        while not self._stop.is_set():
            consecutive_failures = self.refresh_once(consecutive_failures)
            self._stop.wait(self._determine_sleep_interval(consecutive_failures))

    def refresh_once(self, consecutive_failures: int = 0) -> int:
        """Run one refresh and return the updated failure count."""
        try:
            snapshot = self.fetcher.build_snapshot()
        except Exception as exc:
            logger.exception("Score refresh failed: %s", exc)
            consecutive_failures += 1
            with self._lock:
                if consecutive_failures > 3:
                    self.api_error = f"Connection issues ({consecutive_failures} failures)."
                elif not self.api_error:
                    self.api_error = "Temporary issue fetching scores."
            return consecutive_failures

        if snapshot is None:
            return consecutive_failures

        with self._lock:
            self.snapshot = snapshot
            self.current_week = snapshot.get("week", self.current_week)
            self.api_error = snapshot.get("api_error")
            iso_timestamp = snapshot.get("last_update")
            self.last_update = datetime.fromisoformat(iso_timestamp) if iso_timestamp else datetime.now(timezone.utc)
        return 0

    def _determine_sleep_interval(self, failures: int) -> int:
        if failures > 0:
            return min(600, 60 * (2 ** min(failures, 4)))

        has_games_today = self.fetcher.has_games_today()
        now = datetime.now()
        is_prime_time = 12 <= now.hour <= 23

        if has_games_today and is_prime_time:
            return self.settings.refresh_interval
        if has_games_today:
            return 300
        return 600

    def stop(self):
        self._stop.set()
        self.fetcher.cancel()

    # ------------------------------------------------------------------ #
    # Routes
    # ------------------------------------------------------------------ #
    def _setup_routes(self):
        @self.app.route("/api/scores")
        def api_scores():
            with self._lock:
                return jsonify(
                    {
                        "leagues": self.snapshot.get("leagues", []),
                        "last_update": self.last_update.isoformat() if self.last_update else None,
                        "week": self.current_week,
                        "season": self.snapshot.get("season", self.settings.season),
                        "api_error": self.api_error,
                    }
                )

        @self.app.route("/api/leagues/<league_id>")
        def api_league(league_id):
            with self._lock:
                leagues = self.snapshot.get("leagues", [])
            for league in leagues:
                if str(league.get("league_id")) == league_id:
                    return jsonify(league)
            abort(404)

        @self.app.route("/health")
        def health():
            with self._lock:
                return jsonify(
                    {
                        "status": "ok" if self.last_update and not self.api_error else "degraded",
                        "last_update": self.last_update.isoformat() if self.last_update else None,
                        "leagues": len(self.snapshot.get("leagues", [])),
                    }
                )

    def run(self, host="0.0.0.0", port: Optional[int] = None, debug: bool = False):
        if port is None:
            port = self.settings.port
        self.app.run(host=host, port=port, debug=debug)


if __name__ == "__main__":
    settings = Settings.from_env()
    logging.basicConfig(level=settings.log_level, format="%(asctime)s - %(levelname)s - %(message)s")
    tracker = FantasyTracker(ScoreFetcher(settings))
    tracker.run()
