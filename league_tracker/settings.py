import logging
import os
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Mapping, Optional

from dotenv import load_dotenv

from .errors import ConfigurationError
from .models import LeagueSource

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LeagueConfig:
    source: LeagueSource
    league_id: str
    elimination: bool = False

    @classmethod
    def parse(cls, entry: str) -> "LeagueConfig":
        """Parse ``source:league_id`` with an optional ``:elimination`` suffix."""
        parts = [part.strip() for part in entry.split(":") if part.strip()]
        if len(parts) < 2:
            raise ConfigurationError(f"League entry {entry!r} must look like 'sleeper:123' or 'espn:456'")
        try:
            source = LeagueSource(parts[0].lower())
        except ValueError:
            raise ConfigurationError(f"Unknown league source {parts[0]!r} in {entry!r}")
        flags = {part.lower() for part in parts[2:]}
        unknown = flags - {"elimination"}
        if unknown:
            raise ConfigurationError(f"Unknown league options {sorted(unknown)} in {entry!r}")
        return cls(source=source, league_id=parts[1], elimination="elimination" in flags)


def resolve_target_year(configured: Optional[str] = None, today: Optional[datetime] = None) -> int:
    if configured:
        try:
            return int(configured)
        except ValueError:
            logger.warning("Ignoring non-numeric season %r", configured)

    today = today or datetime.now()
    if today.month >= 7:
        return today.year
    return today.year - 1


def _int_env(env: Mapping[str, str], name: str, default: Optional[int]) -> Optional[int]:
    raw = env.get(name)
    if raw in (None, ""):
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}")


@dataclass(frozen=True)
class Settings:
    leagues: List[LeagueConfig] = field(default_factory=list)
    espn_s2: Optional[str] = None
    espn_swid: Optional[str] = None
    season: int = 0
    week: Optional[int] = None
    scoring_format: str = "ppr"
    projection_cache_seconds: int = 3600
    refresh_interval: int = 90
    port: int = 5000
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "Settings":
        """Build settings from the environment, loading ``.env`` first when reading os.environ."""
        if env is None:
            load_dotenv()
            env = os.environ

        leagues = [LeagueConfig.parse(item) for item in (env.get("TRACKER_LEAGUES") or "").split(",") if item.strip()]
        if not leagues:
            # Older single-league setups only set ESPN_LEAGUE_ID
            espn_league = env.get("ESPN_LEAGUE_ID")
            if espn_league:
                leagues = [LeagueConfig(LeagueSource.ESPN, espn_league)]

        if any(league.source == LeagueSource.ESPN for league in leagues) and not (
            env.get("ESPN_S2") and env.get("ESPN_SWID")
        ):
            logger.warning("ESPN leagues configured without ESPN_S2/ESPN_SWID; private leagues will fail")

        return cls(
            leagues=leagues,
            espn_s2=env.get("ESPN_S2"),
            espn_swid=env.get("ESPN_SWID"),
            season=resolve_target_year(env.get("TRACKER_SEASON") or env.get("ESPN_YEAR")),
            week=_int_env(env, "TRACKER_WEEK", None),
            scoring_format=(env.get("SCORING_FORMAT") or "ppr").lower(),
            projection_cache_seconds=_int_env(env, "PROJECTION_CACHE_SECONDS", 3600),
            refresh_interval=_int_env(env, "REFRESH_INTERVAL", 90),
            port=_int_env(env, "PORT", 5000),
            log_level=(env.get("LOG_LEVEL") or "INFO").upper(),
        )
