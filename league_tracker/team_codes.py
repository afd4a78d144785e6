"""
NFL team code normalization.

ESPN and Sleeper disagree on a handful of abbreviations (WSH/WAS, JAC/JAX)
and older payloads still carry relocated franchises (OAK, SD, STL). Every
component compares teams through one canonical code.
"""

from typing import Dict, List, Mapping, Optional


CANONICAL_TEAM_CODES: Dict[str, str] = {
    # AFC East
    "BUF": "BUF",
    "MIA": "MIA",
    "NE": "NE",
    "NEP": "NE",
    "NYJ": "NYJ",
    # AFC North
    "BAL": "BAL",
    "CIN": "CIN",
    "CLE": "CLE",
    "PIT": "PIT",
    # AFC South
    "HOU": "HOU",
    "IND": "IND",
    "JAX": "JAX",
    "JAC": "JAX",
    "TEN": "TEN",
    # AFC West
    "DEN": "DEN",
    "KC": "KC",
    "LV": "LV",
    "LVR": "LV",
    "OAK": "LV",
    "LAC": "LAC",
    "SD": "LAC",
    # NFC East
    "DAL": "DAL",
    "NYG": "NYG",
    "PHI": "PHI",
    "WAS": "WAS",
    "WSH": "WAS",
    # NFC North
    "CHI": "CHI",
    "DET": "DET",
    "GB": "GB",
    "MIN": "MIN",
    # NFC South
    "ATL": "ATL",
    "CAR": "CAR",
    "NO": "NO",
    "TB": "TB",
    # NFC West
    "ARI": "ARI",
    "LAR": "LAR",
    "STL": "LAR",
    "SEA": "SEA",
    "SF": "SF",
}

TEAM_NAMES: Dict[str, str] = {
    "BUF": "Buffalo Bills",
    "MIA": "Miami Dolphins",
    "NE": "New England Patriots",
    "NYJ": "New York Jets",
    "BAL": "Baltimore Ravens",
    "CIN": "Cincinnati Bengals",
    "CLE": "Cleveland Browns",
    "PIT": "Pittsburgh Steelers",
    "HOU": "Houston Texans",
    "IND": "Indianapolis Colts",
    "JAX": "Jacksonville Jaguars",
    "TEN": "Tennessee Titans",
    "DEN": "Denver Broncos",
    "KC": "Kansas City Chiefs",
    "LV": "Las Vegas Raiders",
    "LAC": "Los Angeles Chargers",
    "DAL": "Dallas Cowboys",
    "NYG": "New York Giants",
    "PHI": "Philadelphia Eagles",
    "WAS": "Washington Commanders",
    "CHI": "Chicago Bears",
    "DET": "Detroit Lions",
    "GB": "Green Bay Packers",
    "MIN": "Minnesota Vikings",
    "ATL": "Atlanta Falcons",
    "CAR": "Carolina Panthers",
    "NO": "New Orleans Saints",
    "TB": "Tampa Bay Buccaneers",
    "ARI": "Arizona Cardinals",
    "LAR": "Los Angeles Rams",
    "SEA": "Seattle Seahawks",
    "SF": "San Francisco 49ers",
}


class TeamCodeNormalizer:
    """Maps provider team abbreviations onto one canonical code.

    Built once at startup and handed to every component that compares teams.
    Lookups never fail: unknown codes come back uppercased and unchanged.
    """

    def __init__(self, aliases: Optional[Mapping[str, str]] = None):
        table = CANONICAL_TEAM_CODES if aliases is None else aliases
        self._aliases: Dict[str, str] = {key.upper(): value.upper() for key, value in table.items()}

    def normalize(self, code: Optional[str]) -> Optional[str]:
        if code is None:
            return None
        cleaned = code.strip().upper()
        if not cleaned:
            return None
        return self._aliases.get(cleaned, cleaned)

    def aliases_of(self, code: str) -> List[str]:
        """Return the canonical code followed by every alias that maps onto it."""
        canonical = self.normalize(code) or code.upper()
        others = sorted(
            alias for alias, target in self._aliases.items() if target == canonical and alias != canonical
        )
        return [canonical] + others

    def are_equivalent(self, first: Optional[str], second: Optional[str]) -> bool:
        canonical = self.normalize(first)
        return canonical is not None and canonical == self.normalize(second)

    def display_name(self, code: Optional[str]) -> Optional[str]:
        return TEAM_NAMES.get(self.normalize(code) or "")
