"""Shared fixtures: provider payloads and model factories."""

import copy

import pytest

from league_tracker.game_status import GameStatusResolver, snapshot_from_scoreboard
from league_tracker.models import Player, Team
from league_tracker.team_codes import TeamCodeNormalizer

WEEK = 5
SEASON = 2025


def _espn_entry(player_id, first, last, position_id, pro_team_id, slot_id, stats):
    return {
        "playerId": player_id,
        "lineupSlotId": slot_id,
        "playerPoolEntry": {
            "player": {
                "id": player_id,
                "firstName": first,
                "lastName": last,
                "defaultPositionId": position_id,
                "proTeamId": pro_team_id,
                "injuryStatus": "ACTIVE",
                "stats": stats,
            }
        },
    }


ESPN_PAYLOAD = {
    "settings": {"name": "Office League"},
    "members": [
        {"id": "{OWNER-1}", "firstName": "Alex", "lastName": "Rivera", "displayName": "arivera"},
        {"id": "{OWNER-2}", "firstName": "", "lastName": "", "displayName": "Jordan Blake"},
        {"id": "{OWNER-3}", "firstName": "Sam", "lastName": "", "displayName": "sam"},
    ],
    "teams": [
        {
            "id": 1,
            "name": "Gridiron Giants",
            "owners": ["{OWNER-1}"],
            "record": {"overall": {"wins": 3, "losses": 1, "ties": 0}},
            "roster": {
                "entries": [
                    _espn_entry(
                        3918298, "Josh", "Allen", 1, 2, 0,
                        [
                            {"scoringPeriodId": 5, "statSourceId": 0, "appliedTotal": 24.5},
                            {"scoringPeriodId": 5, "statSourceId": 1, "appliedTotal": 21.0},
                            {"scoringPeriodId": 4, "statSourceId": 0, "appliedTotal": 30.0},
                        ],
                    ),
                    _espn_entry(
                        4361579, "Brian", "Robinson", 2, 28, 2,
                        [{"scoringPeriodId": 5, "statSourceId": 1, "appliedTotal": 11.2}],
                    ),
                    _espn_entry(
                        -16012, "Chiefs", "D/ST", 16, 12, 16,
                        [{"scoringPeriodId": 5, "statSourceId": 0, "appliedTotal": 8.0}],
                    ),
                    _espn_entry(
                        4360438, "Brian", "Thomas", 3, 30, 20,
                        [{"scoringPeriodId": 5, "statSourceId": 0, "appliedTotal": 15.0}],
                    ),
                ]
            },
        },
        {
            "id": 2,
            "name": "Team 2",
            "owners": ["{OWNER-2}"],
            "roster": {
                "entries": [
                    _espn_entry(
                        3139477, "Patrick", "Mahomes", 1, 12, 0,
                        [{"scoringPeriodId": 5, "statSourceId": 0, "appliedTotal": 18.0}],
                    ),
                ]
            },
        },
        {
            "id": 3,
            "location": "Bay",
            "nickname": "Bombers",
            "owners": ["{OWNER-3}"],
            "record": {"overall": {"wins": 2, "losses": 2, "ties": 0}},
            "roster": {
                "entries": [
                    _espn_entry(15847, "Free", "Agent", 4, 0, 6, []),
                ]
            },
        },
    ],
    "schedule": [
        {"id": 10, "matchupPeriodId": 5, "home": {"teamId": 1}, "away": {"teamId": 2}},
        {"id": 11, "matchupPeriodId": 5, "home": {"teamId": 3}},
        {"id": 12, "matchupPeriodId": 6, "home": {"teamId": 1}, "away": {"teamId": 3}},
    ],
}


SLEEPER_PAYLOAD = {
    "league": {
        "league_id": "L1",
        "name": "Chop Shop",
        "settings": {"type": 0},
        "scoring_settings": {"rec": 0.5, "rush_yd": 0.1, "rush_td": 6, "pass_yd": 0.04, "pass_td": 4},
        "roster_positions": ["QB", "RB", "FLEX", "DEF", "BN", "BN"],
    },
    "users": [
        {"user_id": "u1", "display_name": "Casey", "metadata": {"team_name": "Casey's Crushers"}},
        {"user_id": "u2", "display_name": "dana_the_great", "metadata": {}},
        {"user_id": "u3", "display_name": "Eli", "metadata": {}},
    ],
    "rosters": [
        {"roster_id": 1, "owner_id": "u1", "settings": {"wins": 4, "losses": 1, "ties": 0}},
        {"roster_id": 2, "owner_id": "u2", "settings": {"wins": 2, "losses": 3}},
        {"roster_id": 3, "owner_id": "u3", "settings": {}},
        {"roster_id": 4, "owner_id": None, "settings": {}},
    ],
    "matchups": [
        {
            "roster_id": 1,
            "matchup_id": 1,
            "starters": ["4984", "6794", "0", "KC"],
            "players": ["4984", "6794", "KC", "9999", "7777"],
            "points": 39.0,
            "players_points": {"4984": 20.0, "6794": 10.0, "KC": 6.0, "7777": 3.0},
        },
        {
            "roster_id": 2,
            "matchup_id": 1,
            "starters": ["4046"],
            "players": ["4046"],
            "points": 12.0,
            "players_points": {"4046": 12.0},
        },
        {
            "roster_id": 3,
            "matchup_id": 2,
            "starters": ["2133"],
            "players": ["2133"],
            "points": 0.0,
            "players_points": {},
        },
    ],
    "players": {
        "4984": {"first_name": "Josh", "last_name": "Allen", "position": "QB", "team": "BUF", "espn_id": 3918298},
        "6794": {"first_name": "Justin", "last_name": "Jefferson", "position": "WR", "team": "MIN"},
        "KC": {"first_name": "Kansas City", "last_name": "Chiefs", "position": "DEF", "team": "KC"},
        "7777": {"first_name": "Bench", "last_name": "Receiver", "position": "WR", "team": "JAC"},
        "4046": {"first_name": "Jalen", "last_name": "Hurts", "position": "QB", "team": "PHI", "injury_status": "Questionable"},
        "2133": {"first_name": "Davante", "last_name": "Adams", "position": "WR", "team": "LAR"},
    },
    "stats": {},
}


SCOREBOARD_PAYLOAD = {
    "week": {"number": 5},
    "season": {"year": 2025},
    "events": [
        {
            "date": "2025-10-05T17:00Z",
            "status": {
                "displayClock": "7:32",
                "period": 3,
                "type": {"name": "STATUS_IN_PROGRESS", "state": "in", "completed": False},
            },
            "competitions": [
                {
                    "competitors": [
                        {"team": {"abbreviation": "BUF"}, "score": "21"},
                        {"team": {"abbreviation": "WSH"}, "score": "14"},
                    ]
                }
            ],
        },
        {
            "date": "2025-10-05T17:00Z",
            "status": {
                "displayClock": "0:00",
                "period": 4,
                "type": {"name": "STATUS_FINAL", "state": "post", "completed": True},
            },
            "competitions": [
                {
                    "competitors": [
                        {"team": {"abbreviation": "KC"}, "score": "27"},
                        {"team": {"abbreviation": "JAX"}, "score": "20"},
                    ]
                }
            ],
        },
        {
            "date": "2025-10-05T20:25Z",
            "status": {
                "displayClock": "0:00",
                "period": 0,
                "type": {"name": "STATUS_SCHEDULED", "state": "pre", "completed": False},
            },
            "competitions": [
                {
                    "competitors": [
                        {"team": {"abbreviation": "MIN"}, "score": "0"},
                        {"team": {"abbreviation": "PHI"}, "score": "0"},
                    ]
                }
            ],
        },
    ],
}


@pytest.fixture
def normalizer():
    return TeamCodeNormalizer()


@pytest.fixture
def resolver(normalizer):
    return GameStatusResolver(normalizer)


@pytest.fixture
def espn_payload():
    return copy.deepcopy(ESPN_PAYLOAD)


@pytest.fixture
def sleeper_payload():
    return copy.deepcopy(SLEEPER_PAYLOAD)


@pytest.fixture
def scoreboard_payload():
    return copy.deepcopy(SCOREBOARD_PAYLOAD)


@pytest.fixture
def game_snapshot(scoreboard_payload, normalizer):
    """BUF and WAS live, KC and JAX final, MIN and PHI not started."""
    return snapshot_from_scoreboard(scoreboard_payload, normalizer)


@pytest.fixture
def make_player():
    def _make(player_id="p1", position="WR", current_points=0.0, is_starter=True, **kwargs):
        return Player(
            player_id=player_id,
            first_name=kwargs.pop("first_name", "Test"),
            last_name=kwargs.pop("last_name", player_id),
            position=position,
            current_points=current_points,
            is_starter=is_starter,
            **kwargs,
        )

    return _make


@pytest.fixture
def make_team(make_player):
    def _make(team_id, score, owner_id="owner", players=None, **kwargs):
        if players is None:
            players = (make_player(f"{team_id}-qb", "QB", current_points=score),)
        return Team(
            team_id=str(team_id),
            name=kwargs.pop("name", f"Squad {team_id}"),
            owner_name=kwargs.pop("owner_name", "Owner"),
            current_score=score,
            players=tuple(players),
            owner_id=owner_id,
            **kwargs,
        )

    return _make
