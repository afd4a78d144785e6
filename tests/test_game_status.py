from datetime import date, datetime

import pytest

from league_tracker.game_status import GameInfo, snapshot_from_scoreboard
from league_tracker.models import GameStatusCategory, MatchupStatus, Team

TODAY = date(2025, 10, 5)


@pytest.mark.unit
class TestSnapshotFromScoreboard:
    def test_keys_are_canonical_codes(self, game_snapshot):
        assert set(game_snapshot) == {"BUF", "WAS", "KC", "JAX", "MIN", "PHI"}

    def test_live_game(self, game_snapshot):
        game = game_snapshot["BUF"]
        assert game.is_live and not game.is_completed
        assert game.score == 21
        assert game.opponent == "WAS"
        assert game.opponent_score == 14
        assert game.clock == "7:32"
        assert game.period == 3

    def test_final_game(self, game_snapshot):
        game = game_snapshot["JAX"]
        assert game.is_completed and not game.is_live
        assert game.score == 20

    def test_scheduled_game(self, game_snapshot):
        game = game_snapshot["MIN"]
        assert not game.is_live and not game.is_completed
        assert game.start_time == datetime.fromisoformat("2025-10-05T20:25+00:00")

    def test_events_without_two_competitors_are_skipped(self, normalizer):
        payload = {"events": [{"competitions": [{"competitors": [{"team": {"abbreviation": "KC"}}]}]}]}
        assert snapshot_from_scoreboard(payload, normalizer) == {}


@pytest.mark.unit
class TestStatusOf:
    def test_categories(self, resolver, game_snapshot):
        assert resolver.status_of("BUF", game_snapshot) == GameStatusCategory.LIVE
        assert resolver.status_of("KC", game_snapshot) == GameStatusCategory.COMPLETE
        assert resolver.status_of("MIN", game_snapshot) == GameStatusCategory.PREGAME

    def test_team_missing_from_snapshot_is_on_bye(self, resolver, game_snapshot):
        assert resolver.status_of("LAR", game_snapshot) == GameStatusCategory.BYE
        assert resolver.status_of(None, game_snapshot) == GameStatusCategory.BYE

    def test_aliases_resolve_through_normalizer(self, resolver, game_snapshot):
        assert resolver.status_of("WSH", game_snapshot) == GameStatusCategory.LIVE
        assert resolver.status_of("jac", game_snapshot) == GameStatusCategory.COMPLETE


@pytest.mark.unit
class TestYetToPlay:
    @pytest.mark.parametrize("points", [0.0, 12.0, None])
    @pytest.mark.parametrize("game_date", [None, date(2025, 10, 4), date(2025, 10, 9)])
    def test_bye_is_never_yet_to_play(self, resolver, game_snapshot, points, game_date):
        assert not resolver.is_player_yet_to_play("LAR", points, game_snapshot, game_date, today=TODAY)

    def test_pregame_without_points(self, resolver, game_snapshot):
        assert resolver.is_player_yet_to_play("MIN", 0.0, game_snapshot, today=TODAY)

    def test_live_without_points_is_still_yet_to_play(self, resolver, game_snapshot):
        assert resolver.is_player_yet_to_play("BUF", 0.0, game_snapshot, today=TODAY)

    def test_points_scored_means_played(self, resolver, game_snapshot):
        assert not resolver.is_player_yet_to_play("BUF", 4.2, game_snapshot, today=TODAY)

    def test_complete_game_with_zero_points(self, resolver, game_snapshot):
        assert not resolver.is_player_yet_to_play("KC", 0.0, game_snapshot, today=TODAY)

    def test_past_game_date(self, resolver, game_snapshot):
        assert not resolver.is_player_yet_to_play("MIN", 0.0, game_snapshot, date(2025, 10, 4), today=TODAY)

    def test_game_today_or_later(self, resolver, game_snapshot):
        assert resolver.is_player_yet_to_play("MIN", 0.0, game_snapshot, TODAY, today=TODAY)
        assert resolver.is_player_yet_to_play("MIN", 0.0, game_snapshot, datetime(2025, 10, 9, 20, 15), today=TODAY)

    def test_missing_points_count_as_zero(self, resolver, game_snapshot):
        assert resolver.is_player_yet_to_play("PHI", None, game_snapshot, today=TODAY)


@pytest.mark.unit
class TestRosterHelpers:
    def test_matchup_live_when_any_player_live(self, resolver, game_snapshot, make_player):
        players = [make_player("a", team_code="KC"), make_player("b", team_code="BUF")]
        assert resolver.matchup_status(players, game_snapshot) == MatchupStatus.LIVE

    def test_matchup_complete_when_all_done_or_bye(self, resolver, game_snapshot, make_player):
        players = [make_player("a", team_code="KC"), make_player("b", team_code="LAR"), make_player("c")]
        assert resolver.matchup_status(players, game_snapshot) == MatchupStatus.COMPLETE

    def test_matchup_upcoming(self, resolver, game_snapshot, make_player):
        players = [make_player("a", team_code="KC"), make_player("b", team_code="MIN")]
        assert resolver.matchup_status(players, game_snapshot) == MatchupStatus.UPCOMING

    def test_count_yet_to_play_only_counts_starters(self, resolver, game_snapshot, make_player):
        players = [
            make_player("a", team_code="MIN"),
            make_player("b", team_code="PHI", is_starter=False),
            make_player("c", team_code="KC"),
            make_player("d", team_code="BUF", current_points=3.0),
        ]
        assert resolver.count_yet_to_play(players, game_snapshot) == 1

    def test_bucket_starters(self, resolver, game_snapshot, make_player):
        team = Team(
            team_id="1",
            name="Squad",
            owner_name="Owner",
            players=(
                make_player("live", first_name="Josh", last_name="Allen", team_code="BUF", current_points=14.3),
                make_player("done", first_name="Travis", last_name="Kelce", team_code="KC", current_points=9.0),
                make_player("pre", first_name="Jalen", last_name="Hurts", team_code="PHI", projected_points=20.4),
                make_player("bye", team_code="LAR"),
                make_player("bench", team_code="MIN", is_starter=False),
            ),
        )
        buckets = resolver.bucket_starters(team, game_snapshot)
        assert buckets == {
            "currently_playing": ["Josh Allen (14.3)"],
            "yet_to_play": ["Jalen Hurts (proj: 20.4)"],
            "finished_playing": ["Travis Kelce (9.0)"],
        }


def test_game_info_defaults():
    game = GameInfo(is_live=False, is_completed=False)
    assert game.status == "pre"
    assert game.score is None
