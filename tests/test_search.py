"""Tests for dartstats.search module."""

import pytest

from dartstats import Player
from dartstats.search import (
    SearchFilters,
    filter_records,
    find_by_name,
    find_player,
    find_team,
    find_tournament,
    leaderboard,
)


class TestSearchFilters:
    """Tests for filter state."""

    def test_default_inactive(self):
        assert SearchFilters().is_active() is False

    def test_active(self):
        assert SearchFilters(search_term='rama').is_active() is True
        assert SearchFilters(max_win_rate=80).is_active() is True


class TestFilterRecords:
    """Tests for record filtering."""

    def test_no_filters_returns_all(self, league):
        assert len(filter_records(league, SearchFilters())) == 9

    def test_term_matches_team_name(self, league):
        results = filter_records(league, SearchFilters(search_term='RAMA'))
        assert [r.stat_id for r in results] == [3, 4, 5]

    def test_term_matches_tournament_name(self, league):
        results = filter_records(league, SearchFilters(search_term='season 2023'))
        assert [r.stat_id for r in results] == [1, 4]

    def test_term_matches_player_name(self, league):
        results = filter_records(league, SearchFilters(search_term='kapoor'))
        assert [r.stat_id for r in results] == [6, 7]

    def test_id_filters(self, league):
        results = filter_records(
            league, SearchFilters(tournament_ids=[3], team_ids=[3]),
        )
        assert [r.stat_id for r in results] == [7, 9]

    def test_average_range_keeps_missing_values(self, league):
        results = filter_records(league, SearchFilters(min_average=50))
        assert [r.stat_id for r in results] == [1, 2, 5, 6, 7, 9]

    def test_win_rate_range_in_percent(self, league):
        results = filter_records(league, SearchFilters(min_win_rate=60))
        assert [r.stat_id for r in results] == [1, 2, 7, 9]


class TestLeaderboard:
    """Tests for ranking."""

    def test_descending(self, records):
        ranked = leaderboard(records, 'three_dart_avg', limit=3)
        assert [r.stat_id for r in ranked] == [7, 2, 6]

    def test_tie_broken_by_first_nine(self, records):
        ranked = leaderboard(records, 'three_dart_avg')
        ids = [r.stat_id for r in ranked]
        assert ids.index(1) < ids.index(9)
        assert ids[-1] == 5

    def test_ascending_missing_last(self, records):
        ranked = leaderboard(records, 'three_dart_avg', order='asc')
        assert ranked[0].stat_id == 8
        assert ranked[-1].stat_id == 5

    def test_exclude_players(self, records):
        ranked = leaderboard(records, 'three_dart_avg', exclude_player_ids=[3])
        assert all(r.player_id != 3 for r in ranked)
        assert ranked[0].stat_id == 2

    def test_other_metric(self, records):
        ranked = leaderboard(records, 'high_finish', limit=1)
        assert ranked[0].stat_id == 6

    def test_unknown_order(self, records):
        with pytest.raises(ValueError, match='Unknown sort order'):
            leaderboard(records, order='sideways')


class TestFindByName:
    """Tests for name lookup."""

    def test_exact_case_insensitive(self, league):
        assert find_player(league, '  priya   NAIR ').player_id == 2

    def test_fuzzy_typo(self, league):
        assert find_player(league, 'Arjun Metha').player_id == 1

    def test_no_match(self, league):
        assert find_player(league, 'Completely Different') is None

    def test_team_and_tournament(self, league):
        assert find_team(league, 'rsv rising stars').team_id == 3
        assert find_tournament(league, 'RDPL Season 2024').tournament_id == 2

    def test_exact_match_preferred(self):
        players = [Player(1, 'Sai Agarwal'), Player(2, 'Sai Agrawal')]
        assert find_by_name(players, 'Sai Agrawal', 'player_name').player_id == 2

    def test_threshold(self):
        players = [Player(1, 'Rohan Kapoor')]
        assert find_by_name(players, 'Rohan Kapur', 'player_name', threshold=0.999) is None

    def test_empty_candidates(self):
        assert find_by_name([], 'anyone', 'player_name') is None
