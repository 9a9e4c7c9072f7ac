"""Career, team, tournament and league summaries.

All figures are rounded here: averages to two decimals, percentages to
one decimal via ``percentage()``. Rates in the source records are
fractions; every ``*_win_rate`` attribute below is a percentage.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Iterable, Optional

from dartstats import League, PerformanceRecord
from dartstats.aggregator import (
    Bucket,
    BucketCount,
    GroupSummary,
    aggregate_by_group,
    distribution_buckets,
    percentage,
    round_half_away,
    top_n,
)

log = logging.getLogger(__name__)


def _below(limit: float) -> float:
    """Largest float under ``limit``; turns inclusive buckets into half-open ones."""
    return math.nextafter(limit, -math.inf)


THREE_DART_BUCKETS = [
    Bucket('< 25', -math.inf, _below(25)),
    Bucket('25-35', 25, _below(35)),
    Bucket('35-45', 35, _below(45)),
    Bucket('45-55', 45, _below(55)),
    Bucket('55+', 55, math.inf),
]

# Finishes under 50 are not charted
HIGH_FINISH_BUCKETS = [
    Bucket('50-59', 50, _below(60)),
    Bucket('60-79', 60, _below(80)),
    Bucket('80-99', 80, _below(100)),
    Bucket('100+', 100, math.inf),
]

# (label, field, how) for player comparisons.
COMPARISON_METRICS = [
    ('Three Dart Avg', 'three_dart_avg', 'mean'),
    ('First 9 Avg', 'first_9_avg', 'mean'),
    ('Win Rate Sets', 'win_rate_sets', 'rate'),
    ('Win Rate Legs', 'win_rate_legs', 'rate'),
    ('High Finish', 'high_finish', 'max'),
    ('100+ Scores', 'scores_100_plus', 'mean'),
    ('140+ Scores', 'scores_140_plus', 'mean'),
    ('180s', 'scores_180', 'mean'),
]


@dataclass
class PlayerCareer:
    """Aggregated statistics of one player across all tournaments."""

    player_id: int
    player_name: str
    team_name: str
    tournaments: int
    matches: int
    sets_played: int
    sets_won: int
    legs_played: int
    legs_won: int
    three_dart_avg: float
    first_9_avg: float
    set_win_rate: float
    leg_win_rate: float
    high_finish: int
    scores_180: int
    scores_140_plus: int
    scores_100_plus: int
    total_score: int
    total_darts: int
    best_leg: int
    worst_leg: int
    scoring_avg: float
    score_per_dart: float
    records: list[PerformanceRecord] = field(default_factory=list, repr=False)


@dataclass
class TeamSummary:
    team_id: int
    team_name: str
    player_count: int
    tournaments: int
    total_matches: int
    avg_three_dart: float
    avg_win_rate: float


@dataclass
class TournamentSummary:
    tournament_id: int
    tournament_name: str
    tournament_year: int
    participant_count: int
    teams_count: int
    total_matches: int
    avg_three_dart: float
    avg_first_9: float
    avg_win_rate: float
    highest_avg: float
    highest_finish: int
    total_180s: int
    total_140_plus: int
    total_100_plus: int
    high_finish_avg: int
    scores_180_avg: float


@dataclass
class LeagueOverview:
    total_players: int
    total_tournaments: int
    total_records: int
    total_matches: int
    total_sets: int
    total_legs: int
    total_180s: int
    avg_three_dart: float
    avg_first_9: float
    avg_win_rate: float
    peak_three_dart: float
    scoring_avg: float
    score_per_dart: float
    highest_180s: int
    highest_finish: int
    most_matches: int
    total_score: int
    total_darts: int


@dataclass
class ComparisonRow:
    """One metric compared across players, keyed by player id."""

    metric: str
    values: dict[int, float] = field(default_factory=dict)


def scoring_average(group: GroupSummary) -> float:
    """Three-dart average computed from total score and darts thrown."""
    return round_half_away(group.ratio('total_score', 'total_darts') * 3, 2)


def _latest_team_id(league: League, records: list[PerformanceRecord]) -> int:
    def year(record):
        tournament = league.tournament(record.tournament_id)
        return tournament.tournament_year if tournament else 0

    return max(records, key=year).team_id


def player_career(league: League, player_id: int) -> Optional[PlayerCareer]:
    """Aggregate every record of a player.

    Args:
        league: League snapshot.
        player_id: Player to summarize.

    Returns:
        PlayerCareer, or None if the player has no records.
    """
    records = league.records_for(player_id=player_id)
    if not records:
        log.info("No statistics for player %d", player_id)
        return None

    group = GroupSummary(player_id, records)
    return PlayerCareer(
        player_id=player_id,
        player_name=league.player_name(player_id),
        team_name=league.team_name(_latest_team_id(league, records)),
        tournaments=group.distinct('tournament_id'),
        matches=group.sum('match_played'),
        sets_played=group.sum('sets_played'),
        sets_won=group.sum('sets_won'),
        legs_played=group.sum('legs_played'),
        legs_won=group.sum('legs_won'),
        three_dart_avg=group.mean('three_dart_avg'),
        first_9_avg=group.mean('first_9_avg'),
        set_win_rate=percentage(group.ratio('sets_won', 'sets_played')),
        leg_win_rate=percentage(group.ratio('legs_won', 'legs_played')),
        high_finish=group.max('high_finish'),
        scores_180=group.sum('scores_180'),
        scores_140_plus=group.sum('scores_140_plus'),
        scores_100_plus=group.sum('scores_100_plus'),
        total_score=group.sum('total_score'),
        total_darts=group.sum('total_darts'),
        # A leg of 0 darts means "not recorded"
        best_leg=group.where('best_leg', lambda v: v > 0).min('best_leg'),
        worst_leg=group.where('worst_leg', lambda v: v > 0).max('worst_leg'),
        scoring_avg=scoring_average(group),
        score_per_dart=group.ratio('total_score', 'total_darts', places=2),
        records=records,
    )


def team_summaries(league: League) -> list[TeamSummary]:
    """Summarize every team, strongest average first.

    Teams without records are listed with zero figures.
    """
    groups = aggregate_by_group(league.records, 'team_id')
    summaries = []
    for team in league.teams:
        group = groups.get(team.team_id, GroupSummary(team.team_id, []))
        summaries.append(TeamSummary(
            team_id=team.team_id,
            team_name=team.team_name,
            player_count=group.distinct('player_id'),
            tournaments=group.distinct('tournament_id'),
            total_matches=group.sum('match_played'),
            avg_three_dart=group.mean('three_dart_avg'),
            avg_win_rate=percentage(group.mean('win_rate_sets', places=None)),
        ))
    return sorted(summaries, key=lambda s: s.avg_three_dart, reverse=True)


def tournament_summaries(league: League) -> list[TournamentSummary]:
    """Summarize every tournament in chronological order."""
    groups = aggregate_by_group(league.records, 'tournament_id')
    summaries = []
    for tournament in league.tournaments:
        group = groups.get(
            tournament.tournament_id, GroupSummary(tournament.tournament_id, []),
        )
        summaries.append(TournamentSummary(
            tournament_id=tournament.tournament_id,
            tournament_name=tournament.tournament_name,
            tournament_year=tournament.tournament_year,
            participant_count=group.distinct('player_id'),
            teams_count=group.distinct('team_id'),
            total_matches=group.sum('match_played'),
            avg_three_dart=group.mean('three_dart_avg'),
            avg_first_9=group.mean('first_9_avg'),
            avg_win_rate=percentage(group.mean('win_rate_sets', places=None)),
            highest_avg=round_half_away(group.max('three_dart_avg'), 2),
            highest_finish=group.max('high_finish'),
            total_180s=group.sum('scores_180'),
            total_140_plus=group.sum('scores_140_plus'),
            total_100_plus=group.sum('scores_100_plus'),
            high_finish_avg=group.mean('high_finish', places=0),
            scores_180_avg=group.mean('scores_180'),
        ))
    return sorted(summaries, key=lambda s: s.tournament_year)


def league_overview(records: Iterable[PerformanceRecord]) -> LeagueOverview:
    """League-wide totals and averages over the given records."""
    group = GroupSummary(None, records)
    return LeagueOverview(
        total_players=group.distinct('player_id'),
        total_tournaments=group.distinct('tournament_id'),
        total_records=group.count,
        total_matches=group.sum('match_played'),
        total_sets=group.sum('sets_played'),
        total_legs=group.sum('legs_played'),
        total_180s=group.sum('scores_180'),
        avg_three_dart=group.mean('three_dart_avg'),
        avg_first_9=group.mean('first_9_avg'),
        avg_win_rate=percentage(group.mean('win_rate_sets', places=None)),
        peak_three_dart=round_half_away(group.max('three_dart_avg'), 2),
        scoring_avg=scoring_average(group),
        score_per_dart=group.ratio('total_score', 'total_darts', places=2),
        highest_180s=group.max('scores_180'),
        highest_finish=group.max('high_finish'),
        most_matches=group.max('match_played'),
        total_score=group.sum('total_score'),
        total_darts=group.sum('total_darts'),
    )


def three_dart_distribution(records: Iterable[Any]) -> list[BucketCount]:
    return distribution_buckets(records, 'three_dart_avg', THREE_DART_BUCKETS)


def high_finish_distribution(records: Iterable[Any]) -> list[BucketCount]:
    return distribution_buckets(records, 'high_finish', HIGH_FINISH_BUCKETS)


def elite_records(
    records: list[PerformanceRecord],
    fraction: float = 0.2,
) -> list[PerformanceRecord]:
    """Return the top ``fraction`` of records by three-dart average."""
    count = math.ceil(len(records) * fraction)
    return top_n(records, 'three_dart_avg', count)


def compare_players(league: League, player_ids: list[int]) -> list[ComparisonRow]:
    """Compare two to four players metric by metric.

    Averages and counts are per tournament record, win rates are
    percentages and the high finish is the career maximum.

    Args:
        league: League snapshot.
        player_ids: Players to compare, in display order.

    Returns:
        One ComparisonRow per entry of COMPARISON_METRICS, with values
        keyed by player id in the given order.

    Raises:
        ValueError: If fewer than two or more than four players are given,
            or a player is given twice.
    """
    if not 2 <= len(player_ids) <= 4:
        raise ValueError(
            f"Between 2 and 4 players can be compared, got {len(player_ids)}."
        )
    if len(set(player_ids)) != len(player_ids):
        raise ValueError("A player can only be compared once.")

    groups = {
        pid: GroupSummary(pid, league.records_for(player_id=pid))
        for pid in player_ids
    }

    rows = []
    for label, field_name, how in COMPARISON_METRICS:
        row = ComparisonRow(metric=label)
        for pid, group in groups.items():
            if how == 'max':
                value = group.max(field_name)
            elif how == 'rate':
                value = percentage(group.mean(field_name, places=None))
            else:
                value = group.mean(field_name)
            row.values[pid] = value
        rows.append(row)
    return rows
