"""Report generation for league statistics (CSV, HTML, summary)."""

import csv
import logging
from dataclasses import asdict
from pathlib import Path
from typing import Optional

from jinja2 import Environment, FileSystemLoader

from dartstats import League, PerformanceRecord
from dartstats.aggregator import BucketCount, percentage, round_half_away
from dartstats.summaries import (
    ComparisonRow,
    LeagueOverview,
    PlayerCareer,
    TeamSummary,
    TournamentSummary,
)

log = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).resolve().parent / 'templates'

CSV_COLUMNS = [
    'Rank',
    'Player',
    'Team',
    'Tournament',
    'Year',
    'Three_Dart_Avg',
    'First_9_Avg',
    'Set_Win_Rate',
    'Leg_Win_Rate',
    'High_Finish',
    'Scores_180',
    'Matches',
]


def _format(value, places: int = 2) -> str:
    if value is None:
        return ''
    return f'{round_half_away(value, places):.{places}f}'


def _format_rate(value) -> str:
    if value is None:
        return ''
    return f'{percentage(value):.1f}'


def leaderboard_rows(league: League, records: list[PerformanceRecord]) -> list[dict]:
    """Convert ranked records to flat dicts for CSV/HTML output."""
    rows = []
    for rank, record in enumerate(records, start=1):
        tournament = league.tournament(record.tournament_id)
        rows.append({
            'Rank': rank,
            'Player': league.player_name(record.player_id),
            'Team': league.team_name(record.team_id),
            'Tournament': tournament.tournament_name if tournament else '',
            'Year': tournament.tournament_year if tournament else '',
            'Three_Dart_Avg': _format(record.three_dart_avg),
            'First_9_Avg': _format(record.first_9_avg),
            'Set_Win_Rate': _format_rate(record.win_rate_sets),
            'Leg_Win_Rate': _format_rate(record.win_rate_legs),
            'High_Finish': '' if record.high_finish is None else record.high_finish,
            'Scores_180': '' if record.scores_180 is None else record.scores_180,
            'Matches': '' if record.match_played is None else record.match_played,
        })
    return rows


def write_csv_report(rows: list[dict], output_path: Path) -> None:
    """Write leaderboard rows as a CSV report.

    Uses UTF-8 with BOM (utf-8-sig) and semicolon delimiter for
    compatibility with spreadsheet imports.

    Args:
        rows: Rows built by leaderboard_rows().
        output_path: Path for the output CSV file.
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, 'w', newline='', encoding='utf-8-sig') as f:
        writer = csv.DictWriter(
            f, fieldnames=CSV_COLUMNS, delimiter=';', extrasaction='ignore',
        )
        writer.writeheader()
        for row in rows:
            writer.writerow(row)

    log.info("CSV report written: %s (%d rows)", output_path, len(rows))


def write_html_report(
    output_path: Path,
    overview: LeagueOverview,
    rows: list[dict],
    teams: list[TeamSummary],
    tournaments: list[TournamentSummary],
    distributions: dict[str, list[BucketCount]],
    title: str = '',
    metric: str = 'three_dart_avg',
) -> None:
    """Write the league report as HTML using Jinja2.

    Args:
        output_path: Path for the output HTML file.
        overview: League-wide figures.
        rows: Leaderboard rows built by leaderboard_rows().
        teams: Team summaries.
        tournaments: Tournament summaries.
        distributions: Bucket counts keyed by chart title.
        title: Report title.
        metric: Metric the leaderboard is ranked by.
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    env = Environment(
        loader=FileSystemLoader(str(TEMPLATE_DIR)),
        autoescape=True,
    )
    template = env.get_template('report.html')

    html = template.render(
        title=title,
        metric=metric,
        overview=asdict(overview),
        rows=rows,
        columns=CSV_COLUMNS,
        teams=teams,
        tournaments=tournaments,
        distributions=distributions,
    )

    output_path.write_text(html, encoding='utf-8')
    log.info("HTML report written: %s", output_path)


def print_summary(overview: LeagueOverview, title: str = '') -> None:
    """Print league-wide figures to stdout."""
    print(f"\n=== League report: {title} ===")
    print(f"Players:                       {overview.total_players:>8}")
    print(f"Tournaments:                   {overview.total_tournaments:>8}")
    print(f"Matches:                       {overview.total_matches:>8}")
    print(f"Sets:                          {overview.total_sets:>8}")
    print(f"Legs:                          {overview.total_legs:>8}")
    print(f"180s:                          {overview.total_180s:>8}")
    print(f"Total score:                   {overview.total_score:>8}")
    print(f"Total darts:                   {overview.total_darts:>8}")
    print("---")
    print(f"Avg 3-dart:                    {overview.avg_three_dart:>8.2f}")
    print(f"Avg first 9:                   {overview.avg_first_9:>8.2f}")
    print(f"Avg set win rate (%):          {overview.avg_win_rate:>8.1f}")
    print(f"Peak 3-dart:                   {overview.peak_three_dart:>8.2f}")
    print(f"Scoring avg (3 x score/darts): {overview.scoring_avg:>8.2f}")
    print(f"Score per dart:                {overview.score_per_dart:>8.2f}")
    print("---")
    print(f"Most 180s in a tournament:     {overview.highest_180s:>8}")
    print(f"Highest finish:                {overview.highest_finish:>8}")
    print(f"Most matches in a tournament:  {overview.most_matches:>8}")
    print()


def print_career(career: Optional[PlayerCareer], name: str = '') -> None:
    """Print a player's career statistics to stdout."""
    if career is None:
        print(f"\nNo statistics for {name}.\n")
        return

    print(f"\n=== {career.player_name} ({career.team_name}) ===")
    print(f"Tournaments:      {career.tournaments:>8}")
    print(f"Matches:          {career.matches:>8}")
    print(f"Sets won/played:  {career.sets_won:>4}/{career.sets_played:<4}"
          f" ({career.set_win_rate:.1f}%)")
    print(f"Legs won/played:  {career.legs_won:>4}/{career.legs_played:<4}"
          f" ({career.leg_win_rate:.1f}%)")
    print(f"Avg 3-dart:       {career.three_dart_avg:>8.2f}")
    print(f"Avg first 9:      {career.first_9_avg:>8.2f}")
    print(f"Scoring avg:      {career.scoring_avg:>8.2f}")
    print(f"Score per dart:   {career.score_per_dart:>8.2f}")
    print(f"High finish:      {career.high_finish:>8}")
    print(f"Best/worst leg:   {career.best_leg:>4}/{career.worst_leg:<4}")
    print(f"180s:             {career.scores_180:>8}")
    print(f"140+:             {career.scores_140_plus:>8}")
    print(f"100+:             {career.scores_100_plus:>8}")
    print()


def print_comparison(rows: list[ComparisonRow], names: dict[int, str]) -> None:
    """Print a player comparison table to stdout.

    Args:
        rows: Rows built by compare_players().
        names: Display name per player id. Names shared by several
            players get the id appended.
    """
    if not rows:
        return
    player_ids = list(rows[0].values)
    shown = [names.get(pid, 'Unknown Player') for pid in player_ids]
    headers = [
        f"{name[:9]} #{pid}" if shown.count(name) > 1 else name
        for pid, name in zip(player_ids, shown)
    ]
    print()
    print(f"{'Metric':<16}" + ''.join(f"{h[:14]:>16}" for h in headers))
    for row in rows:
        print(f"{row.metric:<16}"
              + ''.join(f"{row.values[pid]:>16.2f}" for pid in player_ids))
    print()
