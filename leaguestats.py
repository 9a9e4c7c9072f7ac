"""darts-league-stats - CLI for darts league statistics and leaderboards."""

import argparse
import logging
import sys
from pathlib import Path

from dartstats.reader import load_league
from dartstats.reporter import (
    leaderboard_rows,
    print_career,
    print_comparison,
    print_summary,
    write_csv_report,
    write_html_report,
)
from dartstats.search import (
    DEFAULT_FUZZY_THRESHOLD,
    LEADERBOARD_METRICS,
    SearchFilters,
    filter_records,
    find_player,
    find_team,
    find_tournament,
    leaderboard,
)
from dartstats.summaries import (
    compare_players,
    high_finish_distribution,
    league_overview,
    player_career,
    team_summaries,
    three_dart_distribution,
    tournament_summaries,
)


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        description='Statistics and leaderboards from darts league table exports.',
        prog='leaguestats.py',
    )
    parser.add_argument(
        '--data-dir', required=True, type=Path,
        help='Directory with tournaments.csv, teams.csv, players.csv and player_stats.csv',
    )
    parser.add_argument(
        '--metric', default='three_dart_avg', choices=LEADERBOARD_METRICS,
        help='Metric to rank the leaderboard by (default: three_dart_avg)',
    )
    parser.add_argument(
        '--top', type=int, default=10,
        help='Number of leaderboard entries (default: 10)',
    )
    parser.add_argument(
        '--order', default='desc', choices=('asc', 'desc'),
        help='Leaderboard order (default: desc)',
    )
    parser.add_argument(
        '--team',
        help='Only include records of this team',
    )
    parser.add_argument(
        '--tournament',
        help='Only include records of this tournament',
    )
    parser.add_argument(
        '--search', default='',
        help='Only include records whose player, team or tournament name contains this text',
    )
    parser.add_argument(
        '--exclude', action='append', default=[], metavar='PLAYER',
        help='Leave a player off the leaderboard (repeatable)',
    )
    parser.add_argument(
        '--player',
        help='Print the career statistics of a player',
    )
    parser.add_argument(
        '--compare', nargs='+', metavar='PLAYER',
        help='Compare 2-4 players side by side',
    )
    parser.add_argument(
        '--output', type=Path,
        help='Path for the leaderboard report (CSV)',
    )
    parser.add_argument(
        '--html', type=Path,
        help='Path for an HTML league report',
    )
    parser.add_argument(
        '--summary', action='store_true',
        help='Print league-wide figures to stdout',
    )
    parser.add_argument(
        '--fuzzy-threshold', type=float, default=DEFAULT_FUZZY_THRESHOLD,
        help=f'Similarity threshold for name lookup (default: {DEFAULT_FUZZY_THRESHOLD})',
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    logging.basicConfig(
        level=logging.INFO,
        format='%(levelname)s: %(message)s',
    )

    parser = build_parser()
    args = parser.parse_args(argv)

    if args.compare and not 2 <= len(args.compare) <= 4:
        parser.error('--compare takes between 2 and 4 player names.')

    if args.top < 1:
        parser.error('--top must be at least 1.')

    league = load_league(args.data_dir)
    threshold = args.fuzzy_threshold

    filters = SearchFilters(search_term=args.search)
    if args.team:
        team = find_team(league, args.team, threshold)
        if team is None:
            logging.error("Team not found: %s", args.team)
            return 1
        filters.team_ids = [team.team_id]
    if args.tournament:
        tournament = find_tournament(league, args.tournament, threshold)
        if tournament is None:
            logging.error("Tournament not found: %s", args.tournament)
            return 1
        filters.tournament_ids = [tournament.tournament_id]

    records = filter_records(league, filters) if filters.is_active() else league.records

    if args.player:
        player = find_player(league, args.player, threshold)
        career = player_career(league, player.player_id) if player else None
        print_career(career, args.player)

    if args.compare:
        player_ids = []
        for name in args.compare:
            player = find_player(league, name, threshold)
            if player is None:
                logging.error("Player not found: %s", name)
                return 1
            player_ids.append(player.player_id)
        try:
            rows = compare_players(league, player_ids)
        except ValueError as exc:
            parser.error(str(exc))
        names = {pid: league.player_name(pid) for pid in player_ids}
        print_comparison(rows, names)

    excluded = []
    for name in args.exclude:
        player = find_player(league, name, threshold)
        if player is not None:
            excluded.append(player.player_id)

    ranked = leaderboard(records, args.metric, args.order, args.top, excluded)
    rows = leaderboard_rows(league, ranked)
    overview = league_overview(records)
    title = args.data_dir.name

    if args.output:
        write_csv_report(rows, args.output)

    if args.html:
        write_html_report(
            args.html,
            overview,
            rows,
            team_summaries(league),
            tournament_summaries(league),
            {
                '3-Dart Average Distribution': three_dart_distribution(records),
                'High Finish Distribution': high_finish_distribution(records),
            },
            title=title,
            metric=args.metric,
        )

    if args.summary:
        print_summary(overview, title)

    return 0


if __name__ == '__main__':
    sys.exit(main())
