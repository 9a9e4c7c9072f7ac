"""Tests for dartstats.reporter module and the CLI."""

import csv

import pytest

import leaguestats
from dartstats.reporter import (
    CSV_COLUMNS,
    leaderboard_rows,
    print_career,
    print_comparison,
    print_summary,
    write_csv_report,
    write_html_report,
)
from dartstats.search import leaderboard
from dartstats.summaries import (
    compare_players,
    league_overview,
    player_career,
    team_summaries,
    three_dart_distribution,
    tournament_summaries,
)


def _figures(out: str) -> dict[str, str]:
    """Map each 'label: value' line of printed output to its value."""
    figures = {}
    for line in out.splitlines():
        label, sep, value = line.partition(':')
        if sep:
            figures[label.strip()] = value.strip()
    return figures


class TestLeaderboardRows:
    """Tests for flattening ranked records."""

    def test_first_row(self, league):
        rows = leaderboard_rows(league, leaderboard(league.records, limit=3))
        first = rows[0]
        assert first['Rank'] == 1
        assert first['Player'] == 'Rohan Kapoor'
        assert first['Team'] == 'RSV Rising Stars'
        assert first['Tournament'] == 'RDPL Season 2025'
        assert first['Year'] == 2025
        assert first['Three_Dart_Avg'] == '61.20'
        assert first['Set_Win_Rate'] == '80.0'
        assert first['High_Finish'] == 110

    def test_missing_values_blank(self, league):
        rows = leaderboard_rows(league, league.records_for(player_id=2))
        assert rows[1]['Three_Dart_Avg'] == ''
        assert rows[1]['Set_Win_Rate'] == '0.0'


class TestWriteReports:
    """Tests for report files."""

    def test_csv(self, league, tmp_path):
        rows = leaderboard_rows(league, leaderboard(league.records, limit=5))
        out = tmp_path / 'reports' / 'leaderboard.csv'
        write_csv_report(rows, out)

        with open(out, encoding='utf-8-sig', newline='') as f:
            written = list(csv.DictReader(f, delimiter=';'))
        assert list(written[0]) == CSV_COLUMNS
        assert len(written) == 5
        assert written[0]['Player'] == 'Rohan Kapoor'

    def test_html(self, league, records, tmp_path):
        rows = leaderboard_rows(league, leaderboard(records, limit=5))
        out = tmp_path / 'report.html'
        write_html_report(
            out,
            league_overview(records),
            rows,
            team_summaries(league),
            tournament_summaries(league),
            {'3-Dart Average Distribution': three_dart_distribution(records)},
            title='sample',
        )
        html = out.read_text(encoding='utf-8')
        assert 'League report sample' in html
        assert 'Rohan Kapoor' in html
        assert 'Tons of Bull' in html
        assert 'Score per dart' in html
        assert '16.86' in html
        assert 'Avg high finish' in html
        assert '3-Dart Average Distribution' in html


class TestPrinting:
    """Tests for stdout summaries."""

    def test_summary(self, records, capsys):
        print_summary(league_overview(records), 'sample')
        out = capsys.readouterr().out
        assert 'League report: sample' in out
        assert '49.00' in out
        figures = _figures(out)
        assert figures['Scoring avg (3 x score/darts)'] == '50.57'
        assert figures['Score per dart'] == '16.86'
        assert figures['Highest finish'] == '161'
        assert figures['Most 180s in a tournament'] == '5'
        assert figures['Most matches in a tournament'] == '6'
        assert figures['Total score'] == '63200'
        assert figures['Total darts'] == '3749'

    def test_career(self, league, capsys):
        print_career(player_career(league, 1))
        out = capsys.readouterr().out
        assert 'Arjun Mehta (Rama Darts)' in out
        assert '63.3%' in out
        assert _figures(out)['Score per dart'] == '17.90'

    def test_career_missing(self, capsys):
        print_career(None, 'Nobody')
        assert 'No statistics for Nobody' in capsys.readouterr().out

    def test_comparison_shared_names(self, league, capsys):
        rows = compare_players(league, [1, 3])
        print_comparison(rows, {1: 'Sam', 3: 'Sam'})
        out = capsys.readouterr().out
        assert 'Sam #1' in out
        assert 'Sam #3' in out


class TestCli:
    """Tests for the command line entry point."""

    def test_compare_needs_two_players(self, data_dir):
        with pytest.raises(SystemExit):
            leaguestats.main(['--data-dir', str(data_dir), '--compare', 'Arjun Mehta'])

    def test_compare_same_player_twice(self, data_dir):
        with pytest.raises(SystemExit):
            leaguestats.main([
                '--data-dir', str(data_dir), '--compare', 'Arjun Mehta', 'arjun mehta',
            ])

    def test_unknown_metric_rejected(self, data_dir):
        with pytest.raises(SystemExit):
            leaguestats.main(['--data-dir', str(data_dir), '--metric', 'darts_per_leg'])

    def test_full_run(self, data_dir, tmp_path, capsys):
        out = tmp_path / 'board.csv'
        html = tmp_path / 'board.html'
        code = leaguestats.main([
            '--data-dir', str(data_dir),
            '--top', '3',
            '--exclude', 'Rohan Kapoor',
            '--player', 'arjun mehta',
            '--compare', 'Arjun Mehta', 'Priya Nair',
            '--output', str(out),
            '--html', str(html),
            '--summary',
        ])
        assert code == 0
        assert out.exists()
        assert html.exists()
        with open(out, encoding='utf-8-sig', newline='') as f:
            written = list(csv.DictReader(f, delimiter=';'))
        assert [row['Player'] for row in written] == [
            'Arjun Mehta', 'Arjun Mehta', 'Vikram Shah',
        ]
        stdout = capsys.readouterr().out
        assert 'Three Dart Avg' in stdout
        assert 'League report: data' in stdout

    def test_team_filter(self, data_dir, tmp_path):
        out = tmp_path / 'team.csv'
        code = leaguestats.main([
            '--data-dir', str(data_dir), '--team', 'Balaji Darts', '--output', str(out),
        ])
        assert code == 0
        with open(out, encoding='utf-8-sig', newline='') as f:
            written = list(csv.DictReader(f, delimiter=';'))
        assert {row['Team'] for row in written} == {'Balaji Darts'}
        assert len(written) == 3

    def test_unknown_team(self, data_dir):
        code = leaguestats.main(['--data-dir', str(data_dir), '--team', 'Nonexistent Squad'])
        assert code == 1
