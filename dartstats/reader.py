"""Table export reader with encoding detection and field normalization."""

import csv
import io
import logging
import math
import re
from pathlib import Path
from typing import Optional

from dartstats import (
    League, PerformanceRecord, Player, STAT_FIELDS, Team, Tournament,
)

log = logging.getLogger(__name__)

# Matches any sequence of whitespace (including Unicode whitespace like U+2006)
_WHITESPACE_RE = re.compile(r'\s+')

_DELIMITERS = ('\t', ';', ',')

# Integer-valued statistics; the rest are rates and averages.
_FLOAT_FIELDS = frozenset({
    'win_rate_sets', 'win_rate_legs', 'three_dart_avg', 'one_dart_avg',
    'first_9_avg', 'keep_rate', 'break_rate',
})

TABLE_FILES = {
    'tournaments': 'tournaments.csv',
    'teams': 'teams.csv',
    'players': 'players.csv',
    'player_stats': 'player_stats.csv',
}


def detect_encoding(path: Path) -> str:
    """Detect file encoding by checking for BOM bytes.

    Args:
        path: Path to the CSV file.

    Returns:
        Encoding string suitable for open().
    """
    with open(path, 'rb') as f:
        bom = f.read(2)
    if bom == b'\xff\xfe':
        return 'utf-16-le'
    return 'utf-8-sig'


def detect_delimiter(header: str) -> str:
    """Pick the delimiter that splits the header line into the most columns."""
    counts = {d: header.count(d) for d in _DELIMITERS}
    best = max(_DELIMITERS, key=lambda d: counts[d])
    return best if counts[best] else ','


def normalize_whitespace(value: str) -> str:
    """Normalize whitespace in a string value.

    Collapses any sequence of whitespace (including Unicode whitespace)
    into a single space and strips leading/trailing whitespace.

    Args:
        value: Raw string value from CSV.

    Returns:
        Normalized string.
    """
    return _WHITESPACE_RE.sub(' ', value).strip()


def parse_number(value: Optional[str], as_float: bool = False) -> Optional[int | float]:
    """Convert a CSV cell to a number.

    Blank cells, ``null``, ``NaN`` and anything non-numeric become None.
    Integer columns accept ``"12.0"`` and yield ``12``.

    Args:
        value: Raw cell text.
        as_float: Return a float instead of an int.

    Returns:
        Parsed number or None.
    """
    if value is None:
        return None
    text = value.strip()
    if not text or text.lower() in ('null', 'none', 'nan', 'undefined'):
        return None
    try:
        number = float(text)
    except ValueError:
        return None
    if not math.isfinite(number):
        return None
    if as_float:
        return number
    if number.is_integer():
        return int(number)
    return number


def _read_rows(path: str | Path, required_cols: set[str]) -> list[tuple[int, dict]]:
    """Read a table export and return (line number, cleaned row) pairs.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the file is empty or required columns are missing.
    """
    path = Path(path)
    encoding = detect_encoding(path)

    with open(path, 'r', encoding=encoding) as f:
        content = f.read()

    # Strip BOM if present
    content = content.lstrip('\ufeff')
    header = content.split('\n', 1)[0]

    reader = csv.DictReader(io.StringIO(content), delimiter=detect_delimiter(header))

    if reader.fieldnames is None:
        raise ValueError(f"File {path} is empty or has no header row.")
    actual_cols = {normalize_whitespace(c) for c in reader.fieldnames}
    missing = required_cols - actual_cols
    if missing:
        raise ValueError(
            f"Missing columns in {path}: {', '.join(sorted(missing))}"
        )

    rows = []
    for row_num, row in enumerate(reader, start=2):
        cleaned = {normalize_whitespace(k): normalize_whitespace(v or '')
                   for k, v in row.items() if k is not None}
        rows.append((row_num, cleaned))
    return rows


def _require_id(cleaned: dict, column: str) -> int:
    value = parse_number(cleaned.get(column))
    if not isinstance(value, int):
        raise ValueError(f"invalid {column} {cleaned.get(column)!r}")
    return value


def read_tournaments(path: str | Path) -> list[Tournament]:
    """Read the tournaments table export."""
    tournaments: list[Tournament] = []
    rows = _read_rows(path, {'tournament_id', 'tournament_name', 'tournament_year'})
    for row_num, cleaned in rows:
        try:
            tournaments.append(Tournament(
                tournament_id=_require_id(cleaned, 'tournament_id'),
                tournament_name=cleaned['tournament_name'],
                tournament_year=_require_id(cleaned, 'tournament_year'),
                start_date=cleaned.get('start_date') or None,
                end_date=cleaned.get('end_date') or None,
                location=cleaned.get('location') or None,
            ))
        except (ValueError, KeyError) as exc:
            log.warning("Skipped line %d in %s: %s", row_num, path, exc)

    log.info("Read %d tournaments from %s", len(tournaments), path)
    return tournaments


def read_teams(path: str | Path) -> list[Team]:
    """Read the teams table export."""
    teams: list[Team] = []
    for row_num, cleaned in _read_rows(path, {'team_id', 'team_name'}):
        try:
            teams.append(Team(
                team_id=_require_id(cleaned, 'team_id'),
                team_name=cleaned['team_name'],
            ))
        except (ValueError, KeyError) as exc:
            log.warning("Skipped line %d in %s: %s", row_num, path, exc)

    log.info("Read %d teams from %s", len(teams), path)
    return teams


def read_players(path: str | Path) -> list[Player]:
    """Read the players table export."""
    players: list[Player] = []
    for row_num, cleaned in _read_rows(path, {'player_id', 'player_name'}):
        try:
            players.append(Player(
                player_id=_require_id(cleaned, 'player_id'),
                player_name=cleaned['player_name'],
            ))
        except (ValueError, KeyError) as exc:
            log.warning("Skipped line %d in %s: %s", row_num, path, exc)

    log.info("Read %d players from %s", len(players), path)
    return players


def read_player_stats(path: str | Path) -> list[PerformanceRecord]:
    """Read the player_stats table export.

    This is the single place where cell text becomes typed values: every
    statistic is either a number or None afterwards. Columns absent from
    the export are left as None.

    Args:
        path: Path to the CSV file.

    Returns:
        List of PerformanceRecord objects.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If an id column is missing.
    """
    records: list[PerformanceRecord] = []
    required = {'stat_id', 'player_id', 'team_id', 'tournament_id'}
    for row_num, cleaned in _read_rows(path, required):
        try:
            stats = {
                name: parse_number(cleaned.get(name), as_float=name in _FLOAT_FIELDS)
                for name in STAT_FIELDS
            }
            records.append(PerformanceRecord(
                stat_id=_require_id(cleaned, 'stat_id'),
                player_id=_require_id(cleaned, 'player_id'),
                team_id=_require_id(cleaned, 'team_id'),
                tournament_id=_require_id(cleaned, 'tournament_id'),
                **stats,
            ))
        except ValueError as exc:
            log.warning("Skipped line %d in %s: %s", row_num, path, exc)

    log.info("Read %d player stats from %s", len(records), path)
    return records


def load_league(data_dir: str | Path) -> League:
    """Load all four table exports from a directory.

    Args:
        data_dir: Directory containing the files named in TABLE_FILES.

    Returns:
        League snapshot.
    """
    data_dir = Path(data_dir)
    return League(
        tournaments=read_tournaments(data_dir / TABLE_FILES['tournaments']),
        teams=read_teams(data_dir / TABLE_FILES['teams']),
        players=read_players(data_dir / TABLE_FILES['players']),
        records=read_player_stats(data_dir / TABLE_FILES['player_stats']),
    )
