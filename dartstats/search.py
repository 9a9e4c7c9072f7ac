"""Record filtering, leaderboards and fuzzy name lookup."""

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Optional

from rapidfuzz.distance import JaroWinkler

from dartstats import League, PerformanceRecord
from dartstats.aggregator import percentage, top_n, value_of

log = logging.getLogger(__name__)

DEFAULT_FUZZY_THRESHOLD = 0.85

# Metrics a leaderboard can be ranked by.
LEADERBOARD_METRICS = (
    'three_dart_avg',
    'first_9_avg',
    'one_dart_avg',
    'win_rate_sets',
    'win_rate_legs',
    'high_finish',
    'scores_180',
    'scores_140_plus',
    'scores_100_plus',
    'finishes_100_plus',
    'match_played',
    'keep_rate',
    'break_rate',
)


@dataclass
class SearchFilters:
    """Filter criteria for performance records.

    Win-rate bounds are percentages; the records hold fractions.
    """

    search_term: str = ''
    tournament_ids: list[int] = field(default_factory=list)
    team_ids: list[int] = field(default_factory=list)
    min_average: float = 0.0
    max_average: float = 100.0
    min_win_rate: float = 0.0
    max_win_rate: float = 100.0

    def is_active(self) -> bool:
        return bool(
            self.search_term
            or self.tournament_ids
            or self.team_ids
            or self.min_average > 0
            or self.max_average < 100
            or self.min_win_rate > 0
            or self.max_win_rate < 100
        )


def _in_range(value: Optional[float], low: float, high: float) -> bool:
    # Records without the value are not excluded by a range
    if value is None:
        return True
    return low <= value <= high


def filter_records(league: League, filters: SearchFilters) -> list[PerformanceRecord]:
    """Return the league records matching all filter criteria.

    The search term matches case-insensitively against the player, team
    and tournament names of a record.

    Args:
        league: League snapshot.
        filters: Criteria to apply.

    Returns:
        Matching records in their original order.
    """
    term = filters.search_term.strip().lower()
    results = []
    for record in league.records:
        if term:
            names = (
                league.player_name(record.player_id),
                league.team_name(record.team_id),
                league.tournament_name(record.tournament_id),
            )
            if not any(term in name.lower() for name in names):
                continue

        if filters.tournament_ids and record.tournament_id not in filters.tournament_ids:
            continue

        if filters.team_ids and record.team_id not in filters.team_ids:
            continue

        if not _in_range(value_of(record, 'three_dart_avg'),
                         filters.min_average, filters.max_average):
            continue

        win_rate = value_of(record, 'win_rate_sets')
        if not _in_range(None if win_rate is None else percentage(win_rate),
                         filters.min_win_rate, filters.max_win_rate):
            continue

        results.append(record)

    log.debug("%d of %d records match the filters", len(results), len(league.records))
    return results


def leaderboard(
    records: Iterable[PerformanceRecord],
    metric: str = 'three_dart_avg',
    order: str = 'desc',
    limit: Optional[int] = None,
    exclude_player_ids: Iterable[int] = (),
) -> list[PerformanceRecord]:
    """Rank records by a metric.

    Args:
        records: Records to rank.
        metric: Field to rank by.
        order: ``'desc'`` (best first) or ``'asc'``.
        limit: Maximum number of entries; None for all.
        exclude_player_ids: Players left off the board.

    Returns:
        Ranked records. Records without the metric come last.

    Raises:
        ValueError: If ``order`` is neither ``'asc'`` nor ``'desc'``.
    """
    excluded = set(exclude_player_ids)
    candidates = [r for r in records if r.player_id not in excluded]
    size = len(candidates) if limit is None else limit

    if order == 'desc':
        return top_n(candidates, metric, size, tiebreak='first_9_avg')
    if order == 'asc':
        def sort_key(record):
            value = value_of(record, metric)
            return (value is None, value or 0)
        return sorted(candidates, key=sort_key)[:max(size, 0)]
    raise ValueError(f"Unknown sort order {order!r}, expected 'asc' or 'desc'.")


def _normalize_key(value: str) -> str:
    """Normalize a name for lookup."""
    return ' '.join(value.split()).upper()


def find_by_name(
    candidates: Iterable[Any],
    name: str,
    attr: str,
    threshold: float = DEFAULT_FUZZY_THRESHOLD,
) -> Optional[Any]:
    """Find the candidate whose ``attr`` best matches ``name``.

    Uses a two-stage approach:
    1. Exact case- and whitespace-insensitive match
    2. Best Jaro-Winkler similarity at or above ``threshold``

    Args:
        candidates: Objects carrying a name attribute.
        name: Name to look up.
        attr: Attribute holding the name.
        threshold: Minimum similarity for a fuzzy match (0-1 scale).

    Returns:
        The matched candidate, or None.
    """
    candidates = list(candidates)
    key = _normalize_key(name)

    for candidate in candidates:
        if _normalize_key(getattr(candidate, attr)) == key:
            return candidate

    best = None
    best_similarity = -1.0
    for candidate in candidates:
        similarity = JaroWinkler.similarity(key, _normalize_key(getattr(candidate, attr)))
        if similarity >= threshold and similarity > best_similarity:
            best = candidate
            best_similarity = similarity

    if best is not None:
        log.info("Matched %r to %r (similarity %.3f)",
                 name, getattr(best, attr), best_similarity)
    else:
        log.warning("No match for %r", name)
    return best


def find_player(league: League, name: str, threshold: float = DEFAULT_FUZZY_THRESHOLD):
    return find_by_name(league.players, name, 'player_name', threshold)


def find_team(league: League, name: str, threshold: float = DEFAULT_FUZZY_THRESHOLD):
    return find_by_name(league.teams, name, 'team_name', threshold)


def find_tournament(league: League, name: str, threshold: float = DEFAULT_FUZZY_THRESHOLD):
    return find_by_name(league.tournaments, name, 'tournament_name', threshold)
