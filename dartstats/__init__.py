"""Core module for darts-league-stats."""

from dataclasses import dataclass, field
from typing import Optional


@dataclass
class Tournament:
    """Represents a row of the tournaments table."""

    tournament_id: int
    tournament_name: str
    tournament_year: int
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    location: Optional[str] = None


@dataclass
class Team:
    """Represents a row of the teams table."""

    team_id: int
    team_name: str


@dataclass
class Player:
    """Represents a row of the players table."""

    player_id: int
    player_name: str


# Numeric columns of player_stats, in export order.
STAT_FIELDS = (
    'match_played',
    'sets_played',
    'sets_won',
    'legs_played',
    'legs_won',
    'legs_diff',
    'scores_100_plus',
    'scores_140_plus',
    'scores_170_plus',
    'scores_180',
    'high_finish',
    'finishes_100_plus',
    'best_leg',
    'worst_leg',
    'win_rate_sets',
    'win_rate_legs',
    'three_dart_avg',
    'one_dart_avg',
    'first_9_avg',
    'keep_rate',
    'break_rate',
    'second_legs',
    'break_legs',
    'total_score',
    'total_darts',
    'group_number',
)

# Fields stored as fractions in [0, 1].
RATE_FIELDS = frozenset({
    'win_rate_sets', 'win_rate_legs', 'keep_rate', 'break_rate',
})


@dataclass
class PerformanceRecord:
    """One player_stats row: a player's figures for a team in a tournament.

    Every statistic is optional; ``None`` marks a value the export did not
    carry. Rates (see ``RATE_FIELDS``) are fractions, not percentages.
    """

    stat_id: int
    player_id: int
    team_id: int
    tournament_id: int
    match_played: Optional[int] = None
    sets_played: Optional[int] = None
    sets_won: Optional[int] = None
    legs_played: Optional[int] = None
    legs_won: Optional[int] = None
    legs_diff: Optional[int] = None
    scores_100_plus: Optional[int] = None
    scores_140_plus: Optional[int] = None
    scores_170_plus: Optional[int] = None
    scores_180: Optional[int] = None
    high_finish: Optional[int] = None
    finishes_100_plus: Optional[int] = None
    best_leg: Optional[int] = None
    worst_leg: Optional[int] = None
    win_rate_sets: Optional[float] = None
    win_rate_legs: Optional[float] = None
    three_dart_avg: Optional[float] = None
    one_dart_avg: Optional[float] = None
    first_9_avg: Optional[float] = None
    keep_rate: Optional[float] = None
    break_rate: Optional[float] = None
    second_legs: Optional[int] = None
    break_legs: Optional[int] = None
    total_score: Optional[int] = None
    total_darts: Optional[int] = None
    group_number: Optional[int] = None


@dataclass
class League:
    """Snapshot of the four backend tables.

    Replaces the joined query of the hosted backend: records carry ids only
    and names are resolved through the lookup methods.
    """

    tournaments: list[Tournament] = field(default_factory=list)
    teams: list[Team] = field(default_factory=list)
    players: list[Player] = field(default_factory=list)
    records: list[PerformanceRecord] = field(default_factory=list)

    def __post_init__(self):
        self._tournaments = {t.tournament_id: t for t in self.tournaments}
        self._teams = {t.team_id: t for t in self.teams}
        self._players = {p.player_id: p for p in self.players}

    def tournament(self, tournament_id: int) -> Optional[Tournament]:
        return self._tournaments.get(tournament_id)

    def tournament_name(self, tournament_id: int) -> str:
        tournament = self._tournaments.get(tournament_id)
        return tournament.tournament_name if tournament else 'Unknown Tournament'

    def team_name(self, team_id: int) -> str:
        team = self._teams.get(team_id)
        return team.team_name if team else 'Unknown Team'

    def player_name(self, player_id: int) -> str:
        player = self._players.get(player_id)
        return player.player_name if player else 'Unknown Player'

    def records_for(
        self,
        player_id: Optional[int] = None,
        team_id: Optional[int] = None,
        tournament_id: Optional[int] = None,
    ) -> list[PerformanceRecord]:
        """Return the records matching every given id filter."""
        return [
            r for r in self.records
            if (player_id is None or r.player_id == player_id)
            and (team_id is None or r.team_id == team_id)
            and (tournament_id is None or r.tournament_id == tournament_id)
        ]
