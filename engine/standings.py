"""
Standings Calculator

Derives ranked team statistics from played matches. Pure and side-effect
free: it ranks either the live TeamStats rows or a table rebuilt from the
raw match history, and both must agree.
"""

from dataclasses import dataclass, fields
from typing import Iterable, Optional

from config import (
    SCORING_SETTINGS, STANDINGS_SETTINGS,
    ScoringSettings, StandingsSettings, TieBreak, PhaseScope,
)
from models.match import Phase, MatchStatus


@dataclass(frozen=True)
class StatDelta:
    """Contribution of one or more results to a team's table row."""
    played: int = 0
    won: int = 0
    drawn: int = 0
    lost: int = 0
    goals_for: int = 0
    goals_against: int = 0
    goal_difference: int = 0
    points: int = 0

    @classmethod
    def from_score(
        cls,
        goals_for: int,
        goals_against: int,
        scoring: ScoringSettings = SCORING_SETTINGS,
    ) -> "StatDelta":
        """Delta for one team given its own and the opponent's goals."""
        won = int(goals_for > goals_against)
        drawn = int(goals_for == goals_against)
        lost = int(goals_for < goals_against)
        return cls(
            played=1,
            won=won,
            drawn=drawn,
            lost=lost,
            goals_for=goals_for,
            goals_against=goals_against,
            goal_difference=goals_for - goals_against,
            points=(won * scoring.points_for_win
                    + drawn * scoring.points_for_draw
                    + lost * scoring.points_for_loss),
        )

    def __add__(self, other: "StatDelta") -> "StatDelta":
        return StatDelta(**{
            f.name: getattr(self, f.name) + getattr(other, f.name) for f in fields(self)
        })


def match_deltas(
    home_score: int,
    away_score: int,
    scoring: ScoringSettings = SCORING_SETTINGS,
) -> tuple[StatDelta, StatDelta]:
    """Home and away deltas for a final score."""
    return (
        StatDelta.from_score(home_score, away_score, scoring),
        StatDelta.from_score(away_score, home_score, scoring),
    )


def counts_toward_standings(phase: Phase, settings: StandingsSettings = STANDINGS_SETTINGS) -> bool:
    """Whether results in this phase feed team statistics."""
    if settings.phase_scope == PhaseScope.ALL_PHASES:
        return True
    return phase == Phase.GROUP


@dataclass
class StandingRow:
    """A team's line in the table."""
    team_id: int
    team_name: str
    played: int = 0
    won: int = 0
    drawn: int = 0
    lost: int = 0
    goals_for: int = 0
    goals_against: int = 0
    goal_difference: int = 0
    points: int = 0
    rank: int = 0

    @classmethod
    def from_stats(cls, team_id: int, team_name: str, stats=None) -> "StandingRow":
        """Build a row from a TeamStats-like object (None means no results yet)."""
        row = cls(team_id=team_id, team_name=team_name)
        if stats is not None:
            row.add(stats)
        return row

    def add(self, delta) -> None:
        self.played += delta.played
        self.won += delta.won
        self.drawn += delta.drawn
        self.lost += delta.lost
        self.goals_for += delta.goals_for
        self.goals_against += delta.goals_against
        self.goal_difference += delta.goal_difference
        self.points += delta.points

    def counters(self) -> StatDelta:
        """Counter values as a StatDelta, for comparisons and repairs."""
        return StatDelta(
            played=self.played,
            won=self.won,
            drawn=self.drawn,
            lost=self.lost,
            goals_for=self.goals_for,
            goals_against=self.goals_against,
            goal_difference=self.goal_difference,
            points=self.points,
        )


def sort_key(row: StandingRow, tie_break: TieBreak) -> tuple:
    """
    Ranking key, primary first.

    Points desc, goal difference desc, then the configured tie-break:
    goals against asc (default), goals for desc, or nothing further.
    """
    key = (-row.points, -row.goal_difference)
    if tie_break == TieBreak.GOALS_AGAINST:
        return key + (row.goals_against,)
    if tie_break == TieBreak.GOALS_FOR:
        return key + (-row.goals_for,)
    return key


def rank_rows(
    rows: Iterable[StandingRow],
    settings: StandingsSettings = STANDINGS_SETTINGS,
) -> list[StandingRow]:
    """
    Order rows by rank and number them from 1.

    Sorting is stable: rows still level after every key keep their input order.
    """
    ranked = sorted(rows, key=lambda r: sort_key(r, settings.tie_break))
    for position, row in enumerate(ranked, start=1):
        row.rank = position
    return ranked


def compute_standings(
    teams: Iterable,
    matches: Iterable,
    settings: StandingsSettings = STANDINGS_SETTINGS,
    scoring: ScoringSettings = SCORING_SETTINGS,
) -> list[StandingRow]:
    """
    Rebuild the table from raw match history.

    Args:
        teams: Objects with ``id`` and ``name``
        matches: Objects with ``phase``, ``status``, team ids and scores

    Returns:
        Ranked standings rows, one per team
    """
    rows: dict[int, StandingRow] = {
        team.id: StandingRow(team_id=team.id, team_name=team.name) for team in teams
    }

    for match in matches:
        if match.status != MatchStatus.PLAYED or not counts_toward_standings(match.phase, settings):
            continue
        if match.home_score is None or match.away_score is None:
            continue

        home = rows.get(match.home_team_id)
        away = rows.get(match.away_team_id)
        if home is None or away is None:
            continue

        home_delta, away_delta = match_deltas(match.home_score, match.away_score, scoring)
        home.add(home_delta)
        away.add(away_delta)

    return rank_rows(rows.values(), settings)


def find_row(rows: Iterable[StandingRow], team_id: int) -> Optional[StandingRow]:
    """Look up a team's row."""
    return next((r for r in rows if r.team_id == team_id), None)
