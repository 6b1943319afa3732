"""
Tests for the Standings Calculator.

Covers per-result deltas, the ranking order and its tie-breaks, and which
matches count toward the table.
"""

from types import SimpleNamespace

import pytest

from config import ScoringSettings, StandingsSettings, TieBreak, PhaseScope
from engine.standings import (
    StatDelta, StandingRow, compute_standings, find_row, match_deltas, rank_rows,
)
from models.match import Match, MatchStatus, Phase


def team(team_id, name=None):
    return SimpleNamespace(id=team_id, name=name or f"Team {team_id}")


def result(home, away, home_score, away_score, phase=Phase.GROUP):
    return Match(
        home_team_id=home,
        away_team_id=away,
        phase=phase,
        status=MatchStatus.PLAYED,
        home_score=home_score,
        away_score=away_score,
    )


class TestStatDelta:
    """Tests for one team's contribution from one result."""

    def test_win(self):
        delta = StatDelta.from_score(3, 1)
        assert (delta.played, delta.won, delta.drawn, delta.lost) == (1, 1, 0, 0)
        assert delta.goal_difference == 2
        assert delta.points == 3

    def test_draw(self):
        delta = StatDelta.from_score(2, 2)
        assert (delta.won, delta.drawn, delta.lost) == (0, 1, 0)
        assert delta.points == 1

    def test_loss(self):
        delta = StatDelta.from_score(0, 4)
        assert delta.lost == 1
        assert delta.goal_difference == -4
        assert delta.points == 0

    def test_custom_points(self):
        """Points come from the scoring settings."""
        scoring = ScoringSettings(points_for_win=2, points_for_draw=1, points_for_loss=0)
        assert StatDelta.from_score(1, 0, scoring).points == 2

    def test_match_deltas_mirror(self):
        home, away = match_deltas(3, 0)
        assert home.goals_for == away.goals_against == 3
        assert home.points == 3 and away.points == 0

    def test_addition(self):
        total = StatDelta.from_score(3, 0) + StatDelta.from_score(1, 1)
        assert total.played == 2
        assert total.points == 4
        assert total.goals_for == 4


class TestRanking:
    """Points, then goal difference, then the configured tie-break."""

    def test_points_first(self):
        rows = [
            StandingRow(1, "A", points=3, goal_difference=5),
            StandingRow(2, "B", points=6, goal_difference=0),
        ]
        ranked = rank_rows(rows)
        assert [r.team_id for r in ranked] == [2, 1]

    def test_goal_difference_second(self):
        rows = [
            StandingRow(1, "A", points=3, goal_difference=1),
            StandingRow(2, "B", points=3, goal_difference=4),
        ]
        assert [r.team_id for r in rank_rows(rows)] == [2, 1]

    def test_fewer_goals_against_ranks_higher(self):
        """Equal points and goal difference: fewer conceded ranks first."""
        teams = [team(1, "A"), team(2, "B"), team(3, "C"), team(4, "D")]
        matches = [
            result(1, 3, 3, 1),  # A: +2, conceded 1
            result(2, 4, 5, 3),  # B: +2, conceded 3
        ]
        ranked = compute_standings(teams, matches)
        assert [r.team_name for r in ranked[:2]] == ["A", "B"]

    def test_goals_for_tie_break(self):
        settings = StandingsSettings(tie_break=TieBreak.GOALS_FOR)
        teams = [team(1, "A"), team(2, "B"), team(3, "C"), team(4, "D")]
        matches = [
            result(1, 3, 3, 1),
            result(2, 4, 5, 3),
        ]
        ranked = compute_standings(teams, matches, settings)
        assert [r.team_name for r in ranked[:2]] == ["B", "A"]

    def test_full_tie_keeps_input_order(self):
        rows = [StandingRow(9, "Z"), StandingRow(4, "Y"), StandingRow(7, "X")]
        assert [r.team_id for r in rank_rows(rows)] == [9, 4, 7]

    def test_ranks_are_numbered_from_one(self):
        rows = rank_rows([StandingRow(1, "A", points=1), StandingRow(2, "B", points=4)])
        assert [(r.team_id, r.rank) for r in rows] == [(2, 1), (1, 2)]


class TestComputeStandings:
    """Rebuilding the table from match history."""

    def test_every_team_gets_a_row(self):
        rows = compute_standings([team(1), team(2), team(3)], [])
        assert len(rows) == 3
        assert all(r.played == 0 and r.points == 0 for r in rows)

    def test_accumulates_results(self):
        teams = [team(1), team(2), team(3)]
        matches = [result(1, 2, 2, 0), result(3, 1, 1, 1), result(2, 3, 0, 3)]
        rows = compute_standings(teams, matches)

        one = find_row(rows, 1)
        assert (one.played, one.won, one.drawn, one.lost) == (2, 1, 1, 0)
        assert (one.goals_for, one.goals_against, one.points) == (3, 1, 4)

        three = find_row(rows, 3)
        assert three.points == 4
        assert three.goal_difference == 3

        assert [r.team_id for r in rows] == [3, 1, 2]

    def test_ignores_unplayed_matches(self):
        scheduled = Match(home_team_id=1, away_team_id=2, phase=Phase.GROUP,
                          status=MatchStatus.SCHEDULED)
        rows = compute_standings([team(1), team(2)], [scheduled])
        assert all(r.played == 0 for r in rows)

    def test_knockout_excluded_by_default(self):
        matches = [result(1, 2, 1, 0), result(1, 2, 4, 0, phase=Phase.FINAL)]
        rows = compute_standings([team(1), team(2)], matches)
        assert find_row(rows, 1).goals_for == 1

    def test_knockout_included_when_configured(self):
        settings = StandingsSettings(phase_scope=PhaseScope.ALL_PHASES)
        matches = [result(1, 2, 1, 0), result(1, 2, 4, 0, phase=Phase.FINAL)]
        rows = compute_standings([team(1), team(2)], matches, settings)
        assert find_row(rows, 1).goals_for == 5
        assert find_row(rows, 1).played == 2

    def test_from_stats_without_row_is_zero(self):
        row = StandingRow.from_stats(3, "C", None)
        assert row.counters() == StatDelta()

    @pytest.mark.parametrize("home,away", [(2, 2), (0, 5), (7, 1)])
    def test_goal_difference_always_consistent(self, home, away):
        rows = compute_standings([team(1), team(2)], [result(1, 2, home, away)])
        for row in rows:
            assert row.goal_difference == row.goals_for - row.goals_against
