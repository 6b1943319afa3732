"""
Tests for the round-robin Schedule Generator.
"""

import itertools

import pytest

from engine.schedule import Fixture, build_round_robin, rounds_of


class TestRoundRobinCoverage:
    """Every pair meets exactly once."""

    @pytest.mark.parametrize("count", [2, 3, 4, 5, 6, 7, 8, 9])
    def test_fixture_count(self, count):
        """N teams produce N*(N-1)/2 fixtures."""
        fixtures = build_round_robin(range(1, count + 1))
        assert len(fixtures) == count * (count - 1) // 2

    @pytest.mark.parametrize("count", [4, 5, 8])
    def test_every_pair_exactly_once(self, count):
        teams = list(range(1, count + 1))
        fixtures = build_round_robin(teams)

        pairs = [frozenset((f.home_team_id, f.away_team_id)) for f in fixtures]
        expected = {frozenset(p) for p in itertools.combinations(teams, 2)}

        assert len(pairs) == len(set(pairs))
        assert set(pairs) == expected

    def test_no_team_plays_itself(self):
        for fixture in build_round_robin(range(1, 8)):
            assert fixture.home_team_id != fixture.away_team_id


class TestRoundStructure:
    """Rounds group fixtures so nobody plays twice in a round."""

    @pytest.mark.parametrize("count", [4, 6, 7, 9])
    def test_team_plays_at_most_once_per_round(self, count):
        for fixtures in rounds_of(build_round_robin(range(count))).values():
            seen = [t for f in fixtures for t in (f.home_team_id, f.away_team_id)]
            assert len(seen) == len(set(seen))

    def test_even_count_uses_n_minus_one_rounds(self):
        rounds = rounds_of(build_round_robin(range(6)))
        assert sorted(rounds) == [1, 2, 3, 4, 5]
        assert all(len(fixtures) == 3 for fixtures in rounds.values())

    def test_odd_count_gives_one_bye_per_round(self):
        """With 5 teams there are 5 rounds of 2 fixtures; one team rests each round."""
        rounds = rounds_of(build_round_robin(range(5)))
        assert len(rounds) == 5
        assert all(len(fixtures) == 2 for fixtures in rounds.values())

    def test_four_team_circle(self):
        """First team fixed, the rest rotate."""
        fixtures = build_round_robin([1, 2, 3, 4])
        assert fixtures == [
            Fixture(1, 1, 4), Fixture(1, 2, 3),
            Fixture(2, 1, 3), Fixture(2, 4, 2),
            Fixture(3, 1, 2), Fixture(3, 3, 4),
        ]


class TestScheduleEdgeCases:

    def test_fewer_than_two_teams_is_empty(self):
        assert build_round_robin([]) == []
        assert build_round_robin([7]) == []

    def test_deterministic_for_same_order(self):
        assert build_round_robin([5, 3, 9, 1]) == build_round_robin([5, 3, 9, 1])

    def test_accepts_any_iterable(self):
        assert len(build_round_robin(t for t in "ABC")) == 3
