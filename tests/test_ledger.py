"""
Tests for the Result Ledger.

Recording, editing and reversing results must keep TeamStats and player
counters equal to what the match history implies.
"""

import pytest
from sqlalchemy import select, func

from engine.errors import InvalidInput, NotFound
from models.match import Match, MatchPlayerStats, MatchStatus, Phase
from services.ledger import ResultLedger

from helpers import play


def stats_of(service, team_id):
    return service.get_team(team_id).stats


def roster(service, team_id):
    return {p.number: p for p in service.get_team(team_id).players}


def audit_rows(session_factory, match_id):
    with session_factory() as session:
        return session.scalar(
            select(func.count()).select_from(MatchPlayerStats)
            .where(MatchPlayerStats.match_id == match_id)
        )


class TestRecordNewResult:
    """Results without a match id create a played group match."""

    def test_creates_played_group_match(self, service, make_teams):
        a, b = make_teams(2)
        match = service.record_result({
            "home_team_id": a.id, "away_team_id": b.id,
            "home_score": 3, "away_score": 0,
        })

        assert match.id is not None
        assert match.status == MatchStatus.PLAYED
        assert match.phase == Phase.GROUP
        assert match.date is not None

    def test_updates_both_teams(self, service, make_teams):
        a, b = make_teams(2)
        service.record_result({
            "home_team_id": a.id, "away_team_id": b.id,
            "home_score": 3, "away_score": 0,
        })

        home = stats_of(service, a.id)
        assert (home.played, home.won, home.drawn, home.lost) == (1, 1, 0, 0)
        assert (home.goals_for, home.goals_against, home.goal_difference, home.points) == (3, 0, 3, 3)

        away = stats_of(service, b.id)
        assert (away.played, away.lost, away.goals_against, away.goal_difference, away.points) == (1, 1, 3, -3, 0)

    def test_player_stats_credited(self, service, make_teams):
        a, b = make_teams(2)
        scorer = roster(service, a.id)[1]
        booked = roster(service, b.id)[2]

        match = service.record_result({
            "home_team_id": a.id, "away_team_id": b.id,
            "home_score": 2, "away_score": 0,
            "player_stats": {
                scorer.id: {"goals": 2},
                booked.id: {"fouls": 3, "yellow_cards": 1},
            },
        })

        assert roster(service, a.id)[1].goals == 2
        assert roster(service, b.id)[2].yellow_cards == 1
        assert roster(service, b.id)[2].fouls == 3
        assert len(match.player_stats) == 2

    def test_empty_stat_lines_are_not_stored(self, service, make_teams, session_factory):
        a, b = make_teams(2)
        player = roster(service, a.id)[1]
        match = service.record_result({
            "home_team_id": a.id, "away_team_id": b.id,
            "home_score": 0, "away_score": 0,
            "player_stats": {player.id: {}},
        })
        assert audit_rows(session_factory, match.id) == 0


class TestEditResult:
    """Editing a played match replaces its contribution."""

    def test_three_nil_edited_to_two_all(self, service, make_teams):
        a, b = make_teams(2)
        match = service.record_result({
            "home_team_id": a.id, "away_team_id": b.id,
            "home_score": 3, "away_score": 0,
        })
        play(service, match, 2, 2)

        for team_id in (a.id, b.id):
            stats = stats_of(service, team_id)
            assert (stats.played, stats.won, stats.drawn, stats.lost) == (1, 0, 1, 0)
            assert (stats.goals_for, stats.goals_against, stats.goal_difference) == (2, 2, 0)
            assert stats.points == 1

    def test_identical_input_is_idempotent(self, service, make_teams, session_factory):
        a, b = make_teams(2)
        scorer = roster(service, a.id)[1]
        match = service.generate_group_schedule()[0]
        line = {scorer.id: {"goals": 1, "yellow_cards": 1}}

        play(service, match, 1, 0, line)
        before = stats_of(service, a.id)
        before_counts = (before.played, before.points, before.goals_for)

        play(service, match, 1, 0, line)
        play(service, match, 1, 0, line)

        after = stats_of(service, a.id)
        assert (after.played, after.points, after.goals_for) == before_counts
        assert roster(service, a.id)[1].goals == 1
        assert roster(service, a.id)[1].yellow_cards == 1
        assert audit_rows(session_factory, match.id) == 1

    def test_player_stats_replaced_on_edit(self, service, make_teams):
        a, b = make_teams(2)
        first, second = roster(service, a.id)[1], roster(service, a.id)[2]
        match = service.generate_group_schedule()[0]

        play(service, match, 2, 0, {first.id: {"goals": 2}})
        play(service, match, 2, 0, {first.id: {"goals": 1}, second.id: {"goals": 1}})

        players = roster(service, a.id)
        assert players[1].goals == 1
        assert players[2].goals == 1

    def test_live_stats_match_recomputed(self, service, make_teams):
        make_teams(4)
        matches = service.generate_group_schedule()
        for i, match in enumerate(matches):
            play(service, match, i % 3, (i + 1) % 2)
        for match in matches[:3]:
            play(service, match, 1, 1)

        live = [(r.team_id, r.counters()) for r in service.get_standings()]
        rebuilt = [(r.team_id, r.counters()) for r in service.recompute_standings()]
        assert live == rebuilt
        assert service.standings_drift() == []


class TestRejectedResults:
    """Invalid input changes nothing."""

    def test_unknown_match(self, service, make_teams):
        a, b = make_teams(2)
        with pytest.raises(NotFound):
            service.record_result({
                "match_id": 999, "home_team_id": a.id, "away_team_id": b.id,
                "home_score": 1, "away_score": 0,
            })

    def test_unknown_team(self, service, make_teams):
        a, = make_teams(1)
        with pytest.raises(NotFound):
            service.record_result({
                "home_team_id": a.id, "away_team_id": 42,
                "home_score": 1, "away_score": 0,
            })

    def test_negative_score(self, service, make_teams):
        a, b = make_teams(2)
        with pytest.raises(InvalidInput):
            service.record_result({
                "home_team_id": a.id, "away_team_id": b.id,
                "home_score": -1, "away_score": 0,
            })

    def test_same_team_both_sides(self, service, make_teams):
        a, = make_teams(1)
        with pytest.raises(InvalidInput):
            service.record_result({
                "home_team_id": a.id, "away_team_id": a.id,
                "home_score": 1, "away_score": 0,
            })

    def test_teams_must_match_stored_match(self, service, make_teams):
        make_teams(3)
        match = service.generate_group_schedule()[0]
        other = ({1, 2, 3} - {match.home_team_id, match.away_team_id}).pop()
        with pytest.raises(InvalidInput):
            service.record_result({
                "match_id": match.id, "home_team_id": match.home_team_id,
                "away_team_id": other, "home_score": 1, "away_score": 0,
            })

    def test_player_from_another_team(self, service, make_teams):
        a, b, c = make_teams(3)
        outsider = roster(service, c.id)[1]
        with pytest.raises(InvalidInput):
            service.record_result({
                "home_team_id": a.id, "away_team_id": b.id,
                "home_score": 1, "away_score": 0,
                "player_stats": {outsider.id: {"goals": 1}},
            })

    def test_failed_edit_rolls_back(self, service, make_teams):
        """A rejected edit leaves the previous result and every total intact."""
        a, b = make_teams(2)
        match = service.generate_group_schedule()[0]
        play(service, match, 3, 0)

        with pytest.raises(NotFound):
            play(service, match, 0, 5, {9999: {"goals": 5}})

        home = stats_of(service, match.home_team_id)
        assert (home.played, home.goals_for, home.points) == (1, 3, 3)
        stored = service.get_match_details(match.id)
        assert (stored.home_score, stored.away_score) == (3, 0)


class TestReverse:

    def test_delete_played_match_reverses_contribution(self, service, make_teams):
        a, b = make_teams(2)
        scorer = roster(service, a.id)[1]
        match = service.record_result({
            "home_team_id": a.id, "away_team_id": b.id,
            "home_score": 1, "away_score": 0,
            "player_stats": {scorer.id: {"goals": 1}},
        })

        service.delete_match(match.id)

        assert stats_of(service, a.id).played == 0
        assert stats_of(service, a.id).points == 0
        assert stats_of(service, b.id).lost == 0
        assert roster(service, a.id)[1].goals == 0

    def test_knockout_result_leaves_team_stats(self, service, make_teams, session_factory):
        a, b = make_teams(2)
        final = service.schedule_match({
            "home_team_id": a.id, "away_team_id": b.id, "phase": Phase.FINAL,
        })
        scorer = roster(service, a.id)[1]

        play(service, final, 2, 1, {scorer.id: {"goals": 2}})

        assert stats_of(service, a.id).played == 0
        assert roster(service, a.id)[1].goals == 2

    def test_reverse_in_session(self, session_factory, make_teams, service):
        """ResultLedger.reverse works inside a caller-owned session."""
        a, b = make_teams(2)
        match = service.generate_group_schedule()[0]
        play(service, match, 4, 1)

        ledger = ResultLedger()
        with session_factory() as session:
            stored = session.get(Match, match.id)
            ledger.reverse(session, stored)
            session.commit()

        assert stats_of(service, a.id).played == 0
        assert stats_of(service, b.id).goals_for == 0
