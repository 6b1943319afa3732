"""
Tournament API

Outward-facing facade over TournamentService. Every call returns an
Outcome instead of raising, with ORM rows converted to response schemas so
nothing bound to a session leaks to the caller.
"""

import functools
import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional

from engine.errors import ErrorKind, TournamentError
from engine.standings import StandingRow
from models.schemas import (
    TeamResponse, PlayerResponse, MatchResponse, StandingRowResponse,
)
from services.tournament import TournamentService

logger = logging.getLogger(__name__)


@dataclass
class Outcome:
    """Result of an API call."""
    success: bool
    data: Any = None
    error: Optional[str] = None
    kind: Optional[ErrorKind] = None

    @classmethod
    def ok(cls, data: Any = None) -> "Outcome":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, error: TournamentError) -> "Outcome":
        return cls(success=False, error=error.message, kind=error.kind)


def as_outcome(func: Callable) -> Callable:
    """Wrap a method so domain errors become failed Outcomes."""
    @functools.wraps(func)
    def wrapper(*args, **kwargs) -> Outcome:
        try:
            return Outcome.ok(func(*args, **kwargs))
        except TournamentError as e:
            logger.warning("%s failed (%s): %s", func.__name__, e.kind.value, e.message)
            return Outcome.fail(e)
    return wrapper


def _standing(row: StandingRow) -> StandingRowResponse:
    return StandingRowResponse.model_validate(row, from_attributes=True)


class TournamentAPI:
    """
    Outcome-returning operations for a UI or script.

    Usage:
        api = TournamentAPI()
        outcome = api.advance()
        if not outcome.success:
            print(outcome.kind, outcome.error)
    """

    def __init__(self, service: Optional[TournamentService] = None):
        self.service = service or TournamentService()

    # Teams

    @as_outcome
    def create_team(self, data) -> TeamResponse:
        return TeamResponse.model_validate(self.service.create_team(data))

    @as_outcome
    def update_team(self, data) -> TeamResponse:
        return TeamResponse.model_validate(self.service.update_team(data))

    @as_outcome
    def delete_team(self, team_id: int) -> None:
        self.service.delete_team(team_id)

    @as_outcome
    def get_teams(self) -> list[TeamResponse]:
        return [TeamResponse.model_validate(t) for t in self.service.get_teams()]

    @as_outcome
    def get_team(self, team_id: int) -> dict:
        team = self.service.get_team(team_id)
        return {
            "team": TeamResponse.model_validate(team),
            "players": [PlayerResponse.model_validate(p) for p in team.players],
        }

    # Matches

    @as_outcome
    def generate_group_schedule(self, team_ids=None) -> list[MatchResponse]:
        return [MatchResponse.model_validate(m) for m in self.service.generate_group_schedule(team_ids)]

    @as_outcome
    def schedule_match(self, data) -> MatchResponse:
        return MatchResponse.model_validate(self.service.schedule_match(data))

    @as_outcome
    def update_match_schedule(self, data) -> MatchResponse:
        return MatchResponse.model_validate(self.service.update_match_schedule(data))

    @as_outcome
    def delete_match(self, match_id: int) -> None:
        self.service.delete_match(match_id)

    @as_outcome
    def record_result(self, data) -> MatchResponse:
        return MatchResponse.model_validate(self.service.record_result(data))

    @as_outcome
    def get_upcoming_matches(self) -> list[MatchResponse]:
        return [MatchResponse.model_validate(m) for m in self.service.get_upcoming_matches()]

    @as_outcome
    def get_played_matches(self) -> list[MatchResponse]:
        return [MatchResponse.model_validate(m) for m in self.service.get_played_matches()]

    @as_outcome
    def get_knockout_matches(self) -> list[MatchResponse]:
        return [MatchResponse.model_validate(m) for m in self.service.get_knockout_matches()]

    # Standings and progression

    @as_outcome
    def get_standings(self) -> list[StandingRowResponse]:
        return [_standing(r) for r in self.service.get_standings()]

    @as_outcome
    def recompute_standings(self) -> list[StandingRowResponse]:
        return [_standing(r) for r in self.service.recompute_standings()]

    @as_outcome
    def standings_drift(self) -> list[int]:
        return self.service.standings_drift()

    @as_outcome
    def rebuild_team_stats(self) -> list[int]:
        return self.service.rebuild_team_stats()

    @as_outcome
    def current_phase(self):
        return self.service.current_phase()

    @as_outcome
    def advance(self) -> list[MatchResponse]:
        return [MatchResponse.model_validate(m) for m in self.service.advance()]

    @as_outcome
    def aggregate_winner(self, team_a: int, team_b: int) -> Optional[int]:
        return self.service.aggregate_winner(team_a, team_b)

    # Leaderboards

    @as_outcome
    def top_scorers(self) -> list[PlayerResponse]:
        return [PlayerResponse.model_validate(p) for p in self.service.top_scorers()]

    @as_outcome
    def best_defense(self) -> list[StandingRowResponse]:
        return [_standing(r) for r in self.service.best_defense()]
