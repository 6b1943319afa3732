"""
Tournament engine error taxonomy.

Every failed precondition raises one of these; the application facade in
services.api turns them into outcomes.
"""

import enum


class ErrorKind(enum.Enum):
    """Closed set of failure kinds reported to callers."""
    NOT_FOUND = "NotFound"
    INVALID_INPUT = "InvalidInput"
    DUPLICATE_NAME = "DuplicateName"
    MATCHES_PENDING = "MatchesPending"
    DUPLICATE_PHASE = "DuplicatePhase"
    UNRESOLVED_TIE = "UnresolvedTie"
    INSUFFICIENT_TEAMS = "InsufficientTeams"
    PHASE_COMPLETE = "PhaseComplete"
    STORE_ERROR = "StoreError"


class TournamentError(Exception):
    """Base exception for tournament operations."""
    kind: ErrorKind = ErrorKind.INVALID_INPUT

    def __init__(self, message: str = ""):
        super().__init__(message or self.kind.value)
        self.message = message or self.kind.value


class NotFound(TournamentError):
    """A referenced team, player or match does not exist."""
    kind = ErrorKind.NOT_FOUND


class InvalidInput(TournamentError):
    """Negative score, same team on both sides, malformed counts."""
    kind = ErrorKind.INVALID_INPUT


class DuplicateName(TournamentError):
    """Team name already registered."""
    kind = ErrorKind.DUPLICATE_NAME


class MatchesPending(TournamentError):
    """The current phase still has unplayed matches."""
    kind = ErrorKind.MATCHES_PENDING


class DuplicatePhase(TournamentError):
    """The target phase has already been generated."""
    kind = ErrorKind.DUPLICATE_PHASE


class UnresolvedTie(TournamentError):
    """A knockout tie is level and no decisive result exists."""
    kind = ErrorKind.UNRESOLVED_TIE

    def __init__(self, team_a: int, team_b: int, message: str = ""):
        super().__init__(
            message or f"Tie between teams {team_a} and {team_b} is level; "
                       f"record a decisive result before advancing"
        )
        self.team_a = team_a
        self.team_b = team_b


class InsufficientTeams(TournamentError):
    """Too few teams to schedule or to build a knockout round."""
    kind = ErrorKind.INSUFFICIENT_TEAMS


class PhaseComplete(TournamentError):
    """The tournament is already in its final phase."""
    kind = ErrorKind.PHASE_COMPLETE


class StoreError(TournamentError):
    """The unit of work failed in the store and was rolled back."""
    kind = ErrorKind.STORE_ERROR
