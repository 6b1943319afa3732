"""
CupManager Tournament Engine

Core progression and standings logic. This package contains no session or
transaction handling; services/ persists what it computes.
"""

from engine.errors import (
    ErrorKind, TournamentError, NotFound, InvalidInput, DuplicateName,
    MatchesPending, DuplicatePhase, UnresolvedTie, InsufficientTeams,
    PhaseComplete, StoreError,
)
from engine.schedule import Fixture, build_round_robin
from engine.standings import StatDelta, StandingRow, compute_standings, rank_rows, match_deltas
from engine.bracket import Matchup, KnockoutFixture, TieOutcome, aggregate_winner, tie_outcome
from engine.phases import PHASE_ORDER, PhasePlan, current_phase, plan_advance

__all__ = [
    "ErrorKind",
    "TournamentError",
    "NotFound",
    "InvalidInput",
    "DuplicateName",
    "MatchesPending",
    "DuplicatePhase",
    "UnresolvedTie",
    "InsufficientTeams",
    "PhaseComplete",
    "StoreError",
    "Fixture",
    "build_round_robin",
    "StatDelta",
    "StandingRow",
    "compute_standings",
    "rank_rows",
    "match_deltas",
    "Matchup",
    "KnockoutFixture",
    "TieOutcome",
    "aggregate_winner",
    "tie_outcome",
    "PHASE_ORDER",
    "PhasePlan",
    "current_phase",
    "plan_advance",
]
