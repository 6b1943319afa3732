"""
CupManager Database Models

SQLAlchemy ORM models for the tournament engine.
"""

from models.base import (
    Base, engine, SessionLocal, get_session, init_db, reset_db,
    make_engine, make_session_factory,
)
from models.team import Team
from models.player import Player, STAT_FIELDS
from models.team_stats import TeamStats, COUNTER_FIELDS
from models.match import Match, MatchPlayerStats, Phase, MatchStatus

__all__ = [
    "Base",
    "engine",
    "SessionLocal",
    "get_session",
    "init_db",
    "reset_db",
    "make_engine",
    "make_session_factory",
    "Team",
    "Player",
    "STAT_FIELDS",
    "TeamStats",
    "COUNTER_FIELDS",
    "Match",
    "MatchPlayerStats",
    "Phase",
    "MatchStatus",
]
