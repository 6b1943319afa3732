"""
Match and MatchPlayerStats models for tournament fixtures.
"""

import enum
from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import (
    Integer, ForeignKey, DateTime, CheckConstraint, UniqueConstraint, Enum as SAEnum
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from models.base import Base

if TYPE_CHECKING:
    from models.player import Player
    from models.team import Team


class Phase(enum.Enum):
    """Tournament stages, in progression order."""
    GROUP = "GROUP"
    QUARTER_FINAL = "QUARTER_FINAL"
    SEMI_FINAL = "SEMI_FINAL"
    FINAL = "FINAL"

    @property
    def is_knockout(self) -> bool:
        return self is not Phase.GROUP


class MatchStatus(enum.Enum):
    """Match lifecycle states."""
    SCHEDULED = "SCHEDULED"
    PLAYED = "PLAYED"


class Match(Base):
    """
    A fixture between two teams.

    Created SCHEDULED with null scores; becomes PLAYED when a result is
    recorded and may be re-recorded any number of times afterwards.
    Knockout fixtures carry their tie index in bracket_position and, for
    two-legged ties, the leg number.
    """
    __tablename__ = "matches"
    __table_args__ = (
        CheckConstraint("home_team_id <> away_team_id", name="ck_matches_distinct_teams"),
        CheckConstraint(
            "(status = 'SCHEDULED' AND home_score IS NULL AND away_score IS NULL)"
            " OR (status = 'PLAYED' AND home_score >= 0 AND away_score >= 0)",
            name="ck_matches_scores_match_status",
        ),
        CheckConstraint("leg IS NULL OR leg IN (1, 2)", name="ck_matches_leg"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    home_team_id: Mapped[int] = mapped_column(ForeignKey("teams.id"), nullable=False)
    away_team_id: Mapped[int] = mapped_column(ForeignKey("teams.id"), nullable=False)

    phase: Mapped[Phase] = mapped_column(SAEnum(Phase), nullable=False, default=Phase.GROUP, index=True)
    status: Mapped[MatchStatus] = mapped_column(
        SAEnum(MatchStatus),
        nullable=False,
        default=MatchStatus.SCHEDULED,
        index=True,
    )

    # Group schedule round (circle method), null for knockout fixtures
    round_number: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    # Knockout tie identity
    bracket_position: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    leg: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    # Null means "to be scheduled"
    date: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    # Final scores, null until PLAYED
    home_score: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    away_score: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    # Relationships
    home_team: Mapped["Team"] = relationship(foreign_keys=[home_team_id])
    away_team: Mapped["Team"] = relationship(foreign_keys=[away_team_id])
    player_stats: Mapped[list["MatchPlayerStats"]] = relationship(
        back_populates="match",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return (
            f"<Match(id={self.id}, {self.home_team_id} v {self.away_team_id}, "
            f"phase={self.phase.value}, status={self.status.value})>"
        )

    @property
    def is_played(self) -> bool:
        return self.status == MatchStatus.PLAYED

    def involves(self, team_id: int) -> bool:
        """Check if a team takes part in this match."""
        return team_id in (self.home_team_id, self.away_team_id)


class MatchPlayerStats(Base):
    """
    Per-match stat line for one player.

    Only written for players with at least one non-zero value. These rows
    are the audit trail that makes a result edit reversible.
    """
    __tablename__ = "match_player_stats"
    __table_args__ = (
        UniqueConstraint("match_id", "player_id", name="uq_match_player_stats"),
        CheckConstraint(
            "goals >= 0 AND fouls >= 0 AND yellow_cards >= 0"
            " AND red_cards >= 0 AND blue_cards >= 0",
            name="ck_match_player_stats_non_negative",
        ),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    match_id: Mapped[int] = mapped_column(ForeignKey("matches.id"), nullable=False)
    player_id: Mapped[int] = mapped_column(ForeignKey("players.id"), nullable=False, index=True)

    goals: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    fouls: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    yellow_cards: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    red_cards: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    blue_cards: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    # Relationships
    match: Mapped["Match"] = relationship(back_populates="player_stats")
    player: Mapped["Player"] = relationship()

    def __repr__(self) -> str:
        return f"<MatchPlayerStats(match={self.match_id}, player={self.player_id})>"
