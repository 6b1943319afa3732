"""
TeamStats model - running group table totals for one team.
"""

from typing import TYPE_CHECKING

from sqlalchemy import Integer, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship

from models.base import Base

if TYPE_CHECKING:
    from models.team import Team


# Counters that move together with every recorded result
COUNTER_FIELDS = (
    "played", "won", "drawn", "lost",
    "goals_for", "goals_against", "goal_difference", "points",
)


class TeamStats(Base):
    """
    Materialized standings row for a team.

    Always equals the sum of contributions of the team's counted PLAYED
    matches. goal_difference == goals_for - goals_against at all times.
    """
    __tablename__ = "team_stats"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    team_id: Mapped[int] = mapped_column(ForeignKey("teams.id"), nullable=False, unique=True)
    team: Mapped["Team"] = relationship(back_populates="stats")

    played: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    won: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    drawn: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    lost: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    goals_for: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    goals_against: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    goal_difference: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    points: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    # Optimistic lock: concurrent increments to one team must serialize
    version_id: Mapped[int] = mapped_column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version_id}

    def __repr__(self) -> str:
        return f"<TeamStats(team={self.team_id}, pts={self.points}, gd={self.goal_difference})>"

    @classmethod
    def zero(cls, team_id: int = None) -> "TeamStats":
        """A fresh row with every counter at zero."""
        return cls(team_id=team_id, **{field: 0 for field in COUNTER_FIELDS})

    def apply(self, delta, sign: int = 1) -> None:
        """Add (sign=1) or reverse (sign=-1) a StatDelta."""
        for field in COUNTER_FIELDS:
            setattr(self, field, getattr(self, field) + sign * getattr(delta, field))

    def overwrite(self, delta) -> bool:
        """Replace every counter from a recomputed row. Returns True if anything changed."""
        changed = False
        for field in COUNTER_FIELDS:
            value = getattr(delta, field)
            if getattr(self, field) != value:
                setattr(self, field, value)
                changed = True
        return changed
