"""
Player model with cumulative tournament counters.
"""

from typing import TYPE_CHECKING

from sqlalchemy import String, Integer, ForeignKey, UniqueConstraint, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from models.base import Base

if TYPE_CHECKING:
    from models.team import Team


# Per-player counters kept in step with MatchPlayerStats rows
STAT_FIELDS = ("goals", "fouls", "yellow_cards", "red_cards", "blue_cards")


class Player(Base):
    """
    A player on a team roster.

    Shirt numbers are unique within a team. Counters are only changed by
    the result ledger, as increment/decrement pairs.
    """
    __tablename__ = "players"
    __table_args__ = (
        UniqueConstraint("team_id", "number", name="uq_players_team_number"),
        CheckConstraint("number >= 0", name="ck_players_number"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    number: Mapped[int] = mapped_column(Integer, nullable=False)

    team_id: Mapped[int] = mapped_column(ForeignKey("teams.id"), nullable=False, index=True)
    team: Mapped["Team"] = relationship(back_populates="players")

    # Cumulative counters
    goals: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    fouls: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    yellow_cards: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    red_cards: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    blue_cards: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    # Optimistic lock against lost counter updates
    version_id: Mapped[int] = mapped_column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version_id}

    def __repr__(self) -> str:
        return f"<Player(id={self.id}, name='{self.name}', number={self.number})>"

    @classmethod
    def create(cls, name: str, number: int, team_id: int = None) -> "Player":
        """Factory method to create a player with zeroed counters."""
        return cls(
            name=name,
            number=number,
            team_id=team_id,
            **{field: 0 for field in STAT_FIELDS},
        )

    def apply_stats(self, line, sign: int = 1) -> None:
        """Add (sign=1) or remove (sign=-1) a per-match stat line."""
        for field in STAT_FIELDS:
            setattr(self, field, getattr(self, field) + sign * getattr(line, field))
