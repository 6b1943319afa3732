"""
Team model for tournament registration.
"""

from typing import TYPE_CHECKING, Optional

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from models.base import Base

if TYPE_CHECKING:
    from models.player import Player
    from models.team_stats import TeamStats


class Team(Base):
    """
    A team registered in the tournament.

    Owns its roster and exactly one TeamStats row. Coach and contact fields
    are opaque to the engine.
    """
    __tablename__ = "teams"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False, unique=True)

    # Contact details
    coach: Mapped[str] = mapped_column(String(200), nullable=False, default="")
    phone: Mapped[str] = mapped_column(String(50), nullable=False, default="")
    email: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    category: Mapped[str] = mapped_column(String(50), nullable=False, default="Unica")

    # Relationships
    players: Mapped[list["Player"]] = relationship(
        back_populates="team",
        cascade="all, delete-orphan",
        order_by="Player.number",
    )
    stats: Mapped[Optional["TeamStats"]] = relationship(
        back_populates="team",
        cascade="all, delete-orphan",
        uselist=False,
    )

    def __repr__(self) -> str:
        return f"<Team(id={self.id}, name='{self.name}')>"

    @property
    def player_count(self) -> int:
        """Number of players on the roster."""
        return len(self.players)

    def player_by_number(self, number: int) -> Optional["Player"]:
        """Find a roster player by shirt number."""
        return next((p for p in self.players if p.number == number), None)
