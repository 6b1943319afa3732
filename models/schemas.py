"""
Pydantic schemas for data validation.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from models.match import Phase, MatchStatus


# ============ Player Schemas ============

class PlayerCreate(BaseModel):
    """Schema for a roster entry at registration."""
    name: str = Field(..., min_length=1, max_length=200)
    number: int = Field(..., ge=0, le=999)

    @field_validator("name")
    @classmethod
    def name_not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Name cannot be empty")
        return v.strip()


class PlayerUpdate(PlayerCreate):
    """Roster entry on team edit. Entries without an id are new players."""
    id: Optional[int] = None


class PlayerResponse(BaseModel):
    """Schema for player response."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    number: int
    team_id: int
    goals: int
    fouls: int
    yellow_cards: int
    red_cards: int
    blue_cards: int


# ============ Team Schemas ============

def _unique_numbers(players: list) -> list:
    numbers = [p.number for p in players]
    if len(numbers) != len(set(numbers)):
        raise ValueError("Shirt numbers must be unique within a team")
    return players


class TeamCreate(BaseModel):
    """Schema for registering a new team."""
    name: str = Field(..., min_length=1, max_length=200)
    coach: str = Field("", max_length=200)
    phone: str = Field("", max_length=50)
    email: Optional[str] = Field(None, max_length=200)
    category: str = Field("Unica", max_length=50)
    players: list[PlayerCreate] = Field(default_factory=list)

    @field_validator("name")
    @classmethod
    def name_not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Name cannot be empty")
        return v.strip()

    @field_validator("players")
    @classmethod
    def numbers_unique(cls, v: list[PlayerCreate]) -> list[PlayerCreate]:
        return _unique_numbers(v)


class TeamUpdate(TeamCreate):
    """Schema for editing a team and syncing its roster."""
    id: int
    players: list[PlayerUpdate] = Field(default_factory=list)

    @field_validator("players")
    @classmethod
    def numbers_unique(cls, v: list[PlayerUpdate]) -> list[PlayerUpdate]:
        return _unique_numbers(v)


class TeamStatsResponse(BaseModel):
    """Schema for a standings row."""
    model_config = ConfigDict(from_attributes=True)

    played: int = 0
    won: int = 0
    drawn: int = 0
    lost: int = 0
    goals_for: int = 0
    goals_against: int = 0
    goal_difference: int = 0
    points: int = 0


class TeamResponse(BaseModel):
    """Schema for team response."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    coach: str
    phone: str
    email: Optional[str]
    category: str
    player_count: int
    stats: Optional[TeamStatsResponse] = None


# ============ Match Schemas ============

class PlayerStatLine(BaseModel):
    """One player's per-match numbers."""
    goals: int = Field(0, ge=0)
    fouls: int = Field(0, ge=0)
    yellow_cards: int = Field(0, ge=0)
    red_cards: int = Field(0, ge=0)
    blue_cards: int = Field(0, ge=0)

    @property
    def is_empty(self) -> bool:
        return not (self.goals or self.fouls or self.yellow_cards
                    or self.red_cards or self.blue_cards)


class MatchResultCreate(BaseModel):
    """Schema for recording (or re-recording) a match result."""
    match_id: Optional[int] = None
    home_team_id: int
    away_team_id: int
    home_score: int = Field(..., ge=0)
    away_score: int = Field(..., ge=0)
    player_stats: dict[int, PlayerStatLine] = Field(default_factory=dict)

    @model_validator(mode="after")
    def distinct_teams(self) -> "MatchResultCreate":
        if self.home_team_id == self.away_team_id:
            raise ValueError("A team cannot play itself")
        return self


class MatchScheduleCreate(BaseModel):
    """Schema for a manually scheduled fixture."""
    home_team_id: int
    away_team_id: int
    date: Optional[datetime] = None
    phase: Phase = Phase.GROUP

    @model_validator(mode="after")
    def distinct_teams(self) -> "MatchScheduleCreate":
        if self.home_team_id == self.away_team_id:
            raise ValueError("A team cannot play itself")
        return self


class MatchScheduleUpdate(BaseModel):
    """Schema for moving or re-pairing a fixture."""
    match_id: int
    date: Optional[datetime] = None
    home_team_id: Optional[int] = None
    away_team_id: Optional[int] = None
    phase: Optional[Phase] = None


class MatchResponse(BaseModel):
    """Schema for match response."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    home_team_id: int
    away_team_id: int
    phase: Phase
    status: MatchStatus
    round_number: Optional[int]
    bracket_position: Optional[int]
    leg: Optional[int]
    date: Optional[datetime]
    home_score: Optional[int]
    away_score: Optional[int]


class StandingRowResponse(TeamStatsResponse):
    """A ranked standings row."""
    rank: int
    team_id: int
    team_name: str
