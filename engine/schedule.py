"""
Schedule Generator

Round-robin fixture list for the group phase using the circle method.
"""

from dataclasses import dataclass
from typing import Hashable, Iterable


# Sentinel that fills the odd slot; pairings against it are byes
BYE = object()


@dataclass(frozen=True)
class Fixture:
    """A scheduled pairing in the group phase."""
    round_number: int
    home_team_id: Hashable
    away_team_id: Hashable


def build_round_robin(team_ids: Iterable[Hashable]) -> list[Fixture]:
    """
    Build a single round robin where every team meets every other once.

    The first team stays fixed while the rest rotate one step clockwise
    per round; in each round position i hosts position size-1-i. The same
    input order always yields the same schedule.

    Args:
        team_ids: Team identifiers in seeding order

    Returns:
        N*(N-1)/2 fixtures, or an empty list for fewer than two teams
    """
    rotation: list = list(team_ids)
    if len(rotation) < 2:
        return []

    if len(rotation) % 2 == 1:
        rotation.append(BYE)

    size = len(rotation)
    half = size // 2
    fixtures: list[Fixture] = []

    for round_idx in range(size - 1):
        for idx in range(half):
            home = rotation[idx]
            away = rotation[size - 1 - idx]
            if home is BYE or away is BYE:
                continue
            fixtures.append(Fixture(round_idx + 1, home, away))

        # Keep first fixed, last moves to second
        rotation = [rotation[0], rotation[-1], *rotation[1:-1]]

    return fixtures


def rounds_of(fixtures: Iterable[Fixture]) -> dict[int, list[Fixture]]:
    """Group fixtures by round number."""
    rounds: dict[int, list[Fixture]] = {}
    for fixture in fixtures:
        rounds.setdefault(fixture.round_number, []).append(fixture)
    return rounds
