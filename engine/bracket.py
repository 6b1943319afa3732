"""
Knockout Pairing & Aggregate Resolver

Seeds knockout matchups from standings or from the previous round's
winners, expands them into single or two-legged fixtures, and resolves
ties by aggregate score.

The bracket is an explicit list of matchups with stable positions, so the
legs of one tie are identified by position rather than inferred from the
teams that happen to share a fixture.
"""

from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

from engine.errors import InsufficientTeams, InvalidInput, MatchesPending, UnresolvedTie
from models.match import Phase, MatchStatus


@dataclass(frozen=True)
class Matchup:
    """
    A knockout tie between two teams.

    ``high`` is the better-placed side (lower seed number), ``low`` the other.
    Seeds are standings ranks when seeded from the group phase and the
    1-based position of the feeding tie in later rounds.
    """
    position: int
    high_team_id: int
    low_team_id: int
    high_seed: int
    low_seed: int


@dataclass(frozen=True)
class KnockoutFixture:
    """A fixture to be created for a knockout phase."""
    phase: Phase
    position: int
    home_team_id: int
    away_team_id: int
    leg: Optional[int] = None


@dataclass(frozen=True)
class TieOutcome:
    """Aggregate of one tie. winner_id is None while undetermined."""
    team_a: int
    team_b: int
    goals_a: int
    goals_b: int
    winner_id: Optional[int]

    @property
    def is_level(self) -> bool:
        return self.goals_a == self.goals_b


def seed_pairings(ranked_team_ids: Sequence[int], bracket_size: int) -> list[Matchup]:
    """
    Pair the top ``bracket_size`` teams 1 v N, 2 v N-1, ...

    Args:
        ranked_team_ids: Team ids in standings order
        bracket_size: Number of qualifiers (even)

    Returns:
        bracket_size / 2 matchups, position 0 holding the top seed
    """
    if bracket_size < 2 or bracket_size % 2:
        raise InvalidInput(f"Bracket size must be an even number >= 2, got {bracket_size}")
    if len(ranked_team_ids) < bracket_size:
        raise InsufficientTeams(
            f"Need {bracket_size} ranked teams, have {len(ranked_team_ids)}"
        )

    qualifiers = list(ranked_team_ids[:bracket_size])
    return [
        Matchup(
            position=i,
            high_team_id=qualifiers[i],
            low_team_id=qualifiers[bracket_size - 1 - i],
            high_seed=i + 1,
            low_seed=bracket_size - i,
        )
        for i in range(bracket_size // 2)
    ]


def pair_winners(winner_ids: Sequence[int]) -> list[Matchup]:
    """
    Build the next round from winners listed in tie-position order.

    Follows the bracket: the winner of the first tie meets the winner of the
    last, the second meets the second-to-last, so the two top seeds can only
    meet in the final.
    """
    count = len(winner_ids)
    if count < 2 or count % 2:
        raise InsufficientTeams(f"Cannot pair {count} winners")

    return [
        Matchup(
            position=i,
            high_team_id=winner_ids[i],
            low_team_id=winner_ids[count - 1 - i],
            high_seed=i + 1,
            low_seed=count - i,
        )
        for i in range(count // 2)
    ]


def expand_legs(matchups: Iterable[Matchup], phase: Phase, legs: int = 1) -> list[KnockoutFixture]:
    """
    Turn matchups into fixtures.

    Single ties are hosted by the higher seed. Two-legged ties open at the
    lower seed's ground and the higher seed hosts the return leg. Away goals
    carry no extra weight.
    """
    if legs not in (1, 2):
        raise InvalidInput(f"A tie has one or two legs, got {legs}")

    fixtures: list[KnockoutFixture] = []
    for matchup in matchups:
        if legs == 1:
            fixtures.append(KnockoutFixture(
                phase=phase,
                position=matchup.position,
                home_team_id=matchup.high_team_id,
                away_team_id=matchup.low_team_id,
            ))
            continue

        fixtures.append(KnockoutFixture(
            phase=phase,
            position=matchup.position,
            home_team_id=matchup.low_team_id,
            away_team_id=matchup.high_team_id,
            leg=1,
        ))
        fixtures.append(KnockoutFixture(
            phase=phase,
            position=matchup.position,
            home_team_id=matchup.high_team_id,
            away_team_id=matchup.low_team_id,
            leg=2,
        ))
    return fixtures


def tie_outcome(legs: Sequence) -> TieOutcome:
    """
    Aggregate the goals of every leg of one tie.

    Args:
        legs: Match-like objects for a single tie, in leg order

    Returns:
        TieOutcome; winner_id is None if any leg is unplayed or the
        aggregate is level
    """
    if not legs:
        raise InvalidInput("A tie needs at least one match")

    team_a = legs[0].home_team_id
    team_b = legs[0].away_team_id
    goals = {team_a: 0, team_b: 0}
    complete = True

    for leg in legs:
        if {leg.home_team_id, leg.away_team_id} != {team_a, team_b}:
            raise InvalidInput(
                f"Match {getattr(leg, 'id', '?')} is not between teams {team_a} and {team_b}"
            )
        if leg.status != MatchStatus.PLAYED or leg.home_score is None or leg.away_score is None:
            complete = False
            continue
        goals[leg.home_team_id] += leg.home_score
        goals[leg.away_team_id] += leg.away_score

    winner_id = None
    if complete and goals[team_a] != goals[team_b]:
        winner_id = team_a if goals[team_a] > goals[team_b] else team_b

    return TieOutcome(
        team_a=team_a,
        team_b=team_b,
        goals_a=goals[team_a],
        goals_b=goals[team_b],
        winner_id=winner_id,
    )


def aggregate_winner(legs: Sequence) -> Optional[int]:
    """Winning team id of a tie, or None when undetermined."""
    return tie_outcome(legs).winner_id


def resolve_tie(legs: Sequence) -> int:
    """
    Winning team id of a finished tie.

    Raises:
        MatchesPending: a leg has no result yet
        UnresolvedTie: the aggregate is level
    """
    outcome = tie_outcome(legs)
    if any(leg.status != MatchStatus.PLAYED for leg in legs):
        raise MatchesPending(
            f"Tie between teams {outcome.team_a} and {outcome.team_b} has unplayed legs"
        )
    if outcome.winner_id is None:
        raise UnresolvedTie(outcome.team_a, outcome.team_b)
    return outcome.winner_id


def group_ties(matches: Iterable) -> list[list]:
    """
    Split a knockout phase's matches into ties, ordered by bracket position.

    Matches without a bracket position (scheduled by hand) are grouped by
    their pair of teams and placed after the positioned ties in order of
    first appearance.
    """
    positioned: dict[int, list] = {}
    loose: dict[frozenset, list] = {}

    for match in matches:
        if match.bracket_position is not None:
            positioned.setdefault(match.bracket_position, []).append(match)
        else:
            pair = frozenset((match.home_team_id, match.away_team_id))
            loose.setdefault(pair, []).append(match)

    ties = [positioned[pos] for pos in sorted(positioned)]
    ties.extend(loose.values())
    return [sorted(tie, key=lambda m: (m.leg or 1, getattr(m, "id", None) or 0)) for tie in ties]
