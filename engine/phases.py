"""
Phase State Machine

GROUP -> QUARTER_FINAL -> SEMI_FINAL -> FINAL. Works out the active phase
from existing matches, validates that it is finished and plans the next
phase's fixtures. Planning is pure; services.tournament persists the plan.
"""

from dataclasses import dataclass, field
from typing import Iterable, Sequence

from config import KNOCKOUT_SETTINGS, KnockoutSettings
from engine.bracket import (
    Matchup, KnockoutFixture, seed_pairings, pair_winners, expand_legs,
    group_ties, resolve_tie,
)
from engine.errors import (
    DuplicatePhase, InsufficientTeams, MatchesPending, PhaseComplete,
)
from models.match import Phase, MatchStatus


# Stage order for progression
PHASE_ORDER = [
    Phase.GROUP,
    Phase.QUARTER_FINAL,
    Phase.SEMI_FINAL,
    Phase.FINAL,
]

# Knockout rounds fed by the previous round's winners, and the field size they need
KNOCKOUT_NEXT = {
    Phase.QUARTER_FINAL: Phase.SEMI_FINAL,
    Phase.SEMI_FINAL: Phase.FINAL,
}
FIELD_SIZE = {
    Phase.QUARTER_FINAL: 8,
    Phase.SEMI_FINAL: 4,
    Phase.FINAL: 2,
}


@dataclass
class PhasePlan:
    """What advance() is about to create."""
    source: Phase
    target: Phase
    matchups: list[Matchup] = field(default_factory=list)
    fixtures: list[KnockoutFixture] = field(default_factory=list)


def current_phase(phases: Iterable[Phase]) -> Phase:
    """
    The most advanced phase that has any match.

    GROUP when there are no matches at all.
    """
    present = set(phases)
    for phase in reversed(PHASE_ORDER):
        if phase in present:
            return phase
    return Phase.GROUP


def legs_for(phase: Phase, settings: KnockoutSettings = KNOCKOUT_SETTINGS) -> int:
    """Legs per tie in a knockout phase."""
    return {
        Phase.QUARTER_FINAL: settings.quarter_final_legs,
        Phase.SEMI_FINAL: settings.semi_final_legs,
        Phase.FINAL: settings.final_legs,
    }[phase]


def phase_after_group(
    ranked_count: int,
    settings: KnockoutSettings = KNOCKOUT_SETTINGS,
) -> Phase:
    """
    First knockout phase for the number of ranked teams.

    8 or more -> QUARTER_FINAL, 4-7 -> SEMI_FINAL, 2-3 -> FINAL.
    """
    if ranked_count >= settings.quarter_final_min_teams:
        return Phase.QUARTER_FINAL
    if ranked_count >= settings.semi_final_min_teams:
        return Phase.SEMI_FINAL
    if ranked_count >= settings.final_min_teams:
        return Phase.FINAL
    raise InsufficientTeams(
        f"Need at least {settings.final_min_teams} ranked teams for a knockout phase, "
        f"have {ranked_count}"
    )


def plan_advance(
    current: Phase,
    current_matches: Sequence,
    existing_phases: Iterable[Phase],
    ranked_team_ids: Sequence[int],
    settings: KnockoutSettings = KNOCKOUT_SETTINGS,
) -> PhasePlan:
    """
    Validate the current phase and plan the next one.

    Args:
        current: Phase returned by current_phase()
        current_matches: Every match of the current phase
        existing_phases: Phases that already hold at least one match
        ranked_team_ids: Standings order, used when leaving the group phase

    Raises:
        PhaseComplete: the tournament is already at the final
        MatchesPending: a current-phase match has no result, or a knockout
            tie is missing a leg
        DuplicatePhase: the target phase already has matches
        UnresolvedTie: a knockout tie is level
        InsufficientTeams: too few teams or winners for the target phase
    """
    if current == Phase.FINAL:
        raise PhaseComplete("The tournament is already in the final phase")

    pending = [m for m in current_matches if m.status != MatchStatus.PLAYED]
    if pending:
        raise MatchesPending(
            f"{len(pending)} {current.value} match(es) still have no result"
        )

    if current == Phase.GROUP:
        target = phase_after_group(len(ranked_team_ids), settings)
    else:
        target = KNOCKOUT_NEXT[current]

    if target in set(existing_phases):
        raise DuplicatePhase(f"{target.value} fixtures have already been generated")

    if current == Phase.GROUP:
        matchups = seed_pairings(ranked_team_ids, FIELD_SIZE[target])
    else:
        legs = legs_for(current, settings)
        ties = group_ties(current_matches)
        for tie in ties:
            if len(tie) != legs:
                raise MatchesPending(
                    f"{current.value} tie between teams {tie[0].home_team_id} and "
                    f"{tie[0].away_team_id} has {len(tie)} of {legs} leg(s)"
                )
        winners = [resolve_tie(tie) for tie in ties]
        if len(winners) != FIELD_SIZE[target]:
            raise InsufficientTeams(
                f"{target.value} needs {FIELD_SIZE[target]} teams, "
                f"{current.value} produced {len(winners)} winner(s)"
            )
        matchups = pair_winners(winners)

    return PhasePlan(
        source=current,
        target=target,
        matchups=matchups,
        fixtures=expand_legs(matchups, target, legs_for(target, settings)),
    )
