"""
Tournament Service

Persistence-bound tournament operations. Each public method is one unit of
work: it commits when it returns and rolls back completely when it raises.
Raises only TournamentError subclasses; store failures surface as
StoreError and are never retried here.
"""

import logging
from contextlib import contextmanager
from typing import Generator, Iterable, Optional, Union

from pydantic import BaseModel, ValidationError
from sqlalchemy import select, or_, and_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker, selectinload

from config import (
    SCORING_SETTINGS, STANDINGS_SETTINGS, KNOCKOUT_SETTINGS, LEADERBOARD_SETTINGS,
    ScoringSettings, StandingsSettings, KnockoutSettings, LeaderboardSettings,
)
from engine import bracket
from engine.errors import (
    TournamentError, NotFound, InvalidInput, DuplicateName, DuplicatePhase,
    InsufficientTeams, StoreError,
)
from engine.phases import PHASE_ORDER, current_phase, plan_advance
from engine.schedule import build_round_robin
from engine.standings import StandingRow, compute_standings, rank_rows
from models.base import get_session
from models.match import Match, MatchPlayerStats, MatchStatus, Phase
from models.player import Player
from models.schemas import (
    TeamCreate, TeamUpdate, MatchResultCreate, MatchScheduleCreate, MatchScheduleUpdate,
)
from models.team import Team
from models.team_stats import TeamStats
from services.ledger import ResultLedger

logger = logging.getLogger(__name__)

KNOCKOUT_PHASES = [p for p in PHASE_ORDER if p.is_knockout]

# Above the 0-999 shirt range; only held inside update_team's transaction
PARKED_NUMBER_BASE = 1000


def _validate(schema: type[BaseModel], data: Union[BaseModel, dict]) -> BaseModel:
    """Coerce a dict (or another model) into the schema, as InvalidInput on failure."""
    if isinstance(data, schema):
        return data
    if isinstance(data, BaseModel):
        data = data.model_dump()
    try:
        return schema.model_validate(data)
    except ValidationError as e:
        raise InvalidInput(str(e)) from e


class TournamentService:
    """
    Registration, scheduling, result entry, standings and phase progression.

    Usage:
        service = TournamentService()
        team = service.create_team({"name": "Atletico", "players": [...]})
        service.generate_group_schedule()
        service.record_result({"match_id": 1, ...})
        service.advance()
    """

    def __init__(
        self,
        session_factory: Optional[sessionmaker] = None,
        scoring: ScoringSettings = SCORING_SETTINGS,
        standings: StandingsSettings = STANDINGS_SETTINGS,
        knockout: KnockoutSettings = KNOCKOUT_SETTINGS,
        leaderboard: LeaderboardSettings = LEADERBOARD_SETTINGS,
    ):
        self._factory = session_factory
        self.scoring = scoring
        self.standings = standings
        self.knockout = knockout
        self.leaderboard = leaderboard
        self.ledger = ResultLedger(scoring, standings)

    @contextmanager
    def _session(self) -> Generator[Session, None, None]:
        """One transaction; store failures become StoreError after rollback."""
        try:
            with get_session(self._factory) as session:
                yield session
        except TournamentError:
            raise
        except SQLAlchemyError as e:
            logger.exception("Transaction rolled back")
            raise StoreError(str(e)) from e

    # -------------------------------------------------------------------------
    # Teams
    # -------------------------------------------------------------------------

    def create_team(self, data: Union[TeamCreate, dict]) -> Team:
        """Register a team with its roster and a zeroed stats row."""
        data = _validate(TeamCreate, data)

        with self._session() as session:
            if session.scalar(select(Team.id).where(Team.name == data.name)) is not None:
                raise DuplicateName(f"A team named '{data.name}' already exists")

            team = Team(
                name=data.name,
                coach=data.coach,
                phone=data.phone,
                email=data.email,
                category=data.category,
                players=[Player.create(p.name, p.number) for p in data.players],
                stats=TeamStats.zero(),
            )
            session.add(team)
            session.flush()
            logger.info("Registered team %s (%s) with %d players", team.id, team.name, len(team.players))
            return team

    def update_team(self, data: Union[TeamUpdate, dict]) -> Team:
        """
        Edit a team and sync its roster.

        Players missing from the input are removed, players with an id are
        updated and players without one are added. A player who already has
        per-match stats cannot be removed.
        """
        data = _validate(TeamUpdate, data)

        with self._session() as session:
            team = self._load_team(session, data.id)

            clash = session.scalar(select(Team.id).where(Team.name == data.name, Team.id != team.id))
            if clash is not None:
                raise DuplicateName(f"A team named '{data.name}' already exists")

            team.name = data.name
            team.coach = data.coach
            team.phone = data.phone
            team.email = data.email
            team.category = data.category

            incoming_ids = {p.id for p in data.players if p.id is not None}
            current = {p.id: p for p in team.players}

            unknown = incoming_ids - current.keys()
            if unknown:
                raise NotFound(f"Players not on team {team.id}: {sorted(unknown)}")

            for player_id, player in current.items():
                if player_id in incoming_ids:
                    continue
                has_history = session.scalar(
                    select(MatchPlayerStats.id).where(MatchPlayerStats.player_id == player_id).limit(1)
                )
                if has_history is not None:
                    raise InvalidInput(
                        f"Player {player_id} has recorded match stats and cannot be removed"
                    )
                team.players.remove(player)

            # Removals first so a freed shirt number can be reused
            session.flush()

            # Renumbered players step aside first so swaps don't collide mid-flush
            renumbered = [
                current[entry.id] for entry in data.players
                if entry.id is not None and current[entry.id].number != entry.number
            ]
            for offset, player in enumerate(renumbered):
                player.number = PARKED_NUMBER_BASE + offset
            if renumbered:
                session.flush()

            for entry in data.players:
                if entry.id is not None:
                    current[entry.id].name = entry.name
                    current[entry.id].number = entry.number
                else:
                    team.players.append(Player.create(entry.name, entry.number))

            session.flush()
            logger.info("Updated team %s (%s)", team.id, team.name)
            return team

    def delete_team(self, team_id: int) -> None:
        """Remove a team that no match references."""
        with self._session() as session:
            team = self._load_team(session, team_id)
            referenced = session.scalar(
                select(Match.id).where(or_(Match.home_team_id == team_id,
                                           Match.away_team_id == team_id)).limit(1)
            )
            if referenced is not None:
                raise InvalidInput(f"Team {team_id} has matches and cannot be deleted")

            session.delete(team)
            logger.info("Deleted team %s", team_id)

    def get_teams(self) -> list[Team]:
        """All teams by name, with roster and stats."""
        with self._session() as session:
            return list(session.scalars(
                select(Team)
                .options(selectinload(Team.players), selectinload(Team.stats))
                .order_by(Team.name)
            ))

    def get_team(self, team_id: int) -> Team:
        with self._session() as session:
            return self._load_team(session, team_id)

    # -------------------------------------------------------------------------
    # Scheduling
    # -------------------------------------------------------------------------

    def generate_group_schedule(self, team_ids: Optional[Iterable[int]] = None) -> list[Match]:
        """
        Create the round-robin group fixtures.

        Args:
            team_ids: Teams to schedule, in seeding order (default: every team by id)

        Raises:
            InsufficientTeams: fewer than two teams
            DuplicatePhase: group fixtures already exist
        """
        with self._session() as session:
            if team_ids is None:
                ids = list(session.scalars(select(Team.id).order_by(Team.id)))
            else:
                ids = list(team_ids)
                if len(ids) != len(set(ids)):
                    raise InvalidInput("A team is listed more than once")
                for team_id in ids:
                    self._load_team(session, team_id)

            if len(ids) < 2:
                raise InsufficientTeams(f"Need at least 2 teams to schedule, have {len(ids)}")

            existing = session.scalar(select(Match.id).where(Match.phase == Phase.GROUP).limit(1))
            if existing is not None:
                raise DuplicatePhase("Group fixtures have already been generated")

            matches = [
                Match(
                    home_team_id=fixture.home_team_id,
                    away_team_id=fixture.away_team_id,
                    phase=Phase.GROUP,
                    status=MatchStatus.SCHEDULED,
                    round_number=fixture.round_number,
                )
                for fixture in build_round_robin(ids)
            ]
            session.add_all(matches)
            session.flush()
            logger.info("Generated %d group fixtures for %d teams", len(matches), len(ids))
            return matches

    def schedule_match(self, data: Union[MatchScheduleCreate, dict]) -> Match:
        """Create a single fixture by hand."""
        data = _validate(MatchScheduleCreate, data)

        with self._session() as session:
            self._load_team(session, data.home_team_id)
            self._load_team(session, data.away_team_id)

            match = Match(
                home_team_id=data.home_team_id,
                away_team_id=data.away_team_id,
                phase=data.phase,
                status=MatchStatus.SCHEDULED,
                date=data.date,
            )
            session.add(match)
            session.flush()
            logger.info("Scheduled %s match %s", match.phase.value, match.id)
            return match

    def update_match_schedule(self, data: Union[MatchScheduleUpdate, dict]) -> Match:
        """
        Move a fixture, or re-pair it while it is still unplayed.

        A PLAYED match may only change its date; changing teams or phase
        would leave its recorded contribution attached to the wrong rows.
        """
        data = _validate(MatchScheduleUpdate, data)

        with self._session() as session:
            match = self._load_match(session, data.match_id)

            home_id = data.home_team_id or match.home_team_id
            away_id = data.away_team_id or match.away_team_id
            phase = data.phase or match.phase

            repaired = (home_id, away_id, phase) != (match.home_team_id, match.away_team_id, match.phase)
            if repaired and match.is_played:
                raise InvalidInput(f"Match {match.id} is played; only its date can change")
            if home_id == away_id:
                raise InvalidInput("A team cannot play itself")

            self._load_team(session, home_id)
            self._load_team(session, away_id)

            match.date = data.date
            match.home_team_id = home_id
            match.away_team_id = away_id
            match.phase = phase
            session.flush()
            return match

    def delete_match(self, match_id: int) -> None:
        """Delete a fixture, first reversing its result if it was played."""
        with self._session() as session:
            match = self._load_match(session, match_id, for_update=True)
            if match.is_played:
                self.ledger.reverse(session, match)
            session.delete(match)
            logger.info("Deleted match %s", match_id)

    # -------------------------------------------------------------------------
    # Results and standings
    # -------------------------------------------------------------------------

    def record_result(self, data: Union[MatchResultCreate, dict]) -> Match:
        """Create or edit a match result through the ledger, atomically."""
        data = _validate(MatchResultCreate, data)
        with self._session() as session:
            return self.ledger.record_result(session, data)

    def get_standings(self) -> list[StandingRow]:
        """Ranked table from the live TeamStats rows."""
        with self._session() as session:
            return self._live_rows(session)

    def recompute_standings(self) -> list[StandingRow]:
        """Ranked table rebuilt from match history (audit path)."""
        with self._session() as session:
            return self._recomputed_rows(session)

    def standings_drift(self) -> list[int]:
        """Teams whose live stats differ from the recomputed table."""
        with self._session() as session:
            live = {r.team_id: r.counters() for r in self._live_rows(session)}
            audit = {r.team_id: r.counters() for r in self._recomputed_rows(session)}
            return sorted(team_id for team_id in audit if live.get(team_id) != audit[team_id])

    def rebuild_team_stats(self) -> list[int]:
        """
        Repair TeamStats from match history.

        Returns:
            Ids of the teams whose rows changed
        """
        with self._session() as session:
            changed = []
            for row in self._recomputed_rows(session):
                stats = session.scalar(select(TeamStats).where(TeamStats.team_id == row.team_id))
                if stats is None:
                    stats = TeamStats.zero(row.team_id)
                    session.add(stats)
                if stats.overwrite(row.counters()):
                    changed.append(row.team_id)
            session.flush()
            if changed:
                logger.warning("Rebuilt drifted stats for teams %s", changed)
            return sorted(changed)

    # -------------------------------------------------------------------------
    # Phase progression
    # -------------------------------------------------------------------------

    def current_phase(self) -> Phase:
        """The most advanced phase with any match; GROUP when there are none."""
        with self._session() as session:
            return current_phase(session.scalars(select(Match.phase).distinct()))

    def advance(self) -> list[Match]:
        """
        Generate the next phase's fixtures.

        Raises:
            PhaseComplete, MatchesPending, DuplicatePhase, UnresolvedTie,
            InsufficientTeams: see engine.phases.plan_advance
        """
        with self._session() as session:
            phases = set(session.scalars(select(Match.phase).distinct()))
            phase = current_phase(phases)
            phase_matches = list(session.scalars(
                select(Match).where(Match.phase == phase).order_by(Match.id)
            ))

            ranked: list[int] = []
            if phase == Phase.GROUP:
                ranked = [row.team_id for row in self._live_rows(session)]
                # Only teams that took part in the group phase can qualify
                entrants = {t for m in phase_matches for t in (m.home_team_id, m.away_team_id)}
                if entrants:
                    ranked = [team_id for team_id in ranked if team_id in entrants]

            plan = plan_advance(phase, phase_matches, phases, ranked, self.knockout)

            created = [
                Match(
                    home_team_id=fixture.home_team_id,
                    away_team_id=fixture.away_team_id,
                    phase=fixture.phase,
                    status=MatchStatus.SCHEDULED,
                    bracket_position=fixture.position,
                    leg=fixture.leg,
                )
                for fixture in plan.fixtures
            ]
            session.add_all(created)
            session.flush()
            logger.info(
                "Advanced from %s to %s: %d fixtures",
                plan.source.value, plan.target.value, len(created),
            )
            return created

    def aggregate_winner(self, team_a: int, team_b: int) -> Optional[int]:
        """
        Winner of the most advanced knockout tie between two teams.

        Returns:
            The winning team id, or None while undetermined (a leg is
            unplayed or the aggregate is level)

        Raises:
            NotFound: the teams never met in a knockout phase
        """
        if team_a == team_b:
            raise InvalidInput("A tie needs two different teams")

        with self._session() as session:
            meetings = list(session.scalars(
                select(Match)
                .where(Match.phase.in_(KNOCKOUT_PHASES))
                .where(or_(
                    and_(Match.home_team_id == team_a, Match.away_team_id == team_b),
                    and_(Match.home_team_id == team_b, Match.away_team_id == team_a),
                ))
                .order_by(Match.id)
            ))
            if not meetings:
                raise NotFound(f"Teams {team_a} and {team_b} have no knockout tie")

            latest = max((m.phase for m in meetings), key=PHASE_ORDER.index)
            legs = sorted((m for m in meetings if m.phase == latest), key=lambda m: (m.leg or 1, m.id))
            return bracket.aggregate_winner(legs)

    # -------------------------------------------------------------------------
    # Match queries
    # -------------------------------------------------------------------------

    def get_upcoming_matches(self) -> list[Match]:
        """Unplayed fixtures, soonest first, undated last."""
        with self._session() as session:
            return list(session.scalars(
                select(Match)
                .where(Match.status == MatchStatus.SCHEDULED)
                .order_by(Match.date.asc().nulls_last(), Match.id)
            ))

    def get_played_matches(self) -> list[Match]:
        """Played matches, most recent first."""
        with self._session() as session:
            return list(session.scalars(
                select(Match)
                .where(Match.status == MatchStatus.PLAYED)
                .order_by(Match.date.desc().nulls_last(), Match.id.desc())
            ))

    def get_matches_by_phase(self, phase: Phase) -> list[Match]:
        with self._session() as session:
            return list(session.scalars(
                select(Match)
                .where(Match.phase == phase)
                .order_by(Match.bracket_position, Match.leg, Match.id)
            ))

    def get_knockout_matches(self) -> list[Match]:
        with self._session() as session:
            matches = list(session.scalars(select(Match).where(Match.phase.in_(KNOCKOUT_PHASES))))
            return sorted(
                matches,
                key=lambda m: (PHASE_ORDER.index(m.phase), m.bracket_position or 0, m.leg or 1, m.id),
            )

    def get_match_details(self, match_id: int) -> Match:
        """A match with both rosters and its per-player stat rows."""
        with self._session() as session:
            match = session.scalar(
                select(Match)
                .where(Match.id == match_id)
                .options(
                    selectinload(Match.home_team).selectinload(Team.players),
                    selectinload(Match.away_team).selectinload(Team.players),
                    selectinload(Match.player_stats),
                )
            )
            if match is None:
                raise NotFound(f"Match not found: {match_id}")
            return match

    # -------------------------------------------------------------------------
    # Leaderboards
    # -------------------------------------------------------------------------

    def top_scorers(self) -> list[Player]:
        """Players at or above the goal threshold, most goals first."""
        with self._session() as session:
            return list(session.scalars(
                select(Player)
                .where(Player.goals >= self.leaderboard.top_scorer_min_goals)
                .options(selectinload(Player.team))
                .order_by(Player.goals.desc(), Player.name)
            ))

    def best_defense(self) -> list[StandingRow]:
        """Teams that have played, within the conceded threshold, fewest conceded first."""
        with self._session() as session:
            rows = session.execute(
                select(Team, TeamStats)
                .join(TeamStats, TeamStats.team_id == Team.id)
                .where(TeamStats.played > 0)
                .where(TeamStats.goals_against <= self.leaderboard.best_defense_max_goals_against)
                .order_by(TeamStats.goals_against, Team.id)
            ).all()

            table = []
            for position, (team, stats) in enumerate(rows, start=1):
                row = StandingRow.from_stats(team.id, team.name, stats)
                row.rank = position
                table.append(row)
            return table

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _load_team(self, session: Session, team_id: int) -> Team:
        team = session.scalar(
            select(Team)
            .where(Team.id == team_id)
            .options(selectinload(Team.players), selectinload(Team.stats))
        )
        if team is None:
            raise NotFound(f"Team not found: {team_id}")
        return team

    def _load_match(self, session: Session, match_id: int, for_update: bool = False) -> Match:
        match = session.get(Match, match_id, with_for_update=for_update)
        if match is None:
            raise NotFound(f"Match not found: {match_id}")
        return match

    def _live_rows(self, session: Session) -> list[StandingRow]:
        teams = session.scalars(select(Team).options(selectinload(Team.stats)).order_by(Team.id))
        return rank_rows(
            [StandingRow.from_stats(team.id, team.name, team.stats) for team in teams],
            self.standings,
        )

    def _recomputed_rows(self, session: Session) -> list[StandingRow]:
        teams = list(session.scalars(select(Team).order_by(Team.id)))
        matches = session.scalars(select(Match).order_by(Match.id))
        return compute_standings(teams, matches, self.standings, self.scoring)
