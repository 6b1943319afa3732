"""
Result Ledger

The single authoritative operation for creating or editing a match result.
Keeps TeamStats and Player counters consistent with the Match and
MatchPlayerStats audit trail. Every method works inside the caller's
session; the caller's unit of work commits or rolls back all of it.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from config import SCORING_SETTINGS, STANDINGS_SETTINGS, ScoringSettings, StandingsSettings
from engine.errors import InvalidInput, NotFound
from engine.standings import counts_toward_standings, match_deltas
from models.match import Match, MatchPlayerStats, MatchStatus, Phase
from models.player import Player, STAT_FIELDS
from models.schemas import MatchResultCreate, PlayerStatLine
from models.team import Team
from models.team_stats import TeamStats

logger = logging.getLogger(__name__)


class ResultLedger:
    """
    Records results as reversible increments.

    Editing a PLAYED match first removes everything its previous result
    added, then applies the new one, so re-recording identical input leaves
    every total unchanged.
    """

    def __init__(
        self,
        scoring: ScoringSettings = SCORING_SETTINGS,
        standings: StandingsSettings = STANDINGS_SETTINGS,
    ):
        self.scoring = scoring
        self.standings = standings

    def record_result(self, session: Session, result: MatchResultCreate) -> Match:
        """
        Create or edit a match result.

        Args:
            session: Open session; the caller commits
            result: Validated result payload

        Returns:
            The PLAYED match

        Raises:
            NotFound: match, team or player does not exist
            InvalidInput: teams disagree with the stored match, or a stat
                line names a player from neither team
        """
        for team_id in (result.home_team_id, result.away_team_id):
            if session.get(Team, team_id) is None:
                raise NotFound(f"Team not found: {team_id}")

        match: Optional[Match] = None
        if result.match_id is not None:
            match = session.get(Match, result.match_id, with_for_update=True)
            if match is None:
                raise NotFound(f"Match not found: {result.match_id}")
            if (match.home_team_id, match.away_team_id) != (result.home_team_id, result.away_team_id):
                raise InvalidInput(
                    f"Match {match.id} is {match.home_team_id} v {match.away_team_id}, "
                    f"not {result.home_team_id} v {result.away_team_id}"
                )

        players = self._load_players(
            session, result.player_stats, {result.home_team_id, result.away_team_id}
        )

        # 1. Undo the previous result
        if match is not None and match.is_played:
            self.reverse(session, match)

        # 2. Create or update the match
        if match is None:
            match = Match(
                home_team_id=result.home_team_id,
                away_team_id=result.away_team_id,
                phase=Phase.GROUP,
                date=datetime.now(timezone.utc),
            )
            session.add(match)

        match.home_score = result.home_score
        match.away_score = result.away_score
        match.status = MatchStatus.PLAYED

        # 3. Per-player audit rows and counters
        for player_id, line in result.player_stats.items():
            if line.is_empty:
                continue
            match.player_stats.append(MatchPlayerStats(
                player_id=player_id,
                **{field: getattr(line, field) for field in STAT_FIELDS},
            ))
            players[player_id].apply_stats(line)

        # 4. Standings
        if counts_toward_standings(match.phase, self.standings):
            self._apply_team_stats(session, match, sign=1)

        session.flush()
        logger.info(
            "Recorded result for match %s: %s %d-%d %s",
            match.id, match.home_team_id, match.home_score, match.away_score, match.away_team_id,
        )
        return match

    def reverse(self, session: Session, match: Match) -> None:
        """
        Remove everything a PLAYED match's current result contributed.

        Player counters are decremented by the stored per-match rows, which
        are then deleted; TeamStats are decremented using the stored score.
        The match itself is left as it is.
        """
        for row in list(match.player_stats):
            player = session.get(Player, row.player_id)
            if player is None:
                raise NotFound(f"Player not found: {row.player_id}")
            player.apply_stats(row, sign=-1)
            match.player_stats.remove(row)

        if (match.home_score is not None and match.away_score is not None
                and counts_toward_standings(match.phase, self.standings)):
            self._apply_team_stats(session, match, sign=-1)

        # Old rows must be gone before new rows for the same players go in
        session.flush()
        logger.debug("Reversed result of match %s", match.id)

    def _load_players(
        self,
        session: Session,
        player_stats: dict[int, PlayerStatLine],
        team_ids: set[int],
    ) -> dict[int, Player]:
        """Fetch every player named in the stat lines and check their team."""
        players: dict[int, Player] = {}
        for player_id in player_stats:
            player = session.get(Player, player_id)
            if player is None:
                raise NotFound(f"Player not found: {player_id}")
            if player.team_id not in team_ids:
                raise InvalidInput(f"Player {player_id} does not play for either team")
            players[player_id] = player
        return players

    def _apply_team_stats(self, session: Session, match: Match, sign: int) -> None:
        """Add (sign=1) or remove (sign=-1) the match's score from both teams' rows."""
        home_delta, away_delta = match_deltas(match.home_score, match.away_score, self.scoring)

        for team_id, delta in ((match.home_team_id, home_delta), (match.away_team_id, away_delta)):
            stats = session.scalar(select(TeamStats).where(TeamStats.team_id == team_id))
            if stats is None:
                if sign < 0:
                    raise NotFound(f"No statistics row for team {team_id}")
                # First contact
                stats = TeamStats.zero(team_id)
                session.add(stats)
            stats.apply(delta, sign)
