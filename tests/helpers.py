"""
Helpers for driving a tournament through the service in tests.
"""

from models.match import MatchStatus


def play(service, match, home_score: int, away_score: int, player_stats=None):
    """Record a result for an existing match."""
    return service.record_result({
        "match_id": match.id,
        "home_team_id": match.home_team_id,
        "away_team_id": match.away_team_id,
        "home_score": home_score,
        "away_score": away_score,
        "player_stats": player_stats or {},
    })


def play_phase(service, phase, margin: int = 1):
    """Play every unplayed match of a phase; the lower team id always wins by ``margin``."""
    for match in service.get_matches_by_phase(phase):
        if match.status == MatchStatus.PLAYED:
            continue
        if match.home_team_id < match.away_team_id:
            play(service, match, margin, 0)
        else:
            play(service, match, 0, margin)
