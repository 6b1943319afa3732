"""
CupManager Services

Persistence-bound operations: result ledger, tournament service, API
facade and CSV export.
"""

from services.ledger import ResultLedger
from services.tournament import TournamentService
from services.api import TournamentAPI, Outcome
from services.export import StandingsExporter

__all__ = ["ResultLedger", "TournamentService", "TournamentAPI", "Outcome", "StandingsExporter"]
