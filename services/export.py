"""
Standings Export

CSV tables of the current standings and the top scorers, for printing or
spreadsheet analysis.
"""

import csv
import logging
from datetime import datetime
from pathlib import Path
from typing import Iterable, Union

from engine.standings import StandingRow

logger = logging.getLogger(__name__)

STANDINGS_HEADER = ["Pos", "Team", "P", "W", "D", "L", "GF", "GA", "GD", "Pts"]
SCORERS_HEADER = ["Pos", "Player", "Number", "Team", "Goals", "Yellow", "Red", "Blue"]


class StandingsExporter:
    """
    Write tournament tables as CSV.

    Supports:
    - League table (StandingRow list)
    - Top scorers (Player list with team loaded)
    """

    def __init__(self, title: str = "Tournament"):
        self.title = title

    def export_standings_csv(self, rows: Iterable[StandingRow], filepath: Union[str, Path]) -> bool:
        """
        Export a ranked standings table.

        Args:
            rows: Ranked rows, as returned by get_standings()
            filepath: Output file path

        Returns:
            True if export successful, False otherwise
        """
        try:
            with open(filepath, "w", newline="", encoding="utf-8") as f:
                writer = csv.writer(f)
                self._write_preamble(writer, "Standings")

                writer.writerow(STANDINGS_HEADER)
                for row in rows:
                    writer.writerow([
                        row.rank,
                        row.team_name,
                        row.played,
                        row.won,
                        row.drawn,
                        row.lost,
                        row.goals_for,
                        row.goals_against,
                        row.goal_difference,
                        row.points,
                    ])
            return True

        except OSError:
            logger.exception("Standings export to %s failed", filepath)
            return False

    def export_scorers_csv(self, players: Iterable, filepath: Union[str, Path]) -> bool:
        """Export the scorers table. Players must have ``team`` loaded."""
        try:
            with open(filepath, "w", newline="", encoding="utf-8") as f:
                writer = csv.writer(f)
                self._write_preamble(writer, "Top Scorers")

                writer.writerow(SCORERS_HEADER)
                for position, player in enumerate(players, start=1):
                    writer.writerow([
                        position,
                        player.name,
                        player.number,
                        player.team.name if player.team is not None else "",
                        player.goals,
                        player.yellow_cards,
                        player.red_cards,
                        player.blue_cards,
                    ])
            return True

        except OSError:
            logger.exception("Scorers export to %s failed", filepath)
            return False

    def _write_preamble(self, writer, table: str) -> None:
        writer.writerow([f"{self.title} - {table}"])
        writer.writerow(["Generated", datetime.now().strftime("%Y-%m-%d %H:%M")])
        writer.writerow([])
