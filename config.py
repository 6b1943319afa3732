"""
CupManager Configuration

Centralized settings, paths, and constants for the tournament engine.
"""

import enum
import logging
import os
from pathlib import Path
from dataclasses import dataclass
import appdirs


# Application info
APP_NAME = "CupManager"
APP_AUTHOR = "CupManager"
APP_VERSION = "1.0.0"

# Overrides the sqlite file under the data directory
DATABASE_URL_ENV = "CUPMANAGER_DATABASE_URL"


class TieBreak(enum.Enum):
    """Final standings tie-break after points and goal difference."""
    GOALS_AGAINST = "goals_against"      # fewer conceded ranks higher
    GOALS_FOR = "goals_for"              # more scored ranks higher
    GOAL_DIFFERENCE = "goal_difference"  # no key after goal difference


class PhaseScope(enum.Enum):
    """Which phases contribute to team statistics."""
    GROUP_ONLY = "group_only"
    ALL_PHASES = "all_phases"


@dataclass(frozen=True)
class Paths:
    """Application paths."""
    # Data directory (stores database)
    data_dir: Path = Path(appdirs.user_data_dir(APP_NAME, APP_AUTHOR))

    # Config directory (stores user preferences)
    config_dir: Path = Path(appdirs.user_config_dir(APP_NAME, APP_AUTHOR))

    # Cache directory (stores temporary files)
    cache_dir: Path = Path(appdirs.user_cache_dir(APP_NAME, APP_AUTHOR))

    # Log directory
    log_dir: Path = Path(appdirs.user_log_dir(APP_NAME, APP_AUTHOR))

    @property
    def database(self) -> Path:
        return self.data_dir / "cupmanager.db"

    @property
    def exports(self) -> Path:
        return self.data_dir / "exports"

    @property
    def log_file(self) -> Path:
        return self.log_dir / "cupmanager.log"

    def ensure_directories(self) -> None:
        """Create all required directories."""
        for dir_path in [self.data_dir, self.config_dir, self.cache_dir,
                         self.log_dir, self.exports]:
            dir_path.mkdir(parents=True, exist_ok=True)


@dataclass(frozen=True)
class ScoringSettings:
    """Points awarded per match outcome."""
    points_for_win: int = 3
    points_for_draw: int = 1
    points_for_loss: int = 0


@dataclass(frozen=True)
class StandingsSettings:
    """Standings ordering policy."""
    tie_break: TieBreak = TieBreak.GOALS_AGAINST
    phase_scope: PhaseScope = PhaseScope.GROUP_ONLY


@dataclass(frozen=True)
class KnockoutSettings:
    """Knockout bracket shape."""
    # Legs per tie (1 = single match, 2 = home and away)
    quarter_final_legs: int = 2
    semi_final_legs: int = 1
    final_legs: int = 1

    # Ranked teams needed to open each knockout phase from the group
    quarter_final_min_teams: int = 8
    semi_final_min_teams: int = 4
    final_min_teams: int = 2


@dataclass(frozen=True)
class LeaderboardSettings:
    """Thresholds for the scorer and defense tables."""
    top_scorer_min_goals: int = 5
    best_defense_max_goals_against: int = 45


@dataclass(frozen=True)
class LogSettings:
    """Logging settings."""
    level: int = logging.INFO
    format: str = "%(asctime)s %(levelname)s %(name)s: %(message)s"


# Singleton instances
PATHS = Paths()
SCORING_SETTINGS = ScoringSettings()
STANDINGS_SETTINGS = StandingsSettings()
KNOCKOUT_SETTINGS = KnockoutSettings()
LEADERBOARD_SETTINGS = LeaderboardSettings()
LOG_SETTINGS = LogSettings()


def database_url() -> str:
    """Database URL, honouring the environment override."""
    return os.environ.get(DATABASE_URL_ENV) or f"sqlite:///{PATHS.database}"


def configure_logging(level: int = LOG_SETTINGS.level, log_to_file: bool = True) -> None:
    """Install console and (optionally) file handlers on the root logger."""
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_to_file:
        PATHS.log_dir.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(PATHS.log_file, encoding="utf-8"))

    logging.basicConfig(level=level, format=LOG_SETTINGS.format, handlers=handlers, force=True)


def init_config() -> None:
    """Initialize configuration, create required directories and set up logging."""
    PATHS.ensure_directories()
    configure_logging()
