"""
Shared fixtures: an in-memory database per test and a service bound to it.
"""

import pytest
from sqlalchemy.pool import StaticPool

from models.base import make_engine, make_session_factory, init_db
from services.tournament import TournamentService


@pytest.fixture
def db_engine():
    """Fresh in-memory SQLite database with every table created."""
    engine = make_engine("sqlite://", poolclass=StaticPool)
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return make_session_factory(db_engine)


@pytest.fixture
def service(session_factory):
    return TournamentService(session_factory)


@pytest.fixture
def make_teams(service):
    """Register ``count`` teams named "Team 1".."Team N", each with a small roster."""
    def _make(count: int, players: int = 2):
        return [
            service.create_team({
                "name": f"Team {i}",
                "coach": f"Coach {i}",
                "players": [
                    {"name": f"Player {i}-{n}", "number": n} for n in range(1, players + 1)
                ],
            })
            for i in range(1, count + 1)
        ]
    return _make
