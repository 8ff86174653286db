"""
Shared fixtures: in-memory database, a scripted box-office provider and a
TestClient wired to both.
"""

from datetime import date, datetime, timezone

import pytest
from fastapi.testclient import TestClient

from movies_api.api.config import Settings, get_settings
from movies_api.api.dependencies import get_database_manager, get_db, get_enrichment_coordinator
from movies_api.api.main import app
from movies_api.clients.boxoffice import BoxOfficeNotFound, BoxOfficeResult
from movies_api.core.enrichment import EnrichmentCoordinator
from movies_api.database import crud
from movies_api.database.connection import DatabaseManager
from movies_api.database.types import BoxOffice, Revenue


AUTH_TOKEN = "secret"


class FakeProvider:
    """Box-office provider that answers from a dict, or raises a given error."""

    def __init__(self, results=None, error=None):
        self.results = results or {}
        self.error = error
        self.calls = []

    def fetch(self, title, timeout=None):
        self.calls.append((title, timeout))
        if self.error is not None:
            raise self.error
        if title not in self.results:
            raise BoxOfficeNotFound(title)
        return self.results[title]


def make_result(distributor="Warner Bros.", budget=160000000, mpa_rating="PG-13", worldwide=829895144):
    return BoxOfficeResult(
        distributor=distributor,
        budget=budget,
        mpa_rating=mpa_rating,
        box_office=BoxOffice(
            revenue=Revenue(worldwide=worldwide, opening_weekend_usa=62785337),
            currency="USD",
            source="BoxOfficeAPI",
            last_updated=datetime(2024, 1, 1, tzinfo=timezone.utc),
        ),
    )


@pytest.fixture
def db_manager():
    """In-memory SQLite database with all tables created."""
    manager = DatabaseManager("sqlite:///:memory:")
    manager.create_tables()
    yield manager
    manager.close()


@pytest.fixture
def session(db_manager):
    """Create a new database session for testing."""
    session = db_manager.get_session()
    yield session
    session.close()


@pytest.fixture
def file_db_manager(tmp_path):
    """File-backed SQLite database, usable from several threads at once."""
    manager = DatabaseManager(f"sqlite:///{tmp_path / 'movies.db'}")
    manager.create_tables()
    yield manager
    manager.close()


@pytest.fixture
def make_movie(session):
    """Factory that creates movies with sensible defaults."""
    def _make(title="Inception", genre="Sci-Fi", release_date=date(2010, 7, 16), **kwargs):
        return crud.create_movie(session, title=title, genre=genre, release_date=release_date, **kwargs)
    return _make


@pytest.fixture
def provider():
    return FakeProvider()


@pytest.fixture
def settings():
    return Settings(
        auth_token=AUTH_TOKEN,
        boxoffice_url="http://boxoffice.test",
        boxoffice_api_key="test-key",
        database_url="sqlite:///:memory:",
        boxoffice_timeout_secs=1,
    )


@pytest.fixture
def client(db_manager, provider, settings):
    """TestClient with settings, database and provider overridden."""
    def override_get_db():
        with db_manager.session_scope() as s:
            yield s

    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_database_manager] = lambda: db_manager
    app.dependency_overrides[get_db] = override_get_db
    coordinator = EnrichmentCoordinator(provider, timeout=1)
    app.dependency_overrides[get_enrichment_coordinator] = lambda: coordinator
    yield TestClient(app)
    app.dependency_overrides = {}
    coordinator.close()


@pytest.fixture
def auth_headers():
    return {"Authorization": f"Bearer {AUTH_TOKEN}"}


@pytest.fixture
def result_factory():
    """Factory for provider results."""
    return make_result


@pytest.fixture
def coordinator_factory():
    """Factory for EnrichmentCoordinators that are closed after the test."""
    created = []

    def _make(provider, timeout=3):
        coordinator = EnrichmentCoordinator(provider, timeout=timeout)
        created.append(coordinator)
        return coordinator

    yield _make
    for coordinator in created:
        coordinator.close()
