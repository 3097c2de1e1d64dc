# tests/conftest.py
import pytest
from fastapi.testclient import TestClient

from catalyst_core.db.session import build_engine, build_session_factory, get_session, init_db
from catalyst_core.main import app
from catalyst_core.store import MeasurementStore


@pytest.fixture(scope="function")
def engine():
    """A fresh in-memory database per test."""
    engine = build_engine("sqlite://", echo=False)
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture(scope="function")
def session_factory(engine):
    return build_session_factory(engine)


@pytest.fixture(scope="function")
def session(session_factory):
    db = session_factory()
    yield db
    db.close()


@pytest.fixture(scope="function")
def store(session):
    return MeasurementStore(session)


@pytest.fixture(scope="function")
def client(session_factory):
    """
    TestClient whose requests run against the per-test database.
    """

    def _override_get_session():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_session] = _override_get_session
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
def france_gdp(store):
    """France, a Demo metric and the year 2023, ready for a measurement."""
    france = store.registry.get_or_create_entity("country", "France", iso3="FRA")
    metric = store.registry.get_or_create_metric("Demo", code="X.1", name="Test Metric")
    year = store.periods.resolve_period("year", year_value=2023)
    return france, metric, year
