"""
Fixtures for the URL shortener tests.

Each test gets its own bootstrapped in-memory SQLite engine, a URLStore on
top of it, and TestClients for the management API and the redirect
service, both sharing that store.
"""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from main import create_api_app, create_service_app
from shortener_app.config import Settings
from shortener_app.database.bootstrap import bootstrap_schema
from shortener_app.database.connection import create_db_engine
from shortener_app.models import AccessMeta
from shortener_app.schemas.request_meta import RequestMeta
from shortener_app.services.store import URLStore


@pytest.fixture(scope="function")
def engine():
    """
    Fresh in-memory database for each test, schema already bootstrapped.
    """
    engine = create_db_engine("sqlite://")
    bootstrap_schema(engine)
    yield engine
    engine.dispose()


@pytest.fixture(scope="function")
def store(engine):
    store = URLStore(engine)
    yield store
    store.close()


@pytest.fixture
def meta():
    return RequestMeta(address="127.0.0.1:50000", header='{"user-agent": "pytest"}')


@pytest.fixture
def settings():
    """Settings that ignore the environment's redirect options"""
    return Settings(
        _env_file=None,
        use_302=None,
        address_to_redirect_if_not_found=None,
    )


@pytest.fixture
def api_key(store, settings):
    return store.create_api_key(settings.admin_uid)


@pytest.fixture
def auth_headers(api_key):
    return {"x-api-key": api_key}


@pytest.fixture(scope="function")
def api_client(store, settings):
    """Client for the management API"""
    with TestClient(create_api_app(store, settings)) as test_client:
        yield test_client


@pytest.fixture(scope="function")
def service_client(store, settings):
    """Client for the redirect service"""
    with TestClient(create_service_app(store, settings)) as test_client:
        yield test_client


@pytest.fixture
def make_service_client(store):
    """Build a redirect service client with custom settings"""
    def _make(settings: Settings) -> TestClient:
        return TestClient(create_service_app(store, settings))
    return _make


@pytest.fixture
def audit_rows(engine):
    """Read back the audit trail, optionally filtered by short code"""
    def _rows(short_code=None):
        with Session(engine) as session:
            stmt = select(AccessMeta).order_by(AccessMeta.id)
            if short_code is not None:
                stmt = stmt.where(AccessMeta.short_code == short_code)
            return list(session.execute(stmt).scalars())
    return _rows


@pytest.fixture
def audit_count(engine):
    def _count():
        with Session(engine) as session:
            return session.execute(select(func.count()).select_from(AccessMeta)).scalar()
    return _count
