"""Pytest configuration and fixtures."""

import os
import uuid

# Set test environment variables BEFORE importing app modules
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-testing-only-32chars")
os.environ.setdefault("ENVIRONMENT", "testing")

# Disable rate limiting for tests by monkey-patching BEFORE imports
from slowapi import Limiter
from slowapi.util import get_remote_address

# Create disabled limiter
_disabled_limiter = Limiter(key_func=get_remote_address, enabled=False)

# Patch the rate_limit module before it's imported elsewhere
import app.core.rate_limit as rate_limit_module
rate_limit_module.limiter = _disabled_limiter

# Patch PostgreSQL types for SQLite compatibility BEFORE importing models
from sqlalchemy import String, TypeDecorator
import sqlalchemy.dialects.postgresql as pg_dialect


class SQLiteUUID(TypeDecorator):
    """Platform-independent UUID type that works with SQLite."""
    impl = String(36)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is not None:
            if isinstance(value, uuid.UUID):
                return str(value)
            return str(uuid.UUID(value))
        return value

    def process_result_value(self, value, dialect):
        if value is not None:
            return uuid.UUID(value)
        return value


# Monkey-patch the PostgreSQL UUID class before any models are imported
class MockUUID(SQLiteUUID):
    """Mock PostgreSQL UUID that works with SQLite for testing."""
    def __init__(self, as_uuid=True):
        super().__init__()
        self.as_uuid = as_uuid


pg_dialect.UUID = MockUUID

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.database import Base
from app.api.deps import get_db
from app.models import DashboardKPI, ProjectActivity, ProjectComponent, WebsiteStat
from app.panels.workspace import workspace_registry
from app.services.client import ServiceClient
from app.services.theme_service import theme_registry
from main import app

# Create in-memory SQLite database for testing
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

ADMIN_EMAIL = "admin@test.com"
USER_EMAIL = "reader@test.com"
PASSWORD = "Password123"


class ManualScheduler:
    """Collects delayed callbacks so tests decide when time passes."""

    def __init__(self):
        self.pending = []

    def __call__(self, delay_seconds, callback):
        self.pending.append((delay_seconds, callback))

    def advance(self, seconds):
        """Run every callback due within `seconds`, in order of delay."""
        due = sorted((p for p in self.pending if p[0] <= seconds), key=lambda p: p[0])
        self.pending = [p for p in self.pending if p[0] > seconds]
        for _, callback in due:
            callback()

    def run_all(self):
        self.advance(float("inf"))


@pytest.fixture(scope="function")
def db_session():
    """Create a fresh database session for each test."""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)
        workspace_registry.clear()
        theme_registry.clear()


@pytest.fixture
def service_client(db_session):
    """ServiceClient bound to the test session."""
    return ServiceClient(db_session)


@pytest.fixture
def manual_scheduler():
    scheduler = ManualScheduler()
    previous = theme_registry.schedule
    theme_registry.schedule = scheduler
    yield scheduler
    theme_registry.schedule = previous


@pytest.fixture(scope="function")
def client(db_session, manual_scheduler):
    """Create a test client with database override."""
    app.dependency_overrides[get_db] = lambda: db_session
    app.state.session_factory = TestingSessionLocal
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def _create_account(db_session, email, role, full_name):
    result = ServiceClient(db_session).auth.create_account(
        email, PASSWORD, {"full_name": full_name, "role": role}
    )
    assert result.ok, result.error
    return result.data


@pytest.fixture
def admin_account(db_session):
    return _create_account(db_session, ADMIN_EMAIL, "admin", "Test Admin")


@pytest.fixture
def user_account(db_session):
    return _create_account(db_session, USER_EMAIL, "user", "Test Reader")


def _login(email):
    test_client = TestClient(app)
    response = test_client.post("/api/auth/login", json={"email": email, "password": PASSWORD})
    assert response.status_code == 200, response.text
    return test_client


@pytest.fixture
def admin_client(client, admin_account):
    """Test client signed in as an admin (session cookie set)."""
    return _login(ADMIN_EMAIL)


@pytest.fixture
def user_client(client, user_account):
    """Test client signed in as a plain reader."""
    return _login(USER_EMAIL)


@pytest.fixture
def components(db_session):
    rows = [
        ProjectComponent(id=uuid.uuid4(), name="Composante 1", order=0),
        ProjectComponent(id=uuid.uuid4(), name="Composante 2", order=1),
    ]
    db_session.add_all(rows)
    db_session.commit()
    return rows


@pytest.fixture
def sample_kpi(db_session):
    kpi = DashboardKPI(
        id=uuid.uuid4(),
        key="budget_execution",
        label="Exécution budgétaire",
        value=42,
        unit="%",
        trend="up",
        order=0,
        is_active=True,
    )
    db_session.add(kpi)
    db_session.commit()
    return kpi


@pytest.fixture
def sample_task(db_session, components):
    task = ProjectActivity(
        id=uuid.uuid4(),
        component_id=components[0].id,
        activity_name="Atelier de lancement",
        status="En cours",
        progress=60,
        order=0,
    )
    db_session.add(task)
    db_session.commit()
    return task


@pytest.fixture
def sample_stats(db_session):
    rows = [
        WebsiteStat(id=uuid.uuid4(), metric_name="Visiteurs", metric_value=8420, metric_type="user"),
        WebsiteStat(id=uuid.uuid4(), metric_name="Budget", metric_value=1250000, metric_type="financial"),
        WebsiteStat(id=uuid.uuid4(), metric_name="Projets", metric_value=37, metric_type="project"),
    ]
    db_session.add_all(rows)
    db_session.commit()
    return rows
