"""Shared test fixtures and configuration."""
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from rollcall.main import app
from rollcall.db.base import Base
from rollcall.api.deps import get_db
from rollcall.core import config

from tests.utils import auth_headers, enroll, make_class, make_teacher, make_user


# Test database setup
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"


@pytest.fixture(autouse=True)
def rate_limiting(request):
    """Disable rate limiting for all tests except rate limiting tests."""
    from rollcall.core.rate_limit import limiter

    limiter.reset()
    if "rate_limit" in request.keywords:
        limiter.enabled = True
        yield
    else:
        limiter.enabled = False
        yield
    limiter.reset()
    limiter.enabled = config.settings.RATE_LIMIT_ENABLED


@pytest.fixture
def settings(monkeypatch):
    """Mutable settings; changes are undone after the test."""
    patched = config.Settings()
    monkeypatch.setattr(config, "settings", patched)
    return patched


@pytest.fixture(scope="function")
def db_engine():
    """Create a fresh database for each test."""
    engine = create_engine(
        SQLALCHEMY_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def db_session(db_engine):
    """Create a new database session for a test."""
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function")
def client(db_session):
    """Create a test client with a test database."""
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def teacher(db_session):
    return make_teacher(db_session, name="Dr. Tran")


@pytest.fixture
def student(db_session):
    return make_user(db_session, name="An Nguyen", student_code="S1001")


@pytest.fixture
def course(db_session, teacher, student):
    """A class run by ``teacher`` with ``student`` enrolled."""
    course = make_class(db_session, teacher)
    enroll(db_session, course, student)
    return course


@pytest.fixture
def teacher_headers(teacher):
    return auth_headers(teacher)


@pytest.fixture
def student_headers(student):
    return auth_headers(student)
