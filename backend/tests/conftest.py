from __future__ import annotations

import os
from uuid import uuid4

# labshare.main builds settings at import time
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET", "test-secret-key-for-testing-only")
os.environ.setdefault("LOG_JSON", "false")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest  # noqa: E402
import sqlalchemy as sa  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

import labshare.models  # noqa: E402,F401
from labshare.api.deps import get_mailer, get_session_factory  # noqa: E402
from labshare.core.config import Settings  # noqa: E402
from labshare.db.base import Base  # noqa: E402
from labshare.db.session import get_db  # noqa: E402
from labshare.main import create_app  # noqa: E402
from labshare.models.student import Student  # noqa: E402
from tests.testkit import ApiClient, IdentityFactory, RecordingMailer  # noqa: E402


@pytest.fixture
def settings() -> Settings:
    return Settings(
        ENV="dev",
        DATABASE_URL="sqlite://",
        JWT_SECRET="unit-test-secret-0123456789",
        OTP_PEPPER="unit-test-pepper",
        ALLOWED_HOSTS="testserver",
    )


@pytest.fixture
def engine():
    engine = sa.create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def student(db) -> Student:
    row = Student(email="E@X.com", name="Eve Example")
    db.add(row)
    db.commit()
    return row


@pytest.fixture
def mailer() -> RecordingMailer:
    return RecordingMailer()


@pytest.fixture
def client(settings, session_factory, mailer):
    app = create_app(settings)

    def _get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_mailer] = lambda: mailer
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture(scope="session")
def api() -> ApiClient:
    if os.getenv("RUN_API_INTEGRATION", "0") != "1":
        pytest.skip("Integration tests disabled. Set RUN_API_INTEGRATION=1.")

    base_url = os.getenv("TEST_API_BASE_URL", "http://localhost:8000")
    client = ApiClient(base_url)
    try:
        health = client.call("GET", "/health")
    except Exception as exc:  # pragma: no cover - guard rail
        pytest.fail(f"API not reachable at {base_url}: {exc}")
    if not isinstance(health, dict) or not health.get("ok"):
        pytest.fail(f"Unexpected health payload from {base_url}: {health}")
    return client


@pytest.fixture(scope="session")
def identity_factory() -> IdentityFactory:
    return IdentityFactory(seed=uuid4().hex[:8])
