"""Pytest fixtures for async FastAPI testing.

Every test gets its own SQLite database file and upload directory under
``tmp_path`` and an ``AsyncClient`` wired to a freshly built app, so tests
never share tokens, users or cookies.
"""
import pytest
from httpx import ASGITransport, AsyncClient

from app.core.config import Settings
from app.core.database import Database
from app.core.security import TokenIssuer
from app.dependencies.rate_limit import reset_rate_limits
from app.services.auth_service import AuthService
from app.services.storage_service import ImageStorage

STRONG_PASSWORD = "Secur3!Pass"


@pytest.fixture
def settings(tmp_path):
    return Settings(
        ENV="test",
        LOG_LEVEL="WARNING",
        DATABASE_URL=f"sqlite:///{tmp_path / 'test.db'}",
        JWT_SECRET="test-access-secret",
        JWT_REFRESH_SECRET="test-refresh-secret",
        STORAGE_BACKEND="local",
        UPLOAD_DIR=str(tmp_path / "uploads"),
        RATE_LIMIT_ENABLED=False,
    )


@pytest.fixture
def database(settings):
    """Create clean schema for one test."""
    database = Database(settings)
    database.create_all()
    yield database
    database.drop_all()
    database.dispose()


@pytest.fixture
def db_session(database):
    """Yield a SQLAlchemy session for direct DB access in tests."""
    with database.session() as db:
        yield db


@pytest.fixture
def token_issuer(settings):
    return TokenIssuer(settings)


@pytest.fixture
def storage(settings):
    return ImageStorage(settings)


@pytest.fixture
def auth_service(db_session, token_issuer):
    return AuthService(db_session, token_issuer)


@pytest.fixture
def app(settings, database, storage):
    from app.main import create_app

    reset_rate_limits()
    return create_app(settings=settings, database=database, storage=storage)


@pytest.fixture
async def async_client(app):
    """Provide an httpx AsyncClient configured with the FastAPI app."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client


@pytest.fixture
def make_user(auth_service):
    """Register a user through the service and return the ``AuthResult``."""
    counter = {"n": 0}

    def _make(email=None, password=STRONG_PASSWORD):
        counter["n"] += 1
        return auth_service.register(email or f"user{counter['n']}@example.com", password)

    return _make
