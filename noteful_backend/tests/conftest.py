import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from noteful_backend.api.deps import get_db
from noteful_backend.api.main import create_app
from noteful_backend.config import Settings
from noteful_database import Base, DocumentStore

TEST_SECRET = "test-secret"


@pytest.fixture
def engine(tmp_path):
    """Fixture for a fresh SQLite file per test; each session gets its own connection."""
    engine = create_engine(
        f"sqlite:///{tmp_path / 'noteful-test.db'}", connect_args={"check_same_thread": False}
    )
    yield engine
    engine.dispose()


@pytest.fixture
def tables(engine):
    """Create tables for the test and drop them afterwards."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session(engine, tables):
    """Provide a SQLAlchemy session for isolated test usage."""
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def store(db_session):
    return DocumentStore(db_session)


@pytest.fixture
def session_factory(engine, tables):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def settings():
    return Settings(database_url="sqlite://", jwt_secret=TEST_SECRET, jwt_expiry_minutes=60)


@pytest.fixture
def app(settings, engine):
    return create_app(settings, engine=engine)


@pytest.fixture
def client(app, db_session):
    """Fixture for FastAPI TestClient with test DB dependency override."""
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as c:
        yield c

    app.dependency_overrides.clear()


@pytest.fixture
def user_data():
    """Returns default user data for registration."""
    return {
        "username": "alice",
        "password": "longenough1",
        "fullname": "Alice Liddell",
    }


@pytest.fixture
def second_user_data():
    """Returns a second user's data."""
    return {
        "username": "bob",
        "password": "bobpassword456",
    }


def register_and_auth(client, user):
    """Helper for registering then logging in to get JWT token."""
    r1 = client.post("/users", json=user)
    assert r1.status_code in (201, 400)

    r2 = client.post("/login", json={
        "username": user["username"], "password": user["password"]
    })
    assert r2.status_code == 200
    return r2.json()["authToken"]


@pytest.fixture
def auth_header(client, user_data):
    """Returns {'Authorization': 'Bearer <token>'} for default user."""
    token = register_and_auth(client, user_data)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def second_auth_header(client, second_user_data):
    """Returns auth header for second user."""
    token = register_and_auth(client, second_user_data)
    return {"Authorization": f"Bearer {token}"}
