# tests/conftest.py

from typing import Callable, Dict, Iterator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from backend.config import Settings
from backend.database import create_db_engine, create_session_factory, init_db
from backend.main import create_app
from backend.models import User
from backend.security import PasswordHasher, TokenIssuer
from backend.stores import TaskStore, UserStore
from backend.tasks import TaskService


@pytest.fixture()
def settings() -> Settings:
    """Settings for an isolated app backed by a private in-memory database."""
    return Settings(
        app_name="Task Tracker Test",
        log_level="WARNING",
        database_url="sqlite://",
        secret_key="test-secret-key",
        jwt_algorithm="HS256",
        access_token_expire_minutes=30,
        cors_origins=["http://localhost:5173"],
        host="127.0.0.1",
        port=8000,
    )


@pytest.fixture()
def session() -> Iterator[Session]:
    engine = create_db_engine("sqlite://")
    init_db(engine)
    s = create_session_factory(engine)()
    try:
        yield s
    finally:
        s.close()
        engine.dispose()


@pytest.fixture(scope="session")
def hasher() -> PasswordHasher:
    return PasswordHasher()


@pytest.fixture()
def token_issuer() -> TokenIssuer:
    return TokenIssuer("test-secret-key", expire_minutes=30)


@pytest.fixture()
def owner(session: Session) -> User:
    # the hash is never checked by task tests
    return UserStore(session).save(User(name="Owner", email="owner@example.com", password_hash="x"))


@pytest.fixture()
def task_service(session: Session, owner: User) -> TaskService:
    return TaskService(TaskStore(session, owner.id))


@pytest.fixture()
def client(settings: Settings) -> Iterator[TestClient]:
    with TestClient(create_app(settings, configure_logging=False)) as c:
        yield c


@pytest.fixture()
def register_user(client: TestClient) -> Callable[..., Dict[str, str]]:
    """Register through the API and return bearer headers for the new user."""

    def _register(email: str = "john@example.com", name: str = "John Doe",
                  password: str = "password123") -> Dict[str, str]:
        resp = client.post("/api/auth/register", json={"name": name, "email": email, "password": password})
        assert resp.status_code == 201, resp.text
        return {"Authorization": f"Bearer {resp.json()['token']}"}

    return _register


@pytest.fixture()
def auth_headers(register_user) -> Dict[str, str]:
    return register_user()
