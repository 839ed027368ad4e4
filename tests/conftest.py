# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Callable, Generator, Iterator
from datetime import UTC, datetime, timedelta
from itertools import count

import pytest

os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite://")

from fastapi import FastAPI  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.engine import Engine  # noqa: E402
from sqlalchemy.orm import Session, sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from chat_vault.core.security import create_access_token, hash_password  # noqa: E402
from chat_vault.db.session import Base  # noqa: E402
from chat_vault.db.session import get_db as app_get_session  # noqa: E402
from chat_vault.main import app as fastapi_app  # noqa: E402
from chat_vault.models import Chat, User  # noqa: E402

TEST_DB_URL = "sqlite://"
TEST_PASSWORD = "correct horse battery"

_CHAT_COUNTER = count(1)
_BASE_TIME = datetime(2024, 1, 1, tzinfo=UTC)


@pytest.fixture(scope="session")
def engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def db_session(engine: Engine) -> Iterator[Session]:
    SessionLocal = sessionmaker(
        bind=engine,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
    )
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        # Repository methods commit, so wipe every table between tests.
        with engine.begin() as cleanup_conn:
            for table in reversed(Base.metadata.sorted_tables):
                cleanup_conn.execute(table.delete())


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture(autouse=True)
def override_session_dependency(app: FastAPI, db_session: Session) -> Iterator[None]:
    def _get_session_override() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[app_get_session] = _get_session_override
    try:
        yield
    finally:
        app.dependency_overrides.pop(app_get_session, None)


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


def _create_user(db_session: Session, username: str) -> User:
    user = User(username=username, password_hash=hash_password(TEST_PASSWORD))
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture()
def test_user(db_session: Session) -> User:
    """Create and return the primary persisted user."""
    return _create_user(db_session, "alice")


@pytest.fixture()
def other_user(db_session: Session) -> User:
    """Create and return a second persisted user."""
    return _create_user(db_session, "bob")


@pytest.fixture()
def auth_token(test_user: User) -> dict[str, str]:
    """Return authorization headers for the primary test user."""
    token = create_access_token(test_user.user_id)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def other_auth_token(other_user: User) -> dict[str, str]:
    """Return authorization headers for the secondary test user."""
    token = create_access_token(other_user.user_id)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def make_chat(db_session: Session) -> Callable[..., Chat]:
    """Return a factory that persists chats with deterministic timestamps."""

    def _make(
        owner: User,
        *,
        name: str | None = None,
        data: bytes = b"hello",
        mime_type: str = "text/plain",
        created_at: datetime | None = None,
        updated_at: datetime | None = None,
    ) -> Chat:
        n = next(_CHAT_COUNTER)
        stamp = _BASE_TIME + timedelta(minutes=n)
        chat = Chat(
            user_id=owner.user_id,
            name=name or f"chat-{n}",
            mime_type=mime_type,
            data=data,
            created_at=created_at or stamp,
            updated_at=updated_at or stamp,
        )
        db_session.add(chat)
        db_session.commit()
        db_session.refresh(chat)
        return chat

    return _make


@pytest.fixture()
def test_chat(make_chat: Callable[..., Chat], test_user: User) -> Chat:
    """A chat owned by the primary test user."""
    return make_chat(test_user, name="note", data=b"hello")
