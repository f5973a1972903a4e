import logging
import os
from collections.abc import Callable, Generator
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

import pytest

# Environment must be in place before any kudos module is imported
os.environ.setdefault("SECRET_KEY", "test-secret")
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["AUTH_TEST_MODE"] = "false"

from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from kudos.api.deps import CurrentUser, get_current_user
from kudos.app import create_app
from kudos.core.database import get_session
from kudos.models import Nomination, User, Vote
from kudos.services.rate_limit import RateLimiter

logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)


class FakeClock:
    """Manually advanced clock for rate limiter tests."""

    def __init__(self, start: float = 1_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@dataclass
class AuthState:
    user: Optional[CurrentUser] = None

    def sign_in(self, user: User) -> None:
        self.user = CurrentUser(id=user.id, name=user.name, image=user.image)

    def sign_out(self) -> None:
        self.user = None


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def engine() -> Generator[Engine, None, None]:
    """In-memory SQLite shared by every session in a test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def strict_session() -> Generator[Session, None, None]:
    """Session on an in-memory SQLite that enforces foreign keys."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine, "connect")
    def _enable_foreign_keys(dbapi_connection, _record) -> None:
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    SQLModel.metadata.create_all(engine)
    with Session(engine) as session:
        yield session
    engine.dispose()


@pytest.fixture
def db_session(engine: Engine) -> Generator[Session, None, None]:
    with Session(engine) as session:
        yield session


@pytest.fixture
def make_user(db_session: Session) -> Callable[..., User]:
    def _make_user(user_id: str, name: Optional[str] = None) -> User:
        user = User(id=user_id, name=name if name is not None else user_id.title())
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _make_user


@pytest.fixture
def make_nomination(db_session: Session) -> Callable[..., Nomination]:
    def _make_nomination(
        nominator: User,
        nominee: User,
        reason: Optional[str] = None,
        created_at: Optional[datetime] = None,
    ) -> Nomination:
        nomination = Nomination(nominator_id=nominator.id, nominee_id=nominee.id, reason=reason)
        if created_at is not None:
            nomination.created_at = created_at
        db_session.add(nomination)
        db_session.commit()
        db_session.refresh(nomination)
        return nomination

    return _make_nomination


@pytest.fixture
def make_vote(db_session: Session) -> Callable[..., Vote]:
    def _make_vote(nomination: Nomination, voter: User) -> Vote:
        vote = Vote(nomination_id=nomination.id, voter_id=voter.id)
        db_session.add(vote)
        db_session.commit()
        return vote

    return _make_vote


@pytest.fixture
def people(make_user: Callable[..., User]) -> dict[str, User]:
    """Alice, Bob, Carol and Dave."""
    return {name: make_user(name) for name in ("alice", "bob", "carol", "dave")}


@pytest.fixture
def rate_limiter() -> RateLimiter:
    return RateLimiter()


@pytest.fixture
def auth() -> AuthState:
    return AuthState()


@pytest.fixture
def app(engine: Engine, rate_limiter: RateLimiter, auth: AuthState) -> FastAPI:
    app = create_app(rate_limiter=rate_limiter)

    def override_session() -> Generator[Session, None, None]:
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_session] = override_session
    app.dependency_overrides[get_current_user] = lambda: auth.user
    return app


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    # Not entered as a context manager: the lifespan would touch the real engine.
    return TestClient(app)
