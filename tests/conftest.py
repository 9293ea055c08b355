"""Shared fixtures: in-memory SQLite, an app client and small factories."""

from __future__ import annotations

import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("JWT_SECRET", "test-secret")

import pytest
from fastapi.testclient import TestClient

from parlayleague.api.server import app
from parlayleague.db.database import SessionLocal, engine
from parlayleague.db.models import Base, League, User
from parlayleague.leagues.rules import DEFAULT_SETTINGS


@pytest.fixture(autouse=True)
def _schema():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def session():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.rollback()
        db.close()


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(session):
    def _make(username: str) -> User:
        user = User(username=username, password_hash="not-a-real-hash")
        session.add(user)
        session.flush()
        return user

    return _make


@pytest.fixture
def make_league(session):
    def _make(creator: User, name: str = "Sunday Sharps", passkey: str = "letmein") -> League:
        league = League(
            name=name,
            name_key=name.casefold(),
            passkey=passkey,
            creator_id=creator.id,
            settings=dict(DEFAULT_SETTINGS),
        )
        league.members.append(creator)
        session.add(league)
        session.flush()
        return league

    return _make
