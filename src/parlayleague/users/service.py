"""Registration and login."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from parlayleague.db.models import League, User
from parlayleague.errors import Conflict, InvalidInput, NotFound, Unauthorized
from parlayleague.security import create_access_token, hash_password, verify_password

logger = logging.getLogger(__name__)


@dataclass
class LoginResult:
    token: str
    user_id: int
    username: str
    league_id: int | None = None
    league_name: str | None = None


def get_user_by_username(session: Session, username: str) -> User | None:
    return session.execute(select(User).where(User.username == username)).scalars().first()


def register_user(session: Session, username: str | None, password: str | None) -> User:
    if not username or not password:
        raise InvalidInput("Username and password are required")
    if get_user_by_username(session, username) is not None:
        raise Conflict("User already exists")

    user = User(username=username, password_hash=hash_password(password))
    try:
        with session.begin_nested():
            session.add(user)
    except IntegrityError as exc:
        raise Conflict("User already exists") from exc
    logger.info("Registered user %s", username)
    return user


def authenticate(session: Session, username: str | None, password: str | None) -> LoginResult:
    if not username or not password:
        raise InvalidInput("Username and password are required")
    user = get_user_by_username(session, username)
    if user is None:
        raise NotFound("User not found")
    if not verify_password(password, user.password_hash):
        raise Unauthorized("Invalid credentials")

    league = session.get(League, user.default_league_id) if user.default_league_id else None
    return LoginResult(
        token=create_access_token(user.id),
        user_id=user.id,
        username=user.username,
        league_id=league.id if league else None,
        league_name=league.name if league else None,
    )
