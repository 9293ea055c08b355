"""League creation, membership and settings management."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from parlayleague.db.models import League, User
from parlayleague.errors import Conflict, Forbidden, InvalidInput, NotFound
from parlayleague.leagues.rules import DEFAULT_SETTINGS, settings_for_type, validate_settings

logger = logging.getLogger(__name__)

SETTINGS_REQUIRED_FIELDS = ("leagueType", "minTotalOdds", "minLegOdds", "numLegs", "submissionDeadline")


def get_league(session: Session, league_id: int | None) -> League:
    league = session.get(League, league_id) if league_id is not None else None
    if league is None:
        raise NotFound("League not found.")
    return league


def require_league_creator(league: League, user_id: int | None, action: str = "manage this league") -> League:
    """Capability gate: only the league's creator may mutate it."""

    if user_id is None or league.creator_id != user_id:
        raise Forbidden(f"Not authorized to {action}.")
    return league


def _adopt_default_league(user: User | None, league: League) -> None:
    if user is not None and user.default_league_id is None:
        user.default_league_id = league.id


def create_league(session: Session, creator_id: int, name: str | None, passkey: str | None) -> League:
    if not name or not passkey:
        raise InvalidInput("League name and passkey are required")

    name_key = name.strip().casefold()
    exists = session.execute(select(League.id).where(League.name_key == name_key)).first()
    if exists:
        raise Conflict("A league with this name already exists.")

    settings = dict(DEFAULT_SETTINGS)
    errors = validate_settings(settings)
    if errors:
        raise InvalidInput(", ".join(errors))

    creator = session.get(User, creator_id)
    league = League(
        name=name.strip(),
        name_key=name_key,
        passkey=passkey,
        creator_id=creator_id,
        settings=settings,
    )
    if creator is not None:
        league.members.append(creator)
    try:
        with session.begin_nested():
            session.add(league)
    except IntegrityError as exc:
        raise Conflict("A league with this name already exists.") from exc
    _adopt_default_league(creator, league)
    session.flush()
    logger.info("League %s (%s) created by user %s", league.id, league.name, creator_id)
    return league


def update_league_settings(
    session: Session,
    acting_user_id: int | None,
    league_id: int | None,
    payload: Mapping[str, Any],
) -> League:
    missing = [field for field in SETTINGS_REQUIRED_FIELDS if payload.get(field) in (None, "")]
    if league_id is None:
        missing.insert(0, "leagueId")
    if missing:
        raise InvalidInput("Missing required fields: " + ", ".join(missing))

    league = get_league(session, league_id)
    require_league_creator(league, acting_user_id, "edit this league")

    settings = settings_for_type(payload)
    errors = validate_settings(settings)
    if errors:
        raise InvalidInput(", ".join(errors))

    league.settings = settings
    session.flush()
    logger.info("League %s settings updated: %s", league.id, settings)
    return league


def join_league(session: Session, user_id: int, league_id: int | None, passkey: str | None) -> bool:
    """Add the user to the league; returns False when already a member."""

    if league_id is None or not passkey:
        raise InvalidInput("Missing required fields")
    league = get_league(session, league_id)
    if league.passkey != passkey:
        raise Forbidden("Incorrect passkey")

    user = session.get(User, user_id)
    if user is None:
        raise NotFound("User not found")
    if any(member.id == user_id for member in league.members):
        return False
    league.members.append(user)
    _adopt_default_league(user, league)
    session.flush()
    logger.info("User %s joined league %s", user_id, league.id)
    return True


def search_leagues(session: Session, name: str | None) -> list[League]:
    if not name:
        raise InvalidInput("League name required")
    stmt = (
        select(League)
        .options(selectinload(League.creator))
        .where(League.name_key.contains(name.strip().casefold()))
        .order_by(League.name.asc())
    )
    leagues = list(session.execute(stmt).scalars().all())
    if not leagues:
        raise NotFound("No matching leagues found")
    return leagues


def leagues_for_username(session: Session, username: str | None) -> list[League]:
    user = session.execute(select(User).where(User.username == username)).scalars().first() if username else None
    if user is None:
        raise NotFound("User not found")
    stmt = (
        select(League)
        .options(selectinload(League.creator))
        .where(League.members.any(User.id == user.id))
        .order_by(League.id.asc())
    )
    return list(session.execute(stmt).scalars().all())
