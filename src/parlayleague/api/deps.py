"""FastAPI dependencies: database sessions, identity and the odds service."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from parlayleague.config import get_settings
from parlayleague.db.database import SessionLocal
from parlayleague.db.models import User
from parlayleague.errors import Internal, Unauthorized
from parlayleague.odds.cache import TTLCache
from parlayleague.odds.client import OddsApiClient
from parlayleague.odds.slate import OddsSlateService
from parlayleague.parlays.service import UNAUTHORIZED_MESSAGE
from parlayleague.security import decode_access_token

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def get_db() -> Iterator[Session]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def optional_user_id(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
    session: Annotated[Session, Depends(get_db)],
) -> int | None:
    """Identity from the bearer token; a missing or bad token, or one naming
    a user that no longer exists, means anonymous."""

    if credentials is None:
        return None
    try:
        user_id = decode_access_token(credentials.credentials)
    except Unauthorized as exc:
        logger.warning("JWT error: %s", exc.message)
        return None
    if session.get(User, user_id) is None:
        logger.warning("Token subject %s is not a known user", user_id)
        return None
    return user_id


def require_user_id(user_id: Annotated[int | None, Depends(optional_user_id)]) -> int:
    if user_id is None:
        raise Unauthorized(UNAUTHORIZED_MESSAGE)
    return user_id


def get_props_cache(request: Request) -> TTLCache:
    return request.app.state.props_cache


def get_odds_service(cache: Annotated[TTLCache, Depends(get_props_cache)]) -> Iterator[OddsSlateService]:
    settings = get_settings()
    try:
        client = OddsApiClient()
    except RuntimeError as exc:
        raise Internal("Missing ODDS_API_KEY on server") from exc
    try:
        yield OddsSlateService(
            client,
            cache,
            season_start=settings.season_start_sunday_et,
            pause_seconds=settings.odds_request_pause_seconds,
        )
    finally:
        client.close()


SessionDep = Annotated[Session, Depends(get_db)]
UserDep = Annotated[int, Depends(require_user_id)]
OddsServiceDep = Annotated[OddsSlateService, Depends(get_odds_service)]
