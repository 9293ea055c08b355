"""Password hashing and bearer token helpers."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt
from werkzeug.security import check_password_hash, generate_password_hash

from parlayleague.config import get_jwt_secret, get_settings
from parlayleague.errors import Unauthorized


def hash_password(password: str) -> str:
    return generate_password_hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    return check_password_hash(password_hash, password)


def create_access_token(user_id: int, expires_delta: timedelta | None = None) -> str:
    settings = get_settings()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=settings.access_token_expire_minutes))
    claims = {"sub": str(user_id), "exp": expire}
    return jwt.encode(claims, get_jwt_secret(), algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> int:
    """Return the user id carried by ``token``; raises :class:`Unauthorized` when it is unusable."""

    try:
        payload = jwt.decode(token, get_jwt_secret(), algorithms=[get_settings().jwt_algorithm])
    except JWTError as exc:
        raise Unauthorized(f"Invalid token: {exc}") from exc
    subject = payload.get("sub")
    if subject is None or not str(subject).isdigit():
        raise Unauthorized("Invalid token: missing subject")
    return int(subject)
