"""Database helpers for Parlay League."""

from __future__ import annotations

from typing import Any

from sqlalchemy import create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from parlayleague.config import get_settings


def _engine_options(url: str) -> dict[str, Any]:
    parsed = make_url(url)
    if parsed.get_backend_name() != "sqlite":
        return {}
    options: dict[str, Any] = {"connect_args": {"check_same_thread": False}}
    if parsed.database in (None, "", ":memory:"):
        # one shared connection, otherwise every checkout gets an empty database
        options["poolclass"] = StaticPool
    return options


settings = get_settings()
engine = create_engine(
    str(settings.database_url),
    future=True,
    echo=False,
    **_engine_options(str(settings.database_url)),
)
SessionLocal = sessionmaker(bind=engine, class_=Session, expire_on_commit=False, autoflush=False)

__all__ = ["engine", "SessionLocal", "init_db"]


def init_db() -> None:
    """Create all tables that do not exist yet."""

    from parlayleague.db.models import Base

    Base.metadata.create_all(bind=engine)

