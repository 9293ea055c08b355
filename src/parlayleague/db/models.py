"""ORM models for Parlay League."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Table,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    """Base declarative class."""


league_members = Table(
    "league_members",
    Base.metadata,
    Column("league_id", ForeignKey("leagues.id"), primary_key=True),
    Column("user_id", ForeignKey("users.id"), primary_key=True),
)


class User(Base):
    """Registered player."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    username: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    default_league_id: Mapped[int | None] = mapped_column(Integer)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    parlays: Mapped[list[Parlay]] = relationship(back_populates="user")


class League(Base):
    """A league with its scoring settings and members."""

    __tablename__ = "leagues"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(128), nullable=False)
    # case-folded name, unique so collisions are rejected by the database
    name_key: Mapped[str] = mapped_column(String(128), nullable=False, unique=True)
    passkey: Mapped[str] = mapped_column(String(128), nullable=False)
    creator_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False)
    settings: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    creator: Mapped[User] = relationship(foreign_keys=[creator_id])
    members: Mapped[list[User]] = relationship(secondary=league_members)
    parlays: Mapped[list[Parlay]] = relationship(back_populates="league")


class Parlay(Base):
    """One weekly ticket per (user, league, week)."""

    __tablename__ = "parlays"
    __table_args__ = (UniqueConstraint("user_id", "league_id", "week", name="uq_parlay_user_league_week"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    league_id: Mapped[int] = mapped_column(ForeignKey("leagues.id"), nullable=False, index=True)
    week: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    total_odds: Mapped[float] = mapped_column(Float, nullable=False)
    result: Mapped[str] = mapped_column(String(16), default="pending", nullable=False)
    legs_won: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    legs_lost: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    submitted_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    user: Mapped[User] = relationship(back_populates="parlays")
    league: Mapped[League] = relationship(back_populates="parlays")
    picks: Mapped[list[ParlayPick]] = relationship(
        back_populates="parlay",
        cascade="all, delete-orphan",
        order_by="ParlayPick.leg_order",
    )


class ParlayPick(Base):
    """A single leg of a parlay."""

    __tablename__ = "parlay_picks"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    parlay_id: Mapped[int] = mapped_column(ForeignKey("parlays.id"), nullable=False)
    leg_order: Mapped[int] = mapped_column(Integer, default=0)
    team: Mapped[str] = mapped_column(String(255), default="", nullable=False)
    bet_type: Mapped[str] = mapped_column(String(64), default="", nullable=False)
    side: Mapped[str | None] = mapped_column(String(32))
    line: Mapped[float | None] = mapped_column(Float)
    odds: Mapped[float] = mapped_column(Float, nullable=False)
    matchup: Mapped[str | None] = mapped_column(String(255))
    result: Mapped[str] = mapped_column(String(16), default="pending", nullable=False)

    parlay: Mapped[Parlay] = relationship(back_populates="picks")
