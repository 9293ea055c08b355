"""Persistence for weekly parlays, keyed by (user, league, week)."""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping, Sequence
from datetime import datetime
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from parlayleague.db.models import Parlay, ParlayPick
from parlayleague.errors import InvalidInput, NotFound
from parlayleague.parlays.types import Pick


def coerce_number(value: Any) -> float | None:
    if isinstance(value, bool) or value is None:
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def normalize_pick(raw: Mapping[str, Any], index: int = 0) -> Pick:
    """Coerce a client-supplied pick into a well-formed :class:`Pick`.

    Missing subject/type become empty strings, ``side`` becomes a string or
    ``None`` and ``line`` a float or ``None``. Odds must be numeric; anything
    else is rejected rather than stored as garbage.
    """

    if not isinstance(raw, Mapping):
        raise InvalidInput(f"picks[{index}] must be an object")

    odds = coerce_number(raw.get("odds"))
    if odds is None:
        raise InvalidInput(f"picks[{index}].odds must be a number")

    raw_line = raw.get("line")
    if raw_line is None or raw_line == "":
        line = None
    else:
        line = coerce_number(raw_line)
        if line is None:
            raise InvalidInput(f"picks[{index}].line must be a number or null")

    team = raw.get("team")
    bet_type = raw.get("type")
    side = raw.get("side")
    matchup = raw.get("matchup")
    return Pick(
        team=str(team) if team is not None else "",
        bet_type=str(bet_type) if bet_type is not None else "",
        odds=odds,
        side=str(side) if side is not None else None,
        line=line,
        matchup=str(matchup) if matchup is not None else None,
    )


class ParlayStore:
    """Parlay record store backed by a SQLAlchemy session."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def upsert_parlay(
        self,
        user_id: int,
        league_id: int,
        week: int,
        picks: Sequence[Pick | Mapping[str, Any]],
        total_odds: float,
        submitted_at: datetime | None = None,
    ) -> int:
        """Insert the week's parlay or overwrite picks, odds and timestamp in place."""

        normalized = [
            pick if isinstance(pick, Pick) else normalize_pick(pick, idx)
            for idx, pick in enumerate(picks)
        ]
        submitted_at = submitted_at or datetime.utcnow()

        parlay = self.find_parlay(user_id, league_id, week)
        if parlay is None:
            try:
                with self.session.begin_nested():
                    parlay = Parlay(
                        user_id=user_id,
                        league_id=league_id,
                        week=week,
                        total_odds=float(total_odds),
                        result="pending",
                        legs_won=0,
                        legs_lost=0,
                        submitted_at=submitted_at,
                        picks=self._pick_rows(normalized),
                    )
                    self.session.add(parlay)
            except IntegrityError:
                # a concurrent submission created the row first; last write wins
                parlay = self.find_parlay(user_id, league_id, week)
                if parlay is None:
                    raise
                self._overwrite(parlay, normalized, total_odds, submitted_at)
        else:
            self._overwrite(parlay, normalized, total_odds, submitted_at)
        self.session.flush()
        return parlay.id

    def find_parlay(self, user_id: int, league_id: int, week: int) -> Parlay | None:
        stmt = select(Parlay).where(
            Parlay.user_id == user_id,
            Parlay.league_id == league_id,
            Parlay.week == week,
        )
        return self.session.execute(stmt).scalars().first()

    def find_parlays_by_league(self, league_id: int) -> list[Parlay]:
        stmt = (
            select(Parlay)
            .options(selectinload(Parlay.user))
            .where(Parlay.league_id == league_id)
            .order_by(Parlay.id.asc())
        )
        return list(self.session.execute(stmt).scalars().all())

    def find_parlays_by_league_and_week(self, league_id: int, week: int) -> list[Parlay]:
        stmt = (
            select(Parlay)
            .options(selectinload(Parlay.user), selectinload(Parlay.picks))
            .where(Parlay.league_id == league_id, Parlay.week == week)
            .order_by(Parlay.id.asc())
        )
        return list(self.session.execute(stmt).scalars().all())

    def update_result(
        self,
        parlay_id: int,
        result: str,
        legs_won: int | None = None,
        legs_lost: int | None = None,
        pick_results: Iterable[str] | None = None,
    ) -> Parlay:
        """Record a settlement; ``None`` leg counts keep the stored values."""

        parlay = self.session.get(Parlay, parlay_id)
        if parlay is None:
            raise NotFound("Parlay not found.")
        parlay.result = result
        if legs_won is not None:
            parlay.legs_won = legs_won
        if legs_lost is not None:
            parlay.legs_lost = legs_lost
        if pick_results is not None:
            for row, pick_result in zip(parlay.picks, pick_results):
                row.result = pick_result
        self.session.flush()
        return parlay

    @staticmethod
    def _pick_rows(picks: Sequence[Pick]) -> list[ParlayPick]:
        return [
            ParlayPick(
                leg_order=order,
                team=pick.team,
                bet_type=pick.bet_type,
                side=pick.side,
                line=pick.line,
                odds=pick.odds,
                matchup=pick.matchup,
                result=pick.result,
            )
            for order, pick in enumerate(picks)
        ]

    def _overwrite(
        self,
        parlay: Parlay,
        picks: Sequence[Pick],
        total_odds: float,
        submitted_at: datetime,
    ) -> None:
        parlay.picks = self._pick_rows(picks)
        parlay.total_odds = float(total_odds)
        parlay.submitted_at = submitted_at
