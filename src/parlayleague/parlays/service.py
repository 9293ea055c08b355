"""Weekly parlay submission and settlement."""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence
from datetime import datetime
from typing import Any

from sqlalchemy.orm import Session

from parlayleague.config import get_settings
from parlayleague.db.models import Parlay
from parlayleague.errors import Conflict, Forbidden, InvalidInput, NotFound, Unauthorized
from parlayleague.leagues.service import get_league, require_league_creator
from parlayleague.parlays.store import ParlayStore, coerce_number
from parlayleague.parlays.types import PARLAY_RESULTS, PICK_RESULTS

logger = logging.getLogger(__name__)

UNAUTHORIZED_MESSAGE = "Unauthorized (token expired or invalid). Please log in again."


def _require_user(acting_user_id: int | None) -> int:
    if acting_user_id is None:
        raise Unauthorized(UNAUTHORIZED_MESSAGE)
    return acting_user_id


def _require_id(value: Any, field: str) -> int:
    if value is None or value == "":
        raise InvalidInput(f"Missing {field}.")
    return _require_week(value, field)


def _require_week(value: Any, field: str = "week") -> int:
    number = coerce_number(value)
    if number is None or not number.is_integer():
        raise InvalidInput(f"{field} must be a finite integer.")
    return int(number)


def _finite_count(value: Any, field: str) -> int | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
        return None
    if not float(value).is_integer():
        raise InvalidInput(f"{field} must be a whole number.")
    return int(value)


def submit_parlay(
    session: Session,
    acting_user_id: int | None,
    league_id: Any,
    week: Any,
    picks: Any,
    total_odds: Any,
    *,
    now: datetime | None = None,
    lock_settled: bool | None = None,
) -> int:
    """Create or replace the acting user's parlay for ``week``."""

    user_id = _require_user(acting_user_id)
    league_id = _require_id(league_id, "leagueId")
    week_num = _require_week(week)
    if isinstance(picks, (str, bytes)) or not isinstance(picks, Sequence) or not picks:
        raise InvalidInput("picks must be a non-empty list.")
    odds = coerce_number(total_odds)
    if odds is None:
        raise InvalidInput("odds must be a finite number.")

    get_league(session, league_id)
    store = ParlayStore(session)

    if lock_settled is None:
        lock_settled = get_settings().lock_settled_parlays
    if lock_settled:
        existing = store.find_parlay(user_id, league_id, week_num)
        if existing is not None and existing.result != "pending":
            raise Conflict("This week's parlay has already been settled.")

    parlay_id = store.upsert_parlay(user_id, league_id, week_num, picks, odds, submitted_at=now)
    logger.info("User %s submitted parlay %s (league %s, week %s)", user_id, parlay_id, league_id, week_num)
    return parlay_id


def has_submitted(session: Session, acting_user_id: int | None, league_id: int, week: int) -> bool:
    user_id = _require_user(acting_user_id)
    return ParlayStore(session).find_parlay(user_id, league_id, week) is not None


def week_parlays(session: Session, acting_user_id: int | None, league_id: int, week: int) -> list[Parlay]:
    """Everyone's parlays for the week, visible only once the caller has submitted."""

    if not has_submitted(session, acting_user_id, league_id, week):
        raise Forbidden("Submit your parlay for this week to view others.")
    return ParlayStore(session).find_parlays_by_league_and_week(league_id, week)


def settle_parlay(
    session: Session,
    acting_user_id: int | None,
    league_id: Any,
    target_user_id: Any,
    week: Any,
    result: Any,
    legs_won: Any = None,
    legs_lost: Any = None,
    pick_results: Sequence[str] | None = None,
) -> int:
    """Record the outcome of a member's parlay. Only the league creator may settle."""

    _require_user(acting_user_id)
    league = get_league(session, _require_id(league_id, "leagueId"))
    require_league_creator(league, acting_user_id, "settle parlays for this league")

    if result not in PARLAY_RESULTS:
        raise InvalidInput(f"result must be one of {', '.join(PARLAY_RESULTS)}.")
    target_id = _require_id(target_user_id, "targetUserId")
    week_num = _require_week(week)

    store = ParlayStore(session)
    parlay = store.find_parlay(target_id, league.id, week_num)
    if parlay is None:
        raise NotFound("Parlay not found for that user/week.")

    if pick_results is not None:
        pick_results = list(pick_results)
        if len(pick_results) != len(parlay.picks):
            raise InvalidInput("pickResults must have one entry per pick.")
        bad = [value for value in pick_results if value not in PICK_RESULTS]
        if bad:
            raise InvalidInput(f"pickResults entries must be one of {', '.join(PICK_RESULTS)}.")

    won_count = _finite_count(legs_won, "legsWon")
    lost_count = _finite_count(legs_lost, "legsLost")
    store.update_result(
        parlay.id,
        result,
        legs_won=won_count,
        legs_lost=lost_count,
        pick_results=pick_results,
    )
    logger.info(
        "Parlay %s settled as %s by user %s (league %s, week %s)",
        parlay.id,
        result,
        acting_user_id,
        league.id,
        week_num,
    )
    return parlay.id
