"""Season standings for a league, rebuilt from every parlay on each request."""

from __future__ import annotations

import math
from collections import defaultdict
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from sqlalchemy.orm import Session

from parlayleague.parlays.store import ParlayStore
from parlayleague.parlays.types import StandingsRow

POINTS_PER_WIN = 1
WEEKLY_BONUS = 2
SEASON_BONUS = 5


@dataclass
class ParlayOutcome:
    user_id: int
    username: str
    week: int
    total_odds: Any
    result: str
    legs_won: Any = 0
    legs_lost: Any = 0


def _numeric_odds(value: Any) -> float | None:
    if isinstance(value, bool) or value is None:
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return None if math.isnan(number) else number


def _odds_or_zero(value: Any) -> float:
    number = _numeric_odds(value)
    return 0.0 if number is None else number


def _count(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
        return 0
    return int(value)


def _award_longest_odds(winners: list[ParlayOutcome], rows: dict[int, StandingsRow], bonus: int) -> None:
    # non-numeric or missing odds count as 0 for the max but never earn a bonus
    best = max(_odds_or_zero(p.total_odds) for p in winners)
    for parlay in winners:
        if _numeric_odds(parlay.total_odds) == best:
            rows[parlay.user_id].points += bonus


def compute_standings(parlays: Iterable[ParlayOutcome]) -> list[StandingsRow]:
    """Fold parlays into ranked per-user standings.

    Every parlay contributes its leg counts. A won parlay is worth one point;
    the longest winning odds of each week earn a weekly bonus and the longest
    winning odds of the season a season bonus, with ties all qualifying.
    Rows are sorted by points, highest first, keeping first-seen order on ties.
    """

    parlays = list(parlays)
    rows: dict[int, StandingsRow] = {}
    for parlay in parlays:
        row = rows.get(parlay.user_id)
        if row is None:
            row = rows[parlay.user_id] = StandingsRow(user_id=parlay.user_id, username=parlay.username)
        row.legs_won += _count(parlay.legs_won)
        row.legs_lost += _count(parlay.legs_lost)
        if parlay.result == "won":
            row.parlay_wins += 1
            row.points += POINTS_PER_WIN
        elif parlay.result == "lost":
            row.parlay_losses += 1

    winners = [p for p in parlays if p.result == "won"]
    by_week: dict[int, list[ParlayOutcome]] = defaultdict(list)
    for parlay in winners:
        by_week[parlay.week].append(parlay)
    for week_winners in by_week.values():
        _award_longest_odds(week_winners, rows, WEEKLY_BONUS)

    if winners:
        _award_longest_odds(winners, rows, SEASON_BONUS)

    return sorted(rows.values(), key=lambda r: r.points, reverse=True)


def compute_league_standings(session: Session, league_id: int) -> list[StandingsRow]:
    parlays = ParlayStore(session).find_parlays_by_league(league_id)
    return compute_standings(
        ParlayOutcome(
            user_id=p.user_id,
            username=p.user.username if p.user else "",
            week=p.week,
            total_odds=p.total_odds,
            result=p.result,
            legs_won=p.legs_won,
            legs_lost=p.legs_lost,
        )
        for p in parlays
    )
