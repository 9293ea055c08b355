"""Weekly NFL slate assembly on top of the odds feed."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterable
from datetime import date, datetime, timedelta, timezone
from typing import Any
from zoneinfo import ZoneInfo

import httpx

from parlayleague.odds.cache import TTLCache
from parlayleague.odds.client import OddsApiClient, is_rate_limited

logger = logging.getLogger(__name__)

EASTERN = ZoneInfo("America/New_York")
SUNDAY = 6

PROP_MARKETS = (
    "player_pass_yds",
    "player_reception_tds",
    "player_reception_yds",
    "player_rush_yds",
    "player_1st_td",
    "player_anytime_td",
)


def eastern_date(commence_time: str) -> date | None:
    try:
        moment = datetime.fromisoformat(commence_time.replace("Z", "+00:00"))
    except (AttributeError, ValueError):
        return None
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(EASTERN).date()


def sunday_for_week(season_start: date, week: int) -> date:
    """Eastern-time Sunday of NFL ``week`` given the season's opening Sunday."""

    return season_start + timedelta(weeks=max(1, week) - 1)


def filter_to_week_sunday(games: Iterable[dict[str, Any]], season_start: date, week: int) -> list[dict[str, Any]]:
    target = sunday_for_week(season_start, week)
    kept = []
    for game in games:
        game_day = eastern_date(game.get("commence_time", ""))
        if game_day is not None and game_day == target and game_day.weekday() == SUNDAY:
            kept.append(game)
    return kept


def merge_props(game: dict[str, Any], prop_books: Iterable[dict[str, Any]]) -> int:
    """Merge player-prop markets into ``game``'s bookmakers by market key.

    Returns how many merged markets carried outcomes.
    """

    bookmakers = game.get("bookmakers")
    if not isinstance(bookmakers, list):
        bookmakers = game["bookmakers"] = []
    by_key = {str(book.get("key") or "").lower(): book for book in bookmakers}

    found = 0
    for book in prop_books:
        nested = book.get("bookmaker") or {}
        key = str(book.get("key") or nested.get("key") or "").lower()
        if not key:
            continue
        target = by_key.get(key)
        if target is None:
            target = {"key": key, "title": book.get("title") or nested.get("title") or key, "markets": []}
            bookmakers.append(target)
            by_key[key] = target
        if not isinstance(target.get("markets"), list):
            target["markets"] = []

        for market in book.get("markets") or []:
            if market.get("key") not in PROP_MARKETS:
                continue
            existing = next((i for i, m in enumerate(target["markets"]) if m.get("key") == market["key"]), None)
            if existing is None:
                target["markets"].append(market)
            else:
                target["markets"][existing] = market
            if market.get("outcomes"):
                found += 1
    return found


class OddsSlateService:
    """Fetch a week's games and optionally fold in cached player props."""

    def __init__(
        self,
        client: OddsApiClient,
        cache: TTLCache,
        *,
        season_start: date,
        pause_seconds: float = 0.0,
        sleep_fn: Callable[[float], None] | None = None,
    ) -> None:
        self.client = client
        self.cache = cache
        self.season_start = season_start
        self.pause_seconds = pause_seconds
        self._sleep = sleep_fn or time.sleep

    def fetch_slate(
        self,
        sport: str,
        week: int = 1,
        *,
        sunday_only: bool = True,
        include_props: bool = False,
        base_markets: str = "h2h,spreads,totals",
        bookmakers: str = "fanduel",
        regions: str = "us",
        odds_format: str = "decimal",
        season_start: date | None = None,
    ) -> tuple[list[dict[str, Any]], bool]:
        """Return ``(games, props_present)`` for the requested slate."""

        bookmakers = bookmakers.lower()
        games = self.client.get_odds(
            sport,
            markets=base_markets,
            regions=regions,
            bookmakers=bookmakers,
            odds_format=odds_format,
        )
        if sunday_only:
            games = filter_to_week_sunday(games, season_start or self.season_start, week)
        if not include_props or not games:
            return games, False

        props_found = 0
        for game in games:
            event_id = game.get("id")
            if not event_id:
                continue
            books = self._props_for_event(sport, str(event_id), bookmakers, regions, odds_format)
            if books:
                props_found += merge_props(game, books)
            if self.pause_seconds:
                self._sleep(self.pause_seconds)
        return games, props_found > 0

    def _props_for_event(
        self,
        sport: str,
        event_id: str,
        bookmakers: str,
        regions: str,
        odds_format: str,
    ) -> list[dict[str, Any]]:
        markets = ",".join(PROP_MARKETS)
        key = f"{sport}:{bookmakers}:{event_id}:{markets}"
        cached = self.cache.get(key)
        if cached is not None:
            return cached
        try:
            books = self.client.get_event_odds(
                sport,
                event_id,
                markets=markets,
                regions=regions,
                bookmakers=bookmakers,
                odds_format=odds_format,
            )
        except httpx.HTTPError as exc:
            if is_rate_limited(exc):
                logger.warning("Odds API rate limited for event %s; serving stale props", event_id)
                return self.cache.get_stale(key) or []
            logger.warning("Failed to fetch props for event %s: %s", event_id, exc)
            return []
        self.cache.set(key, books)
        return books
