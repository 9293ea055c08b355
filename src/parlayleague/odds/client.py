"""Thin client for The Odds API v4."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx
from tenacity import RetryCallState, retry, retry_if_exception, stop_after_attempt, wait_fixed

from parlayleague.config import get_odds_api_key, get_settings

logger = logging.getLogger(__name__)

RATE_LIMIT_CODE = "EXCEEDED_FREQ_LIMIT"


def _retry_log(retry_state: RetryCallState) -> None:  # pragma: no cover - logging helper
    attempt = retry_state.attempt_number
    exception = retry_state.outcome.exception() if retry_state.outcome else None
    logger.warning("Odds API retry attempt %s due to %s", attempt, exception)


def is_rate_limited(exc: BaseException) -> bool:
    if not isinstance(exc, httpx.HTTPStatusError):
        return False
    if exc.response.status_code == 429:
        return True
    try:
        body = exc.response.json()
    except ValueError:
        return False
    return isinstance(body, dict) and body.get("error_code") == RATE_LIMIT_CODE


def _retryable(exc: BaseException) -> bool:
    # retrying a rate-limited call only burns quota
    return isinstance(exc, httpx.HTTPError) and not is_rate_limited(exc)


class OddsApiClient:
    """Convenient wrapper for The Odds API."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        *,
        http_client: httpx.Client | None = None,
    ) -> None:
        settings = get_settings()
        self.api_key = api_key or get_odds_api_key()
        self.base_url = (base_url or settings.odds_api_base_url).rstrip("/")
        self._client = http_client or httpx.Client(timeout=15.0)

    def __enter__(self) -> "OddsApiClient":  # pragma: no cover - context sugar
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_fixed(1),
        retry=retry_if_exception(_retryable),
        after=_retry_log,
        reraise=True,
    )
    def _request(self, path: str, params: Dict[str, Any]) -> Any:
        url = f"{self.base_url}{path}"
        response = self._client.get(url, params={"apiKey": self.api_key, **params})
        response.raise_for_status()
        return response.json()

    def get_odds(
        self,
        sport: str,
        markets: str,
        regions: str = "us",
        bookmakers: str = "fanduel",
        odds_format: str = "decimal",
    ) -> List[Dict[str, Any]]:
        """Return the core game list with odds for ``markets``."""

        payload = self._request(
            f"/v4/sports/{sport}/odds",
            {"regions": regions, "bookmakers": bookmakers, "markets": markets, "oddsFormat": odds_format},
        )
        return payload if isinstance(payload, list) else []

    def get_event_odds(
        self,
        sport: str,
        event_id: str,
        markets: str,
        regions: str = "us",
        bookmakers: str = "fanduel",
        odds_format: str = "decimal",
    ) -> List[Dict[str, Any]]:
        """Return the bookmakers block for a single event."""

        payload = self._request(
            f"/v4/sports/{sport}/events/{event_id}/odds",
            {"regions": regions, "bookmakers": bookmakers, "markets": markets, "oddsFormat": odds_format},
        )
        books = payload.get("bookmakers") if isinstance(payload, dict) else None
        return books if isinstance(books, list) else []
