"""Dataclasses for picks and standings."""

from __future__ import annotations

from dataclasses import dataclass

PARLAY_RESULTS = ("pending", "won", "lost")
PICK_RESULTS = ("pending", "won", "lost", "push")


@dataclass
class Pick:
    team: str
    bet_type: str
    odds: float
    side: str | None = None
    line: float | None = None
    matchup: str | None = None
    result: str = "pending"


@dataclass
class StandingsRow:
    user_id: int
    username: str
    legs_won: int = 0
    legs_lost: int = 0
    parlay_wins: int = 0
    parlay_losses: int = 0
    points: int = 0
