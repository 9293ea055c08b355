"""Pydantic schemas for the Parlay League API."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    """camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class MessageResponse(ApiModel):
    message: str


class Credentials(ApiModel):
    username: str | None = None
    password: str | None = None


class LoginResponse(ApiModel):
    token: str
    username: str
    user_id: int
    league_id: int | None = None
    league_name: str | None = None


class CreateLeagueRequest(ApiModel):
    league_name: str | None = None
    passkey: str | None = None


class CreateLeagueResponse(ApiModel):
    message: str
    league_id: int


class LeagueSettingsRequest(ApiModel):
    # numeric fields stay loose so validate_settings can report each problem by name
    league_id: int | None = None
    league_type: str | None = None
    starting_bucs: Any = None
    points_per_win: Any = None
    bonus_week: Any = None
    bonus_season: Any = None
    min_total_odds: Any = None
    min_leg_odds: Any = None
    num_legs: Any = None
    submission_deadline: Any = None


class JoinLeagueRequest(ApiModel):
    league_id: int | None = None
    passkey: str | None = None


class UserRef(ApiModel):
    id: int
    username: str


class LeagueResponse(ApiModel):
    id: int
    name: str
    creator: UserRef
    created_at: datetime
    settings: dict[str, Any]
    members: list[int] = Field(default_factory=list)


class SubmitParlayRequest(ApiModel):
    league_id: int | None = None
    week: int | None = None
    picks: list[dict[str, Any]] | None = None
    odds: float | None = Field(default=None, allow_inf_nan=False)


class SettleParlayRequest(ApiModel):
    league_id: int | None = None
    target_user_id: int | None = None
    week: int | None = None
    result: Any = None
    legs_won: Any = None
    legs_lost: Any = None
    pick_results: list[str] | None = None


class ParlayActionResponse(ApiModel):
    message: str
    parlay_id: int


class PickResponse(ApiModel):
    team: str
    bet_type: str = Field(alias="type")
    side: str | None = None
    line: float | None = None
    odds: float
    matchup: str | None = None
    result: str = "pending"


class ParlayResponse(ApiModel):
    id: int
    user_id: int
    username: str
    league_id: int
    week: int
    picks: list[PickResponse]
    odds: float
    result: str
    legs_won: int
    legs_lost: int
    submitted_at: datetime


class SubmissionStatus(ApiModel):
    submitted: bool


class StandingsRowResponse(ApiModel):
    user_id: int
    username: str
    legs_won: int
    legs_lost: int
    parlay_wins: int
    parlay_losses: int
    points: int
