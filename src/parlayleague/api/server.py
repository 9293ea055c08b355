"""FastAPI backend for Parlay League."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import date
from typing import Annotated, Any

import httpx
from fastapi import FastAPI, Query, Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from parlayleague import __version__
from parlayleague.api.deps import OddsServiceDep, SessionDep, UserDep
from parlayleague.api.schemas import (
    CreateLeagueRequest,
    CreateLeagueResponse,
    Credentials,
    JoinLeagueRequest,
    LeagueResponse,
    LeagueSettingsRequest,
    LoginResponse,
    MessageResponse,
    ParlayActionResponse,
    ParlayResponse,
    PickResponse,
    SettleParlayRequest,
    StandingsRowResponse,
    SubmissionStatus,
    SubmitParlayRequest,
    UserRef,
)
from parlayleague.config import get_jwt_secret, get_settings
from parlayleague.db.database import init_db
from parlayleague.db.models import League, Parlay
from parlayleague.errors import InvalidInput, ParlayLeagueError
from parlayleague.leagues import service as leagues
from parlayleague.odds.cache import TTLCache
from parlayleague.parlays import service as parlays
from parlayleague.stats.engine import compute_league_standings
from parlayleague.users import service as users

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI) -> AsyncIterator[None]:
    get_jwt_secret()  # fatal when missing
    init_db()
    yield


app = FastAPI(
    title="Parlay League API",
    version=__version__,
    description="Weekly parlay picks, settlement and season standings for private leagues.",
    lifespan=lifespan,
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.state.props_cache = TTLCache(get_settings().odds_cache_ttl_seconds)


@app.exception_handler(ParlayLeagueError)
async def handle_domain_error(_: Request, exc: ParlayLeagueError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(RequestValidationError)
async def handle_validation_error(_: Request, exc: RequestValidationError) -> JSONResponse:
    problems = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path"))
        problems.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    return JSONResponse(
        status_code=InvalidInput.status_code,
        content={"error": "Missing or invalid fields. " + "; ".join(problems)},
    )


@app.exception_handler(SQLAlchemyError)
async def handle_store_error(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.exception("Store error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"error": "Server error"})


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


# ---- users ----------------------------------------------------------------


@app.post("/register", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
def register(payload: Credentials, session: SessionDep) -> MessageResponse:
    users.register_user(session, payload.username, payload.password)
    session.commit()
    return MessageResponse(message="User registered successfully")


@app.post("/login", response_model=LoginResponse)
def login(payload: Credentials, session: SessionDep) -> LoginResponse:
    result = users.authenticate(session, payload.username, payload.password)
    return LoginResponse(
        token=result.token,
        username=result.username,
        user_id=result.user_id,
        league_id=result.league_id,
        league_name=result.league_name,
    )


# ---- leagues --------------------------------------------------------------


def _league_to_response(league: League) -> LeagueResponse:
    return LeagueResponse(
        id=league.id,
        name=league.name,
        creator=UserRef(id=league.creator.id, username=league.creator.username),
        created_at=league.created_at,
        settings=league.settings or {},
        members=[member.id for member in league.members],
    )


@app.post("/create-league", response_model=CreateLeagueResponse, status_code=status.HTTP_201_CREATED)
def create_league(payload: CreateLeagueRequest, user_id: UserDep, session: SessionDep) -> CreateLeagueResponse:
    league = leagues.create_league(session, user_id, payload.league_name, payload.passkey)
    session.commit()
    return CreateLeagueResponse(message="League created successfully", league_id=league.id)


@app.post("/api/league-settings", response_model=MessageResponse)
def update_league_settings(
    payload: LeagueSettingsRequest,
    user_id: UserDep,
    session: SessionDep,
) -> MessageResponse:
    fields = payload.model_dump(by_alias=True, exclude={"league_id"})
    leagues.update_league_settings(session, user_id, payload.league_id, fields)
    session.commit()
    return MessageResponse(message="League settings saved successfully.")


@app.post("/api/leagues/join", response_model=MessageResponse)
def join_league(payload: JoinLeagueRequest, user_id: UserDep, session: SessionDep) -> MessageResponse:
    joined = leagues.join_league(session, user_id, payload.league_id, payload.passkey)
    session.commit()
    if not joined:
        return MessageResponse(message="Already a member of this league")
    return MessageResponse(message="Successfully joined the league!")


@app.get("/league/{league_id}", response_model=LeagueResponse)
def get_league(league_id: int, session: SessionDep) -> LeagueResponse:
    return _league_to_response(leagues.get_league(session, league_id))


@app.get("/api/leagues/search", response_model=list[LeagueResponse])
def search_leagues(
    session: SessionDep,
    name: Annotated[str | None, Query()] = None,
) -> list[LeagueResponse]:
    return [_league_to_response(league) for league in leagues.search_leagues(session, name)]


@app.get("/api/user-leagues", response_model=list[LeagueResponse])
def user_leagues(
    session: SessionDep,
    username: Annotated[str | None, Query()] = None,
) -> list[LeagueResponse]:
    return [_league_to_response(league) for league in leagues.leagues_for_username(session, username)]


# ---- odds feed ------------------------------------------------------------


def _flag(value: str | None) -> bool:
    return str(value).lower() in ("1", "true", "yes")


@app.get("/api/odds")
def odds(
    response: Response,
    service: OddsServiceDep,
    sport: Annotated[str | None, Query()] = None,
    week: Annotated[int, Query()] = 1,
    sunday_only: Annotated[str, Query(alias="sundayOnly")] = "1",
    include_props: Annotated[str, Query(alias="includeProps")] = "0",
    base_markets: Annotated[str, Query(alias="baseMarkets")] = "h2h,spreads,totals",
    bookmakers: Annotated[str, Query()] = "fanduel",
    regions: Annotated[str, Query()] = "us",
    odds_format: Annotated[str, Query(alias="oddsFormat")] = "decimal",
    season_start_et: Annotated[date | None, Query(alias="seasonStartEt")] = None,
) -> Any:
    if not sport:
        raise InvalidInput("Missing sport")
    headers = {"Access-Control-Expose-Headers": "X-Props-Present", "X-Props-Present": "false"}
    try:
        games, props_present = service.fetch_slate(
            sport,
            week=max(1, week),
            sunday_only=_flag(sunday_only),
            include_props=_flag(include_props),
            base_markets=base_markets,
            bookmakers=bookmakers,
            regions=regions,
            odds_format=odds_format,
            season_start=season_start_et,
        )
    except httpx.HTTPError as exc:
        logger.error("Error fetching odds: %s", exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Failed to fetch odds", "details": str(exc)},
            headers=headers,
        )
    headers["X-Props-Present"] = str(props_present).lower()
    response.headers.update(headers)
    return games


# ---- parlays --------------------------------------------------------------


def _parlay_to_response(parlay: Parlay) -> ParlayResponse:
    return ParlayResponse(
        id=parlay.id,
        user_id=parlay.user_id,
        username=parlay.user.username if parlay.user else "",
        league_id=parlay.league_id,
        week=parlay.week,
        picks=[
            PickResponse(
                team=pick.team,
                bet_type=pick.bet_type,
                side=pick.side,
                line=pick.line,
                odds=pick.odds,
                matchup=pick.matchup,
                result=pick.result,
            )
            for pick in parlay.picks
        ],
        odds=parlay.total_odds,
        result=parlay.result,
        legs_won=parlay.legs_won,
        legs_lost=parlay.legs_lost,
        submitted_at=parlay.submitted_at,
    )


@app.post("/api/parlay/submit", response_model=ParlayActionResponse)
def submit_parlay(payload: SubmitParlayRequest, user_id: UserDep, session: SessionDep) -> ParlayActionResponse:
    parlay_id = parlays.submit_parlay(
        session,
        user_id,
        payload.league_id,
        payload.week,
        payload.picks,
        payload.odds,
    )
    session.commit()
    return ParlayActionResponse(message="Parlay submitted successfully!", parlay_id=parlay_id)


@app.get("/api/parlay/week/{league_id}/{week}", response_model=list[ParlayResponse])
def week_parlays(league_id: int, week: int, user_id: UserDep, session: SessionDep) -> list[ParlayResponse]:
    return [_parlay_to_response(p) for p in parlays.week_parlays(session, user_id, league_id, week)]


@app.get("/api/parlay/mine/{league_id}/{week}", response_model=SubmissionStatus)
def my_parlay(league_id: int, week: int, user_id: UserDep, session: SessionDep) -> SubmissionStatus:
    return SubmissionStatus(submitted=parlays.has_submitted(session, user_id, league_id, week))


@app.post("/api/parlay/settle", response_model=ParlayActionResponse)
def settle_parlay(payload: SettleParlayRequest, user_id: UserDep, session: SessionDep) -> ParlayActionResponse:
    parlay_id = parlays.settle_parlay(
        session,
        user_id,
        payload.league_id,
        payload.target_user_id,
        payload.week,
        payload.result,
        legs_won=payload.legs_won,
        legs_lost=payload.legs_lost,
        pick_results=payload.pick_results,
    )
    session.commit()
    return ParlayActionResponse(message="Parlay settled.", parlay_id=parlay_id)


@app.get("/api/league/{league_id}/stats", response_model=list[StandingsRowResponse])
def league_stats(league_id: int, session: SessionDep) -> list[StandingsRowResponse]:
    return [
        StandingsRowResponse(
            user_id=row.user_id,
            username=row.username,
            legs_won=row.legs_won,
            legs_lost=row.legs_lost,
            parlay_wins=row.parlay_wins,
            parlay_losses=row.parlay_losses,
            points=row.points,
        )
        for row in compute_league_standings(session, league_id)
    ]
