"""HTTP routes for the duel API."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from pydantic import BaseModel, Field

from ninjaduel.api.runtime import ApiState, outcome_to_dict, snapshot_to_dict
from ninjaduel.domain.errors import (
    InvalidMoveError,
    InvalidPlayerError,
    LedgerError,
    NotFoundError,
    OracleError,
    RoundNotReadyError,
)

router = APIRouter()


def get_state(request: Request) -> ApiState:
    state = getattr(request.app.state, "api_state", None)
    if state is None:  # pragma: no cover - FastAPI should always initialise state
        raise RuntimeError("API state not initialised")
    return state


ApiStateDep = Annotated[ApiState, Depends(get_state)]


class CreateMatchRequest(BaseModel):
    player1: str = Field(min_length=1)
    player2: str = Field(min_length=1)
    equipment1: str = Field(min_length=1)
    equipment2: str = Field(min_length=1)


class MatchCreated(BaseModel):
    match_id: str


class MatchDetail(BaseModel):
    match_id: str
    player1: str
    player2: str
    equipment1: str
    equipment2: str
    round: int
    max_rounds: int
    wins1: int
    wins2: int
    player1_moved: bool
    player2_moved: bool


class MoveRequest(BaseModel):
    player: str = Field(min_length=1)
    move: str


class MoveResponse(BaseModel):
    match_id: str
    status: str
    message: str
    player: str | None = None
    round: int | None = None
    wins1: int | None = None
    wins2: int | None = None
    round_winner: str | None = None
    move1: str | None = None
    move2: str | None = None
    power1: int | None = None
    power2: int | None = None
    winner: str | None = None
    recording_error: str | None = None


class WeaponSummary(BaseModel):
    id: str
    name: str
    type: str
    rarity: str
    power: int


class CreateWeaponRequest(BaseModel):
    weapon_type: str = Field(min_length=1)
    rarity: str = Field(default="common", min_length=1)


class LeaderboardRow(BaseModel):
    rank: int
    address: str
    points: int


class SeasonResponse(BaseModel):
    season: int
    started_at: str
    ends_at: str
    duration_days: int


@router.get("/health")
async def health(state: ApiStateDep) -> dict[str, object]:
    rules = state.battles.rules
    return {
        "status": "ok",
        "max_rounds": rules.max_rounds,
        "wins_required": rules.wins_required,
        "tie_policy": str(rules.tie_policy),
        "active_matches": len(state.battles.active_match_ids()),
        "season": state.ranking.current_season,
    }


@router.post("/matches", response_model=MatchCreated, status_code=status.HTTP_201_CREATED)
async def create_match(request: CreateMatchRequest, state: ApiStateDep) -> MatchCreated:
    try:
        match_id = await state.battles.create(
            request.player1, request.player2, request.equipment1, request.equipment2
        )
    except InvalidPlayerError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return MatchCreated(match_id=match_id)


@router.get("/matches/{match_id}", response_model=MatchDetail)
async def get_match(match_id: str, state: ApiStateDep) -> MatchDetail:
    try:
        snapshot = state.battles.get_match(match_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return MatchDetail.model_validate(snapshot_to_dict(snapshot))


@router.post("/matches/{match_id}/moves", response_model=MoveResponse)
async def submit_move(match_id: str, request: MoveRequest, state: ApiStateDep) -> MoveResponse:
    try:
        outcome = await state.battles.submit_move(match_id, request.player, request.move)
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except (InvalidPlayerError, InvalidMoveError) as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except OracleError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)
        ) from exc
    return MoveResponse.model_validate(outcome_to_dict(outcome))


@router.post("/matches/{match_id}/retry", response_model=MoveResponse)
async def retry_round(match_id: str, state: ApiStateDep) -> MoveResponse:
    try:
        outcome = await state.battles.retry_round(match_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except RoundNotReadyError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    except OracleError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)
        ) from exc
    return MoveResponse.model_validate(outcome_to_dict(outcome))


@router.get("/players/{player}/weapons", response_model=list[WeaponSummary])
async def list_weapons(player: str, state: ApiStateDep) -> list[WeaponSummary]:
    weapons = await state.equipment.get_player_weapons(player)
    return [WeaponSummary.model_validate(weapon, from_attributes=True) for weapon in weapons]


@router.post(
    "/players/{player}/weapons",
    response_model=WeaponSummary,
    status_code=status.HTTP_201_CREATED,
)
async def create_weapon(
    player: str, request: CreateWeaponRequest, state: ApiStateDep
) -> WeaponSummary:
    try:
        weapon = await state.equipment.create_weapon(player, request.weapon_type, request.rarity)
    except LedgerError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return WeaponSummary.model_validate(weapon, from_attributes=True)


@router.get("/leaderboard", response_model=list[LeaderboardRow])
async def leaderboard(
    state: ApiStateDep,
    top_n: Annotated[int, Query(ge=1, le=100)] = 10,
) -> list[LeaderboardRow]:
    entries = await state.ranking.get_leaderboard(top_n)
    return [LeaderboardRow.model_validate(entry, from_attributes=True) for entry in entries]


@router.get("/season", response_model=SeasonResponse)
async def season(state: ApiStateDep) -> SeasonResponse:
    return SeasonResponse.model_validate(state.ranking.season_info())
