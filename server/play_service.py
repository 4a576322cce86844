"""REST service for creating, joining and playing UNO matches."""

from __future__ import annotations

import logging
from dataclasses import asdict
from typing import Dict, List, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from engine.cards import Color
from engine.errors import UnoError
from engine.rules_schema import ColorName, GameConfigModel
from engine.service import MatchService, MatchView

logger = logging.getLogger(__name__)

STATUS_CODES: Dict[str, int] = {
    "invalid-argument": 400,
    "failed-precondition": 412,
    "not-found": 404,
    "resource-exhausted": 409,
    "aborted": 409,
    "internal": 500,
}


class CreateMatchRequest(BaseModel):
    player_id: str = Field(min_length=1)
    is_private: bool = False
    max_players: int = Field(4, ge=2, le=10)
    house_rules: List[str] = Field(default_factory=list)


class PlayerRequest(BaseModel):
    player_id: str = Field(min_length=1)


class StartRequest(BaseModel):
    player_id: str = Field(min_length=1)
    seed: Optional[str] = None


class PlayRequest(BaseModel):
    player_id: str = Field(min_length=1)
    card_index: int = Field(ge=0)
    chosen_color: Optional[ColorName] = None


class DrawRequest(BaseModel):
    player_id: str = Field(min_length=1)
    count: int = 1


service = MatchService()

app = FastAPI(title="UNO Match Service")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(UnoError)
async def uno_error_handler(request: Request, exc: UnoError) -> JSONResponse:
    status_code = STATUS_CODES.get(exc.status, 500)
    if status_code >= 500:
        logger.error("Internal game error on %s: %s", request.url.path, exc.message)
    return JSONResponse(status_code=status_code, content=exc.to_response())


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unexpected error on %s", request.url.path)
    return JSONResponse(
        status_code=500,
        content={"code": "INTERNAL_ERROR", "message": "An unexpected error occurred. Please try again."},
    )


def serialize_view(view: MatchView) -> Dict[str, object]:
    return asdict(view)


@app.post("/matches")
def create_match(request: CreateMatchRequest) -> Dict[str, object]:
    config = GameConfigModel(
        is_private=request.is_private,
        max_players=request.max_players,
        house_rules=request.house_rules,
    ).to_config()
    match_id = service.create_match(request.player_id, config)
    return {"match_id": match_id, "state": serialize_view(service.get_match_view(match_id, request.player_id))}


@app.post("/matches/{match_id}/join")
def join_match(match_id: str, request: PlayerRequest) -> Dict[str, object]:
    return {"state": serialize_view(service.join_match(match_id, request.player_id))}


@app.post("/matches/{match_id}/start")
def start_match(match_id: str, request: StartRequest) -> Dict[str, object]:
    service.start_match(match_id, seed=request.seed)
    return {"state": serialize_view(service.get_match_view(match_id, request.player_id))}


@app.post("/matches/{match_id}/play")
def play_card(match_id: str, request: PlayRequest) -> Dict[str, object]:
    color = Color(request.chosen_color) if request.chosen_color else None
    view = service.play_card(match_id, request.player_id, request.card_index, color)
    return {"state": serialize_view(view)}


@app.post("/matches/{match_id}/draw")
def draw_cards(match_id: str, request: DrawRequest) -> Dict[str, object]:
    return {"state": serialize_view(service.draw_cards(match_id, request.player_id, request.count))}


@app.post("/matches/{match_id}/pass")
def pass_turn(match_id: str, request: PlayerRequest) -> Dict[str, object]:
    return {"state": serialize_view(service.pass_turn(match_id, request.player_id))}


@app.post("/matches/{match_id}/uno")
def call_uno(match_id: str, request: PlayerRequest) -> Dict[str, object]:
    return {"state": serialize_view(service.call_uno(match_id, request.player_id))}


@app.get("/matches/{match_id}")
def get_match(match_id: str, player_id: Optional[str] = None) -> Dict[str, object]:
    return {"state": serialize_view(service.get_match_view(match_id, player_id))}
