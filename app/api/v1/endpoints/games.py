from typing import Literal

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.dependencies import get_current_user, get_engine
from app.middlewares.rate_limit import limiter
from app.models import User
from app.schemas.game import MinesRevealRequest, MinesStartRequest, SessionView, StartRequest, TowerPlayRequest
from app.services.engine import WageringEngine

router = APIRouter()

SessionGameName = Literal["tower", "crash", "mines"]


@router.post("/tower/start", response_model=SessionView, response_model_exclude_none=True)
@limiter.limit("60/minute")
def start_tower(
    request: Request,
    payload: StartRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    engine: WageringEngine = Depends(get_engine),
):
    return engine.start_session(db, user.id, "tower", payload)


@router.post("/tower/play", response_model=SessionView, response_model_exclude_none=True)
@limiter.limit("120/minute")
def play_tower(
    request: Request,
    payload: TowerPlayRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    engine: WageringEngine = Depends(get_engine),
):
    return engine.advance_session(db, user.id, "tower", payload)


@router.post("/crash/start", response_model=SessionView, response_model_exclude_none=True)
@limiter.limit("60/minute")
def start_crash(
    request: Request,
    payload: StartRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    engine: WageringEngine = Depends(get_engine),
):
    return engine.start_session(db, user.id, "crash", payload)


@router.post("/mines/start", response_model=SessionView, response_model_exclude_none=True)
@limiter.limit("60/minute")
def start_mines(
    request: Request,
    payload: MinesStartRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    engine: WageringEngine = Depends(get_engine),
):
    return engine.start_session(db, user.id, "mines", payload)


@router.post("/mines/reveal", response_model=SessionView, response_model_exclude_none=True)
@limiter.limit("120/minute")
def reveal_mine(
    request: Request,
    payload: MinesRevealRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    engine: WageringEngine = Depends(get_engine),
):
    return engine.advance_session(db, user.id, "mines", payload)


@router.post("/{game}/cashout", response_model=SessionView, response_model_exclude_none=True)
@limiter.limit("60/minute")
def cashout(
    request: Request,
    game: SessionGameName,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    engine: WageringEngine = Depends(get_engine),
):
    return engine.cashout_session(db, user.id, game)


@router.get("/{game}/status", response_model=SessionView, response_model_exclude_none=True)
def session_status(
    game: SessionGameName,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    engine: WageringEngine = Depends(get_engine),
):
    return engine.get_session_status(db, user.id, game)
