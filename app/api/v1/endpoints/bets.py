from typing import Annotated, Union

from fastapi import APIRouter, Body, Depends, Query, Request
from sqlalchemy.orm import Session
from app.core.database import get_db
from app.dependencies import get_current_user, get_engine
from app.middlewares.rate_limit import limiter
from app.models import User
from app.schemas.game import CoinFlipBet, DiceBet, RouletteBet, SingleShotResult
from app.schemas.wallet import BetOut
from app.services import ledger
from app.services.engine import WageringEngine

router = APIRouter()


@router.post("", response_model=SingleShotResult, response_model_exclude_none=True)
@limiter.limit("120/minute")
def place_bet(
    request: Request,
    payload: Annotated[Union[CoinFlipBet, RouletteBet, DiceBet], Body(discriminator="game_type")],
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    engine: WageringEngine = Depends(get_engine),
):
    return engine.place_single_shot_bet(db, user.id, payload)


@router.get("/recent", response_model=list[BetOut])
def recent_bets(
    limit: int = Query(default=5, ge=1, le=100),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return ledger.list_bets(db, user.id, limit)
