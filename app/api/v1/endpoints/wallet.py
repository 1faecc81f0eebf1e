from fastapi import APIRouter, BackgroundTasks, Depends, Query, Request
from sqlalchemy.orm import Session
from app.core.config import get_settings
from app.core.database import SessionLocal, get_db
from app.dependencies import get_current_user, get_engine
from app.middlewares.rate_limit import limiter
from app.models import User
from app.schemas.wallet import BalanceOut, DepositOut, DepositRequest, StatsOut, TransactionOut, WalletAddressOut
from app.services import ledger
from app.services.deposits import confirm_deposit_later, create_deposit
from app.services.engine import WageringEngine

router = APIRouter()
settings = get_settings()


@router.get("/balance", response_model=BalanceOut)
def get_balance(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    engine: WageringEngine = Depends(get_engine),
):
    return engine.get_balance(db, user.id)


@router.get("/address", response_model=WalletAddressOut)
def get_wallet_address(user: User = Depends(get_current_user)):
    return {"address": user.wallet_address}


@router.post("/deposit", response_model=DepositOut, status_code=201)
@limiter.limit("10/minute")
def deposit(
    request: Request,
    payload: DepositRequest,
    background_tasks: BackgroundTasks,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    engine: WageringEngine = Depends(get_engine),
):
    record = create_deposit(db, user, payload.amount, payload.currency)
    session_factory = getattr(request.app.state, "session_factory", SessionLocal)
    background_tasks.add_task(
        confirm_deposit_later,
        session_factory,
        engine,
        user.id,
        record.id,
        settings.deposit_confirmation_delay_seconds,
    )
    return record


@router.get("/deposits", response_model=list[DepositOut])
def list_deposits(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return ledger.list_deposits(db, user.id)


@router.get("/transactions", response_model=list[TransactionOut])
def list_transactions(
    limit: int | None = Query(default=None, ge=1, le=500),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return ledger.list_transactions(db, user.id, limit)


@router.get("/stats", response_model=StatsOut)
def get_stats(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return ledger.get_stats(db, user.id)
