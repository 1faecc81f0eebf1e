import logging
import secrets
import time
from decimal import Decimal
from sqlalchemy.orm import Session
from app.models import Deposit, DepositStatus, TransactionType, User
from app.services import ledger
from app.services.amounts import format_amount

logger = logging.getLogger(__name__)


def wallet_address_for(seed: str) -> str:
    # Mock address: hex of the seed, padded to 40 hex chars.
    digest = seed.encode("utf-8").hex()
    return "0x" + digest[:40].ljust(40, "0")


def create_deposit(db: Session, user: User, amount: Decimal, currency: str) -> Deposit:
    deposit = Deposit(
        user_id=user.id,
        amount=amount,
        currency=currency,
        wallet_address=user.wallet_address,
        status=DepositStatus.PENDING,
    )
    db.add(deposit)
    db.commit()
    db.refresh(deposit)
    logger.info("Deposit %s pending user=%s amount=%s %s", deposit.id, user.id, format_amount(amount), currency)
    return deposit


def confirm_deposit(db: Session, user_id: int, deposit_id: int) -> Deposit | None:
    """Mark a deposit confirmed and credit the balance. Caller holds the user's lock."""
    deposit = db.query(Deposit).filter(Deposit.id == deposit_id, Deposit.user_id == user_id).first()
    if not deposit or deposit.status != DepositStatus.PENDING:
        return deposit

    deposit.status = DepositStatus.CONFIRMED
    deposit.transaction_hash = "0x" + secrets.token_hex(32)
    amount = Decimal(deposit.amount)
    ledger.adjust_balance(db, user_id, amount)
    ledger.record_transaction(
        db,
        user_id,
        TransactionType.DEPOSIT,
        amount,
        f"Deposit of {format_amount(amount)} {deposit.currency}",
    )
    logger.info("Deposit %s confirmed user=%s amount=%s", deposit.id, user_id, format_amount(amount))
    return deposit


def confirm_deposit_later(session_factory, engine, user_id: int, deposit_id: int, delay_seconds: float) -> None:
    # Sleep without holding any lock; the chain watcher is simulated.
    if delay_seconds > 0:
        time.sleep(delay_seconds)
    db = session_factory()
    try:
        engine.credit_deposit(db, user_id, lambda db, user_id: confirm_deposit(db, user_id, deposit_id))
    except Exception:
        logger.exception("Deposit %s confirmation failed user=%s", deposit_id, user_id)
    finally:
        db.close()
