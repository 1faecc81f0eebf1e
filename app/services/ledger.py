from decimal import Decimal
from sqlalchemy import func
from sqlalchemy.orm import Session
from app.core.config import get_settings
from app.models import Balance, Bet, BetOutcome, Deposit, GameType, Transaction, TransactionType
from app.services.amounts import LEDGER_PRECISION, ledger_precision
from app.services.errors import InsufficientFunds, ValidationError


def _balance_query(db: Session, user_id: int):
    query = db.query(Balance).filter(Balance.user_id == user_id)
    if db.bind is not None and db.bind.dialect.name == "postgresql":
        query = query.with_for_update()
    return query


def get_or_create_balance(db: Session, user_id: int) -> Balance:
    balance = _balance_query(db, user_id).first()
    if not balance:
        balance = Balance(user_id=user_id, amount=Decimal("0"), currency=get_settings().currency)
        db.add(balance)
        db.flush()
    return balance


def get_balance(db: Session, user_id: int) -> Balance:
    return get_or_create_balance(db, user_id)


def set_balance(db: Session, user_id: int, new_amount: Decimal) -> Balance:
    # Overwrite, not a delta: callers hold the user's lock across read-compute-write.
    new_amount = Decimal(new_amount)
    if new_amount < 0:
        raise InsufficientFunds()
    if len(format(new_amount, "f")) > LEDGER_PRECISION:
        raise ValidationError("Balance exceeds the ledger's capacity")
    balance = get_or_create_balance(db, user_id)
    balance.amount = new_amount
    db.flush()
    return balance


def adjust_balance(db: Session, user_id: int, delta: Decimal) -> Balance:
    balance = get_or_create_balance(db, user_id)
    with ledger_precision():
        new_amount = Decimal(balance.amount) + Decimal(delta)
    return set_balance(db, user_id, new_amount)


def ensure_funds(db: Session, user_id: int, amount: Decimal) -> Decimal:
    current = Decimal(get_or_create_balance(db, user_id).amount)
    if current < amount:
        raise InsufficientFunds()
    return current


def record_transaction(
    db: Session,
    user_id: int,
    tx_type: TransactionType,
    amount: Decimal,
    description: str,
) -> Transaction:
    if Decimal(amount) < 0:
        raise ValidationError("Transaction amount cannot be negative")
    entry = Transaction(
        user_id=user_id,
        tx_type=tx_type,
        amount=Decimal(amount),
        description=description[:255],
    )
    db.add(entry)
    db.flush()
    return entry


def record_bet(
    db: Session,
    user_id: int,
    game_type: GameType,
    bet_amount: Decimal,
    bet_choice: str,
    result: str,
    outcome: BetOutcome,
    payout: Decimal,
) -> Bet:
    bet = Bet(
        user_id=user_id,
        game_type=game_type,
        bet_amount=Decimal(bet_amount),
        bet_choice=bet_choice[:255],
        result=result[:255],
        outcome=outcome,
        payout=Decimal(payout) if outcome == BetOutcome.WIN else Decimal("0"),
    )
    db.add(bet)
    db.flush()
    return bet


def list_transactions(db: Session, user_id: int, limit: int | None = None) -> list[Transaction]:
    query = db.query(Transaction).filter(Transaction.user_id == user_id).order_by(Transaction.id.desc())
    if limit:
        query = query.limit(limit)
    return query.all()


def list_bets(db: Session, user_id: int, limit: int | None = None) -> list[Bet]:
    query = db.query(Bet).filter(Bet.user_id == user_id).order_by(Bet.id.desc())
    if limit:
        query = query.limit(limit)
    return query.all()


def list_deposits(db: Session, user_id: int) -> list[Deposit]:
    return db.query(Deposit).filter(Deposit.user_id == user_id).order_by(Deposit.id.desc()).all()


def _sum_transactions(db: Session, user_id: int, tx_type: TransactionType) -> Decimal:
    # Amounts are stored as strings; summing in SQL would go through floats.
    rows = (
        db.query(Transaction.amount)
        .filter(Transaction.user_id == user_id, Transaction.tx_type == tx_type)
        .all()
    )
    with ledger_precision():
        return sum((Decimal(row[0]) for row in rows), Decimal("0"))


def get_stats(db: Session, user_id: int) -> dict:
    balance = get_or_create_balance(db, user_id)
    total_bets = db.query(func.count(Bet.id)).filter(Bet.user_id == user_id).scalar() or 0
    return {
        "balance": Decimal(balance.amount),
        "total_deposits": _sum_transactions(db, user_id, TransactionType.DEPOSIT),
        "total_bets": int(total_bets),
        "total_winnings": _sum_transactions(db, user_id, TransactionType.WIN),
    }
