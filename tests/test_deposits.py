from decimal import Decimal

from app.models import Deposit, DepositStatus, Transaction, TransactionType, User
from app.services import deposits


def test_wallet_address_shape():
    address = deposits.wallet_address_for("player1")
    assert address.startswith("0x")
    assert len(address) == 42
    assert address == deposits.wallet_address_for("player1")


def test_deposit_is_pending_until_confirmed(db, make_user, balance_of):
    user_id = make_user()
    user = db.get(User, user_id)

    deposit = deposits.create_deposit(db, user, Decimal("25"), "USDT")

    assert deposit.status == DepositStatus.PENDING
    assert deposit.transaction_hash is None
    assert balance_of(user_id) == Decimal("0")


def test_confirmation_credits_once(db, engine, session_factory, make_user, balance_of):
    user_id = make_user("1")
    deposit = deposits.create_deposit(db, db.get(User, user_id), Decimal("25.5"), "USDT")

    deposits.confirm_deposit_later(session_factory, engine, user_id, deposit.id, 0)
    deposits.confirm_deposit_later(session_factory, engine, user_id, deposit.id, 0)

    db.expire_all()
    stored = db.get(Deposit, deposit.id)
    assert stored.status == DepositStatus.CONFIRMED
    assert stored.transaction_hash.startswith("0x")
    assert len(stored.transaction_hash) == 66
    assert balance_of(user_id) == Decimal("26.5")

    credits = db.query(Transaction).filter(Transaction.tx_type == TransactionType.DEPOSIT).all()
    assert len(credits) == 1
    assert credits[0].description == "Deposit of 25.5 USDT"


def test_confirmation_of_unknown_deposit_is_harmless(db, engine, session_factory, make_user, balance_of):
    user_id = make_user("3")

    deposits.confirm_deposit_later(session_factory, engine, user_id, 999, 0)

    assert balance_of(user_id) == Decimal("3")
