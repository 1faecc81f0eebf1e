import time
from decimal import Decimal
from typing import Callable

from sqlalchemy.orm import Session

from app.models import GameType, TransactionType
from app.services import ledger
from app.services.amounts import format_amount, ledger_precision
from app.services.errors import NoActiveSession, SessionAlreadyActive
from app.services.rng import RandomSource
from app.services.sessions import SessionStore


class SessionGame:
    """Shared start/lookup plumbing for the multi-step games.

    Subclasses set ``game_type`` and implement ``describe``. Callers hold the
    user's lock and own the DB commit.
    """

    game_type: GameType

    def __init__(self, sessions: SessionStore, rng: RandomSource, clock: Callable[[], float] = time.time):
        self.sessions = sessions
        self.rng = rng
        self.clock = clock

    def _open(self, db: Session, user_id: int, bet_amount: Decimal, session):
        if self.sessions.get(user_id, self.game_type) is not None:
            raise SessionAlreadyActive(f"You already have an active {self.game_type.value} game")
        current = ledger.ensure_funds(db, user_id, bet_amount)

        # The session exists before the debit is written; a failed commit removes it again.
        self.sessions.create(user_id, self.game_type, session)
        with ledger_precision():
            new_amount = current - bet_amount
        balance = ledger.set_balance(db, user_id, new_amount)
        ledger.record_transaction(
            db,
            user_id,
            TransactionType.BET,
            bet_amount,
            f"Placed {format_amount(bet_amount)} {balance.currency} bet on {self.game_type.value}",
        )
        return session

    def _active(self, user_id: int):
        session = self.sessions.get(user_id, self.game_type)
        if session is None:
            raise NoActiveSession(f"No active {self.game_type.value} game found")
        return session

    def _take(self, user_id: int):
        return self.sessions.pop(user_id, self.game_type)

    def describe(self, session) -> dict:
        raise NotImplementedError

    def status(self, db: Session, user_id: int) -> dict:
        session = self.sessions.get(user_id, self.game_type)
        if session is None:
            return {"game_type": self.game_type.value, "active": False}
        return self.describe(session)
