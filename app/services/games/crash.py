import logging
from dataclasses import dataclass
from decimal import Decimal

from sqlalchemy.orm import Session

from app.models import BetOutcome, GameType
from app.services.amounts import format_amount, format_multiplier, quantize_amount
from app.services.games.base import SessionGame
from app.services.settlement import settle

logger = logging.getLogger(__name__)

MIN_CRASH_POINT = Decimal("1.01")
MAX_CRASH_POINT = Decimal("1000")
# Multiplier gained per elapsed second.
GROWTH_PER_SECOND = Decimal("0.1")


@dataclass
class CrashSession:
    bet_amount: Decimal
    crash_point: Decimal
    started_at: float


def draw_crash_point(draw: float) -> Decimal:
    raw = Decimal(repr(draw ** -0.04))
    return max(MIN_CRASH_POINT, min(MAX_CRASH_POINT, raw))


def multiplier_at(started_at: float, now: float) -> Decimal:
    elapsed_ms = max(0, round((now - started_at) * 1000))
    return Decimal(1) + Decimal(elapsed_ms) / Decimal(1000) * GROWTH_PER_SECOND


class CrashGame(SessionGame):
    game_type = GameType.CRASH

    def start(self, db: Session, user_id: int, bet_amount: Decimal) -> CrashSession:
        session = CrashSession(
            bet_amount=bet_amount,
            crash_point=draw_crash_point(self.rng.random_open()),
            started_at=self.clock(),
        )
        return self._open(db, user_id, bet_amount, session)

    def _settle_crash(self, db: Session, user_id: int, crash_point: Decimal, bet_amount: Decimal, choice: str) -> dict:
        settle(
            db,
            user_id,
            self.game_type,
            bet_amount=bet_amount,
            bet_choice=choice,
            result=f"Crashed at {format_multiplier(crash_point)}",
            outcome=BetOutcome.LOSS,
        )
        return {
            "game_type": self.game_type.value,
            "active": False,
            "outcome": BetOutcome.LOSS.value,
            "crashed": True,
            "crash_point": crash_point,
            "bet_amount": bet_amount,
            "payout": Decimal("0"),
        }

    def cashout(self, db: Session, user_id: int) -> dict:
        snapshot = self._take(user_id)
        bet_amount, crash_point, started_at = snapshot.bet_amount, snapshot.crash_point, snapshot.started_at

        multiplier = min(multiplier_at(started_at, self.clock()), crash_point)
        if multiplier >= crash_point:
            return self._settle_crash(db, user_id, crash_point, bet_amount, "Cashout")

        payout = quantize_amount(bet_amount * multiplier)
        settle(
            db,
            user_id,
            self.game_type,
            bet_amount=bet_amount,
            bet_choice=f"Cashed out at {format_multiplier(multiplier)}",
            result=format_multiplier(multiplier),
            outcome=BetOutcome.WIN,
            payout=payout,
            win_description=f"Won {format_amount(payout)} on crash ({format_multiplier(multiplier)})",
        )
        return {
            "game_type": self.game_type.value,
            "active": False,
            "outcome": BetOutcome.WIN.value,
            "crashed": False,
            "multiplier": multiplier,
            "crash_point": crash_point,
            "bet_amount": bet_amount,
            "payout": payout,
        }

    def status(self, db: Session, user_id: int) -> dict:
        # Polling is a valid trigger: a session past its crash point settles here.
        session = self.sessions.get(user_id, self.game_type)
        if session is None:
            return {"game_type": self.game_type.value, "active": False}
        if multiplier_at(session.started_at, self.clock()) >= session.crash_point:
            snapshot = self._take(user_id)
            logger.info("Crash session for user=%s passed %s on poll", user_id, snapshot.crash_point)
            return self._settle_crash(db, user_id, snapshot.crash_point, snapshot.bet_amount, "Auto-crashed")
        return self.describe(session)

    def describe(self, session: CrashSession) -> dict:
        multiplier = multiplier_at(session.started_at, self.clock())
        return {
            "game_type": self.game_type.value,
            "active": True,
            "crashed": False,
            "multiplier": multiplier,
            "bet_amount": session.bet_amount,
            "potential_payout": quantize_amount(session.bet_amount * multiplier),
            "started_at": session.started_at,
        }
