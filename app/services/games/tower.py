import logging
from dataclasses import dataclass
from decimal import Decimal

from sqlalchemy.orm import Session

from app.models import BetOutcome, GameType
from app.services.amounts import format_amount, quantize_amount
from app.services.errors import InvalidMove, ValidationError
from app.services.games.base import SessionGame
from app.services.settlement import settle

logger = logging.getLogger(__name__)

MAX_LEVEL = 8


@dataclass(frozen=True)
class Difficulty:
    win_chance: float
    multiplier: Decimal


DIFFICULTIES = {
    "easy": Difficulty(0.66, Decimal("1.5")),
    "medium": Difficulty(0.50, Decimal("2.0")),
    "hard": Difficulty(0.33, Decimal("3.0")),
}


@dataclass
class TowerSession:
    bet_amount: Decimal
    level: int = 0
    multiplier: Decimal = Decimal("1")

    @property
    def potential_payout(self) -> Decimal:
        return quantize_amount(self.bet_amount * self.multiplier)


class TowerGame(SessionGame):
    game_type = GameType.TOWER

    def start(self, db: Session, user_id: int, bet_amount: Decimal) -> TowerSession:
        return self._open(db, user_id, bet_amount, TowerSession(bet_amount=bet_amount))

    def play(self, db: Session, user_id: int, difficulty: str) -> dict:
        config = DIFFICULTIES.get(difficulty)
        if config is None:
            raise ValidationError("Difficulty must be easy, medium, or hard")
        session = self._active(user_id)
        if session.level >= MAX_LEVEL:
            raise InvalidMove("Maximum level reached")

        if self.rng.random() < config.win_chance:
            session.level += 1
            session.multiplier = session.multiplier * config.multiplier
            view = self.describe(session)
            view.update(outcome=BetOutcome.WIN.value, max_level=session.level >= MAX_LEVEL)
            return view

        lost = self._take(user_id)
        settle(
            db,
            user_id,
            self.game_type,
            bet_amount=lost.bet_amount,
            bet_choice=f"Level {lost.level + 1} - {difficulty}",
            result=f"Lost at level {lost.level + 1}",
            outcome=BetOutcome.LOSS,
        )
        return {
            "game_type": self.game_type.value,
            "active": False,
            "outcome": BetOutcome.LOSS.value,
            "level": lost.level,
            "bet_amount": lost.bet_amount,
            "payout": Decimal("0"),
        }

    def cashout(self, db: Session, user_id: int) -> dict:
        snapshot = self._take(user_id)
        bet_amount, level, multiplier = snapshot.bet_amount, snapshot.level, snapshot.multiplier
        payout = quantize_amount(bet_amount * multiplier)
        settle(
            db,
            user_id,
            self.game_type,
            bet_amount=bet_amount,
            bet_choice=f"Cashed out at level {level}",
            result=f"Level {level}",
            outcome=BetOutcome.WIN,
            payout=payout,
            win_description=f"Won {format_amount(payout)} on tower (Level {level})",
        )
        return {
            "game_type": self.game_type.value,
            "active": False,
            "outcome": BetOutcome.WIN.value,
            "level": level,
            "multiplier": multiplier,
            "bet_amount": bet_amount,
            "payout": payout,
        }

    def describe(self, session: TowerSession) -> dict:
        return {
            "game_type": self.game_type.value,
            "active": True,
            "level": session.level,
            "multiplier": session.multiplier,
            "bet_amount": session.bet_amount,
            "potential_payout": session.potential_payout,
            "max_level": session.level >= MAX_LEVEL,
        }
