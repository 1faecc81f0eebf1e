import enum
from decimal import Decimal
from sqlalchemy import Column, Integer, String, ForeignKey, Enum, Index
from sqlalchemy.orm import relationship
from app.core.database import Base
from app.models.base import TimestampMixin
from app.models.columns import DecimalString


class GameType(str, enum.Enum):
    COINFLIP = "coinflip"
    ROULETTE = "roulette"
    DICE = "dice"
    TOWER = "tower"
    CRASH = "crash"
    MINES = "mines"


SESSION_GAMES = frozenset({GameType.TOWER, GameType.CRASH, GameType.MINES})


class BetOutcome(str, enum.Enum):
    WIN = "win"
    LOSS = "loss"


class Bet(Base, TimestampMixin):
    __tablename__ = "bets"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    game_type = Column(Enum(GameType, values_callable=lambda e: [m.value for m in e]), nullable=False)
    bet_amount = Column(DecimalString, nullable=False)
    bet_choice = Column(String(255), nullable=False)
    result = Column(String(255), nullable=False)
    outcome = Column(Enum(BetOutcome, values_callable=lambda e: [m.value for m in e]), nullable=False)
    payout = Column(DecimalString, default=Decimal("0"), nullable=False)

    user = relationship("User", back_populates="bets")


Index("ix_bets_user_game", Bet.user_id, Bet.game_type)
