from app.models.user import User
from app.models.balance import Balance
from app.models.transaction import Transaction, TransactionType
from app.models.bet import Bet, BetOutcome, GameType, SESSION_GAMES
from app.models.deposit import Deposit, DepositStatus

__all__ = [
    "User",
    "Balance",
    "Transaction",
    "TransactionType",
    "Bet",
    "BetOutcome",
    "GameType",
    "SESSION_GAMES",
    "Deposit",
    "DepositStatus",
]
