from datetime import datetime
from decimal import Decimal
from typing import Annotated, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict

from app.models import BetOutcome, DepositStatus, GameType, TransactionType
from app.services.amounts import parse_deposit_amount


class BalanceOut(BaseModel):
    amount: Decimal
    currency: str


class WalletAddressOut(BaseModel):
    address: str


class DepositRequest(BaseModel):
    amount: Annotated[Decimal, BeforeValidator(parse_deposit_amount)]
    currency: str = "USDT"


class DepositOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    amount: Decimal
    currency: str
    wallet_address: str
    transaction_hash: Optional[str] = None
    status: DepositStatus
    created_at: Optional[datetime] = None


class TransactionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    tx_type: TransactionType
    amount: Decimal
    description: str
    created_at: Optional[datetime] = None


class BetOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    game_type: GameType
    bet_amount: Decimal
    bet_choice: str
    result: str
    outcome: BetOutcome
    payout: Decimal
    created_at: Optional[datetime] = None


class StatsOut(BaseModel):
    balance: Decimal
    total_deposits: Decimal
    total_bets: int
    total_winnings: Decimal
