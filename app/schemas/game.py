from decimal import Decimal
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, BeforeValidator, Field, field_validator, model_validator

from app.services.amounts import parse_bet_amount

BetAmount = Annotated[Decimal, BeforeValidator(parse_bet_amount)]

ROULETTE_GROUPS = ("red", "black", "even", "odd")


class CoinFlipBet(BaseModel):
    game_type: Literal["coinflip"] = "coinflip"
    bet_amount: BetAmount
    choice: Literal["heads", "tails"]


class RouletteBet(BaseModel):
    game_type: Literal["roulette"] = "roulette"
    bet_amount: BetAmount
    choice: str

    @field_validator("choice", mode="before")
    @classmethod
    def normalize_choice(cls, value):
        text = str(value if value is not None else "").strip().lower()
        if text in ROULETTE_GROUPS:
            return text
        if text.isdigit() and 0 <= int(text) <= 36:
            return str(int(text))
        raise ValueError("Choice must be red, black, even, odd or a number from 0 to 36")


class DiceBet(BaseModel):
    game_type: Literal["dice"] = "dice"
    bet_amount: BetAmount
    target: int = Field(..., ge=1, le=99)
    direction: Literal["over", "under"]

    @model_validator(mode="after")
    def check_target(self):
        if self.direction == "over" and self.target > 98:
            raise ValueError("Invalid target and direction combination. Roll over must be <=98, roll under must be >=2")
        if self.direction == "under" and self.target < 2:
            raise ValueError("Invalid target and direction combination. Roll over must be <=98, roll under must be >=2")
        return self


SingleShotBet = Annotated[Union[CoinFlipBet, RouletteBet, DiceBet], Field(discriminator="game_type")]


class SingleShotResult(BaseModel):
    game_type: str
    result: str
    outcome: Literal["win", "loss"]
    payout: Decimal
    multiplier: Optional[Decimal] = None
    balance: Decimal


class StartRequest(BaseModel):
    bet_amount: BetAmount


class TowerPlayRequest(BaseModel):
    difficulty: Literal["easy", "medium", "hard"]


class MinesStartRequest(BaseModel):
    bet_amount: BetAmount
    mine_count: int = Field(..., ge=1, le=24)


class MinesRevealRequest(BaseModel):
    tile_index: int


class SessionView(BaseModel):
    """Snapshot of a session game; fields a game does not use stay null."""

    game_type: str
    active: bool
    outcome: Optional[Literal["win", "loss"]] = None
    bet_amount: Optional[Decimal] = None
    multiplier: Optional[Decimal] = None
    potential_payout: Optional[Decimal] = None
    payout: Optional[Decimal] = None
    # tower
    level: Optional[int] = None
    max_level: Optional[bool] = None
    # crash
    crashed: Optional[bool] = None
    crash_point: Optional[Decimal] = None
    started_at: Optional[float] = None
    # mines
    grid_size: Optional[int] = None
    mine_count: Optional[int] = None
    revealed_tiles: Optional[list[int]] = None
    tile_index: Optional[int] = None
    hit_mine: Optional[bool] = None
    mine_positions: Optional[list[int]] = None
