"""One-request games: coin flip, roulette and dice.

Each resolver applies the net balance change in a single ledger write and
then records the Bet, the ``bet`` Transaction and, on a win, the ``win``
Transaction.
"""
import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from sqlalchemy.orm import Session

from app.models import BetOutcome, GameType, TransactionType
from app.schemas.game import CoinFlipBet, DiceBet, RouletteBet
from app.services import ledger
from app.services.amounts import format_amount, format_multiplier, ledger_precision, quantize_amount
from app.services.rng import RandomSource
from app.services.settlement import settle

logger = logging.getLogger(__name__)

RED_NUMBERS = frozenset({1, 3, 5, 7, 9, 12, 14, 16, 18, 19, 21, 23, 25, 27, 30, 32, 34, 36})
BLACK_NUMBERS = frozenset({2, 4, 6, 8, 10, 11, 13, 15, 17, 20, 22, 24, 26, 28, 29, 31, 33, 35})

COINFLIP_MULTIPLIER = Decimal("2")
ROULETTE_NUMBER_MULTIPLIER = Decimal("36")
ROULETTE_GROUP_MULTIPLIER = Decimal("2")
DICE_RETURN = Decimal("0.98")


@dataclass
class Resolution:
    result: str
    won: bool
    multiplier: Decimal
    bet_choice: str
    game_name: str


def flip_coin(rng: RandomSource) -> str:
    return "heads" if rng.random() < 0.5 else "tails"


def spin_roulette(rng: RandomSource) -> int:
    return rng.randint_below(37)


def roulette_wins(choice: str, number: int) -> bool:
    if choice == "red":
        return number in RED_NUMBERS
    if choice == "black":
        return number in BLACK_NUMBERS
    # Zero is neither even nor odd.
    if choice == "even":
        return number != 0 and number % 2 == 0
    if choice == "odd":
        return number != 0 and number % 2 == 1
    return int(choice) == number


def roulette_multiplier(choice: str) -> Decimal:
    return ROULETTE_NUMBER_MULTIPLIER if choice.isdigit() else ROULETTE_GROUP_MULTIPLIER


def roll_dice(rng: RandomSource) -> int:
    return rng.randint_below(100)


def dice_win_chance(target: int, direction: str) -> Decimal:
    if direction == "over":
        return Decimal(99 - target) / Decimal(100)
    return Decimal(target) / Decimal(100)


def dice_multiplier(target: int, direction: str) -> Decimal:
    return DICE_RETURN / dice_win_chance(target, direction)


def dice_wins(roll: int, target: int, direction: str) -> bool:
    return roll > target if direction == "over" else roll < target


class SingleShotResolver:
    def __init__(self, rng: RandomSource):
        self.rng = rng

    def resolve(self, bet) -> Resolution:
        if isinstance(bet, CoinFlipBet):
            side = flip_coin(self.rng)
            return Resolution(side, side == bet.choice, COINFLIP_MULTIPLIER, bet.choice, "coin flip")
        if isinstance(bet, RouletteBet):
            number = spin_roulette(self.rng)
            return Resolution(
                str(number),
                roulette_wins(bet.choice, number),
                roulette_multiplier(bet.choice),
                bet.choice,
                "roulette",
            )
        if isinstance(bet, DiceBet):
            roll = roll_dice(self.rng)
            return Resolution(
                str(roll),
                dice_wins(roll, bet.target, bet.direction),
                dice_multiplier(bet.target, bet.direction),
                f"{bet.direction} {bet.target}",
                "dice",
            )
        raise TypeError(f"Unsupported bet type: {type(bet).__name__}")

    def play(self, db: Session, user_id: int, bet) -> dict:
        game_type = GameType(bet.game_type)
        bet_amount = bet.bet_amount
        current = ledger.ensure_funds(db, user_id, bet_amount)

        resolution = self.resolve(bet)
        payout = quantize_amount(bet_amount * resolution.multiplier) if resolution.won else Decimal("0")
        outcome = BetOutcome.WIN if resolution.won else BetOutcome.LOSS

        with ledger_precision():
            new_amount = current - bet_amount + payout
        balance = ledger.set_balance(db, user_id, new_amount)
        ledger.record_transaction(
            db,
            user_id,
            TransactionType.BET,
            bet_amount,
            f"Bet {format_amount(bet_amount)} {balance.currency} on {resolution.bet_choice}",
        )
        settle(
            db,
            user_id,
            game_type,
            bet_amount=bet_amount,
            bet_choice=resolution.bet_choice,
            result=resolution.result,
            outcome=outcome,
            payout=payout,
            win_description=(
                f"Won {format_amount(payout)} {balance.currency} on {resolution.game_name}"
                f" ({format_multiplier(resolution.multiplier)})"
            ),
            credit=False,
        )
        multiplier: Optional[Decimal] = resolution.multiplier if game_type == GameType.DICE else None
        return {
            "game_type": game_type.value,
            "result": resolution.result,
            "outcome": outcome.value,
            "payout": payout,
            "multiplier": multiplier,
            "balance": Decimal(balance.amount),
        }
