import logging
from decimal import Decimal
from sqlalchemy.orm import Session
from app.models import Bet, BetOutcome, GameType, TransactionType
from app.services import ledger
from app.services.amounts import format_amount

logger = logging.getLogger(__name__)


def settle(
    db: Session,
    user_id: int,
    game_type: GameType,
    *,
    bet_amount: Decimal,
    bet_choice: str,
    result: str,
    outcome: BetOutcome,
    payout: Decimal = Decimal("0"),
    win_description: str = "",
    credit: bool = True,
) -> Bet:
    """Write the final record of a resolved wager.

    Records the Bet and, on a win, the ``win`` Transaction. With ``credit`` the
    payout is also added to the balance; single-shot games pass ``credit=False``
    because they already applied the net delta in one write.
    """
    if outcome == BetOutcome.LOSS:
        payout = Decimal("0")
    if outcome == BetOutcome.WIN and credit:
        ledger.adjust_balance(db, user_id, payout)

    bet = ledger.record_bet(db, user_id, game_type, bet_amount, bet_choice, result, outcome, payout)
    if outcome == BetOutcome.WIN:
        ledger.record_transaction(db, user_id, TransactionType.WIN, payout, win_description)

    logger.info(
        "Settled %s bet user=%s amount=%s outcome=%s payout=%s",
        game_type.value,
        user_id,
        format_amount(bet_amount),
        outcome.value,
        format_amount(payout),
    )
    return bet
