from decimal import Decimal

import pytest

from app.models import Bet, BetOutcome, Transaction, TransactionType
from app.services.errors import InsufficientFunds, ValidationError
from app.services.games.single_shot import dice_multiplier, dice_win_chance, roulette_wins


def _transactions(db, user_id):
    return db.query(Transaction).filter(Transaction.user_id == user_id).order_by(Transaction.id).all()


def test_coinflip_loss_debits_stake(db, engine, rng, make_user, balance_of):
    user_id = make_user("50")
    rng.push(0.7)  # tails

    result = engine.place_single_shot_bet(
        db, user_id, {"game_type": "coinflip", "bet_amount": "20", "choice": "heads"}
    )

    assert result["outcome"] == "loss"
    assert result["result"] == "tails"
    assert result["payout"] == Decimal("0")
    assert balance_of(user_id) == Decimal("30")

    bet = db.query(Bet).filter(Bet.user_id == user_id).one()
    assert bet.outcome == BetOutcome.LOSS
    assert bet.payout == Decimal("0")
    assert [tx.tx_type for tx in _transactions(db, user_id)] == [TransactionType.BET]


def test_coinflip_win_applies_net_delta(db, engine, rng, make_user, balance_of):
    user_id = make_user("50")
    rng.push(0.1)  # heads

    result = engine.place_single_shot_bet(
        db, user_id, {"game_type": "coinflip", "bet_amount": "20", "choice": "heads"}
    )

    assert result["outcome"] == "win"
    assert result["payout"] == Decimal("40")
    assert balance_of(user_id) == Decimal("70")
    txs = _transactions(db, user_id)
    assert [tx.tx_type for tx in txs] == [TransactionType.BET, TransactionType.WIN]
    assert txs[1].amount == Decimal("40")


def test_roulette_straight_number_pays_36x(db, engine, rng, make_user, balance_of):
    user_id = make_user("10")
    rng.push(17.5 / 37)

    result = engine.place_single_shot_bet(
        db, user_id, {"game_type": "roulette", "bet_amount": "1", "choice": "17"}
    )

    assert result["result"] == "17"
    assert result["outcome"] == "win"
    assert result["payout"] == Decimal("36")
    assert balance_of(user_id) == Decimal("45")


def test_roulette_zero_is_neither_even_nor_odd(db, engine, rng, make_user, balance_of):
    user_id = make_user("10")
    rng.push(0.0)

    result = engine.place_single_shot_bet(
        db, user_id, {"game_type": "roulette", "bet_amount": "2", "choice": "even"}
    )

    assert result["result"] == "0"
    assert result["outcome"] == "loss"
    assert balance_of(user_id) == Decimal("8")


@pytest.mark.parametrize(
    "choice,number,expected",
    [
        ("red", 1, True),
        ("red", 2, False),
        ("black", 2, True),
        ("black", 0, False),
        ("odd", 35, True),
        ("even", 36, True),
        ("odd", 0, False),
        ("36", 36, True),
        ("0", 0, True),
    ],
)
def test_roulette_rules(choice, number, expected):
    assert roulette_wins(choice, number) is expected


def test_roulette_rejects_unknown_choice(db, engine, make_user):
    user_id = make_user("10")
    with pytest.raises(ValidationError):
        engine.place_single_shot_bet(db, user_id, {"game_type": "roulette", "bet_amount": "1", "choice": "green"})
    with pytest.raises(ValidationError):
        engine.place_single_shot_bet(db, user_id, {"game_type": "roulette", "bet_amount": "1", "choice": "37"})


def test_dice_expected_return_is_98_percent_for_every_target():
    for direction, targets in (("over", range(1, 99)), ("under", range(2, 100))):
        for target in targets:
            product = dice_multiplier(target, direction) * dice_win_chance(target, direction)
            assert abs(product - Decimal("0.98")) < Decimal("1e-20")


def test_dice_win_uses_single_combined_write(db, engine, rng, make_user, balance_of):
    user_id = make_user("100")
    rng.push(0.755)  # roll 75

    result = engine.place_single_shot_bet(
        db, user_id, {"game_type": "dice", "bet_amount": "10", "target": 50, "direction": "over"}
    )

    assert result["result"] == "75"
    assert result["outcome"] == "win"
    assert result["multiplier"] == Decimal("2")
    assert result["payout"] == Decimal("20")
    assert balance_of(user_id) == Decimal("110")
    assert [tx.tx_type for tx in _transactions(db, user_id)] == [TransactionType.BET, TransactionType.WIN]
    bet = db.query(Bet).filter(Bet.user_id == user_id).one()
    assert bet.bet_choice == "over 50"


def test_dice_roll_equal_to_target_loses(db, engine, rng, make_user, balance_of):
    user_id = make_user("100")
    rng.push(0.505)  # roll 50

    result = engine.place_single_shot_bet(
        db, user_id, {"game_type": "dice", "bet_amount": "10", "target": 50, "direction": "under"}
    )

    assert result["outcome"] == "loss"
    assert balance_of(user_id) == Decimal("90")


@pytest.mark.parametrize("target,direction", [(99, "over"), (1, "under"), (0, "over"), (100, "under")])
def test_dice_rejects_impossible_targets(db, engine, make_user, target, direction):
    user_id = make_user("100")
    with pytest.raises(ValidationError):
        engine.place_single_shot_bet(
            db, user_id, {"game_type": "dice", "bet_amount": "1", "target": target, "direction": direction}
        )


def test_insufficient_funds_mutates_nothing(db, engine, make_user, balance_of):
    user_id = make_user("5")

    with pytest.raises(InsufficientFunds):
        engine.place_single_shot_bet(db, user_id, {"game_type": "coinflip", "bet_amount": "10", "choice": "heads"})

    assert balance_of(user_id) == Decimal("5")
    assert db.query(Bet).count() == 0
    assert _transactions(db, user_id) == []


@pytest.mark.parametrize("amount", ["0", "-1", "abc", "1.123456789", 1.5, "", None, "2000000"])
def test_malformed_bet_amount_is_rejected(db, engine, make_user, amount):
    user_id = make_user("100")
    with pytest.raises(ValidationError):
        engine.place_single_shot_bet(db, user_id, {"game_type": "coinflip", "bet_amount": amount, "choice": "heads"})


def test_unknown_game_type_is_rejected(db, engine, make_user):
    user_id = make_user("100")
    with pytest.raises(ValidationError):
        engine.place_single_shot_bet(db, user_id, {"game_type": "poker", "bet_amount": "1"})
