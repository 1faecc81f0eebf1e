import re
from contextlib import contextmanager
from decimal import Decimal, ROUND_DOWN, InvalidOperation, localcontext

from app.core.config import get_settings
from app.services.errors import ValidationError

AMOUNT_PLACES = Decimal("0.00000001")
# Digits a DecimalString column can hold.
LEDGER_PRECISION = 40
_AMOUNT_PATTERN = re.compile(r"^\d+(\.\d{1,8})?$")


@contextmanager
def ledger_precision():
    """Run balance arithmetic without the default 28-digit rounding."""
    with localcontext() as ctx:
        ctx.prec = LEDGER_PRECISION
        yield ctx


def parse_amount(value) -> Decimal:
    """Parse a bet/deposit amount from the wire.

    Accepts base-10 strings (or ints) with at most 8 fractional digits. Floats
    are refused so a binary rounding error can never reach the ledger.
    """
    if isinstance(value, bool) or isinstance(value, float):
        raise ValidationError("Amount must be a decimal string")
    if isinstance(value, Decimal):
        text = format(value, "f")
    else:
        text = str(value if value is not None else "").strip()
    if not _AMOUNT_PATTERN.match(text):
        raise ValidationError("Amount must be a valid decimal number with at most 8 decimal places")
    try:
        amount = Decimal(text)
    except InvalidOperation:
        raise ValidationError("Amount must be a valid decimal number")
    if amount <= 0:
        raise ValidationError("Amount must be greater than zero")
    return amount


def parse_bet_amount(value) -> Decimal:
    settings = get_settings()
    amount = parse_amount(value)
    if amount < settings.min_bet_amount or amount > settings.max_bet_amount:
        raise ValidationError(
            f"Bet amount must be between {format_amount(settings.min_bet_amount)} "
            f"and {format_amount(settings.max_bet_amount)}"
        )
    return amount


def parse_deposit_amount(value) -> Decimal:
    amount = parse_amount(value)
    limit = get_settings().max_deposit_amount
    if amount > limit:
        raise ValidationError(f"Deposit amount cannot exceed {format_amount(limit)}")
    return amount


def quantize_amount(value: Decimal) -> Decimal:
    # Payouts round toward the house.
    with ledger_precision():
        return Decimal(value).quantize(AMOUNT_PLACES, rounding=ROUND_DOWN)


def format_amount(value) -> str:
    amount = Decimal(value)
    if not amount:
        return "0"
    with ledger_precision():
        return format(amount.normalize(), "f")


def format_multiplier(value: Decimal) -> str:
    return f"{Decimal(value):.2f}x"
