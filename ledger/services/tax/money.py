"""
Money helpers shared by every calculator and by the referral commission.

All amounts are Naira held as ``Decimal``. Rounding is round-half-up to
kobo at each monetary derivation, never only at the end, so that
per-transaction figures add up to the period totals exactly.
"""
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

from .exceptions import InvalidAmount

KOBO = Decimal('0.01')
ZERO = Decimal('0.00')
HUNDRED = Decimal('100')
# One quadrillion Naira. Larger amounts are rejected.
MAX_AMOUNT = Decimal('1000000000000000')


def round2(value: Decimal, field: str = 'amount') -> Decimal:
    try:
        return value.quantize(KOBO, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        raise InvalidAmount(f"{field} is too large to round to kobo: {value}", field=field)


def percent_of(amount: Decimal, percent: Decimal) -> Decimal:
    """
    Apply a percentage to an amount: ``round2(amount * percent / 100)``.

    This is the one place the convention lives. VAT, WHT, bracket tax,
    payroll deductions and referral commission all go through it.
    """
    return round2(Decimal(amount) * Decimal(percent) / HUNDRED)


def to_money(value, field: str) -> Decimal:
    """
    Coerce ``value`` to a non-negative Decimal or fail naming ``field``.

    Floats are converted through ``str`` so 0.1 stays 0.1.
    """
    if value is None or isinstance(value, bool):
        raise InvalidAmount(f"{field} is required", field=field)

    if isinstance(value, float):
        value = str(value)

    try:
        amount = Decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        raise InvalidAmount(f"{field} must be a number, got {value!r}", field=field)

    if not amount.is_finite():
        raise InvalidAmount(f"{field} must be a finite number", field=field)
    if amount < 0:
        raise InvalidAmount(f"{field} cannot be negative: {amount}", field=field)
    if amount >= MAX_AMOUNT:
        raise InvalidAmount(f"{field} must be less than {MAX_AMOUNT:,}", field=field)
    return amount
