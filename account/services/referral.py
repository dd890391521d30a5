"""
Referral commission on subscription payments.

Only the commission amount is computed here; payouts and referral
bookkeeping live outside this service.
"""
from decimal import Decimal

from django.conf import settings

from ledger.services.tax.money import percent_of, to_money

DEFAULT_REFERRAL_COMMISSION_PERCENT = Decimal('15')


def commission_percent() -> Decimal:
    return to_money(
        getattr(settings, 'REFERRAL_COMMISSION_PERCENT', DEFAULT_REFERRAL_COMMISSION_PERCENT),
        'REFERRAL_COMMISSION_PERCENT',
    )


def calculate_referral_commission(payment_amount, percent=None) -> Decimal:
    """
    Commission owed to a referrer on one subscription payment.

    Args:
        payment_amount: Amount the referred user paid (Naira)
        percent: Override for the configured commission percentage

    Returns:
        Commission rounded half-up to kobo
    """
    amount = to_money(payment_amount, 'payment_amount')
    rate = commission_percent() if percent is None else to_money(percent, 'percent')
    return percent_of(amount, rate)


def commission_for_subscription(subscription):
    """Commission owed to whoever referred the subscriber, or None."""
    if not subscription.is_active or subscription.plan is None:
        return None
    if subscription.user.referred_by_id is None:
        return None
    return calculate_referral_commission(subscription.plan.amount)
