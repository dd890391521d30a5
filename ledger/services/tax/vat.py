from decimal import Decimal

from .domain import VATResult, VATStatus
from .money import ZERO, percent_of, round2, to_money
from .rates import RateTables


def compute_vat(subtotal, exempt: bool, rates: RateTables, input_vat=ZERO) -> VATResult:
    """
    VAT on a VAT-exclusive subtotal.

    Args:
        subtotal: Amount before VAT (Naira)
        exempt: Exemption decision for the supply; exempt supplies carry no output VAT
        rates: Rate tables for the transaction's tax year
        input_vat: Deductible VAT on recorded purchases for the same scope

    Returns:
        VATResult with output, input and net VAT plus the payable/refundable status
    """
    subtotal = to_money(subtotal, 'subtotal')
    input_vat = to_money(input_vat, 'input_vat')

    if exempt:
        output_vat = ZERO
    else:
        output_vat = percent_of(subtotal, rates.vat_rate)

    net_vat = round2(output_vat - input_vat)
    return VATResult(
        output_vat=output_vat,
        input_vat=round2(input_vat),
        net_vat=net_vat,
        status=vat_status(net_vat),
    )


def vat_status(net_vat: Decimal) -> VATStatus:
    if net_vat > 0:
        return VATStatus.PAYABLE
    if net_vat < 0:
        return VATStatus.REFUNDABLE
    return VATStatus.NONE


def is_vat_exempt_category(category, rates: RateTables) -> bool:
    """Exemption decision for a goods/service category (food, healthcare, ...)."""
    if not category:
        return False
    return str(category).strip().lower() in rates.vat_exempt_categories
