"""
Withholding tax on payments for services, rent, dividends and the like.

The rate comes from the table's matrix keyed by service category and
taxpayer class. Class differences (individuals and sole proprietors
usually pay less than companies) live in the matrix, not here.

WHT is always charged on the VAT-exclusive subtotal. VAT only enters the
picture for the amount actually paid over after the deduction.
"""
from decimal import Decimal
from typing import Optional

from .domain import ServiceCategory, TaxpayerClass, WHTResult
from .money import ZERO, percent_of, round2, to_money
from .rates import RateTables


def wht_rate(service_category, taxpayer_class, rates: RateTables,
             supplier_annual_turnover=None) -> Decimal:
    category = ServiceCategory.parse(service_category)
    taxpayer_class = TaxpayerClass.parse(taxpayer_class)

    if supplier_annual_turnover is not None:
        turnover = to_money(supplier_annual_turnover, 'supplier_annual_turnover')
        if (turnover <= rates.wht_small_supplier_threshold
                and category in rates.wht_service_categories):
            return ZERO

    row = rates.wht_rate_matrix.get(category, {})
    rate = row.get(taxpayer_class)
    if rate is None:
        rate = rates.wht_default_rates[taxpayer_class]
    return rate


def compute_wht(subtotal, service_category, taxpayer_class, rates: RateTables,
                vat_amount=ZERO, supplier_annual_turnover: Optional[Decimal] = None) -> WHTResult:
    """
    Withholding tax owed on a payment.

    Args:
        subtotal: VAT-exclusive amount; this is the WHT base
        service_category: ServiceCategory or its string value
        taxpayer_class: TaxpayerClass or its string value
        rates: Rate tables for the transaction's tax year
        vat_amount: VAT charged on the same invoice, if any
        supplier_annual_turnover: When known, small suppliers are exempt on services

    Raises:
        UnknownServiceCategory / UnknownTaxpayerClass for values outside the enums
    """
    subtotal = to_money(subtotal, 'subtotal')
    vat_amount = to_money(vat_amount, 'vat_amount')

    rate = wht_rate(service_category, taxpayer_class, rates, supplier_annual_turnover)
    wht_amount = percent_of(subtotal, rate)

    return WHTResult(
        rate=rate,
        base_amount=subtotal,
        wht_amount=wht_amount,
        net_after_wht=round2(subtotal + vat_amount - wht_amount),
    )
