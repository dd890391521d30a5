"""
Per-transaction tax figures in the order the statute applies them:
VAT first on the subtotal, then WHT on the same VAT-exclusive subtotal.

The invoice preview endpoint and the period aggregator both go through
``price_transaction`` / ``derive`` so the preview shown to users is the
authoritative computation, not a replica of it.
"""
from dataclasses import dataclass
from typing import Optional

from .domain import (
    PAYEResult, Transaction, TransactionBreakdown, TransactionKind, VATResult, WHTResult,
)
from .exceptions import TaxConfigurationError
from .money import ZERO, round2, to_money
from .paye import compute_paye
from .rates import RateTables
from .vat import compute_vat
from .wht import compute_wht


def price_transaction(subtotal, rates: RateTables, vat_exempt=False, service_category=None,
                      taxpayer_class=None, supplier_annual_turnover=None) -> TransactionBreakdown:
    """
    Invoice/expense breakdown: subtotal, VAT, gross, WHT and the amount
    actually paid over after withholding.

    WHT is skipped when no service category is given; a category without a
    taxpayer class is rejected by the WHT calculator.
    """
    subtotal = to_money(subtotal, 'subtotal')
    vat = compute_vat(subtotal, vat_exempt, rates)
    gross = round2(subtotal + vat.output_vat)

    wht = None
    if service_category not in (None, ''):
        wht = compute_wht(
            subtotal,
            service_category,
            taxpayer_class,
            rates,
            vat_amount=vat.output_vat,
            supplier_annual_turnover=supplier_annual_turnover,
        )

    return TransactionBreakdown(
        subtotal=round2(subtotal),
        vat=vat,
        gross_amount=gross,
        wht=wht,
        amount_payable=wht.net_after_wht if wht else gross,
    )


@dataclass(frozen=True)
class DerivedResults:
    """Everything the engine derives from a single stored transaction."""
    vat: Optional[VATResult] = None
    wht: Optional[WHTResult] = None
    paye: Optional[PAYEResult] = None

    @property
    def vat_amount(self):
        return self.vat.output_vat if self.vat else ZERO

    @property
    def wht_amount(self):
        return self.wht.wht_amount if self.wht else ZERO

    @property
    def paye_amount(self):
        return self.paye.paye if self.paye else ZERO


def derive(transaction: Transaction, rates: RateTables) -> DerivedResults:
    if rates.tax_year != transaction.tax_year:
        raise TaxConfigurationError(
            f"Rate tables for {rates.tax_year} cannot price a {transaction.tax_year} transaction",
            field='tax_year',
        )

    if transaction.kind == TransactionKind.SALARY:
        return DerivedResults(
            paye=compute_paye(transaction.amount, rates, transaction.annual_rent_paid),
        )

    breakdown = price_transaction(
        transaction.amount,
        rates,
        vat_exempt=transaction.vat_exempt,
        service_category=transaction.service_category,
        taxpayer_class=transaction.taxpayer_class,
    )
    return DerivedResults(vat=breakdown.vat, wht=breakdown.wht)
