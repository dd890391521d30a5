"""
Company Income Tax with the small-company exemption.

The exemption test is on TURNOVER. A company above the ceiling pays the
large-company rate on its taxable profit however thin that profit is.
"""
from decimal import Decimal

from .domain import BracketLine, TaxComputation
from .money import ZERO, percent_of, round2, to_money
from .rates import RateTables


def compute_cit(annual_turnover, taxable_profit, rates: RateTables) -> TaxComputation:
    """
    Args:
        annual_turnover: Turnover for the year, VAT-exclusive
        taxable_profit: Assessable profit after allowable deductions
        rates: Rate tables for the tax year

    Returns:
        TaxComputation with a single line naming the company class applied.
        The development levy is reported separately and is not part of total_tax.
    """
    turnover = to_money(annual_turnover, 'annual_turnover')
    profit = to_money(taxable_profit, 'taxable_profit')
    ceiling = rates.cit_small_company_turnover_ceiling

    is_small = turnover <= ceiling
    if is_small:
        rate = rates.cit_rates['small']
        label = f"Small company (turnover ≤ ₦{ceiling:,.0f})"
        levy = ZERO
    else:
        rate = rates.cit_rates['large']
        label = f"Large company (turnover > ₦{ceiling:,.0f})"
        levy = percent_of(profit, rates.development_levy_rate)

    total_tax = percent_of(profit, rate)

    return TaxComputation(
        gross_income=round2(turnover),
        taxable_income=round2(profit),
        bracket_breakdown=(
            BracketLine(
                bracket_label=label,
                rate=rate,
                amount_in_bracket=round2(profit),
                tax_for_bracket=total_tax,
            ),
        ),
        total_tax=total_tax,
        is_small_company=is_small,
        development_levy=levy,
    )


def apply_wht_credits(tax_liability, wht_credits) -> Decimal:
    """
    Offset WHT suffered during the year against the final PIT/CIT liability.

    Credits never push the liability below zero.
    """
    liability = to_money(tax_liability, 'tax_liability')
    credits = to_money(wht_credits, 'wht_credits')
    return round2(max(ZERO, liability - credits))
