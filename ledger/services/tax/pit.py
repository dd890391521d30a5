"""
Personal Income Tax via progressive brackets (Nigeria Tax Act 2025).

The full bracket breakdown is returned together with the total so that
filing documents can show the statutory working line by line.
"""
from decimal import Decimal, InvalidOperation

from .domain import BracketLine, TaxComputation
from .exceptions import InvalidIncome
from .money import ZERO, percent_of, round2, to_money
from .rates import PITBracket, RateTables, validate_brackets


def compute_pit(taxable_income, brackets, gross_income=None) -> TaxComputation:
    """
    Walk the brackets in ascending order and tax the slice of income in each.

    Args:
        taxable_income: Annual taxable income (Naira)
        brackets: Ordered PITBracket sequence, last one unbounded
        gross_income: Income before deductions, reported as-is (defaults to taxable_income)

    Returns:
        TaxComputation with one BracketLine per bracket touched

    Raises:
        InvalidIncome: income missing, not a number or negative
        MalformedRateTable: bracket list empty or out of order
    """
    income = _income(taxable_income, 'taxable_income')
    gross = income if gross_income is None else _income(gross_income, 'gross_income')

    brackets = tuple(brackets or ())
    validate_brackets(brackets)

    lines = []
    total_tax = ZERO
    previous_upper = ZERO

    for bracket in brackets:
        amount_in_bracket = max(ZERO, min(income, bracket.upper_bound) - previous_upper)
        tax_for_bracket = percent_of(amount_in_bracket, bracket.rate)

        lines.append(BracketLine(
            bracket_label=bracket.label or _default_label(previous_upper, bracket),
            rate=bracket.rate,
            amount_in_bracket=round2(amount_in_bracket),
            tax_for_bracket=tax_for_bracket,
        ))
        total_tax += tax_for_bracket

        if income <= bracket.upper_bound:
            break
        previous_upper = bracket.upper_bound

    return TaxComputation(
        gross_income=round2(gross),
        taxable_income=round2(income),
        bracket_breakdown=tuple(lines),
        total_tax=round2(total_tax),
    )


def rent_relief(annual_rent_paid, rates: RateTables) -> Decimal:
    """Lower of 20% of annual rent paid or the ₦500,000 cap."""
    rent = to_money(annual_rent_paid, 'annual_rent_paid')
    return min(percent_of(rent, rates.rent_relief_rate), rates.rent_relief_cap)


def assess_personal_income(gross_income, rates: RateTables, deductions=ZERO,
                           annual_rent_paid=ZERO) -> TaxComputation:
    """
    Annual PIT for an individual or sole proprietor.

    Taxable income is gross income less allowable deductions (pension,
    NHF, NHIS, business expenses) and rent relief, floored at zero.
    """
    gross = _income(gross_income, 'gross_income')
    deductions = to_money(deductions, 'deductions')
    relief = rent_relief(annual_rent_paid, rates)

    taxable = max(ZERO, gross - deductions - relief)
    return compute_pit(taxable, rates.pit_brackets, gross_income=gross)


def _income(value, field):
    if value is None or isinstance(value, bool):
        raise InvalidIncome(f"{field} is required", field=field)
    try:
        income = Decimal(str(value)) if isinstance(value, float) else Decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        raise InvalidIncome(f"{field} must be a number, got {value!r}", field=field)
    if not income.is_finite() or income < 0:
        raise InvalidIncome(f"{field} must be a non-negative amount, got {value!r}", field=field)
    return income


def _default_label(previous_upper: Decimal, bracket: PITBracket) -> str:
    if bracket.upper_bound.is_infinite():
        return f"Above ₦{previous_upper:,.0f}"
    return f"₦{previous_upper:,.0f} - ₦{bracket.upper_bound:,.0f}"
