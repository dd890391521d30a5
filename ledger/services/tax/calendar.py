"""Statutory filing and remittance deadlines."""
from datetime import date
from typing import Optional

from .domain import TaxObligation
from .exceptions import InvalidPeriod
from .rates import RateTables

MONTHLY_OBLIGATIONS = (TaxObligation.VAT, TaxObligation.WHT, TaxObligation.PAYE)


def validate_month(month) -> Optional[int]:
    if month is None:
        return None
    if isinstance(month, bool) or not isinstance(month, int) or not 1 <= month <= 12:
        raise InvalidPeriod(f"month must be between 1 and 12, got {month!r}", field='month')
    return month


def filing_deadline(obligation, rates: RateTables, month: Optional[int] = None) -> date:
    """
    Due date for an obligation of ``rates.tax_year``.

    Monthly obligations fall due on a fixed day of the following month. When
    no month is given (an annual view) the December period's deadline is
    used, i.e. the last monthly deadline of the year.
    """
    obligation = TaxObligation(obligation)
    month = validate_month(month)
    year = rates.tax_year

    if obligation in MONTHLY_OBLIGATIONS:
        day = {
            TaxObligation.VAT: rates.vat_filing_day,
            TaxObligation.WHT: rates.wht_filing_day,
            TaxObligation.PAYE: rates.paye_filing_day,
        }[obligation]
        period_month = month or 12
        if period_month == 12:
            return date(year + 1, 1, day)
        return date(year, period_month + 1, day)

    if obligation == TaxObligation.CIT:
        due_month, due_day = rates.cit_filing_date
    else:
        due_month, due_day = rates.pit_filing_date
    return date(year + 1, due_month, due_day)
