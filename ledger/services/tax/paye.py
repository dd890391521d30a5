"""
Monthly PAYE on a salary line.

Statutory deductions come off gross pay first (pension, NHF, NHIS) along
with a twelfth of the annual rent relief. The remainder is annualised and
run through the same PIT brackets used for annual returns, so monthly
PAYE and the annual PIT computation can never disagree on the bands.
"""
from decimal import Decimal

from .domain import PAYEResult
from .money import ZERO, percent_of, round2, to_money
from .pit import compute_pit, rent_relief
from .rates import RateTables

MONTHS_IN_YEAR = Decimal('12')


def compute_paye(monthly_gross, rates: RateTables, annual_rent_paid=ZERO) -> PAYEResult:
    gross = to_money(monthly_gross, 'monthly_gross')

    pension = percent_of(gross, rates.pension_employee_rate)
    nhf = percent_of(min(gross, rates.nhf_annual_income_cap / MONTHS_IN_YEAR), rates.nhf_rate)
    nhis = percent_of(gross, rates.nhis_rate)
    monthly_rent_relief = round2(rent_relief(annual_rent_paid, rates) / MONTHS_IN_YEAR)

    taxable = max(ZERO, round2(gross - pension - nhf - nhis - monthly_rent_relief))

    annual = compute_pit(taxable * MONTHS_IN_YEAR, rates.pit_brackets)
    paye = round2(annual.total_tax / MONTHS_IN_YEAR)

    return PAYEResult(
        gross_salary=round2(gross),
        pension=pension,
        nhf=nhf,
        nhis=nhis,
        rent_relief=monthly_rent_relief,
        taxable_income=taxable,
        paye=paye,
        net_salary=round2(gross - pension - nhf - nhis - paye),
    )
