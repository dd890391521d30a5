"""
Statutory rate data for the Nigeria Tax Act 2025 (effective January 1, 2026).

Acts signed into law: June 26, 2025
Effective date: January 1, 2026

This module holds DATA only. Nothing here is read directly by a
calculator; ``rates.load_rates`` turns these literals into an immutable
``RateTables`` snapshot per tax year and every calculation receives that
snapshot as an argument.

Key Legal Points (2026):
- First ₦800,000 of annual income is taxed at 0% (PIT)
- Progressive PIT regime with top marginal rate of 25%
- CRA is no longer used
- Small companies (turnover <= ₦50m) pay 0% CIT, others 30%
- VAT stays at 7.5%; registration threshold remains ₦25m
- Development levy replaces the old education/IT/police levies for
  non-small companies, stepping down from 4% to 2% by 2030

A new statute is a new year key here, never an edit of an existing one.
"""

from decimal import Decimal

from .domain import ServiceCategory as S, TaxpayerClass as C

INFINITY = Decimal('Infinity')

FIRST_TAX_YEAR = 2026
LAST_TAX_YEAR = 2100


# =========================
# PERSONAL INCOME TAX BANDS (2026)
# =========================
# (cumulative upper limit on annual taxable income, marginal rate %, label)
PERSONAL_INCOME_TAX_BANDS_2026 = [
    (Decimal('800000'), Decimal('0'), 'First ₦800,000'),
    (Decimal('3000000'), Decimal('15'), 'Next ₦2,200,000'),
    (Decimal('12000000'), Decimal('18'), 'Next ₦9,000,000'),
    (Decimal('25000000'), Decimal('21'), 'Next ₦13,000,000'),
    (Decimal('50000000'), Decimal('23'), 'Next ₦25,000,000'),
    (INFINITY, Decimal('25'), 'Above ₦50,000,000'),
]


# =========================
# COMPANY INCOME TAX
# =========================
CIT_SMALL_COMPANY_TURNOVER_CEILING = Decimal('50000000')  # ₦50m
CIT_RATES = {
    'small': Decimal('0'),
    'large': Decimal('30'),
}

# Development levy on assessable profit of non-small companies
DEVELOPMENT_LEVY_SCHEDULE = {
    2026: Decimal('4'),
    2027: Decimal('3.5'),
    2028: Decimal('3'),
    2029: Decimal('2.5'),
    2030: Decimal('2'),
}


# =========================
# VAT
# =========================
VAT_RATE = Decimal('7.5')
VAT_REGISTRATION_THRESHOLD = Decimal('25000000')  # ₦25m, distinct from the CIT ceiling

VAT_EXEMPT_CATEGORIES = frozenset({
    'food',
    'healthcare',
    'education',
    'housing',
    'transportation',
})


# =========================
# WITHHOLDING TAX
# =========================
# Rate in percent by service category and taxpayer class. A missing cell
# falls back to WHT_DEFAULT_RATES for that class; an unknown category is
# rejected before it ever gets here.
WHT_RATE_MATRIX = {
    S.PROFESSIONAL_SERVICES: {C.INDIVIDUAL: Decimal('5'), C.SOLE_PROPRIETOR: Decimal('5'), C.COMPANY: Decimal('10')},
    S.TECHNICAL_SERVICES: {C.INDIVIDUAL: Decimal('5'), C.SOLE_PROPRIETOR: Decimal('5'), C.COMPANY: Decimal('10')},
    S.MANAGEMENT_SERVICES: {C.INDIVIDUAL: Decimal('5'), C.SOLE_PROPRIETOR: Decimal('5'), C.COMPANY: Decimal('10')},
    S.CONSULTANCY: {C.INDIVIDUAL: Decimal('5'), C.SOLE_PROPRIETOR: Decimal('5'), C.COMPANY: Decimal('10')},
    S.COMMISSION: {C.INDIVIDUAL: Decimal('5'), C.SOLE_PROPRIETOR: Decimal('5'), C.COMPANY: Decimal('10')},
    S.CONSTRUCTION: {C.INDIVIDUAL: Decimal('5'), C.SOLE_PROPRIETOR: Decimal('5'), C.COMPANY: Decimal('5')},
    S.SUPPLY_OF_GOODS: {C.INDIVIDUAL: Decimal('5'), C.SOLE_PROPRIETOR: Decimal('5'), C.COMPANY: Decimal('5')},
    S.CONTRACT: {C.INDIVIDUAL: Decimal('10'), C.SOLE_PROPRIETOR: Decimal('10'), C.COMPANY: Decimal('10')},
    S.RENT: {C.INDIVIDUAL: Decimal('10'), C.SOLE_PROPRIETOR: Decimal('10'), C.COMPANY: Decimal('10')},
    S.DIVIDENDS: {C.INDIVIDUAL: Decimal('10'), C.SOLE_PROPRIETOR: Decimal('10'), C.COMPANY: Decimal('10')},
    S.INTEREST: {C.INDIVIDUAL: Decimal('10'), C.SOLE_PROPRIETOR: Decimal('10'), C.COMPANY: Decimal('10')},
    S.ROYALTIES: {C.INDIVIDUAL: Decimal('10'), C.SOLE_PROPRIETOR: Decimal('10'), C.COMPANY: Decimal('10')},
    # Directors' fees are paid to natural persons; companies use the default row
    S.DIRECTORS_FEES: {C.INDIVIDUAL: Decimal('15'), C.SOLE_PROPRIETOR: Decimal('15')},
}

# Documented default row (other_services)
WHT_DEFAULT_RATES = {
    C.INDIVIDUAL: Decimal('2'),
    C.SOLE_PROPRIETOR: Decimal('2'),
    C.COMPANY: Decimal('5'),
}

# Suppliers at or below this turnover suffer no WHT on service payments
WHT_SMALL_SUPPLIER_THRESHOLD = Decimal('25000000')
WHT_SERVICE_CATEGORIES = frozenset({
    S.PROFESSIONAL_SERVICES,
    S.TECHNICAL_SERVICES,
    S.MANAGEMENT_SERVICES,
    S.CONSULTANCY,
    S.COMMISSION,
    S.CONSTRUCTION,
    S.OTHER_SERVICES,
})


# =========================
# PAYROLL (PAYE) DEDUCTIONS
# =========================
PENSION_EMPLOYEE_RATE = Decimal('8')
NHF_RATE = Decimal('2.5')
NHF_ANNUAL_INCOME_CAP = Decimal('2500000')
NHIS_RATE = Decimal('5')
RENT_RELIEF_RATE = Decimal('20')
RENT_RELIEF_CAP = Decimal('500000')


# =========================
# FILING CALENDAR
# =========================
# Monthly obligations: day of the following month
VAT_FILING_DAY = 21
WHT_FILING_DAY = 21
PAYE_FILING_DAY = 10
# Annual obligations: (month, day) of the following year
CIT_FILING_DATE = (6, 30)
PIT_FILING_DATE = (3, 31)


# =========================
# PUBLISHED TABLES
# =========================
def _nigeria_tax_act_2025(tax_year):
    return {
        'tax_year': tax_year,
        'pit_brackets': PERSONAL_INCOME_TAX_BANDS_2026,
        'cit_small_company_turnover_ceiling': CIT_SMALL_COMPANY_TURNOVER_CEILING,
        'cit_rates': CIT_RATES,
        'vat_rate': VAT_RATE,
        'vat_registration_threshold': VAT_REGISTRATION_THRESHOLD,
        'vat_exempt_categories': VAT_EXEMPT_CATEGORIES,
        'wht_rate_matrix': WHT_RATE_MATRIX,
        'wht_default_rates': WHT_DEFAULT_RATES,
        'wht_small_supplier_threshold': WHT_SMALL_SUPPLIER_THRESHOLD,
        'wht_service_categories': WHT_SERVICE_CATEGORIES,
        'development_levy_rate': DEVELOPMENT_LEVY_SCHEDULE[tax_year],
        'pension_employee_rate': PENSION_EMPLOYEE_RATE,
        'nhf_rate': NHF_RATE,
        'nhf_annual_income_cap': NHF_ANNUAL_INCOME_CAP,
        'nhis_rate': NHIS_RATE,
        'rent_relief_rate': RENT_RELIEF_RATE,
        'rent_relief_cap': RENT_RELIEF_CAP,
        'vat_filing_day': VAT_FILING_DAY,
        'wht_filing_day': WHT_FILING_DAY,
        'paye_filing_day': PAYE_FILING_DAY,
        'cit_filing_date': CIT_FILING_DATE,
        'pit_filing_date': PIT_FILING_DATE,
    }


PUBLISHED_RATE_TABLES = {
    year: _nigeria_tax_act_2025 for year in DEVELOPMENT_LEVY_SCHEDULE
}


TAX_DISCLAIMER = (
    "These are estimates only and do not constitute official tax filing with the NRS "
    "(Nigeria Revenue Service). Consult a licensed tax professional for "
    "accurate tax computation and filing."
)
