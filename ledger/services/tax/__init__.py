"""
Nigerian tax computation engine (Nigeria Tax Act 2025, tax years 2026+).

Pure functions over immutable inputs: every calculator takes a loaded
``RateTables`` snapshot and returns a frozen result. Nothing in this
package touches the database or Django.
"""
from .breakdown import derive, price_transaction
from .calendar import filing_deadline
from .cit import apply_wht_credits, compute_cit
from .domain import (
    ComplianceProfile,
    FilingRecord,
    PeriodSummary,
    ServiceCategory,
    TaxObligation,
    TaxpayerClass,
    Transaction,
    TransactionKind,
    VATStatus,
)
from .exceptions import (
    TaxConfigurationError,
    TaxEngineError,
    TaxValidationError,
)
from .money import percent_of, round2, to_money
from .paye import compute_paye
from .pit import assess_personal_income, compute_pit
from .rates import RateTables, load_rates, resolve_tax_year
from .vat import compute_vat, is_vat_exempt_category
from .wht import compute_wht

__all__ = [
    'ComplianceProfile',
    'FilingRecord',
    'PeriodSummary',
    'RateTables',
    'ServiceCategory',
    'TaxConfigurationError',
    'TaxEngineError',
    'TaxObligation',
    'TaxValidationError',
    'TaxpayerClass',
    'Transaction',
    'TransactionKind',
    'VATStatus',
    'apply_wht_credits',
    'assess_personal_income',
    'compute_cit',
    'compute_paye',
    'compute_pit',
    'compute_vat',
    'compute_wht',
    'derive',
    'filing_deadline',
    'is_vat_exempt_category',
    'load_rates',
    'percent_of',
    'price_transaction',
    'resolve_tax_year',
    'round2',
    'to_money',
]
