"""
Value types flowing through the tax engine.

Everything here is immutable. Calculators take these in and hand new ones
back; nothing is updated in place.
"""
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional, Tuple

from .exceptions import UnknownServiceCategory, UnknownTaxpayerClass


def _parse_member(enum_cls, value, error_cls, field_name):
    if isinstance(value, enum_cls):
        return value
    if value is None or value == '':
        raise error_cls(f"{field_name} is required", field=field_name)
    try:
        return enum_cls(str(value).strip().lower())
    except ValueError:
        allowed = ', '.join(member.value for member in enum_cls)
        raise error_cls(
            f"Unknown {field_name} {value!r}. Expected one of: {allowed}",
            field=field_name,
        )


def enum_choices(enum_cls):
    """Django-style ``choices`` list for a str-valued enum."""
    return [(member.value, member.value.replace('_', ' ').title()) for member in enum_cls]


class TaxpayerClass(str, Enum):
    INDIVIDUAL = 'individual'
    SOLE_PROPRIETOR = 'sole_proprietor'
    COMPANY = 'company'

    @classmethod
    def parse(cls, value):
        return _parse_member(cls, value, UnknownTaxpayerClass, 'taxpayer_class')


class ServiceCategory(str, Enum):
    PROFESSIONAL_SERVICES = 'professional_services'
    TECHNICAL_SERVICES = 'technical_services'
    MANAGEMENT_SERVICES = 'management_services'
    CONSULTANCY = 'consultancy'
    COMMISSION = 'commission'
    CONSTRUCTION = 'construction'
    SUPPLY_OF_GOODS = 'supply_of_goods'
    CONTRACT = 'contract'
    RENT = 'rent'
    DIVIDENDS = 'dividends'
    INTEREST = 'interest'
    ROYALTIES = 'royalties'
    DIRECTORS_FEES = 'directors_fees'
    OTHER_SERVICES = 'other_services'

    @classmethod
    def parse(cls, value):
        return _parse_member(cls, value, UnknownServiceCategory, 'service_category')


class TransactionKind(str, Enum):
    INVOICE = 'invoice'
    EXPENSE = 'expense'
    SALARY = 'salary'


class VATStatus(str, Enum):
    PAYABLE = 'payable'
    REFUNDABLE = 'refundable'
    NONE = 'none'


class TaxObligation(str, Enum):
    VAT = 'vat'
    WHT = 'wht'
    PAYE = 'paye'
    PIT = 'pit'
    CIT = 'cit'


# =========================
# INPUTS
# =========================
@dataclass(frozen=True)
class Transaction:
    """One taxable event as handed over by the storage layer."""
    entity_id: str
    kind: TransactionKind
    amount: Decimal
    transaction_date: date
    tax_year: int
    taxpayer_class: TaxpayerClass
    service_category: Optional[ServiceCategory] = None
    vat_exempt: bool = False
    annual_rent_paid: Decimal = Decimal('0.00')


@dataclass(frozen=True)
class FilingRecord:
    obligation: TaxObligation
    tax_year: int
    amount: Decimal
    month: Optional[int] = None
    filed_on: Optional[date] = None


@dataclass(frozen=True)
class ComplianceProfile:
    taxpayer_class: TaxpayerClass
    tin: str = ''
    cac_number: str = ''
    vat_registered: bool = False
    annual_turnover: Decimal = Decimal('0.00')


# =========================
# RESULTS
# =========================
@dataclass(frozen=True)
class VATResult:
    output_vat: Decimal
    input_vat: Decimal
    net_vat: Decimal
    status: VATStatus


@dataclass(frozen=True)
class WHTResult:
    rate: Decimal
    base_amount: Decimal
    wht_amount: Decimal
    net_after_wht: Decimal


@dataclass(frozen=True)
class BracketLine:
    bracket_label: str
    rate: Decimal
    amount_in_bracket: Decimal
    tax_for_bracket: Decimal


@dataclass(frozen=True)
class TaxComputation:
    """Shared shape of PIT and CIT results, itemised for filing documents."""
    gross_income: Decimal
    taxable_income: Decimal
    bracket_breakdown: Tuple[BracketLine, ...]
    total_tax: Decimal
    is_small_company: bool = False
    development_levy: Decimal = Decimal('0.00')


@dataclass(frozen=True)
class PAYEResult:
    gross_salary: Decimal
    pension: Decimal
    nhf: Decimal
    nhis: Decimal
    rent_relief: Decimal
    taxable_income: Decimal
    paye: Decimal
    net_salary: Decimal


@dataclass(frozen=True)
class TransactionBreakdown:
    subtotal: Decimal
    vat: VATResult
    gross_amount: Decimal
    wht: Optional[WHTResult]
    amount_payable: Decimal


@dataclass(frozen=True)
class PeriodSummary:
    entity_id: str
    tax_year: int
    month: Optional[int]
    total_output_vat: Decimal
    total_input_vat: Decimal
    net_vat: Decimal
    total_paye: Decimal
    total_wht_remitted: Decimal
    total_wht_credits: Decimal = Decimal('0.00')
    turnover: Decimal = Decimal('0.00')
    transaction_count: int = 0
    invoice_count: int = 0

    @property
    def is_annual(self):
        return self.month is None


@dataclass(frozen=True)
class ComplianceAlert:
    type: str
    severity: str
    message: str


@dataclass(frozen=True)
class ComplianceReport:
    score: int
    status: str
    alerts: Tuple[ComplianceAlert, ...] = field(default_factory=tuple)
