"""
Versioned rate tables, loaded once per tax year.

``load_rates(year)`` builds an immutable ``RateTables`` snapshot from the
published data in ``config`` the first time a year is requested and
hands back the same object on every later call. The first load is
serialised behind a lock; reads after that take no lock at all.
"""
import logging
import threading
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from types import MappingProxyType
from typing import FrozenSet, Mapping, Optional, Tuple

from . import config
from .domain import ServiceCategory, TaxpayerClass
from .exceptions import MalformedRateTable, RateTableNotFound, UnsupportedTaxYear

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PITBracket:
    upper_bound: Decimal
    rate: Decimal
    label: str = ''


@dataclass(frozen=True)
class RateTables:
    tax_year: int
    pit_brackets: Tuple[PITBracket, ...]
    cit_small_company_turnover_ceiling: Decimal
    cit_rates: Mapping[str, Decimal]
    vat_rate: Decimal
    vat_registration_threshold: Decimal
    wht_rate_matrix: Mapping[ServiceCategory, Mapping[TaxpayerClass, Decimal]]
    wht_default_rates: Mapping[TaxpayerClass, Decimal]
    wht_small_supplier_threshold: Decimal
    wht_service_categories: FrozenSet[ServiceCategory]
    vat_exempt_categories: FrozenSet[str]
    development_levy_rate: Decimal
    pension_employee_rate: Decimal
    nhf_rate: Decimal
    nhf_annual_income_cap: Decimal
    nhis_rate: Decimal
    rent_relief_rate: Decimal
    rent_relief_cap: Decimal
    vat_filing_day: int
    wht_filing_day: int
    paye_filing_day: int
    cit_filing_date: Tuple[int, int]
    pit_filing_date: Tuple[int, int]


_tables = {}
_load_lock = threading.Lock()


# =========================
# TAX YEAR POLICY
# =========================
def resolve_tax_year(value, coerce_legacy: bool = False) -> int:
    """
    Validate a tax year arriving at a system boundary.

    Years before 2026 are rejected. When ``coerce_legacy`` is set (see
    ``TAX_ENGINE['COERCE_LEGACY_TAX_YEARS']``) they are moved to 2026 and a
    warning is logged instead; this is the only place that happens.
    """
    if isinstance(value, bool):
        raise UnsupportedTaxYear(f"Invalid tax year {value!r}", field='tax_year')
    try:
        year = int(str(value).strip())
    except (TypeError, ValueError):
        raise UnsupportedTaxYear(
            f"Invalid tax year {value!r}. Use a four digit year such as 2026",
            field='tax_year',
        )

    if year < config.FIRST_TAX_YEAR:
        if coerce_legacy:
            logger.warning(
                f"Tax year {year} is before {config.FIRST_TAX_YEAR}; "
                f"coercing to {config.FIRST_TAX_YEAR} (legacy compatibility)"
            )
            return config.FIRST_TAX_YEAR
        raise UnsupportedTaxYear(
            f"Invalid tax year {year}. Only tax years {config.FIRST_TAX_YEAR} and onward "
            "are supported under the Nigeria Tax Act 2025",
            field='tax_year',
        )
    if year > config.LAST_TAX_YEAR:
        raise UnsupportedTaxYear(
            f"Invalid tax year {year}. Latest supported year is {config.LAST_TAX_YEAR}",
            field='tax_year',
        )
    return year


def tax_year_for(on: date, coerce_legacy: bool = False) -> int:
    return resolve_tax_year(on.year, coerce_legacy=coerce_legacy)


# =========================
# LOADING
# =========================
def load_rates(tax_year) -> RateTables:
    """
    Return the rate tables for ``tax_year``.

    Raises:
        UnsupportedTaxYear: year outside 2026..2100.
        RateTableNotFound: year in range but no table published.
        MalformedRateTable: the published data failed validation.
    """
    year = resolve_tax_year(tax_year)

    tables = _tables.get(year)
    if tables is not None:
        return tables

    with _load_lock:
        tables = _tables.get(year)
        if tables is None:
            tables = _build(year)
            _tables[year] = tables
            logger.info(f"Loaded rate tables for tax year {year}")
    return tables


def reload_rates(tax_year) -> RateTables:
    """
    Administrative reload of one year's tables.

    Only meant for an explicit operator action after a statute-driven
    release; ordinary code paths never call this.
    """
    year = resolve_tax_year(tax_year)
    with _load_lock:
        tables = _build(year)
        _tables[year] = tables
    logger.warning(f"Rate tables for tax year {year} were reloaded")
    return tables


def loaded_years():
    return sorted(_tables)


def _build(year: int) -> RateTables:
    factory = config.PUBLISHED_RATE_TABLES.get(year)
    if factory is None:
        raise RateTableNotFound(
            f"No rate table has been published for tax year {year}",
            field='tax_year',
        )
    raw = factory(year)

    brackets = tuple(
        PITBracket(upper_bound=Decimal(upper), rate=Decimal(rate), label=label)
        for upper, rate, label in raw['pit_brackets']
    )
    validate_brackets(brackets)

    matrix = MappingProxyType({
        ServiceCategory(category): MappingProxyType({
            TaxpayerClass(taxpayer_class): Decimal(rate)
            for taxpayer_class, rate in row.items()
        })
        for category, row in raw['wht_rate_matrix'].items()
    })
    defaults = MappingProxyType({
        TaxpayerClass(taxpayer_class): Decimal(rate)
        for taxpayer_class, rate in raw['wht_default_rates'].items()
    })
    missing_defaults = set(TaxpayerClass) - set(defaults)
    if missing_defaults:
        raise MalformedRateTable(
            f"WHT default row for {year} is missing classes: "
            + ', '.join(sorted(c.value for c in missing_defaults)),
            field='wht_default_rates',
        )

    cit_rates = MappingProxyType({key: Decimal(rate) for key, rate in raw['cit_rates'].items()})
    if set(cit_rates) != {'small', 'large'}:
        raise MalformedRateTable(
            f"CIT rates for {year} must define 'small' and 'large'",
            field='cit_rates',
        )

    for name in ('vat_rate', 'development_levy_rate'):
        _check_percent(Decimal(raw[name]), name)
    for row in matrix.values():
        for rate in row.values():
            _check_percent(rate, 'wht_rate_matrix')

    return RateTables(
        tax_year=year,
        pit_brackets=brackets,
        cit_small_company_turnover_ceiling=Decimal(raw['cit_small_company_turnover_ceiling']),
        cit_rates=cit_rates,
        vat_rate=Decimal(raw['vat_rate']),
        vat_registration_threshold=Decimal(raw['vat_registration_threshold']),
        wht_rate_matrix=matrix,
        wht_default_rates=defaults,
        wht_small_supplier_threshold=Decimal(raw['wht_small_supplier_threshold']),
        wht_service_categories=frozenset(raw['wht_service_categories']),
        vat_exempt_categories=frozenset(raw['vat_exempt_categories']),
        development_levy_rate=Decimal(raw['development_levy_rate']),
        pension_employee_rate=Decimal(raw['pension_employee_rate']),
        nhf_rate=Decimal(raw['nhf_rate']),
        nhf_annual_income_cap=Decimal(raw['nhf_annual_income_cap']),
        nhis_rate=Decimal(raw['nhis_rate']),
        rent_relief_rate=Decimal(raw['rent_relief_rate']),
        rent_relief_cap=Decimal(raw['rent_relief_cap']),
        vat_filing_day=raw['vat_filing_day'],
        wht_filing_day=raw['wht_filing_day'],
        paye_filing_day=raw['paye_filing_day'],
        cit_filing_date=tuple(raw['cit_filing_date']),
        pit_filing_date=tuple(raw['pit_filing_date']),
    )


def validate_brackets(brackets: Optional[Tuple[PITBracket, ...]]) -> None:
    """Brackets must be non-empty, strictly ascending and end at infinity."""
    if not brackets:
        raise MalformedRateTable("PIT bracket list is empty", field='pit_brackets')

    previous = Decimal('0')
    for bracket in brackets:
        _check_percent(bracket.rate, 'pit_brackets')
        if bracket.upper_bound <= previous:
            raise MalformedRateTable(
                f"PIT brackets must be strictly ascending; {bracket.upper_bound} follows {previous}",
                field='pit_brackets',
            )
        previous = bracket.upper_bound

    if not brackets[-1].upper_bound.is_infinite():
        raise MalformedRateTable(
            "The last PIT bracket must have an unbounded upper limit",
            field='pit_brackets',
        )


def _check_percent(rate: Decimal, field: str) -> None:
    if not rate.is_finite() or rate < 0 or rate > 100:
        raise MalformedRateTable(f"{field} rate {rate} is outside 0-100%", field=field)
