"""
Period aggregation for tax filing.

Summaries are recomputed from the stored transactions on every request.
No summary data is stored in the database and nothing is cached: each
transaction is re-derived through the tax calculators with its own tax
year's rate tables, so a summary always agrees with the per-transaction
figures and calling ``aggregate`` twice gives the same result.
"""
import logging
from typing import Iterable, Optional, Protocol

from ledger.models import Transaction as LedgerTransaction
from ledger.services.tax.breakdown import derive
from ledger.services.tax.calendar import validate_month
from ledger.services.tax.domain import PeriodSummary, Transaction, TransactionKind
from ledger.services.tax.money import ZERO, round2
from ledger.services.tax.rates import load_rates, resolve_tax_year

logger = logging.getLogger(__name__)


class TransactionSource(Protocol):
    def transactions_for(self, entity_id, tax_year: int, month: Optional[int]) -> Iterable[Transaction]:
        ...


class LedgerTransactionSource:
    """
    Reads live (not soft-deleted) ledger rows for one business.

    Rows are chosen by their stored tax year, so a row whose year was
    moved forward under legacy coercion is summarised with that year.
    """

    def transactions_for(self, entity_id, tax_year, month):
        queryset = LedgerTransaction.objects.select_related('business').filter(
            business_id=entity_id,
            tax_year=tax_year,
            is_deleted=False,
        )
        if month is not None:
            queryset = queryset.filter(date__month=month)
        queryset = queryset.order_by('date', 'created_at')
        return [row.to_engine() for row in queryset]


def in_period(transaction: Transaction, tax_year: int, month: Optional[int] = None) -> bool:
    """Tax year decides the year; the transaction date decides the month."""
    if transaction.tax_year != tax_year:
        return False
    return month is None or transaction.transaction_date.month == month


def aggregate(entity_id, tax_year, month=None, source: Optional[TransactionSource] = None,
              coerce_legacy: bool = False) -> PeriodSummary:
    """
    Build the VAT/WHT/PAYE summary for one entity and period.

    Args:
        entity_id: Business identifier
        tax_year: Tax year of the period
        month: 1-12 for a monthly summary, None for the whole year
        source: Where transactions come from; defaults to the ledger tables
        coerce_legacy: Move pre-2026 years to 2026 instead of rejecting them

    Returns:
        PeriodSummary. A period with no transactions gives an all-zero summary.

    Raises:
        InvalidPeriod: month outside 1-12
        UnsupportedTaxYear: tax year outside the supported range
    """
    tax_year = resolve_tax_year(tax_year, coerce_legacy=coerce_legacy)
    month = validate_month(month)
    source = source or LedgerTransactionSource()

    output_vat = input_vat = paye = ZERO
    wht_remitted = wht_credits = turnover = ZERO
    count = invoices = 0

    for transaction in source.transactions_for(entity_id, tax_year, month):
        if not in_period(transaction, tax_year, month):
            continue
        if str(transaction.entity_id) != str(entity_id):
            continue

        derived = derive(transaction, load_rates(transaction.tax_year))
        count += 1

        if transaction.kind == TransactionKind.INVOICE:
            invoices += 1
            output_vat += derived.vat_amount
            turnover += transaction.amount
            wht_credits += derived.wht_amount
        elif transaction.kind == TransactionKind.EXPENSE:
            input_vat += derived.vat_amount
            wht_remitted += derived.wht_amount
        else:
            paye += derived.paye_amount

    logger.debug(
        f"Aggregated {count} transactions for entity {entity_id}, "
        f"tax year {tax_year}, month {month or 'all'}"
    )

    return PeriodSummary(
        entity_id=str(entity_id),
        tax_year=tax_year,
        month=month,
        total_output_vat=round2(output_vat),
        total_input_vat=round2(input_vat),
        net_vat=round2(output_vat - input_vat),
        total_paye=round2(paye),
        total_wht_remitted=round2(wht_remitted),
        total_wht_credits=round2(wht_credits),
        turnover=round2(turnover),
        transaction_count=count,
        invoice_count=invoices,
    )
