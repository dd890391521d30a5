from dataclasses import replace
from datetime import date
from decimal import Decimal

from django.test import SimpleTestCase, TestCase, override_settings

from account.models import User
from ledger.models import Business, Transaction
from ledger.services.summaries import aggregate, in_period
from ledger.services.tax.domain import (
    ServiceCategory,
    TaxpayerClass,
    Transaction as EngineTransaction,
    TransactionKind,
)
from ledger.services.tax.exceptions import InvalidPeriod, UnsupportedTaxYear


class StaticSource:
    """In-memory transaction source"""

    def __init__(self, transactions):
        self.transactions = list(transactions)
        self.calls = []

    def transactions_for(self, entity_id, tax_year, month):
        self.calls.append((entity_id, tax_year, month))
        return [
            t for t in self.transactions
            if t.entity_id == entity_id and in_period(t, tax_year, month)
        ]


def make_transaction(kind, amount, on, category=None, taxpayer_class=TaxpayerClass.COMPANY,
                     entity_id='biz-1', **kwargs):
    return EngineTransaction(
        entity_id=entity_id,
        kind=kind,
        amount=Decimal(amount),
        transaction_date=on,
        tax_year=on.year,
        taxpayer_class=taxpayer_class,
        service_category=category,
        **kwargs
    )


class PeriodAggregatorTest(SimpleTestCase):

    def setUp(self):
        self.source = StaticSource([
            make_transaction(TransactionKind.INVOICE, '200000', date(2026, 3, 5),
                             category=ServiceCategory.PROFESSIONAL_SERVICES),
            make_transaction(TransactionKind.EXPENSE, '100000', date(2026, 3, 10)),
            make_transaction(TransactionKind.EXPENSE, '50000', date(2026, 3, 31),
                             category=ServiceCategory.RENT, taxpayer_class=TaxpayerClass.INDIVIDUAL),
            make_transaction(TransactionKind.SALARY, '500000', date(2026, 3, 28)),
            make_transaction(TransactionKind.INVOICE, '100000', date(2026, 4, 1)),
            make_transaction(TransactionKind.INVOICE, '999999', date(2026, 3, 5), entity_id='biz-2'),
        ])

    def test_monthly_summary(self):
        summary = aggregate('biz-1', 2026, 3, source=self.source)
        self.assertEqual(summary.entity_id, 'biz-1')
        self.assertEqual(summary.month, 3)
        self.assertEqual(summary.total_output_vat, Decimal('15000.00'))
        self.assertEqual(summary.total_input_vat, Decimal('11250.00'))
        self.assertEqual(summary.net_vat, Decimal('3750.00'))
        self.assertEqual(summary.total_paye, Decimal('59862.50'))
        self.assertEqual(summary.total_wht_remitted, Decimal('5000.00'))
        self.assertEqual(summary.total_wht_credits, Decimal('20000.00'))
        self.assertEqual(summary.turnover, Decimal('200000.00'))
        self.assertEqual(summary.transaction_count, 4)
        self.assertEqual(summary.invoice_count, 1)
        self.assertEqual(self.source.calls[0][1:], (2026, 3))

    def test_annual_summary(self):
        summary = aggregate('biz-1', 2026, source=self.source)
        self.assertTrue(summary.is_annual)
        self.assertEqual(summary.total_output_vat, Decimal('22500.00'))
        self.assertEqual(summary.turnover, Decimal('300000.00'))
        self.assertEqual(summary.transaction_count, 5)

    def test_idempotent(self):
        first = aggregate('biz-1', 2026, 3, source=self.source)
        second = aggregate('biz-1', 2026, 3, source=self.source)
        self.assertEqual(first, second)

    def test_empty_period_is_zero_summary(self):
        summary = aggregate('biz-1', 2026, 7, source=StaticSource([]))
        self.assertEqual(summary.total_output_vat, Decimal('0.00'))
        self.assertEqual(summary.net_vat, Decimal('0.00'))
        self.assertEqual(summary.total_paye, Decimal('0.00'))
        self.assertEqual(summary.transaction_count, 0)

    def test_invalid_month(self):
        for month in [0, 13]:
            with self.assertRaises(InvalidPeriod) as ctx:
                aggregate('biz-1', 2026, month, source=self.source)
            self.assertEqual(ctx.exception.field, 'month')

    def test_pre_2026_year(self):
        with self.assertRaises(UnsupportedTaxYear):
            aggregate('biz-1', 2025, source=self.source)

    def test_legacy_year_coerced_when_enabled(self):
        with self.assertLogs('ledger.services.tax.rates', level='WARNING'):
            summary = aggregate('biz-1', 2025, 3, source=self.source, coerce_legacy=True)
        self.assertEqual(summary.tax_year, 2026)
        self.assertEqual(summary.total_output_vat, Decimal('15000.00'))

    def test_period_follows_tax_year_not_calendar_year(self):
        coerced = make_transaction(TransactionKind.INVOICE, '100000', date(2025, 11, 5))
        coerced = replace(coerced, tax_year=2026)
        self.assertTrue(in_period(coerced, 2026))
        self.assertTrue(in_period(coerced, 2026, 11))
        self.assertFalse(in_period(coerced, 2026, 3))
        self.assertFalse(in_period(coerced, 2025))


class LedgerAggregationTest(TestCase):
    """Aggregation over stored ledger rows"""

    def setUp(self):
        self.user = User.objects.create_user(email='owner@example.com', password='testpass123')
        self.business = Business.objects.create(
            user=self.user,
            name="Adaeze Consulting Ltd",
            taxpayer_class='company',
        )

    def create(self, **kwargs):
        return Transaction.objects.create(user=self.user, business=self.business, **kwargs)

    def test_save_derives_tax_figures(self):
        invoice = self.create(
            transaction_type='invoice',
            date=date(2026, 3, 5),
            amount=Decimal('200000.00'),
            service_category='professional_services',
        )
        invoice.refresh_from_db()
        self.assertEqual(invoice.tax_year, 2026)
        self.assertEqual(invoice.vat_amount, Decimal('15000.00'))
        self.assertEqual(invoice.wht_amount, Decimal('20000.00'))
        self.assertEqual(invoice.paye_amount, Decimal('0.00'))

    def test_expense_uses_counterparty_class(self):
        expense = self.create(
            transaction_type='expense',
            date=date(2026, 3, 5),
            amount=Decimal('100000.00'),
            service_category='consultancy',
            counterparty_class='individual',
        )
        self.assertEqual(expense.wht_amount, Decimal('5000.00'))

    def test_pre_2026_transaction_rejected(self):
        with self.assertRaises(UnsupportedTaxYear):
            self.create(transaction_type='invoice', date=date(2025, 12, 31), amount=Decimal('100.00'))

    def test_aggregate_skips_deleted_rows(self):
        self.create(
            transaction_type='invoice',
            date=date(2026, 3, 5),
            amount=Decimal('200000.00'),
            service_category='professional_services',
        )
        deleted = self.create(transaction_type='invoice', date=date(2026, 3, 6), amount=Decimal('400000.00'))
        deleted.is_deleted = True
        deleted.save()
        self.create(transaction_type='salary', date=date(2026, 3, 28), amount=Decimal('500000.00'))

        summary = aggregate(self.business.id, 2026, 3)
        self.assertEqual(summary.entity_id, str(self.business.id))
        self.assertEqual(summary.total_output_vat, Decimal('15000.00'))
        self.assertEqual(summary.total_wht_credits, Decimal('20000.00'))
        self.assertEqual(summary.total_paye, Decimal('59862.50'))
        self.assertEqual(summary.transaction_count, 2)

    def test_other_business_not_included(self):
        other = Business.objects.create(user=self.user, name="Side Hustle", taxpayer_class='individual')
        Transaction.objects.create(
            user=self.user, business=other, transaction_type='invoice',
            date=date(2026, 3, 5), amount=Decimal('100000.00'),
        )
        summary = aggregate(self.business.id, 2026, 3)
        self.assertEqual(summary.transaction_count, 0)

    @override_settings(TAX_ENGINE={'COERCE_LEGACY_TAX_YEARS': True})
    def test_coerced_legacy_row_lands_in_2026(self):
        with self.assertLogs('ledger.services.tax.rates', level='WARNING'):
            invoice = self.create(
                transaction_type='invoice',
                date=date(2025, 11, 5),
                amount=Decimal('200000.00'),
            )
        self.assertEqual(invoice.tax_year, 2026)

        self.assertEqual(aggregate(self.business.id, 2026).total_output_vat, Decimal('15000.00'))
        self.assertEqual(aggregate(self.business.id, 2026, 11).transaction_count, 1)
        self.assertEqual(aggregate(self.business.id, 2026, 3).transaction_count, 0)
        with self.assertLogs('ledger.services.tax.rates', level='WARNING'):
            legacy = aggregate(self.business.id, 2025, coerce_legacy=True)
        self.assertEqual(legacy.tax_year, 2026)
        self.assertEqual(legacy.invoice_count, 1)
