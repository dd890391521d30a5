import threading
from dataclasses import FrozenInstanceError
from datetime import date
from decimal import Decimal

from django.test import SimpleTestCase

from ledger.services.tax.calendar import filing_deadline
from ledger.services.tax.domain import ServiceCategory, TaxObligation, TaxpayerClass
from ledger.services.tax.exceptions import (
    InvalidAmount,
    InvalidPeriod,
    MalformedRateTable,
    RateTableNotFound,
    TaxConfigurationError,
    UnsupportedTaxYear,
)
from ledger.services.tax.money import percent_of, round2, to_money
from ledger.services.tax.rates import (
    PITBracket,
    load_rates,
    resolve_tax_year,
    validate_brackets,
)


class MoneyTest(SimpleTestCase):
    """Rounding convention shared by all calculators"""

    def test_round_half_up(self):
        self.assertEqual(round2(Decimal('0.005')), Decimal('0.01'))
        self.assertEqual(round2(Decimal('2.675')), Decimal('2.68'))
        self.assertEqual(round2(Decimal('-0.005')), Decimal('-0.01'))

    def test_percent_of(self):
        self.assertEqual(percent_of(Decimal('200000'), Decimal('7.5')), Decimal('15000.00'))
        self.assertEqual(percent_of(Decimal('0.07'), Decimal('7.5')), Decimal('0.01'))

    def test_to_money_accepts_numbers(self):
        self.assertEqual(to_money('100.50', 'amount'), Decimal('100.50'))
        self.assertEqual(to_money(10, 'amount'), Decimal('10'))
        self.assertEqual(to_money(0.1, 'amount'), Decimal('0.1'))

    def test_to_money_rejects_bad_values(self):
        for value in [None, True, 'abc', Decimal('NaN'), Decimal('Infinity'), -1]:
            with self.assertRaises(InvalidAmount) as ctx:
                to_money(value, 'subtotal')
            self.assertEqual(ctx.exception.field, 'subtotal')

    def test_to_money_caps_magnitude(self):
        self.assertEqual(to_money('999999999999999.99', 'amount'), Decimal('999999999999999.99'))
        with self.assertRaises(InvalidAmount) as ctx:
            to_money(Decimal('1e28'), 'subtotal')
        self.assertEqual(ctx.exception.field, 'subtotal')

    def test_round2_overflow_is_typed(self):
        with self.assertRaises(InvalidAmount):
            round2(Decimal('1e28'))


class TaxYearPolicyTest(SimpleTestCase):

    def test_accepts_supported_years(self):
        self.assertEqual(resolve_tax_year(2026), 2026)
        self.assertEqual(resolve_tax_year('2030'), 2030)
        self.assertEqual(resolve_tax_year(2100), 2100)

    def test_rejects_pre_2026(self):
        with self.assertRaises(UnsupportedTaxYear) as ctx:
            resolve_tax_year(2025)
        self.assertEqual(ctx.exception.field, 'tax_year')

    def test_rejects_out_of_range_and_garbage(self):
        for value in [2101, 'next year', None, True]:
            with self.assertRaises(UnsupportedTaxYear):
                resolve_tax_year(value)

    def test_legacy_coercion_logs_warning(self):
        with self.assertLogs('ledger.services.tax.rates', level='WARNING') as logs:
            self.assertEqual(resolve_tax_year(2024, coerce_legacy=True), 2026)
        self.assertIn('2024', logs.output[0])

    def test_coercion_does_not_touch_upper_bound(self):
        with self.assertRaises(UnsupportedTaxYear):
            resolve_tax_year(2101, coerce_legacy=True)


class LoadRatesTest(SimpleTestCase):

    def test_2026_values(self):
        rates = load_rates(2026)
        self.assertEqual(rates.tax_year, 2026)
        self.assertEqual(rates.vat_rate, Decimal('7.5'))
        self.assertEqual(rates.vat_registration_threshold, Decimal('25000000'))
        self.assertEqual(rates.cit_small_company_turnover_ceiling, Decimal('50000000'))
        self.assertEqual(rates.cit_rates['large'], Decimal('30'))
        self.assertEqual(rates.pit_brackets[0].upper_bound, Decimal('800000'))
        self.assertEqual(rates.pit_brackets[0].rate, Decimal('0'))
        self.assertTrue(rates.pit_brackets[-1].upper_bound.is_infinite())
        self.assertEqual(rates.pit_brackets[-1].rate, Decimal('25'))

    def test_same_snapshot_every_call(self):
        self.assertIs(load_rates(2026), load_rates('2026'))

    def test_development_levy_steps_down(self):
        self.assertEqual(load_rates(2026).development_levy_rate, Decimal('4'))
        self.assertEqual(load_rates(2028).development_levy_rate, Decimal('3'))
        self.assertEqual(load_rates(2030).development_levy_rate, Decimal('2'))

    def test_unpublished_year(self):
        with self.assertRaises(RateTableNotFound) as ctx:
            load_rates(2031)
        # Reported as configuration, catchable as an unsupported year
        self.assertIsInstance(ctx.exception, TaxConfigurationError)
        self.assertIsInstance(ctx.exception, UnsupportedTaxYear)

    def test_pre_2026_rejected(self):
        with self.assertRaises(UnsupportedTaxYear):
            load_rates(2025)

    def test_tables_are_read_only(self):
        rates = load_rates(2026)
        with self.assertRaises(TypeError):
            rates.wht_rate_matrix[ServiceCategory.RENT] = {}
        with self.assertRaises(TypeError):
            rates.wht_default_rates[TaxpayerClass.COMPANY] = Decimal('0')
        with self.assertRaises(FrozenInstanceError):
            rates.vat_rate = Decimal('10')

    def test_concurrent_first_load_returns_one_snapshot(self):
        results = []

        def load():
            results.append(load_rates(2029))

        threads = [threading.Thread(target=load) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        self.assertEqual(len(results), 8)
        self.assertTrue(all(result is results[0] for result in results))


class BracketValidationTest(SimpleTestCase):

    def test_empty(self):
        with self.assertRaises(MalformedRateTable):
            validate_brackets(())

    def test_not_ascending(self):
        brackets = (
            PITBracket(Decimal('1000'), Decimal('0')),
            PITBracket(Decimal('500'), Decimal('10')),
            PITBracket(Decimal('Infinity'), Decimal('20')),
        )
        with self.assertRaises(MalformedRateTable):
            validate_brackets(brackets)

    def test_last_bracket_must_be_unbounded(self):
        brackets = (
            PITBracket(Decimal('1000'), Decimal('0')),
            PITBracket(Decimal('5000'), Decimal('10')),
        )
        with self.assertRaises(MalformedRateTable):
            validate_brackets(brackets)

    def test_rate_out_of_range(self):
        with self.assertRaises(MalformedRateTable):
            validate_brackets((PITBracket(Decimal('Infinity'), Decimal('150')),))


class FilingDeadlineTest(SimpleTestCase):

    def setUp(self):
        self.rates = load_rates(2026)

    def test_monthly_obligations_fall_in_following_month(self):
        self.assertEqual(filing_deadline(TaxObligation.VAT, self.rates, 3), date(2026, 4, 21))
        self.assertEqual(filing_deadline(TaxObligation.WHT, self.rates, 3), date(2026, 4, 21))
        self.assertEqual(filing_deadline(TaxObligation.PAYE, self.rates, 5), date(2026, 6, 10))

    def test_december_rolls_into_next_year(self):
        self.assertEqual(filing_deadline('vat', self.rates, 12), date(2027, 1, 21))
        self.assertEqual(filing_deadline('vat', self.rates), date(2027, 1, 21))

    def test_annual_returns(self):
        self.assertEqual(filing_deadline(TaxObligation.CIT, self.rates), date(2027, 6, 30))
        self.assertEqual(filing_deadline(TaxObligation.PIT, self.rates), date(2027, 3, 31))

    def test_invalid_month(self):
        for month in [0, 13, '3']:
            with self.assertRaises(InvalidPeriod):
                filing_deadline(TaxObligation.VAT, self.rates, month)
