from decimal import Decimal

from django.test import SimpleTestCase

from ledger.services.tax.breakdown import price_transaction
from ledger.services.tax.domain import ServiceCategory, TaxpayerClass, VATStatus
from ledger.services.tax.exceptions import (
    InvalidAmount,
    UnknownServiceCategory,
    UnknownTaxpayerClass,
)
from ledger.services.tax.rates import load_rates
from ledger.services.tax.vat import compute_vat, is_vat_exempt_category
from ledger.services.tax.wht import compute_wht, wht_rate


class VATCalculatorTest(SimpleTestCase):

    def setUp(self):
        self.rates = load_rates(2026)

    def test_standard_rate(self):
        result = compute_vat(Decimal('200000'), False, self.rates)
        self.assertEqual(result.output_vat, Decimal('15000.00'))
        self.assertEqual(result.net_vat, Decimal('15000.00'))
        self.assertEqual(result.status, VATStatus.PAYABLE)

    def test_exempt_supply(self):
        result = compute_vat(Decimal('200000'), True, self.rates)
        self.assertEqual(result.output_vat, Decimal('0.00'))
        self.assertEqual(result.status, VATStatus.NONE)

    def test_exempt_supply_has_no_vat_at_any_size(self):
        for subtotal in [Decimal('0'), Decimal('1.33'), Decimal('999999999999999.99')]:
            result = compute_vat(subtotal, True, self.rates)
            self.assertEqual(result.output_vat, Decimal('0.00'))
            self.assertEqual(result.net_vat, Decimal('0.00'))

    def test_very_large_standard_rated_supply(self):
        result = compute_vat(Decimal('999999999999999.99'), False, self.rates)
        self.assertEqual(result.output_vat, Decimal('75000000000000.00'))

    def test_zero_subtotal(self):
        result = compute_vat(Decimal('0'), False, self.rates)
        self.assertEqual(result.output_vat, Decimal('0.00'))
        self.assertEqual(result.status, VATStatus.NONE)

    def test_refundable_when_input_exceeds_output(self):
        result = compute_vat(Decimal('200000'), False, self.rates, input_vat=Decimal('20000'))
        self.assertEqual(result.net_vat, Decimal('-5000.00'))
        self.assertEqual(result.status, VATStatus.REFUNDABLE)

    def test_rounds_half_up_to_kobo(self):
        self.assertEqual(compute_vat(Decimal('1.33'), False, self.rates).output_vat, Decimal('0.10'))

    def test_deterministic(self):
        first = compute_vat(Decimal('12345.67'), False, self.rates, Decimal('100'))
        second = compute_vat(Decimal('12345.67'), False, self.rates, Decimal('100'))
        self.assertEqual(first, second)

    def test_negative_subtotal_rejected(self):
        with self.assertRaises(InvalidAmount) as ctx:
            compute_vat(Decimal('-1'), False, self.rates)
        self.assertEqual(ctx.exception.field, 'subtotal')

    def test_exempt_categories(self):
        self.assertTrue(is_vat_exempt_category('Food', self.rates))
        self.assertTrue(is_vat_exempt_category('healthcare', self.rates))
        self.assertFalse(is_vat_exempt_category('electronics', self.rates))
        self.assertFalse(is_vat_exempt_category(None, self.rates))


class WHTCalculatorTest(SimpleTestCase):

    def setUp(self):
        self.rates = load_rates(2026)

    def test_base_ignores_vat(self):
        without_vat = compute_wht(Decimal('100000'), 'professional_services', 'individual', self.rates)
        with_vat = compute_wht(
            Decimal('100000'), 'professional_services', 'individual', self.rates,
            vat_amount=Decimal('7500'),
        )
        self.assertEqual(without_vat.wht_amount, Decimal('5000.00'))
        self.assertEqual(with_vat.wht_amount, Decimal('5000.00'))
        self.assertEqual(with_vat.base_amount, Decimal('100000'))
        self.assertEqual(with_vat.net_after_wht, Decimal('102500.00'))

    def test_class_asymmetry_comes_from_matrix(self):
        self.assertEqual(
            wht_rate(ServiceCategory.PROFESSIONAL_SERVICES, TaxpayerClass.INDIVIDUAL, self.rates),
            Decimal('5'),
        )
        self.assertEqual(
            wht_rate(ServiceCategory.PROFESSIONAL_SERVICES, TaxpayerClass.COMPANY, self.rates),
            Decimal('10'),
        )

    def test_default_row(self):
        self.assertEqual(wht_rate('other_services', 'individual', self.rates), Decimal('2'))
        self.assertEqual(wht_rate('other_services', 'company', self.rates), Decimal('5'))
        # No company cell for directors' fees
        self.assertEqual(wht_rate('directors_fees', 'company', self.rates), Decimal('5'))
        self.assertEqual(wht_rate('directors_fees', 'individual', self.rates), Decimal('15'))

    def test_unknown_category(self):
        with self.assertRaises(UnknownServiceCategory) as ctx:
            compute_wht(Decimal('1000'), 'haircut', 'individual', self.rates)
        self.assertEqual(ctx.exception.field, 'service_category')

    def test_unknown_taxpayer_class(self):
        with self.assertRaises(UnknownTaxpayerClass) as ctx:
            compute_wht(Decimal('1000'), 'rent', 'partnership', self.rates)
        self.assertEqual(ctx.exception.field, 'taxpayer_class')

    def test_small_supplier_exemption_on_services_only(self):
        services = compute_wht(
            Decimal('100000'), 'consultancy', 'company', self.rates,
            supplier_annual_turnover=Decimal('20000000'),
        )
        rent = compute_wht(
            Decimal('100000'), 'rent', 'company', self.rates,
            supplier_annual_turnover=Decimal('20000000'),
        )
        self.assertEqual(services.wht_amount, Decimal('0.00'))
        self.assertEqual(rent.wht_amount, Decimal('10000.00'))

    def test_large_supplier_still_withheld(self):
        result = compute_wht(
            Decimal('100000'), 'consultancy', 'company', self.rates,
            supplier_annual_turnover=Decimal('30000000'),
        )
        self.assertEqual(result.wht_amount, Decimal('10000.00'))


class TransactionBreakdownTest(SimpleTestCase):

    def setUp(self):
        self.rates = load_rates(2026)

    def test_vat_then_wht(self):
        breakdown = price_transaction(
            Decimal('200000'), self.rates,
            service_category='professional_services', taxpayer_class='company',
        )
        self.assertEqual(breakdown.vat.output_vat, Decimal('15000.00'))
        self.assertEqual(breakdown.gross_amount, Decimal('215000.00'))
        self.assertEqual(breakdown.wht.wht_amount, Decimal('20000.00'))
        self.assertEqual(breakdown.amount_payable, Decimal('195000.00'))

    def test_without_category_no_wht(self):
        breakdown = price_transaction(Decimal('200000'), self.rates)
        self.assertIsNone(breakdown.wht)
        self.assertEqual(breakdown.amount_payable, Decimal('215000.00'))

    def test_category_without_class_rejected(self):
        with self.assertRaises(UnknownTaxpayerClass):
            price_transaction(Decimal('200000'), self.rates, service_category='rent')

    def test_oversized_subtotal_rejected(self):
        with self.assertRaises(InvalidAmount) as ctx:
            price_transaction(Decimal('1e28'), self.rates)
        self.assertEqual(ctx.exception.field, 'subtotal')
