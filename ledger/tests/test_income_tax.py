from decimal import Decimal

from django.test import SimpleTestCase

from ledger.services.tax.cit import apply_wht_credits, compute_cit
from ledger.services.tax.exceptions import InvalidAmount, InvalidIncome, MalformedRateTable
from ledger.services.tax.paye import compute_paye
from ledger.services.tax.pit import assess_personal_income, compute_pit, rent_relief
from ledger.services.tax.rates import load_rates


class PITCalculatorTest(SimpleTestCase):
    """Personal Income Tax, Nigeria Tax Act 2025 bands"""

    def setUp(self):
        self.rates = load_rates(2026)
        self.brackets = self.rates.pit_brackets

    def test_zero_rate_band(self):
        result = compute_pit(Decimal('800000'), self.brackets)
        self.assertEqual(result.total_tax, Decimal('0.00'))
        self.assertEqual(len(result.bracket_breakdown), 1)
        self.assertEqual(result.bracket_breakdown[0].rate, Decimal('0'))

    def test_first_naira_above_exemption_is_taxed(self):
        result = compute_pit(Decimal('800001'), self.brackets)
        self.assertEqual(result.total_tax, Decimal('0.15'))
        self.assertEqual(len(result.bracket_breakdown), 2)

    def test_five_million(self):
        result = compute_pit(Decimal('5000000'), self.brackets)
        # 0 + 2,200,000 @ 15% + 2,000,000 @ 18%
        self.assertEqual(result.total_tax, Decimal('690000.00'))
        self.assertEqual(
            [line.tax_for_bracket for line in result.bracket_breakdown],
            [Decimal('0.00'), Decimal('330000.00'), Decimal('360000.00')],
        )
        self.assertEqual(result.bracket_breakdown[2].amount_in_bracket, Decimal('2000000.00'))
        self.assertEqual(result.bracket_breakdown[1].bracket_label, 'Next ₦2,200,000')

    def test_top_band(self):
        result = compute_pit(Decimal('60000000'), self.brackets)
        self.assertEqual(result.total_tax, Decimal('12930000.00'))
        self.assertEqual(len(result.bracket_breakdown), 6)
        self.assertEqual(result.bracket_breakdown[-1].bracket_label, 'Above ₦50,000,000')

    def test_bracket_taxes_sum_to_total(self):
        result = compute_pit(Decimal('27345678.91'), self.brackets)
        self.assertEqual(
            sum(line.tax_for_bracket for line in result.bracket_breakdown),
            result.total_tax,
        )

    def test_monotonic(self):
        incomes = [
            Decimal('0'), Decimal('500000'), Decimal('800000'), Decimal('800001'),
            Decimal('2999999.99'), Decimal('3000000'), Decimal('12000000'),
            Decimal('25000001'), Decimal('49999999'), Decimal('75000000'),
        ]
        totals = [compute_pit(income, self.brackets).total_tax for income in incomes]
        self.assertEqual(totals, sorted(totals))

    def test_invalid_income(self):
        for value in [None, Decimal('-1'), 'lots', Decimal('NaN')]:
            with self.assertRaises(InvalidIncome):
                compute_pit(value, self.brackets)

    def test_malformed_brackets(self):
        with self.assertRaises(MalformedRateTable):
            compute_pit(Decimal('1000'), ())

    def test_rent_relief_capped(self):
        self.assertEqual(rent_relief(Decimal('1000000'), self.rates), Decimal('200000.00'))
        self.assertEqual(rent_relief(Decimal('5000000'), self.rates), Decimal('500000'))

    def test_assess_personal_income(self):
        result = assess_personal_income(
            Decimal('3000000'), self.rates,
            deductions=Decimal('200000'), annual_rent_paid=Decimal('1000000'),
        )
        self.assertEqual(result.gross_income, Decimal('3000000.00'))
        self.assertEqual(result.taxable_income, Decimal('2600000.00'))
        self.assertEqual(result.total_tax, Decimal('270000.00'))

    def test_deductions_cannot_push_taxable_below_zero(self):
        result = assess_personal_income(Decimal('100000'), self.rates, deductions=Decimal('500000'))
        self.assertEqual(result.taxable_income, Decimal('0.00'))
        self.assertEqual(result.total_tax, Decimal('0.00'))


class PAYECalculatorTest(SimpleTestCase):

    def setUp(self):
        self.rates = load_rates(2026)

    def test_monthly_paye(self):
        result = compute_paye(Decimal('500000'), self.rates)
        self.assertEqual(result.pension, Decimal('40000.00'))
        # NHF is capped at 2.5% of a twelfth of ₦2,500,000
        self.assertEqual(result.nhf, Decimal('5208.33'))
        self.assertEqual(result.nhis, Decimal('25000.00'))
        self.assertEqual(result.taxable_income, Decimal('429791.67'))
        self.assertEqual(result.paye, Decimal('59862.50'))
        self.assertEqual(result.net_salary, Decimal('369929.17'))

    def test_low_earner_pays_no_paye(self):
        result = compute_paye(Decimal('50000'), self.rates)
        self.assertEqual(result.paye, Decimal('0.00'))
        self.assertEqual(result.net_salary, Decimal('42250.00'))

    def test_rent_relief_reduces_paye(self):
        without = compute_paye(Decimal('500000'), self.rates)
        with_rent = compute_paye(Decimal('500000'), self.rates, annual_rent_paid=Decimal('1200000'))
        self.assertEqual(with_rent.rent_relief, Decimal('20000.00'))
        self.assertLess(with_rent.paye, without.paye)

    def test_negative_salary_rejected(self):
        with self.assertRaises(InvalidAmount):
            compute_paye(Decimal('-100'), self.rates)


class CITCalculatorTest(SimpleTestCase):

    def setUp(self):
        self.rates = load_rates(2026)

    def test_small_company_at_ceiling_is_exempt(self):
        result = compute_cit(Decimal('50000000'), Decimal('10000000'), self.rates)
        self.assertTrue(result.is_small_company)
        self.assertEqual(result.total_tax, Decimal('0.00'))
        self.assertEqual(result.development_levy, Decimal('0.00'))
        self.assertEqual(len(result.bracket_breakdown), 1)
        self.assertIn('Small company', result.bracket_breakdown[0].bracket_label)

    def test_one_naira_over_ceiling_is_taxed(self):
        result = compute_cit(Decimal('50000001'), Decimal('10000000'), self.rates)
        self.assertFalse(result.is_small_company)
        self.assertEqual(result.total_tax, Decimal('3000000.00'))
        self.assertEqual(result.development_levy, Decimal('400000.00'))
        self.assertIn('Large company', result.bracket_breakdown[0].bracket_label)

    def test_exemption_is_on_turnover_not_profit(self):
        large = compute_cit(Decimal('100000000'), Decimal('1000000'), self.rates)
        small = compute_cit(Decimal('40000000'), Decimal('30000000'), self.rates)
        self.assertEqual(large.total_tax, Decimal('300000.00'))
        self.assertEqual(small.total_tax, Decimal('0.00'))

    def test_levy_follows_tax_year(self):
        result = compute_cit(Decimal('100000000'), Decimal('10000000'), load_rates(2030))
        self.assertEqual(result.development_levy, Decimal('200000.00'))
        self.assertEqual(result.total_tax, Decimal('3000000.00'))

    def test_wht_credit_offset(self):
        self.assertEqual(apply_wht_credits(Decimal('3000000'), Decimal('500000')), Decimal('2500000.00'))
        self.assertEqual(apply_wht_credits(Decimal('100'), Decimal('500')), Decimal('0.00'))
