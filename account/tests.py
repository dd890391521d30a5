from decimal import Decimal

from django.test import SimpleTestCase, TestCase, override_settings

from account.models import Subscription, SubscriptionPlan, User
from account.services.referral import calculate_referral_commission, commission_for_subscription
from ledger.services.tax.exceptions import InvalidAmount


class ReferralCommissionTest(SimpleTestCase):
    """Commission uses the same rounding as the tax calculators"""

    def test_default_percent(self):
        self.assertEqual(calculate_referral_commission(Decimal('10000')), Decimal('1500.00'))

    def test_rounds_half_up(self):
        # 15% of 0.10 is 0.015
        self.assertEqual(calculate_referral_commission(Decimal('0.10')), Decimal('0.02'))

    def test_explicit_percent(self):
        self.assertEqual(calculate_referral_commission('5000', percent=10), Decimal('500.00'))

    @override_settings(REFERRAL_COMMISSION_PERCENT='20')
    def test_configured_percent(self):
        self.assertEqual(calculate_referral_commission(Decimal('10000')), Decimal('2000.00'))

    def test_negative_payment_rejected(self):
        with self.assertRaises(InvalidAmount) as ctx:
            calculate_referral_commission(Decimal('-1'))
        self.assertEqual(ctx.exception.field, 'payment_amount')


class UserModelTest(TestCase):

    def test_email_login(self):
        user = User.objects.create_user(email='Owner@Example.com', password='testpass123')
        self.assertEqual(user.email, 'Owner@example.com')
        self.assertEqual(user.username, 'Owner@example.com')
        self.assertTrue(user.check_password('testpass123'))

    def test_email_required(self):
        with self.assertRaises(ValueError):
            User.objects.create_user(email='', password='testpass123')

    def test_superuser(self):
        admin = User.objects.create_superuser(email='admin@example.com', password='testpass123')
        self.assertTrue(admin.is_staff)
        self.assertTrue(admin.is_superuser)


class SubscriptionCommissionTest(TestCase):

    def setUp(self):
        self.referrer = User.objects.create_user(email='referrer@example.com', password='testpass123')
        self.plan = SubscriptionPlan.objects.create(
            name='Pro', code='pro-monthly', amount=Decimal('5000.00'), interval='monthly',
        )

    def test_commission_for_referred_subscriber(self):
        user = User.objects.create_user(
            email='new@example.com', password='testpass123', referred_by=self.referrer,
        )
        subscription = Subscription.objects.create(user=user, plan=self.plan)
        self.assertEqual(commission_for_subscription(subscription), Decimal('750.00'))

    def test_no_commission_without_referrer(self):
        user = User.objects.create_user(email='direct@example.com', password='testpass123')
        subscription = Subscription.objects.create(user=user, plan=self.plan)
        self.assertIsNone(commission_for_subscription(subscription))

    def test_no_commission_on_inactive_subscription(self):
        user = User.objects.create_user(
            email='lapsed@example.com', password='testpass123', referred_by=self.referrer,
        )
        subscription = Subscription.objects.create(user=user, plan=self.plan, is_active=False)
        self.assertIsNone(commission_for_subscription(subscription))
