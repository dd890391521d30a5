import uuid
from django.db import models
from django.contrib.auth.models import AbstractUser, UserManager


class EmailUserManager(UserManager):
    """Accounts sign in with their email; the username mirrors it."""

    def create_user(self, email, password=None, **extra_fields):
        if not email:
            raise ValueError('An email address is required')
        email = self.normalize_email(email)
        username = extra_fields.pop('username', email)
        return super().create_user(username, email, password, **extra_fields)

    def create_superuser(self, email, password=None, **extra_fields):
        email = self.normalize_email(email)
        username = extra_fields.pop('username', email)
        return super().create_superuser(username, email, password, **extra_fields)


class User(AbstractUser):
    email = models.EmailField(unique=True)
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    referred_by = models.ForeignKey(
        'self', on_delete=models.SET_NULL, null=True, blank=True, related_name='referrals'
    )

    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = ['username']

    objects = EmailUserManager()

    def __str__(self):
        return self.email


class SubscriptionPlan(models.Model):
    """Priced plan; referral commission is a share of ``amount``."""
    name = models.CharField(max_length=100)
    code = models.CharField(max_length=100, unique=True)
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    interval = models.CharField(max_length=20, choices=[
        ('monthly', 'Monthly'),
        ('annually', 'Annually'),
    ])
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.name} ({self.interval})"


class Subscription(models.Model):
    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name='subscription')
    plan = models.ForeignKey(SubscriptionPlan, on_delete=models.SET_NULL, null=True, blank=True)
    is_active = models.BooleanField(default=True)  # Commission is only owed on active subscriptions
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        state = 'active' if self.is_active else 'inactive'
        return f"{self.user.email} - {state}"
