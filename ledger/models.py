import uuid
from django.db import models
from django.core.validators import MaxValueValidator, MinValueValidator
from decimal import Decimal

from account.models import User
from ledger.services.tax.breakdown import derive
from ledger.services.tax.domain import (
    ComplianceProfile,
    FilingRecord as EngineFilingRecord,
    ServiceCategory,
    TaxObligation,
    TaxpayerClass,
    Transaction as EngineTransaction,
    TransactionKind,
    enum_choices,
)
from ledger.services.tax.rates import load_rates, resolve_tax_year
from ledger.utils import coerce_legacy_tax_years


class Business(models.Model):
    """
    Taxpayer entity - an individual, sole proprietorship or company
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='businesses')
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    taxpayer_class = models.CharField(
        max_length=20,
        choices=enum_choices(TaxpayerClass),
        default=TaxpayerClass.SOLE_PROPRIETOR.value,
    )
    tin = models.CharField(max_length=20, blank=True, help_text="Tax Identification Number")
    cac_number = models.CharField(max_length=20, blank=True, help_text="CAC registration number (RC/BN)")
    vat_registered = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name_plural = 'Businesses'
        indexes = [
            models.Index(fields=['user'], name='ledger_business_user_idx'),
        ]

    def __str__(self):
        return f"{self.name} - {self.user.email}"

    def compliance_profile(self, annual_turnover=Decimal('0.00')):
        return ComplianceProfile(
            taxpayer_class=TaxpayerClass(self.taxpayer_class),
            tin=self.tin,
            cac_number=self.cac_number,
            vat_registered=self.vat_registered,
            annual_turnover=annual_turnover,
        )


class Transaction(models.Model):
    """
    Invoice, expense or salary line.

    The VAT, WHT and PAYE figures are derived by the tax engine on every
    save and stored for display only; period summaries re-derive them.
    """
    TRANSACTION_TYPES = enum_choices(TransactionKind)

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='transactions')
    business = models.ForeignKey(Business, on_delete=models.CASCADE, related_name='transactions')
    transaction_type = models.CharField(max_length=10, choices=TRANSACTION_TYPES)
    date = models.DateField()
    tax_year = models.PositiveIntegerField(
        validators=[MinValueValidator(2026), MaxValueValidator(2100)],
        help_text="Tax year whose rate tables price this transaction",
    )
    description = models.TextField(blank=True)
    amount = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.00'))],
        help_text="Amount net of VAT (monthly gross pay for salary lines)",
    )
    vat_exempt = models.BooleanField(default=False)
    service_category = models.CharField(
        max_length=30,
        choices=enum_choices(ServiceCategory),
        blank=True,
        null=True,
        help_text="Set when the payment attracts withholding tax",
    )
    counterparty_class = models.CharField(
        max_length=20,
        choices=enum_choices(TaxpayerClass),
        blank=True,
        null=True,
        help_text="Supplier's taxpayer class for expenses; defaults to the business's own class",
    )
    annual_rent_paid = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        default=Decimal('0.00'),
        validators=[MinValueValidator(Decimal('0.00'))],
        help_text="Employee's annual rent, for rent relief on salary lines",
    )

    # Derived figures
    vat_amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'), editable=False)
    wht_amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'), editable=False)
    paye_amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'), editable=False)

    is_deleted = models.BooleanField(default=False)  # Soft delete
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-date', '-created_at']
        indexes = [
            models.Index(fields=['user', 'date'], name='ledger_txn_user_date_idx'),
            models.Index(fields=['business', 'date'], name='ledger_txn_business_date_idx'),
            models.Index(fields=['user', 'is_deleted'], name='ledger_txn_user_deleted_idx'),
            models.Index(fields=['transaction_type'], name='ledger_txn_type_idx'),
        ]

    def __str__(self):
        return f"{self.transaction_type.title()} - {self.date} - {self.amount}"

    def to_engine(self) -> EngineTransaction:
        """Immutable view of this row for the tax calculators."""
        kind = TransactionKind(self.transaction_type)
        if kind == TransactionKind.EXPENSE and self.counterparty_class:
            taxpayer_class = TaxpayerClass(self.counterparty_class)
        else:
            taxpayer_class = TaxpayerClass(self.business.taxpayer_class)

        return EngineTransaction(
            entity_id=str(self.business_id),
            kind=kind,
            amount=Decimal(self.amount),
            transaction_date=self.date,
            tax_year=self.tax_year,
            taxpayer_class=taxpayer_class,
            service_category=ServiceCategory(self.service_category) if self.service_category else None,
            vat_exempt=self.vat_exempt,
            annual_rent_paid=Decimal(self.annual_rent_paid or 0),
        )

    def save(self, *args, **kwargs):
        """
        Recompute derived tax figures before saving
        """
        if self.tax_year is None and self.date:
            self.tax_year = resolve_tax_year(self.date.year, coerce_legacy=coerce_legacy_tax_years())

        derived = derive(self.to_engine(), load_rates(self.tax_year))
        self.vat_amount = derived.vat_amount
        self.wht_amount = derived.wht_amount
        self.paye_amount = derived.paye_amount

        super().save(*args, **kwargs)


class FilingRecord(models.Model):
    """
    A return filed or remittance made to the revenue service
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    business = models.ForeignKey(Business, on_delete=models.CASCADE, related_name='filings')
    obligation = models.CharField(max_length=10, choices=enum_choices(TaxObligation))
    tax_year = models.PositiveIntegerField(validators=[MinValueValidator(2026), MaxValueValidator(2100)])
    month = models.PositiveSmallIntegerField(
        blank=True,
        null=True,
        validators=[MinValueValidator(1), MaxValueValidator(12)],
        help_text="Leave empty for annual returns",
    )
    amount = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.00'))],
    )
    filed_on = models.DateField()
    reference = models.CharField(max_length=100, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-tax_year', '-month', '-filed_on']
        indexes = [
            models.Index(fields=['business', 'tax_year'], name='ledger_filing_biz_year_idx'),
        ]

    def __str__(self):
        period = f"{self.tax_year}/{self.month:02d}" if self.month else str(self.tax_year)
        return f"{self.obligation.upper()} {period} - {self.amount}"

    def to_engine(self) -> EngineFilingRecord:
        return EngineFilingRecord(
            obligation=TaxObligation(self.obligation),
            tax_year=self.tax_year,
            amount=Decimal(self.amount),
            month=self.month,
            filed_on=self.filed_on,
        )
