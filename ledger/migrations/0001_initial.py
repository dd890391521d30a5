import django.core.validators
import django.db.models.deletion
import uuid
from decimal import Decimal
from django.conf import settings
from django.db import migrations, models


TAXPAYER_CLASSES = [
    ('individual', 'Individual'),
    ('sole_proprietor', 'Sole Proprietor'),
    ('company', 'Company'),
]

SERVICE_CATEGORIES = [
    ('professional_services', 'Professional Services'),
    ('technical_services', 'Technical Services'),
    ('management_services', 'Management Services'),
    ('consultancy', 'Consultancy'),
    ('commission', 'Commission'),
    ('construction', 'Construction'),
    ('supply_of_goods', 'Supply Of Goods'),
    ('contract', 'Contract'),
    ('rent', 'Rent'),
    ('dividends', 'Dividends'),
    ('interest', 'Interest'),
    ('royalties', 'Royalties'),
    ('directors_fees', 'Directors Fees'),
    ('other_services', 'Other Services'),
]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Business',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('name', models.CharField(max_length=255)),
                ('description', models.TextField(blank=True)),
                ('taxpayer_class', models.CharField(choices=TAXPAYER_CLASSES, default='sole_proprietor', max_length=20)),
                ('tin', models.CharField(blank=True, help_text='Tax Identification Number', max_length=20)),
                ('cac_number', models.CharField(blank=True, help_text='CAC registration number (RC/BN)', max_length=20)),
                ('vat_registered', models.BooleanField(default=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='businesses', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name_plural': 'Businesses',
                'indexes': [models.Index(fields=['user'], name='ledger_business_user_idx')],
            },
        ),
        migrations.CreateModel(
            name='Transaction',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('transaction_type', models.CharField(choices=[('invoice', 'Invoice'), ('expense', 'Expense'), ('salary', 'Salary')], max_length=10)),
                ('date', models.DateField()),
                ('tax_year', models.PositiveIntegerField(help_text='Tax year whose rate tables price this transaction', validators=[django.core.validators.MinValueValidator(2026), django.core.validators.MaxValueValidator(2100)])),
                ('description', models.TextField(blank=True)),
                ('amount', models.DecimalField(decimal_places=2, help_text='Amount net of VAT (monthly gross pay for salary lines)', max_digits=14, validators=[django.core.validators.MinValueValidator(Decimal('0.00'))])),
                ('vat_exempt', models.BooleanField(default=False)),
                ('service_category', models.CharField(blank=True, choices=SERVICE_CATEGORIES, help_text='Set when the payment attracts withholding tax', max_length=30, null=True)),
                ('counterparty_class', models.CharField(blank=True, choices=TAXPAYER_CLASSES, help_text="Supplier's taxpayer class for expenses; defaults to the business's own class", max_length=20, null=True)),
                ('annual_rent_paid', models.DecimalField(decimal_places=2, default=Decimal('0.00'), help_text="Employee's annual rent, for rent relief on salary lines", max_digits=14, validators=[django.core.validators.MinValueValidator(Decimal('0.00'))])),
                ('vat_amount', models.DecimalField(decimal_places=2, default=Decimal('0.00'), editable=False, max_digits=14)),
                ('wht_amount', models.DecimalField(decimal_places=2, default=Decimal('0.00'), editable=False, max_digits=14)),
                ('paye_amount', models.DecimalField(decimal_places=2, default=Decimal('0.00'), editable=False, max_digits=14)),
                ('is_deleted', models.BooleanField(default=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('business', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='transactions', to='ledger.business')),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='transactions', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['-date', '-created_at'],
                'indexes': [
                    models.Index(fields=['user', 'date'], name='ledger_txn_user_date_idx'),
                    models.Index(fields=['business', 'date'], name='ledger_txn_business_date_idx'),
                    models.Index(fields=['user', 'is_deleted'], name='ledger_txn_user_deleted_idx'),
                    models.Index(fields=['transaction_type'], name='ledger_txn_type_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='FilingRecord',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('obligation', models.CharField(choices=[('vat', 'Vat'), ('wht', 'Wht'), ('paye', 'Paye'), ('pit', 'Pit'), ('cit', 'Cit')], max_length=10)),
                ('tax_year', models.PositiveIntegerField(validators=[django.core.validators.MinValueValidator(2026), django.core.validators.MaxValueValidator(2100)])),
                ('month', models.PositiveSmallIntegerField(blank=True, help_text='Leave empty for annual returns', null=True, validators=[django.core.validators.MinValueValidator(1), django.core.validators.MaxValueValidator(12)])),
                ('amount', models.DecimalField(decimal_places=2, max_digits=14, validators=[django.core.validators.MinValueValidator(Decimal('0.00'))])),
                ('filed_on', models.DateField()),
                ('reference', models.CharField(blank=True, max_length=100)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('business', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='filings', to='ledger.business')),
            ],
            options={
                'ordering': ['-tax_year', '-month', '-filed_on'],
                'indexes': [models.Index(fields=['business', 'tax_year'], name='ledger_filing_biz_year_idx')],
            },
        ),
    ]
