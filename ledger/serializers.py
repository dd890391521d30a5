from rest_framework import serializers

from .models import Business, Transaction, FilingRecord
from ledger.services.tax.domain import ServiceCategory, TaxpayerClass, enum_choices
from ledger.services.tax.exceptions import TaxValidationError
from ledger.services.tax.rates import resolve_tax_year
from ledger.utils import coerce_legacy_tax_years


def validate_tax_year_value(value):
    """Run the tax-year policy and turn engine errors into field errors."""
    try:
        return resolve_tax_year(value, coerce_legacy=coerce_legacy_tax_years())
    except TaxValidationError as exc:
        raise serializers.ValidationError(exc.message)


class BusinessSerializer(serializers.ModelSerializer):
    """
    Serializer for Business (taxpayer entity)
    """
    class Meta:
        model = Business
        fields = [
            'id', 'user', 'name', 'description', 'taxpayer_class',
            'tin', 'cac_number', 'vat_registered', 'created_at', 'updated_at',
        ]
        read_only_fields = ['id', 'user', 'created_at', 'updated_at']

    def create(self, validated_data):
        # Automatically set user from request context
        validated_data['user'] = self.context['request'].user
        return super().create(validated_data)


# ======================================================
# Transactions
# ======================================================
class TransactionSerializer(serializers.ModelSerializer):
    business_id = serializers.UUIDField(write_only=True)
    tax_year = serializers.IntegerField(required=False)

    class Meta:
        model = Transaction
        fields = [
            'id', 'business_id', 'business', 'transaction_type', 'date', 'tax_year',
            'description', 'amount', 'vat_exempt', 'service_category', 'counterparty_class',
            'annual_rent_paid', 'vat_amount', 'wht_amount', 'paye_amount', 'created_at',
        ]
        read_only_fields = ['id', 'business', 'vat_amount', 'wht_amount', 'paye_amount', 'created_at']

    def validate_business_id(self, value):
        user = self.context['request'].user
        try:
            return Business.objects.get(id=value, user=user)
        except Business.DoesNotExist:
            raise serializers.ValidationError(
                "Business not found or does not belong to you."
            )

    def validate_tax_year(self, value):
        return validate_tax_year_value(value)

    def validate(self, data):
        date = data.get('date') or getattr(self.instance, 'date', None)
        if date is not None:
            # Only legacy coercion may move a transaction out of its calendar year
            expected_year = validate_tax_year_value(date.year)
            tax_year = data.get('tax_year')
            if tax_year is None and 'date' not in data:
                tax_year = getattr(self.instance, 'tax_year', None)
            if tax_year is None:
                data['tax_year'] = expected_year
            elif tax_year != expected_year:
                raise serializers.ValidationError(
                    {'tax_year': f"Tax year {tax_year} does not match the transaction date ({date})."}
                )

        transaction_type = data.get('transaction_type') or getattr(self.instance, 'transaction_type', None)
        if transaction_type == 'salary':
            # Salary lines never carry VAT or WHT
            data['service_category'] = None
            data['vat_exempt'] = False
        return data

    def create(self, validated_data):
        validated_data['business'] = validated_data.pop('business_id')
        validated_data['user'] = self.context['request'].user
        return super().create(validated_data)

    def update(self, instance, validated_data):
        business = validated_data.pop('business_id', None)
        if business:
            instance.business = business
        return super().update(instance, validated_data)


class FilingRecordSerializer(serializers.ModelSerializer):
    business_id = serializers.UUIDField(write_only=True)

    class Meta:
        model = FilingRecord
        fields = [
            'id', 'business_id', 'business', 'obligation', 'tax_year', 'month',
            'amount', 'filed_on', 'reference', 'created_at',
        ]
        read_only_fields = ['id', 'business', 'created_at']

    def validate_business_id(self, value):
        user = self.context['request'].user
        try:
            return Business.objects.get(id=value, user=user)
        except Business.DoesNotExist:
            raise serializers.ValidationError(
                "Business not found or does not belong to you."
            )

    def validate_tax_year(self, value):
        return validate_tax_year_value(value)

    def create(self, validated_data):
        validated_data['business'] = validated_data.pop('business_id')
        return super().create(validated_data)


# ======================================================
# Tax engine requests
# ======================================================
class InvoicePreviewRequestSerializer(serializers.Serializer):
    subtotal = serializers.DecimalField(max_digits=15, decimal_places=2, min_value=0)
    tax_year = serializers.IntegerField()
    vat_exempt = serializers.BooleanField(default=False)
    service_category = serializers.ChoiceField(
        choices=enum_choices(ServiceCategory), required=False, allow_null=True,
    )
    taxpayer_class = serializers.ChoiceField(
        choices=enum_choices(TaxpayerClass), required=False, allow_null=True,
    )
    supplier_annual_turnover = serializers.DecimalField(
        max_digits=15, decimal_places=2, min_value=0, required=False, allow_null=True,
    )

    def validate_tax_year(self, value):
        return validate_tax_year_value(value)

    def validate(self, data):
        if data.get('service_category') and not data.get('taxpayer_class'):
            raise serializers.ValidationError(
                {'taxpayer_class': "Required when a service category is given."}
            )
        return data


class PersonalIncomeRequestSerializer(serializers.Serializer):
    gross_income = serializers.DecimalField(max_digits=15, decimal_places=2, min_value=0)
    deductions = serializers.DecimalField(max_digits=15, decimal_places=2, min_value=0, default=0)
    annual_rent_paid = serializers.DecimalField(max_digits=15, decimal_places=2, min_value=0, default=0)
    wht_credits = serializers.DecimalField(max_digits=15, decimal_places=2, min_value=0, default=0)
    tax_year = serializers.IntegerField()

    def validate_tax_year(self, value):
        return validate_tax_year_value(value)


class CompanyIncomeRequestSerializer(serializers.Serializer):
    annual_turnover = serializers.DecimalField(max_digits=15, decimal_places=2, min_value=0)
    taxable_profit = serializers.DecimalField(max_digits=15, decimal_places=2, min_value=0)
    wht_credits = serializers.DecimalField(max_digits=15, decimal_places=2, min_value=0, default=0)
    tax_year = serializers.IntegerField()

    def validate_tax_year(self, value):
        return validate_tax_year_value(value)


# ======================================================
# Tax engine responses
# ======================================================
class BracketLineSerializer(serializers.Serializer):
    bracket_label = serializers.CharField()
    rate = serializers.DecimalField(max_digits=5, decimal_places=2)
    amount_in_bracket = serializers.DecimalField(max_digits=15, decimal_places=2)
    tax_for_bracket = serializers.DecimalField(max_digits=15, decimal_places=2)


class TaxComputationSerializer(serializers.Serializer):
    """
    PIT or CIT computation, itemised by bracket for filing documents.

    Based on Nigeria Tax Act 2025 (effective January 1, 2026).
    All monetary values are in Naira (NGN), rounded half-up to kobo.
    """
    gross_income = serializers.DecimalField(max_digits=15, decimal_places=2)
    taxable_income = serializers.DecimalField(max_digits=15, decimal_places=2)
    bracket_breakdown = BracketLineSerializer(many=True)
    total_tax = serializers.DecimalField(max_digits=15, decimal_places=2)
    is_small_company = serializers.BooleanField()
    development_levy = serializers.DecimalField(max_digits=15, decimal_places=2)


class VATResultSerializer(serializers.Serializer):
    output_vat = serializers.DecimalField(max_digits=15, decimal_places=2)
    input_vat = serializers.DecimalField(max_digits=15, decimal_places=2)
    net_vat = serializers.DecimalField(max_digits=15, decimal_places=2)
    status = serializers.CharField(source='status.value')


class WHTResultSerializer(serializers.Serializer):
    rate = serializers.DecimalField(max_digits=5, decimal_places=2)
    base_amount = serializers.DecimalField(max_digits=15, decimal_places=2)
    wht_amount = serializers.DecimalField(max_digits=15, decimal_places=2)
    net_after_wht = serializers.DecimalField(max_digits=15, decimal_places=2)


class TransactionBreakdownSerializer(serializers.Serializer):
    """
    Invoice preview: VAT on the subtotal first, then WHT on the same
    VAT-exclusive subtotal.
    """
    subtotal = serializers.DecimalField(max_digits=15, decimal_places=2)
    vat = VATResultSerializer()
    gross_amount = serializers.DecimalField(max_digits=15, decimal_places=2)
    wht = WHTResultSerializer(allow_null=True)
    amount_payable = serializers.DecimalField(max_digits=15, decimal_places=2)


class PeriodSummarySerializer(serializers.Serializer):
    entity_id = serializers.CharField()
    tax_year = serializers.IntegerField()
    month = serializers.IntegerField(allow_null=True)
    total_output_vat = serializers.DecimalField(max_digits=15, decimal_places=2)
    total_input_vat = serializers.DecimalField(max_digits=15, decimal_places=2)
    net_vat = serializers.DecimalField(max_digits=15, decimal_places=2)
    total_paye = serializers.DecimalField(max_digits=15, decimal_places=2)
    total_wht_remitted = serializers.DecimalField(max_digits=15, decimal_places=2)
    total_wht_credits = serializers.DecimalField(max_digits=15, decimal_places=2)
    turnover = serializers.DecimalField(max_digits=15, decimal_places=2)
    transaction_count = serializers.IntegerField()
    invoice_count = serializers.IntegerField()


class ComplianceAlertSerializer(serializers.Serializer):
    type = serializers.CharField()
    severity = serializers.CharField()
    message = serializers.CharField()


class ComplianceReportSerializer(serializers.Serializer):
    score = serializers.IntegerField()
    status = serializers.CharField()
    alerts = ComplianceAlertSerializer(many=True)
