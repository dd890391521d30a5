import logging
import uuid
from datetime import datetime

from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.exceptions import ValidationError
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.db.models import Sum
from drf_spectacular.utils import extend_schema, extend_schema_view, OpenApiParameter, OpenApiExample
from drf_spectacular.types import OpenApiTypes

from .models import Business, Transaction, FilingRecord
from .serializers import (
    BusinessSerializer,
    TransactionSerializer,
    FilingRecordSerializer,
    InvoicePreviewRequestSerializer,
    PersonalIncomeRequestSerializer,
    CompanyIncomeRequestSerializer,
    TaxComputationSerializer,
    TransactionBreakdownSerializer,
    PeriodSummarySerializer,
    ComplianceReportSerializer,
)
from .permissions import IsOwner, IsBusinessOwner
from .services.compliance import score
from .services.summaries import aggregate
from .services.tax import (
    TaxConfigurationError,
    TaxValidationError,
    apply_wht_credits,
    assess_personal_income,
    compute_cit,
    load_rates,
    price_transaction,
)
from .services.tax.config import TAX_DISCLAIMER
from .utils import coerce_legacy_tax_years

logger = logging.getLogger(__name__)


def engine_error_response(exc):
    """
    Map a tax engine failure to an HTTP response.

    Bad input is the caller's problem (400); a missing or malformed rate
    table is ours (500).
    """
    if isinstance(exc, TaxConfigurationError):
        logger.error(f"Tax engine configuration error: {exc.message}")
        return Response(exc.as_dict(), status=status.HTTP_500_INTERNAL_SERVER_ERROR)
    return Response(exc.as_dict(), status=status.HTTP_400_BAD_REQUEST)


def business_id_param(request):
    """
    The ``business_id`` query parameter as a UUID, or None when absent.
    A malformed id is a 400 naming the field.
    """
    value = request.query_params.get('business_id')
    if not value:
        return None
    try:
        return uuid.UUID(value)
    except ValueError:
        raise ValidationError({'error': f"'{value}' is not a valid business id.", 'field': 'business_id'})


@extend_schema_view(
    list=extend_schema(
        summary="List all businesses",
        description="Get a list of taxpayer entities owned by the authenticated user.",
        tags=["Businesses"]
    ),
    create=extend_schema(
        summary="Create a business",
        description="Register an individual, sole proprietorship or company for the authenticated user.",
        tags=["Businesses"]
    ),
    retrieve=extend_schema(
        summary="Get business details",
        description="Retrieve details of a specific business.",
        tags=["Businesses"]
    ),
    update=extend_schema(
        summary="Update business",
        description="Update business and registration information.",
        tags=["Businesses"]
    ),
    partial_update=extend_schema(
        summary="Partial update business",
        description="Partially update business information.",
        tags=["Businesses"]
    ),
    destroy=extend_schema(
        summary="Delete business",
        description="Delete a business.",
        tags=["Businesses"]
    ),
)
class BusinessViewSet(viewsets.ModelViewSet):
    """
    ViewSet for managing Business
    Users can only access their own businesses
    """
    serializer_class = BusinessSerializer
    permission_classes = [IsAuthenticated, IsBusinessOwner]

    def get_queryset(self):
        return Business.objects.filter(user=self.request.user)

    def perform_create(self, serializer):
        serializer.save(user=self.request.user)


@extend_schema_view(
    list=extend_schema(
        summary="List transactions",
        description="Get a list of invoices, expenses and salary lines with filtering options.",
        tags=["Transactions"],
        parameters=[
            OpenApiParameter(
                name='type',
                type=OpenApiTypes.STR,
                enum=['invoice', 'expense', 'salary'],
                description='Filter by transaction type'
            ),
            OpenApiParameter(
                name='business_id',
                type=OpenApiTypes.UUID,
                description='Filter by business'
            ),
            OpenApiParameter(
                name='start_date',
                type=OpenApiTypes.DATE,
                description='Filter transactions from this date (YYYY-MM-DD)'
            ),
            OpenApiParameter(
                name='end_date',
                type=OpenApiTypes.DATE,
                description='Filter transactions until this date (YYYY-MM-DD)'
            ),
        ]
    ),
    create=extend_schema(
        summary="Create transaction",
        description="Record a transaction. VAT, WHT and PAYE are computed on save.",
        tags=["Transactions"],
        examples=[
            OpenApiExample(
                'Invoice Example',
                value={
                    'business_id': '3fa85f64-5717-4562-b3fc-2c963f66afa6',
                    'transaction_type': 'invoice',
                    'date': '2026-03-14',
                    'description': 'Consulting retainer',
                    'amount': '200000.00',
                    'service_category': 'professional_services',
                },
                request_only=True
            )
        ]
    ),
    retrieve=extend_schema(
        summary="Get transaction details",
        description="Retrieve a specific transaction with its derived tax figures.",
        tags=["Transactions"]
    ),
    update=extend_schema(
        summary="Update transaction",
        description="Update a transaction. Derived tax figures are recomputed.",
        tags=["Transactions"]
    ),
    partial_update=extend_schema(
        summary="Partial update transaction",
        description="Partially update a transaction. Derived tax figures are recomputed.",
        tags=["Transactions"]
    ),
    destroy=extend_schema(
        summary="Delete transaction",
        description="Soft delete a transaction.",
        tags=["Transactions"]
    ),
)
class TransactionViewSet(viewsets.ModelViewSet):
    """
    ViewSet for managing Transactions
    Supports CRUD operations with proper user scoping
    """
    serializer_class = TransactionSerializer
    permission_classes = [IsAuthenticated, IsOwner]

    def get_queryset(self):
        """
        Filter transactions to only those owned by the authenticated user
        Exclude soft-deleted transactions by default
        """
        queryset = Transaction.objects.filter(
            user=self.request.user,
            is_deleted=False
        ).select_related('business', 'user')

        transaction_type = self.request.query_params.get('type', None)
        if transaction_type in ['invoice', 'expense', 'salary']:
            queryset = queryset.filter(transaction_type=transaction_type)

        business_id = business_id_param(self.request)
        if business_id:
            queryset = queryset.filter(business_id=business_id)

        start_date = self.request.query_params.get('start_date', None)
        end_date = self.request.query_params.get('end_date', None)

        if start_date:
            queryset = queryset.filter(date__gte=start_date)
        if end_date:
            queryset = queryset.filter(date__lte=end_date)

        return queryset

    def create(self, request, *args, **kwargs):
        try:
            return super().create(request, *args, **kwargs)
        except (TaxValidationError, TaxConfigurationError) as exc:
            return engine_error_response(exc)

    def update(self, request, *args, **kwargs):
        try:
            return super().update(request, *args, **kwargs)
        except (TaxValidationError, TaxConfigurationError) as exc:
            return engine_error_response(exc)

    def perform_destroy(self, instance):
        """
        Soft delete - set is_deleted to True instead of actually deleting
        """
        instance.is_deleted = True
        instance.save()

    @extend_schema(
        summary="Get transaction totals",
        description="Totals of amounts and derived VAT, WHT and PAYE per transaction type.",
        tags=["Transactions"],
    )
    @action(detail=False, methods=['get'])
    def totals(self, request):
        queryset = self.get_queryset()
        totals = {}
        for transaction_type in ['invoice', 'expense', 'salary']:
            totals[transaction_type] = queryset.filter(transaction_type=transaction_type).aggregate(
                amount=Sum('amount'),
                vat=Sum('vat_amount'),
                wht=Sum('wht_amount'),
                paye=Sum('paye_amount'),
            )
            totals[transaction_type]['count'] = queryset.filter(transaction_type=transaction_type).count()
        return Response(totals)

    @extend_schema(
        summary="List deleted transactions",
        description="Get a list of soft-deleted transactions.",
        tags=["Transactions"]
    )
    @action(detail=False, methods=['get'])
    def deleted(self, request):
        deleted_transactions = Transaction.objects.filter(
            user=request.user,
            is_deleted=True
        ).select_related('business', 'user')

        serializer = self.get_serializer(deleted_transactions, many=True)
        return Response(serializer.data)

    @extend_schema(
        summary="Restore deleted transaction",
        description="Restore a soft-deleted transaction back to active state.",
        tags=["Transactions"]
    )
    @action(detail=True, methods=['post'])
    def restore(self, request, pk=None):
        try:
            transaction = Transaction.objects.get(pk=pk, user=request.user)
        except Transaction.DoesNotExist:
            return Response({'error': 'Transaction not found'}, status=status.HTTP_404_NOT_FOUND)

        if not transaction.is_deleted:
            return Response(
                {'error': 'Transaction is not deleted'},
                status=status.HTTP_400_BAD_REQUEST
            )

        transaction.is_deleted = False
        transaction.save()

        serializer = self.get_serializer(transaction)
        return Response(serializer.data)


@extend_schema_view(
    list=extend_schema(summary="List filings", tags=["Filings"]),
    create=extend_schema(
        summary="Record a filing",
        description="Record a return filed or a remittance made to the revenue service.",
        tags=["Filings"]
    ),
    retrieve=extend_schema(summary="Get filing details", tags=["Filings"]),
    update=extend_schema(summary="Update filing", tags=["Filings"]),
    partial_update=extend_schema(summary="Partial update filing", tags=["Filings"]),
    destroy=extend_schema(summary="Delete filing", tags=["Filings"]),
)
class FilingRecordViewSet(viewsets.ModelViewSet):
    serializer_class = FilingRecordSerializer
    permission_classes = [IsAuthenticated, IsOwner]

    def get_queryset(self):
        queryset = FilingRecord.objects.filter(business__user=self.request.user).select_related('business')
        business_id = business_id_param(self.request)
        if business_id:
            queryset = queryset.filter(business_id=business_id)
        return queryset


PERIOD_PARAMETERS = [
    OpenApiParameter(
        name='business_id',
        type=OpenApiTypes.UUID,
        location=OpenApiParameter.QUERY,
        required=True,
        description='Business to summarise'
    ),
    OpenApiParameter(
        name='year',
        type=OpenApiTypes.INT,
        location=OpenApiParameter.QUERY,
        required=False,
        description='Tax year for an annual summary (e.g., 2026)'
    ),
    OpenApiParameter(
        name='month',
        type=OpenApiTypes.STR,
        location=OpenApiParameter.QUERY,
        required=False,
        description='Month for a monthly summary (YYYY-MM)'
    ),
]


class TaxViewSet(viewsets.ViewSet):
    """
    ViewSet for Nigerian tax calculations (Nigeria Tax Act 2025, effective
    January 1, 2026).

    Every figure comes from the tax engine; this layer only parses
    requests and maps engine errors to responses.
    """
    permission_classes = [IsAuthenticated]

    def _get_business(self, request):
        business_id = business_id_param(request)
        if not business_id:
            return None
        return Business.objects.filter(id=business_id, user=request.user).first()

    def _get_period(self, request):
        """
        (tax_year, month) from ``?month=YYYY-MM`` or ``?year=YYYY``.
        Returns an error Response instead when neither parses.
        """
        year_str = request.query_params.get('year')
        month_str = request.query_params.get('month')

        if month_str:
            try:
                period_date = datetime.strptime(month_str, '%Y-%m')
            except ValueError:
                return Response(
                    {'error': 'Invalid month format. Use YYYY-MM', 'field': 'month'},
                    status=status.HTTP_400_BAD_REQUEST
                )
            return period_date.year, period_date.month

        if year_str:
            return year_str, None

        return Response(
            {'error': 'Either year (YYYY) or month (YYYY-MM) parameter is required', 'field': 'year'},
            status=status.HTTP_400_BAD_REQUEST
        )

    @extend_schema(
        summary="Preview invoice taxes",
        description=(
            "Authoritative VAT and WHT breakdown for an invoice before it is saved. "
            "VAT is charged on the subtotal; WHT is deducted from the same VAT-exclusive subtotal."
        ),
        request=InvoicePreviewRequestSerializer,
        responses={200: TransactionBreakdownSerializer},
        examples=[
            OpenApiExample(
                'Professional services invoice',
                value={
                    'subtotal': '200000.00',
                    'tax_year': 2026,
                    'service_category': 'professional_services',
                    'taxpayer_class': 'company',
                },
                request_only=True
            )
        ],
        tags=["Tax"]
    )
    @action(detail=False, methods=['post'], url_path='preview')
    def preview(self, request):
        serializer = InvoicePreviewRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            breakdown = price_transaction(
                data['subtotal'],
                load_rates(data['tax_year']),
                vat_exempt=data['vat_exempt'],
                service_category=data.get('service_category'),
                taxpayer_class=data.get('taxpayer_class'),
                supplier_annual_turnover=data.get('supplier_annual_turnover'),
            )
        except (TaxValidationError, TaxConfigurationError) as exc:
            return engine_error_response(exc)

        return Response(TransactionBreakdownSerializer(breakdown).data)

    @extend_schema(
        summary="Compute Personal Income Tax",
        description="Progressive PIT with rent relief and WHT credits, itemised by bracket.",
        request=PersonalIncomeRequestSerializer,
        responses={200: TaxComputationSerializer},
        tags=["Tax"]
    )
    @action(detail=False, methods=['post'], url_path='pit')
    def pit(self, request):
        serializer = PersonalIncomeRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            computation = assess_personal_income(
                data['gross_income'],
                load_rates(data['tax_year']),
                deductions=data['deductions'],
                annual_rent_paid=data['annual_rent_paid'],
            )
            tax_payable = apply_wht_credits(computation.total_tax, data['wht_credits'])
        except (TaxValidationError, TaxConfigurationError) as exc:
            return engine_error_response(exc)

        payload = TaxComputationSerializer(computation).data
        payload['tax_year'] = data['tax_year']
        payload['wht_credits'] = str(data['wht_credits'])
        payload['tax_payable'] = str(tax_payable)
        payload['disclaimer'] = TAX_DISCLAIMER
        return Response(payload)

    @extend_schema(
        summary="Compute Company Income Tax",
        description=(
            "CIT with the small-company exemption (turnover at or below ₦50,000,000) "
            "and the development levy for larger companies."
        ),
        request=CompanyIncomeRequestSerializer,
        responses={200: TaxComputationSerializer},
        tags=["Tax"]
    )
    @action(detail=False, methods=['post'], url_path='cit')
    def cit(self, request):
        serializer = CompanyIncomeRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            computation = compute_cit(
                data['annual_turnover'],
                data['taxable_profit'],
                load_rates(data['tax_year']),
            )
            tax_payable = apply_wht_credits(computation.total_tax, data['wht_credits'])
        except (TaxValidationError, TaxConfigurationError) as exc:
            return engine_error_response(exc)

        payload = TaxComputationSerializer(computation).data
        payload['tax_year'] = data['tax_year']
        payload['wht_credits'] = str(data['wht_credits'])
        payload['tax_payable'] = str(tax_payable)
        payload['disclaimer'] = TAX_DISCLAIMER
        return Response(payload)

    @extend_schema(
        summary="Get period tax summary",
        description=(
            "VAT, WHT and PAYE totals for a month or a whole tax year, recomputed "
            "from the business's transactions on every request."
        ),
        parameters=PERIOD_PARAMETERS,
        responses={200: PeriodSummarySerializer},
        tags=["Tax"]
    )
    @action(detail=False, methods=['get'], url_path='summary')
    def summary(self, request):
        """
        GET /api/tax/summary/?business_id=uuid&year=2026
        GET /api/tax/summary/?business_id=uuid&month=2026-03
        """
        business = self._get_business(request)
        if business is None:
            return Response(
                {'error': 'Business not found or does not belong to you.', 'field': 'business_id'},
                status=status.HTTP_404_NOT_FOUND
            )

        period = self._get_period(request)
        if isinstance(period, Response):
            return period
        tax_year, month = period

        try:
            period_summary = aggregate(
                business.id, tax_year, month, coerce_legacy=coerce_legacy_tax_years(),
            )
        except (TaxValidationError, TaxConfigurationError) as exc:
            return engine_error_response(exc)

        return Response(PeriodSummarySerializer(period_summary).data)

    @extend_schema(
        summary="Get compliance score",
        description=(
            "Score the period against the filing checklist (registration, VAT returns, "
            "WHT and PAYE remittances). Returns a 0-100 score, a status and alerts."
        ),
        parameters=PERIOD_PARAMETERS,
        responses={200: ComplianceReportSerializer},
        tags=["Tax"]
    )
    @action(detail=False, methods=['get'], url_path='compliance')
    def compliance(self, request):
        business = self._get_business(request)
        if business is None:
            return Response(
                {'error': 'Business not found or does not belong to you.', 'field': 'business_id'},
                status=status.HTTP_404_NOT_FOUND
            )

        period = self._get_period(request)
        if isinstance(period, Response):
            return period
        tax_year, month = period

        try:
            coerce_legacy = coerce_legacy_tax_years()
            period_summary = aggregate(business.id, tax_year, month, coerce_legacy=coerce_legacy)
            if month is None:
                annual_turnover = period_summary.turnover
            else:
                annual_turnover = aggregate(
                    business.id, period_summary.tax_year, coerce_legacy=coerce_legacy,
                ).turnover
            filings = [
                record.to_engine()
                for record in business.filings.filter(tax_year=period_summary.tax_year)
            ]
            report = score(
                period_summary,
                filings,
                profile=business.compliance_profile(annual_turnover),
            )
        except (TaxValidationError, TaxConfigurationError) as exc:
            return engine_error_response(exc)

        payload = ComplianceReportSerializer(report).data
        payload['summary'] = PeriodSummarySerializer(period_summary).data
        return Response(payload)
