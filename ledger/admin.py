from django.contrib import admin
from .models import Business, Transaction, FilingRecord


class FilingRecordInline(admin.TabularInline):
    model = FilingRecord
    extra = 0


@admin.register(Business)
class BusinessAdmin(admin.ModelAdmin):
    list_display = ['name', 'user', 'taxpayer_class', 'tin', 'vat_registered', 'created_at']
    list_filter = ['taxpayer_class', 'vat_registered']
    search_fields = ['name', 'tin', 'cac_number', 'user__email']
    readonly_fields = ['id', 'created_at', 'updated_at']
    inlines = [FilingRecordInline]


@admin.register(Transaction)
class TransactionAdmin(admin.ModelAdmin):
    list_display = ['date', 'transaction_type', 'amount', 'vat_amount', 'wht_amount', 'paye_amount', 'business', 'is_deleted']
    list_filter = ['transaction_type', 'tax_year', 'is_deleted', 'date']
    search_fields = ['description', 'user__email', 'business__name']
    readonly_fields = ['id', 'created_at', 'updated_at', 'vat_amount', 'wht_amount', 'paye_amount']


@admin.register(FilingRecord)
class FilingRecordAdmin(admin.ModelAdmin):
    list_display = ['business', 'obligation', 'tax_year', 'month', 'amount', 'filed_on']
    list_filter = ['obligation', 'tax_year']
    search_fields = ['business__name', 'reference']
    readonly_fields = ['id', 'created_at']
