from django.urls import path, include
from rest_framework.routers import DefaultRouter
from .views import BusinessViewSet, TransactionViewSet, FilingRecordViewSet, TaxViewSet

router = DefaultRouter()
router.register(r'businesses', BusinessViewSet, basename='business')
router.register(r'transactions', TransactionViewSet, basename='transaction')
router.register(r'filings', FilingRecordViewSet, basename='filing')
router.register(r'tax', TaxViewSet, basename='tax')

urlpatterns = [
    path('', include(router.urls)),
]
