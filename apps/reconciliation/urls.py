from django.urls import path, include
from rest_framework.routers import DefaultRouter

from . import views

app_name = 'reconciliation'

router = DefaultRouter()
router.register(r'statements', views.BankStatementViewSet, basename='statement')
router.register(r'bank-transactions', views.BankTransactionViewSet, basename='bank-transaction')
router.register(r'sessions', views.ReconciliationSessionViewSet, basename='session')

urlpatterns = [
    # POST   /api/reconciliation/statements/import/               - Upload CSV
    # POST   /api/reconciliation/statements/{id}/auto_match/      - Auto-match lines
    # GET    /api/reconciliation/statements/{id}/summary/         - Balances
    # GET    /api/reconciliation/bank-transactions/{id}/candidates/
    # POST   /api/reconciliation/sessions/{id}/complete/
    path('', include(router.urls)),
]
