from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'transactions'

# Categories must be registered BEFORE the empty prefix to avoid URL conflicts
router = DefaultRouter()
router.register(r'categories', views.CategoryViewSet, basename='category')
router.register(r'', views.TransactionViewSet, basename='transaction')

urlpatterns = [
    # GET    /api/transactions/                 - List (filter, search, ordering)
    # POST   /api/transactions/                 - Create
    # POST   /api/transactions/bulk-upload/     - CSV import
    # GET    /api/transactions/summary/         - Totals for a date range
    # POST   /api/transactions/{id}/receipt/    - Attach receipt
    # CRUD   /api/transactions/categories/      - Categories
    path('', include(router.urls)),
]
