from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'budgets'

router = DefaultRouter()
router.register(r'', views.BudgetViewSet, basename='budget')

urlpatterns = [
    # CRUD   /api/budgets/
    # POST   /api/budgets/{id}/next/          - Next period of a recurring budget
    # GET    /api/budgets/{id}/transactions/  - Linked transactions
    path('', include(router.urls)),
]
