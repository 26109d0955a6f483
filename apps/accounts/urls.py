from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'accounts'

router = DefaultRouter()
router.register(r'', views.AccountViewSet, basename='account')

urlpatterns = [
    # GET    /api/accounts/               - List accounts
    # POST   /api/accounts/               - Create account
    # GET    /api/accounts/current/       - Current account
    # POST   /api/accounts/{id}/switch/   - Make account current
    path('', include(router.urls)),
]
