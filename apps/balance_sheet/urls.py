from django.urls import path, include
from rest_framework.routers import DefaultRouter

from . import views

app_name = 'balance_sheet'

router = DefaultRouter()
router.register(r'assets', views.AssetViewSet, basename='asset')
router.register(r'liabilities', views.LiabilityViewSet, basename='liability')

urlpatterns = [
    path('summary/', views.summary, name='summary'),
    path('', include(router.urls)),
]
