from django.urls import path, include
from rest_framework.routers import DefaultRouter

from . import views

app_name = 'invoices'

router = DefaultRouter()
router.register(r'clients', views.ClientViewSet, basename='client')
router.register(r'', views.InvoiceViewSet, basename='invoice')

urlpatterns = [
    path('settings/', views.invoice_settings, name='invoice-settings'),
    path('public/<str:share_token>/', views.public_invoice, name='public-invoice'),
    path('', include(router.urls)),
]
