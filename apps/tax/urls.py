from django.urls import path

from . import views

app_name = 'tax'

urlpatterns = [
    path('settings/', views.tax_settings, name='settings'),
    path('summary/', views.tax_summary, name='summary'),
    path('deductions/', views.deductions, name='deductions'),
]
