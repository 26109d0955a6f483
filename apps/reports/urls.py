from django.urls import path

from . import views

app_name = 'reports'

urlpatterns = [
    # All reports accept ?period=YYYY-MM or ?start_date=&end_date=
    path('profit-loss/', views.profit_and_loss, name='profit-loss'),
    path('cash-flow/', views.cash_flow, name='cash-flow'),
    path('expenses/', views.expense_report, name='expenses'),
    path('weekly-summary/', views.weekly_summary, name='weekly-summary'),
    # ?file_format=pdf|csv
    path('<str:report_type>/export/', views.export_report, name='export'),
]
