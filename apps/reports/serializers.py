"""
Serializers for reports app.

Input Serializers:
    ReportPeriodQuerySerializer - Validates period and date range parameters
    ReportExportQuerySerializer - Adds the export file format
    WeeklySummaryQuerySerializer - Validates the week end date

Response Serializers:
    ProfitAndLossSerializer, CashFlowSerializer, ExpenseReportSerializer,
    WeeklySummarySerializer
"""

import calendar
from datetime import date

from rest_framework import serializers


# =============================================================================
# Input Serializers (Query Parameter Validation)
# =============================================================================

class ReportPeriodQuerySerializer(serializers.Serializer):
    """
    Validate report period query parameters.

    Query Parameters:
        period (str): Month in YYYY-MM format (e.g., '2024-03')
        start_date (date): Start of date range
        end_date (date): End of date range

    Note:
        'period' takes precedence. Without any parameter the current
        month is used; a missing start or end falls back to the current
        month's first or last day.
    """

    period = serializers.RegexField(
        regex=r'^\d{4}-(0[1-9]|1[0-2])$',
        required=False,
        allow_blank=True,
        help_text='Month period in YYYY-MM format'
    )
    start_date = serializers.DateField(required=False)
    end_date = serializers.DateField(required=False)

    @staticmethod
    def _month_bounds(year, month):
        return date(year, month, 1), date(year, month, calendar.monthrange(year, month)[1])

    def validate(self, attrs):
        period = attrs.get('period')
        if period:
            year, month = (int(part) for part in period.split('-'))
            attrs['start_date'], attrs['end_date'] = self._month_bounds(year, month)
        else:
            today = date.today()
            month_start, month_end = self._month_bounds(today.year, today.month)
            attrs.setdefault('start_date', month_start)
            attrs.setdefault('end_date', month_end)

        if attrs['start_date'] > attrs['end_date']:
            raise serializers.ValidationError({
                'end_date': 'End date must be after start date'
            })
        return attrs


class WeeklySummaryQuerySerializer(serializers.Serializer):
    end_date = serializers.DateField(required=False)


class ReportExportQuerySerializer(ReportPeriodQuerySerializer):
    """Period parameters plus the file format of the download."""

    file_format = serializers.ChoiceField(
        choices=['pdf', 'csv'],
        default='pdf',
        help_text='pdf (default) or csv'
    )


# =============================================================================
# Response Serializers
# =============================================================================

class GroupTotalSerializer(serializers.Serializer):
    name = serializers.CharField()
    total = serializers.DecimalField(max_digits=18, decimal_places=2)
    count = serializers.IntegerField()


class ShareSerializer(GroupTotalSerializer):
    percentage = serializers.DecimalField(max_digits=7, decimal_places=2)


class ProfitAndLossSerializer(serializers.Serializer):
    income_by_category = GroupTotalSerializer(many=True)
    expenses_by_category = GroupTotalSerializer(many=True)
    total_income = serializers.DecimalField(max_digits=18, decimal_places=2)
    total_expenses = serializers.DecimalField(max_digits=18, decimal_places=2)
    net_profit = serializers.DecimalField(max_digits=18, decimal_places=2)
    profit_margin = serializers.DecimalField(max_digits=9, decimal_places=2)
    period_start = serializers.DateField()
    period_end = serializers.DateField()


class MonthlyFlowSerializer(serializers.Serializer):
    month = serializers.CharField()
    cash_in = serializers.DecimalField(max_digits=18, decimal_places=2)
    cash_out = serializers.DecimalField(max_digits=18, decimal_places=2)
    net_flow = serializers.DecimalField(max_digits=18, decimal_places=2)


class CashFlowSerializer(serializers.Serializer):
    starting_balance = serializers.DecimalField(max_digits=18, decimal_places=2)
    cash_in_by_category = GroupTotalSerializer(many=True)
    cash_out_by_category = GroupTotalSerializer(many=True)
    total_cash_in = serializers.DecimalField(max_digits=18, decimal_places=2)
    total_cash_out = serializers.DecimalField(max_digits=18, decimal_places=2)
    net_cash_flow = serializers.DecimalField(max_digits=18, decimal_places=2)
    monthly = MonthlyFlowSerializer(many=True)
    ending_balance = serializers.DecimalField(max_digits=18, decimal_places=2)
    period_start = serializers.DateField()
    period_end = serializers.DateField()


class ExpenseReportSerializer(serializers.Serializer):
    total_expenses = serializers.DecimalField(max_digits=18, decimal_places=2)
    count = serializers.IntegerField()
    average = serializers.DecimalField(max_digits=18, decimal_places=2)
    by_category = ShareSerializer(many=True)
    by_payment_source = ShareSerializer(many=True)
    period_start = serializers.DateField()
    period_end = serializers.DateField()


class TopCategorySerializer(serializers.Serializer):
    name = serializers.CharField()
    total = serializers.DecimalField(max_digits=18, decimal_places=2)
    percentage = serializers.DecimalField(max_digits=7, decimal_places=2)


class WeeklySummarySerializer(serializers.Serializer):
    week_start = serializers.DateField()
    week_end = serializers.DateField()
    total_income = serializers.DecimalField(max_digits=18, decimal_places=2)
    total_expenses = serializers.DecimalField(max_digits=18, decimal_places=2)
    net_cash_flow = serializers.DecimalField(max_digits=18, decimal_places=2)
    transaction_count = serializers.IntegerField()
    top_categories = TopCategorySerializer(many=True)
    overdue_invoices = serializers.IntegerField()
