import csv
import io

import pytest
from decimal import Decimal
from datetime import date
from django.urls import reverse
from rest_framework import status
from apps.reports.reports import ReportQueries


MARCH = {'period': '2024-03'}


# =============================================================================
# Profit and Loss Tests
# =============================================================================

@pytest.mark.django_db
class TestProfitAndLoss:
    """Tests for GET /api/reports/profit-loss/"""

    def test_march(self, authenticated_client, ledger):
        """Totals and category rows for one month."""
        response = authenticated_client.get(reverse('reports:profit-loss'), MARCH)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['total_income'] == '4000.00'
        assert response.data['total_expenses'] == '1100.00'
        assert response.data['net_profit'] == '2900.00'
        assert response.data['profit_margin'] == '72.50'
        assert response.data['period_start'] == '2024-03-01'
        assert response.data['period_end'] == '2024-03-31'
        assert [row['name'] for row in response.data['expenses_by_category']] == ['Rent', 'Supplies']
        assert response.data['expenses_by_category'][1]['count'] == 2

    def test_no_income_margin_zero(self, account, user):
        """A period with nothing recorded has a zero margin."""
        report = ReportQueries.profit_and_loss(account, date(2024, 1, 1), date(2024, 1, 31))

        assert report['profit_margin'] == Decimal('0.00')
        assert report['income_by_category'] == []

    def test_date_range(self, authenticated_client, ledger):
        """start_date and end_date are inclusive."""
        params = {'start_date': '2024-03-05', 'end_date': '2024-03-10'}
        response = authenticated_client.get(reverse('reports:profit-loss'), params)

        assert response.data['total_income'] == '1000.00'
        assert response.data['total_expenses'] == '800.00'

    def test_invalid_period(self, authenticated_client, account):
        response = authenticated_client.get(reverse('reports:profit-loss'), {'period': '2024-13'})

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_reversed_range(self, authenticated_client, account):
        params = {'start_date': '2024-03-31', 'end_date': '2024-03-01'}
        response = authenticated_client.get(reverse('reports:profit-loss'), params)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'end_date' in response.data

    def test_other_account_excluded(self, other_client, other_account, ledger):
        response = other_client.get(reverse('reports:profit-loss'), MARCH)

        assert response.data['total_income'] == '0.00'

    def test_requires_account(self, authenticated_client, user):
        response = authenticated_client.get(reverse('reports:profit-loss'), MARCH)

        assert response.status_code == status.HTTP_400_BAD_REQUEST


# =============================================================================
# Cash Flow Tests
# =============================================================================

@pytest.mark.django_db
class TestCashFlow:
    """Tests for GET /api/reports/cash-flow/"""

    def test_march(self, authenticated_client, ledger):
        """Starting balance carries February's net."""
        response = authenticated_client.get(reverse('reports:cash-flow'), MARCH)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['starting_balance'] == '800.00'
        assert response.data['total_cash_in'] == '4000.00'
        assert response.data['total_cash_out'] == '1100.00'
        assert response.data['net_cash_flow'] == '2900.00'
        assert response.data['ending_balance'] == '3700.00'

    def test_monthly_breakdown(self, account, ledger):
        report = ReportQueries.cash_flow(account, date(2024, 2, 1), date(2024, 4, 30))

        assert report['starting_balance'] == Decimal('0.00')
        assert [row['month'] for row in report['monthly']] == ['2024-02', '2024-03', '2024-04']
        assert report['monthly'][2]['cash_in'] == Decimal('0.00')
        assert report['monthly'][2]['net_flow'] == Decimal('-50.00')
        assert report['ending_balance'] == Decimal('3650.00')


# =============================================================================
# Expense Report Tests
# =============================================================================

@pytest.mark.django_db
class TestExpenseReport:
    """Tests for GET /api/reports/expenses/"""

    def test_march(self, authenticated_client, ledger):
        response = authenticated_client.get(reverse('reports:expenses'), MARCH)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['total_expenses'] == '1100.00'
        assert response.data['count'] == 3
        assert response.data['average'] == '366.67'
        assert response.data['by_category'][0] == {
            'name': 'Rent', 'total': '800.00', 'count': 1, 'percentage': '72.73',
        }
        assert [row['name'] for row in response.data['by_payment_source']] == ['Bank Transfer', 'Cash']

    def test_empty(self, account):
        report = ReportQueries.expense_report(account, date(2024, 1, 1), date(2024, 1, 31))

        assert report['count'] == 0
        assert report['average'] == Decimal('0.00')


# =============================================================================
# Weekly Summary Tests
# =============================================================================

@pytest.mark.django_db
class TestWeeklySummary:
    """Tests for GET /api/reports/weekly-summary/"""

    def test_week(self, authenticated_client, ledger):
        """The seven days ending on end_date."""
        response = authenticated_client.get(reverse('reports:weekly-summary'), {'end_date': '2024-03-21'})

        assert response.status_code == status.HTTP_200_OK
        assert response.data['week_start'] == '2024-03-15'
        assert response.data['total_expenses'] == '300.00'
        assert response.data['net_cash_flow'] == '-300.00'
        assert response.data['transaction_count'] == 2
        assert response.data['top_categories'] == [
            {'name': 'Supplies', 'total': '300.00', 'percentage': '100.00'},
        ]

    def test_defaults_to_today(self, authenticated_client, account):
        response = authenticated_client.get(reverse('reports:weekly-summary'))

        assert response.data['week_end'] == date.today().isoformat()


# =============================================================================
# Export Tests
# =============================================================================

@pytest.mark.django_db
class TestReportExport:
    """Tests for GET /api/reports/{report}/export/"""

    @staticmethod
    def _csv_rows(response):
        return list(csv.reader(io.StringIO(response.content.decode('utf-8'))))

    def test_profit_loss_csv(self, authenticated_client, ledger):
        url = reverse('reports:export', kwargs={'report_type': 'profit-loss'})
        response = authenticated_client.get(url, {**MARCH, 'file_format': 'csv'})

        assert response.status_code == status.HTTP_200_OK
        assert response['Content-Type'] == 'text/csv'
        assert response['Content-Disposition'] == (
            'attachment; filename="profit-loss-report-2024-03-01-to-2024-03-31.csv"'
        )
        rows = self._csv_rows(response)
        assert rows[0] == ['Type', 'Category', 'Count', 'Amount']
        assert ['Revenue', 'Sales', '1', '3000.00'] in rows
        assert ['Expense', 'Supplies', '2', '300.00'] in rows
        assert rows[-1] == ['Total', 'Net profit', '', '2900.00']

    def test_cash_flow_csv(self, authenticated_client, ledger):
        url = reverse('reports:export', kwargs={'report_type': 'cash-flow'})
        response = authenticated_client.get(url, {**MARCH, 'file_format': 'csv'})

        rows = self._csv_rows(response)
        assert rows[1] == ['Balance', 'Starting balance', '', '800.00']
        assert ['Cash Out', 'Rent', '1', '800.00'] in rows
        assert rows[-1] == ['Balance', 'Ending balance', '', '3700.00']

    def test_expenses_csv_lists_each_expense(self, authenticated_client, ledger):
        url = reverse('reports:export', kwargs={'report_type': 'expenses'})
        response = authenticated_client.get(url, {**MARCH, 'file_format': 'csv'})

        rows = self._csv_rows(response)
        assert rows[0] == ['Date', 'Category', 'Description', 'Amount', 'Payment Source']
        assert rows[1:] == [
            ['2024-03-05', 'Rent', 'Rent entry', '800.00', 'Bank Transfer'],
            ['2024-03-15', 'Supplies', 'Supplies entry', '200.00', 'Cash'],
            ['2024-03-20', 'Supplies', 'Supplies entry', '100.00', 'Cash'],
        ]

    @pytest.mark.parametrize('report_type', ['profit-loss', 'cash-flow', 'expenses'])
    def test_pdf_by_default(self, authenticated_client, ledger, report_type):
        url = reverse('reports:export', kwargs={'report_type': report_type})
        response = authenticated_client.get(url, MARCH)

        assert response.status_code == status.HTTP_200_OK
        assert response['Content-Type'] == 'application/pdf'
        assert response.content.startswith(b'%PDF')

    def test_empty_period_pdf(self, authenticated_client, account):
        url = reverse('reports:export', kwargs={'report_type': 'expenses'})
        response = authenticated_client.get(url, {'period': '2024-01'})

        assert response.status_code == status.HTTP_200_OK
        assert response.content.startswith(b'%PDF')

    def test_unknown_report(self, authenticated_client, account):
        url = reverse('reports:export', kwargs={'report_type': 'balance-sheet'})
        response = authenticated_client.get(url, MARCH)

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_unknown_format(self, authenticated_client, account):
        url = reverse('reports:export', kwargs={'report_type': 'expenses'})
        response = authenticated_client.get(url, {**MARCH, 'file_format': 'xlsx'})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'file_format' in response.data

    def test_other_account_excluded(self, other_client, other_account, ledger):
        url = reverse('reports:export', kwargs={'report_type': 'expenses'})
        response = other_client.get(url, {**MARCH, 'file_format': 'csv'})

        assert self._csv_rows(response) == [['Date', 'Category', 'Description', 'Amount', 'Payment Source']]
