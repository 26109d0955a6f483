from datetime import date

import pytest
from django.urls import reverse
from rest_framework import status

from apps.tax.models import TaxSettings


# =============================================================================
# Tax Settings Tests
# =============================================================================

@pytest.mark.django_db
class TestTaxSettings:
    """Tests for /api/tax/settings/"""

    def test_get_creates_defaults(self, authenticated_client, user):
        response = authenticated_client.get(reverse('tax:settings'))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['business_type'] == 'individual'
        assert response.data['vat_registered'] is False
        assert TaxSettings.objects.filter(user=user).count() == 1

    def test_patch(self, authenticated_client, user):
        url = reverse('tax:settings')
        response = authenticated_client.patch(url, {'business_type': 'company', 'tax_id': '12345678-0001'})

        assert response.status_code == status.HTTP_200_OK
        assert TaxSettings.objects.get(user=user).business_type == 'company'

    def test_invalid_business_type(self, authenticated_client, user):
        response = authenticated_client.patch(reverse('tax:settings'), {'business_type': 'charity'})

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_requires_auth(self, api_client):
        response = api_client.get(reverse('tax:settings'))

        assert response.status_code == status.HTTP_401_UNAUTHORIZED


# =============================================================================
# Tax Summary Tests
# =============================================================================

@pytest.mark.django_db
class TestTaxSummary:
    """Tests for GET /api/tax/summary/"""

    def test_summary_for_year(self, authenticated_client, account, book):
        book('5000000')
        book('1000000', 'expense', tax_deductible=True)

        response = authenticated_client.get(reverse('tax:summary'), {'year': 2024})

        assert response.status_code == status.HTTP_200_OK
        assert response.data['year'] == 2024
        assert response.data['taxable_income'] == '4000000.00'
        assert response.data['income_tax'] == '518000.00'

    def test_defaults_to_current_year(self, authenticated_client, account, book):
        book('1000', day=date.today())

        response = authenticated_client.get(reverse('tax:summary'))

        assert response.data['year'] == date.today().year
        assert response.data['turnover'] == '1000.00'

    def test_year_out_of_range(self, authenticated_client, account):
        response = authenticated_client.get(reverse('tax:summary'), {'year': 1900})

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_other_account_data_excluded(self, other_client, other_account, book):
        book('5000000')

        response = other_client.get(reverse('tax:summary'), {'year': 2024})

        assert response.data['turnover'] == '0.00'

    def test_requires_account(self, authenticated_client, user):
        response = authenticated_client.get(reverse('tax:summary'))

        assert response.status_code == status.HTTP_400_BAD_REQUEST


# =============================================================================
# Deduction Tests
# =============================================================================

@pytest.mark.django_db
class TestDeductions:
    """Tests for GET /api/tax/deductions/"""

    def test_deductions(self, authenticated_client, account, book):
        book('500', 'expense', tax_deductible=True, tax_category='Rent')
        book('300', 'expense', tax_deductible=True, tax_category='Travel')

        response = authenticated_client.get(reverse('tax:deductions'), {'year': 2024})

        assert response.status_code == status.HTTP_200_OK
        assert response.data['total'] == '800.00'
        assert response.data['by_category'][0] == {'tax_category': 'Rent', 'total': '500.00', 'count': 1}

    def test_filter_by_category(self, authenticated_client, account, book):
        book('500', 'expense', tax_deductible=True, tax_category='Rent')
        book('300', 'expense', tax_deductible=True, tax_category='Travel')

        response = authenticated_client.get(reverse('tax:deductions'), {'year': 2024, 'tax_category': 'Rent'})

        assert response.data['count'] == 1
