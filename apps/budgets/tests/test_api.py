from datetime import date
from decimal import Decimal

import pytest
from django.urls import reverse
from rest_framework import status

from apps.budgets.models import Budget
from apps.transactions.models import Category, Transaction


@pytest.fixture
def budget(account):
    return Budget.objects.create(
        account=account,
        name='March operations',
        amount=Decimal('1000.00'),
        start_date=date(2024, 3, 1),
        end_date=date(2024, 3, 31),
        is_recurring=True,
        recurring_type='monthly',
    )


def _spend(budget, amount):
    return Transaction.objects.create(
        account=budget.account,
        date=date(2024, 3, 10),
        description='Spend',
        category='Supplies',
        amount=Decimal(amount),
        type='expense',
        payment_source='Cash',
        budget=budget,
    )


# =============================================================================
# Budget CRUD Tests
# =============================================================================

@pytest.mark.django_db
class TestBudgetCreate:
    """Tests for POST /api/budgets/"""

    def test_create_budget(self, authenticated_client, account):
        category = Category.objects.get(account=account, name='Uncategorized', type='expense')
        url = reverse('budgets:budget-list')
        data = {
            'name': 'Q2 marketing',
            'amount': '5000.00',
            'start_date': '2024-04-01',
            'end_date': '2024-06-30',
            'categories': [str(category.id)],
        }
        response = authenticated_client.post(url, data, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['spent'] == '0.00'
        assert response.data['remaining'] == '5000.00'
        assert Budget.objects.get(id=response.data['id']).account == account

    def test_end_must_follow_start(self, authenticated_client, account):
        url = reverse('budgets:budget-list')
        data = {
            'name': 'Backwards',
            'amount': '100.00',
            'start_date': '2024-04-01',
            'end_date': '2024-04-01',
        }
        response = authenticated_client.post(url, data, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'end_date' in response.data

    def test_recurring_needs_type(self, authenticated_client, account):
        url = reverse('budgets:budget-list')
        data = {
            'name': 'Monthly',
            'amount': '100.00',
            'start_date': '2024-04-01',
            'end_date': '2024-04-30',
            'is_recurring': True,
        }
        response = authenticated_client.post(url, data, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'recurring_type' in response.data

    def test_foreign_category_rejected(self, authenticated_client, account, other_account):
        foreign = Category.objects.filter(account=other_account).first()
        url = reverse('budgets:budget-list')
        data = {
            'name': 'Sneaky',
            'amount': '100.00',
            'start_date': '2024-04-01',
            'end_date': '2024-04-30',
            'categories': [str(foreign.id)],
        }
        response = authenticated_client.post(url, data, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'categories' in response.data


@pytest.mark.django_db
class TestBudgetList:
    """Tests for GET /api/budgets/"""

    def test_spent_and_remaining(self, authenticated_client, budget):
        _spend(budget, '250.00')
        _spend(budget, '1000.00')

        response = authenticated_client.get(reverse('budgets:budget-list'))

        assert response.status_code == status.HTTP_200_OK
        item = response.data['results'][0]
        assert item['spent'] == '1250.00'
        assert item['remaining'] == '-250.00'
        assert item['percent_used'] == '125.00'

    def test_active_on_filter(self, authenticated_client, budget):
        url = reverse('budgets:budget-list')

        inside = authenticated_client.get(url, {'active_on': '2024-03-15'})
        outside = authenticated_client.get(url, {'active_on': '2024-04-15'})

        assert inside.data['count'] == 1
        assert outside.data['count'] == 0

    def test_other_account_hidden(self, other_client, budget, other_account):
        response = other_client.get(reverse('budgets:budget-list'))

        assert response.data['count'] == 0


# =============================================================================
# Recurring Budget Tests
# =============================================================================

@pytest.mark.django_db
class TestNextBudget:
    """Tests for POST /api/budgets/{id}/next/"""

    def test_next_period(self, authenticated_client, budget):
        url = reverse('budgets:budget-next', kwargs={'pk': budget.id})
        response = authenticated_client.post(url)

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['start_date'] == '2024-04-01'
        assert response.data['end_date'] == '2024-04-30'
        assert response.data['parent_budget'] == budget.id

    def test_non_recurring(self, authenticated_client, budget):
        budget.is_recurring = False
        budget.recurring_type = ''
        budget.save()

        url = reverse('budgets:budget-next', kwargs={'pk': budget.id})
        response = authenticated_client.post(url)

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_linked_transactions(self, authenticated_client, budget):
        _spend(budget, '10.00')

        url = reverse('budgets:budget-transactions', kwargs={'pk': budget.id})
        response = authenticated_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['count'] == 1
