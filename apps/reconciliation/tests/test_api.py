from datetime import date

import pytest
from django.core.files.uploadedfile import SimpleUploadedFile
from django.urls import reverse
from rest_framework import status

from apps.reconciliation.models import BankStatement, ReconciliationSession
from apps.reconciliation.services import auto_match_statement, start_session


# =============================================================================
# Statement Import Tests
# =============================================================================

@pytest.mark.django_db
class TestStatementImport:
    """Tests for POST /api/reconciliation/statements/import/"""

    def test_import_file(self, authenticated_client, account, statement_csv):
        url = reverse('reconciliation:statement-import')
        upload = SimpleUploadedFile('march.csv', statement_csv.encode('utf-8'), content_type='text/csv')
        response = authenticated_client.post(url, {'file': upload}, format='multipart')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['transaction_count'] == 2
        assert response.data['file_name'] == 'march.csv'
        assert response.data['status'] == 'pending'
        assert BankStatement.objects.get(id=response.data['id']).account == account

    def test_import_content_with_override(self, authenticated_client, account, statement_csv):
        url = reverse('reconciliation:statement-import')
        data = {'content': statement_csv, 'closing_balance': '1500.00', 'period_start': '2024-03-01'}
        response = authenticated_client.post(url, data, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['closing_balance'] == '1500.00'
        assert response.data['period_start'] == '2024-03-01'
        assert response.data['period_end'] == '2024-03-05'

    def test_nothing_to_import(self, authenticated_client, account):
        url = reverse('reconciliation:statement-import')
        response = authenticated_client.post(url, {'notes': 'empty'}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_parse_errors_listed(self, authenticated_client, account):
        url = reverse('reconciliation:statement-import')
        data = {'content': "2024-03-02,Fee,-5\n2024-13-40,Fee,-5\n"}
        response = authenticated_client.post(url, data, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['errors'][0]['row'] == 2
        assert response.data['errors'][0]['field'] == 'date'
        assert BankStatement.objects.count() == 0

    def test_period_order_validated(self, authenticated_client, account, statement_csv):
        url = reverse('reconciliation:statement-import')
        data = {'content': statement_csv, 'period_start': '2024-03-31', 'period_end': '2024-03-01'}
        response = authenticated_client.post(url, data, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'period_end' in response.data

    def test_non_utf8_file(self, authenticated_client, account):
        url = reverse('reconciliation:statement-import')
        upload = SimpleUploadedFile('bad.csv', b'\xff\xfe\x00bad', content_type='text/csv')
        response = authenticated_client.post(url, {'file': upload}, format='multipart')

        assert response.status_code == status.HTTP_400_BAD_REQUEST


# =============================================================================
# Statement Tests
# =============================================================================

@pytest.mark.django_db
class TestStatements:
    """Tests for /api/reconciliation/statements/"""

    def test_list_scoped(self, authenticated_client, other_client, other_account, statement):
        assert authenticated_client.get(reverse('reconciliation:statement-list')).data['count'] == 1
        assert other_client.get(reverse('reconciliation:statement-list')).data['count'] == 0

    def test_auto_match(self, authenticated_client, statement, matching_records):
        url = reverse('reconciliation:statement-auto-match', kwargs={'pk': statement.id})
        response = authenticated_client.post(url)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['matched'] == 2
        assert response.data['summary']['app_balance'] == '1400.00'
        assert response.data['summary']['has_discrepancy'] is False

    def test_summary(self, authenticated_client, statement):
        url = reverse('reconciliation:statement-summary', kwargs={'pk': statement.id})
        response = authenticated_client.get(url)

        assert response.data['total_bank_transactions'] == 2
        assert response.data['unmatched_transactions'] == 2
        assert response.data['bank_balance'] == '1400.00'
        assert response.data['discrepancy_amount'] == '400.00'
        assert response.data['has_discrepancy'] is True

    def test_transactions_filtered(self, authenticated_client, statement, account, matching_records):
        auto_match_statement(statement_id=statement.id, account=account)
        url = reverse('reconciliation:statement-transactions', kwargs={'pk': statement.id})

        assert authenticated_client.get(url, {'match_status': 'matched'}).data['count'] == 2
        assert authenticated_client.get(url, {'match_status': 'unmatched'}).data['count'] == 0

    def test_invalid_status_filter(self, authenticated_client, statement):
        url = reverse('reconciliation:statement-transactions', kwargs={'pk': statement.id})
        response = authenticated_client.get(url, {'match_status': 'sort_of'})

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_foreign_statement_not_found(self, other_client, other_account, statement):
        url = reverse('reconciliation:statement-summary', kwargs={'pk': statement.id})

        assert other_client.get(url).status_code == status.HTTP_404_NOT_FOUND

    def test_delete_removes_lines(self, authenticated_client, statement):
        url = reverse('reconciliation:statement-detail', kwargs={'pk': statement.id})
        response = authenticated_client.delete(url)

        assert response.status_code == status.HTTP_204_NO_CONTENT
        assert not BankStatement.objects.exists()


# =============================================================================
# Bank Transaction Tests
# =============================================================================

@pytest.mark.django_db
class TestBankTransactions:
    """Tests for /api/reconciliation/bank-transactions/"""

    def test_candidates(self, authenticated_client, statement, matching_records):
        line = statement.bank_transactions.get(description='POS Purchase Shoprite')
        url = reverse('reconciliation:bank-transaction-candidates', kwargs={'pk': line.id})
        response = authenticated_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        assert response.data[0]['id'] == str(matching_records['purchase'].id)

    def test_manual_match(self, authenticated_client, statement, matching_records):
        line = statement.bank_transactions.get(description='Transfer from Ada')
        url = reverse('reconciliation:bank-transaction-match', kwargs={'pk': line.id})
        response = authenticated_client.post(url, {'transaction': str(matching_records['transfer'].id)})

        assert response.status_code == status.HTTP_200_OK
        assert response.data['match_status'] == 'manual_match'
        assert response.data['match_confidence'] == '1.00'

    def test_match_already_used(self, authenticated_client, statement, matching_records):
        purchase = statement.bank_transactions.get(description='POS Purchase Shoprite')
        transfer = statement.bank_transactions.get(description='Transfer from Ada')
        target = {'transaction': str(matching_records['purchase'].id)}
        authenticated_client.post(reverse('reconciliation:bank-transaction-match', kwargs={'pk': purchase.id}), target)

        response = authenticated_client.post(
            reverse('reconciliation:bank-transaction-match', kwargs={'pk': transfer.id}),
            target,
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_match_unknown_transaction(self, authenticated_client, statement):
        line = statement.bank_transactions.first()
        url = reverse('reconciliation:bank-transaction-match', kwargs={'pk': line.id})
        response = authenticated_client.post(url, {'transaction': '00000000-0000-0000-0000-000000000000'})

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_unmatch_and_ignore(self, authenticated_client, statement, account, matching_records):
        auto_match_statement(statement_id=statement.id, account=account)
        line = statement.bank_transactions.get(description='Transfer from Ada')

        response = authenticated_client.post(reverse('reconciliation:bank-transaction-unmatch', kwargs={'pk': line.id}))
        assert response.data['match_status'] == 'unmatched'
        assert response.data['matched_transaction'] is None

        response = authenticated_client.post(reverse('reconciliation:bank-transaction-ignore', kwargs={'pk': line.id}))
        assert response.data['match_status'] == 'ignored'

    def test_list_filtered_by_statement(self, authenticated_client, statement, account):
        url = reverse('reconciliation:bank-transaction-list')
        response = authenticated_client.get(url, {'statement': str(statement.id), 'match_status': 'unmatched'})

        assert response.data['count'] == 2


# =============================================================================
# Session Tests
# =============================================================================

@pytest.mark.django_db
class TestSessions:
    """Tests for /api/reconciliation/sessions/"""

    def test_start_session(self, authenticated_client, statement):
        url = reverse('reconciliation:session-list')
        response = authenticated_client.post(url, {'statement': str(statement.id)})

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['status'] == 'in_progress'
        assert response.data['total_transactions'] == 2

    def test_second_session_rejected(self, authenticated_client, statement, account, user):
        start_session(statement_id=statement.id, account=account, user=user)
        url = reverse('reconciliation:session-list')
        response = authenticated_client.post(url, {'statement': str(statement.id)})

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_foreign_statement(self, other_client, other_account, statement):
        url = reverse('reconciliation:session-list')
        response = other_client.post(url, {'statement': str(statement.id)})

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_complete_reconciled(self, authenticated_client, statement, account, user, matching_records):
        auto_match_statement(statement_id=statement.id, account=account)
        session = start_session(statement_id=statement.id, account=account, user=user)
        url = reverse('reconciliation:session-complete', kwargs={'pk': session.id})
        response = authenticated_client.post(url, {'notes': 'All good'})

        assert response.status_code == status.HTTP_200_OK
        assert response.data['status'] == 'completed'
        assert response.data['discrepancies'] == []
        statement.refresh_from_db()
        assert statement.status == 'reconciled'

    def test_complete_with_discrepancy(self, authenticated_client, statement, account, user, record):
        record('Fuel', '70.00', 'expense', date(2024, 3, 4))
        session = start_session(statement_id=statement.id, account=account, user=user)
        url = reverse('reconciliation:session-complete', kwargs={'pk': session.id})
        response = authenticated_client.post(url)

        types = [item['discrepancy_type'] for item in response.data['discrepancies']]
        assert types.count('missing_app_transaction') == 2
        assert types.count('missing_bank_transaction') == 1
        statement.refresh_from_db()
        assert statement.status == 'discrepancy'

    def test_abandon(self, authenticated_client, statement, account, user):
        session = start_session(statement_id=statement.id, account=account, user=user)
        url = reverse('reconciliation:session-abandon', kwargs={'pk': session.id})

        response = authenticated_client.post(url)
        assert response.data['status'] == 'abandoned'

        response = authenticated_client.post(url)
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert ReconciliationSession.objects.get(id=session.id).status == 'abandoned'
