"""
Tests for transactions services.

These tests verify the business logic in the services layer,
independent of the HTTP layer.
"""

from datetime import date
from decimal import Decimal

import pytest

from apps.transactions.models import Transaction
from apps.transactions.services import (
    parse_transactions_csv,
    bulk_create_transactions,
    summarize_transactions,
    BulkUploadError,
)


class TestParseTransactionsCsv:

    def test_header_aliases_and_formats(self):
        content = (
            "\ufeffDate,Description,Category,Amount,Type,Payment_Source\n"
            "01/03/2024,Fuel for van,Transport,₦12500,Expense,Cash\n"
            "2024/03/02,Invoice 7,Sales,$300.50,INCOME,Bank Transfer\n"
        )
        rows, errors = parse_transactions_csv(content)

        assert errors == []
        assert rows[0]['date'] == date(2024, 3, 1)
        assert rows[0]['amount'] == Decimal('12500')
        assert rows[0]['type'] == 'expense'
        assert rows[1]['date'] == date(2024, 3, 2)
        assert rows[1]['amount'] == Decimal('300.50')
        assert rows[1]['notes'] == ''

    def test_missing_columns(self):
        rows, errors = parse_transactions_csv("date,description,amount\n2024-03-01,Fuel,10\n")

        assert rows == []
        assert {error['field'] for error in errors} == {'category', 'type', 'payment_source'}
        assert all(error['row'] == 1 for error in errors)

    def test_empty_file(self):
        rows, errors = parse_transactions_csv('')

        assert rows == []
        assert errors[0]['message'] == 'File is empty'

    def test_blank_lines_skipped(self):
        content = (
            "date,description,category,amount,type,payment source\n"
            "\n"
            "2024-03-01,Fuel for van,Transport,10,expense,Cash\n"
            ",,,,,\n"
        )
        rows, errors = parse_transactions_csv(content)

        assert errors == []
        assert len(rows) == 1

    def test_bad_type_reported_per_row(self):
        content = (
            "date,description,category,amount,type,payment source\n"
            "2024-03-01,Fuel for van,Transport,10,transfer,Cash\n"
        )
        rows, errors = parse_transactions_csv(content)

        assert rows == []
        assert errors == [{'row': 2, 'field': 'type', 'message': errors[0]['message']}]


@pytest.mark.django_db
class TestBulkCreateTransactions:

    def test_all_or_nothing(self, account, user):
        content = (
            "date,description,category,amount,type,payment source\n"
            "2024-03-01,Fuel for van,Transport,10,expense,Cash\n"
            "2024-03-02,Broken,Transport,-5,expense,Cash\n"
        )
        with pytest.raises(BulkUploadError) as exc_info:
            bulk_create_transactions(account=account, user=user, content=content)

        assert exc_info.value.errors[0]['field'] == 'amount'
        assert Transaction.objects.filter(account=account).count() == 0

    def test_header_only_is_error(self, account, user):
        with pytest.raises(BulkUploadError):
            bulk_create_transactions(
                account=account,
                user=user,
                content="date,description,category,amount,type,payment source\n",
            )

    def test_creates_rows(self, account, user):
        content = (
            "date,description,category,amount,type,payment source\n"
            "2024-03-01,Fuel for van,Transport,10,expense,Cash\n"
        )
        created = bulk_create_transactions(account=account, user=user, content=content)

        assert len(created) == 1
        txn = Transaction.objects.get(account=account)
        assert txn.created_by == user


@pytest.mark.django_db
class TestSummarizeTransactions:

    def test_date_range(self, account, make_transaction):
        make_transaction(type='income', amount=Decimal('100.00'), date=date(2024, 3, 1))
        make_transaction(type='income', amount=Decimal('900.00'), date=date(2024, 4, 1))
        make_transaction(type='expense', amount=Decimal('40.00'), date=date(2024, 3, 15))

        data = summarize_transactions(
            account=account,
            date_from=date(2024, 3, 1),
            date_to=date(2024, 3, 31),
        )

        assert data['total_income'] == Decimal('100.00')
        assert data['total_expense'] == Decimal('40.00')
        assert data['net'] == Decimal('60.00')
        assert data['count'] == 2
