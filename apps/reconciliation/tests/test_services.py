"""
Tests for reconciliation services.

These tests verify the business logic in the services layer,
independent of the HTTP layer.
"""

from datetime import date
from decimal import Decimal

import pytest

from apps.reconciliation.models import (
    BankTransaction,
    DiscrepancyType,
    MatchStatus,
    SessionStatus,
    StatementStatus,
)
from apps.reconciliation.services import (
    abandon_session,
    auto_match_statement,
    complete_session,
    find_match_candidates,
    ignore,
    import_statement,
    manual_match,
    match_confidence,
    parse_statement_csv,
    reconciliation_summary,
    start_session,
    unmatch,
    AlreadyMatchedError,
    MatchTargetNotFoundError,
    SessionStateError,
    StatementNotFoundError,
    StatementParseError,
)
from apps.transactions.models import Transaction


# =============================================================================
# Parsing and Import Tests
# =============================================================================

class TestParseStatementCsv:

    def test_metadata_and_rows(self):
        content = (
            "\ufeffStatement date: 2024-03-31\n"
            "Period start: 2024-03-01\n"
            "Period end: 2024-03-31\n"
            "Opening balance: 150000.00\n"
            "date,description,amount,type\n"
            "2024-03-02,POS Purchase,-4500.00,debit\n"
            "05/03/2024,\"Transfer, Ada\",\"37,000.00\",Credit Transfer\n"
        )
        parsed = parse_statement_csv(content)

        assert parsed['errors'] == []
        assert parsed['metadata'] == {
            'statement_date': date(2024, 3, 31),
            'period_start': date(2024, 3, 1),
            'period_end': date(2024, 3, 31),
            'opening_balance': Decimal('150000.00'),
        }
        first, second = parsed['rows']
        assert first['amount'] == Decimal('4500.00')
        assert first['transaction_type'] == 'debit'
        assert second['transaction_date'] == date(2024, 3, 5)
        assert second['description'] == 'Transfer, Ada'
        assert second['amount'] == Decimal('37000.00')
        assert second['transaction_type'] == 'credit'

    def test_sign_decides_without_type(self):
        parsed = parse_statement_csv("2024-03-02,Fee,-50\n2024-03-03,Refund,20\n")

        assert [row['transaction_type'] for row in parsed['rows']] == ['debit', 'credit']

    def test_deposit_word_is_credit(self):
        parsed = parse_statement_csv("2024-03-02,Cash in,200,Cash Deposit\n")

        assert parsed['rows'][0]['transaction_type'] == 'credit'

    def test_errors_reported_per_line(self):
        parsed = parse_statement_csv(
            "date,description,amount\n"
            "yesterday,Fee,-50\n"
            "2024-03-03,Refund,lots\n"
            "2024-03-04,Short\n"
            "2024-03-05,,10\n"
            "Opening balance: plenty\n"
        )

        assert [(error['row'], error['field']) for error in parsed['errors']] == [
            (2, 'date'),
            (3, 'amount'),
            (4, 'line'),
            (5, 'description'),
            (6, 'metadata'),
        ]
        assert parsed['rows'] == []

    def test_non_finite_amount(self):
        parsed = parse_statement_csv("2024-03-02,Fee,NaN\n")

        assert parsed['errors'][0]['field'] == 'amount'

    def test_unquoted_thousands_rejected(self):
        """An unquoted comma in the amount shifts the columns."""
        parsed = parse_statement_csv("2024-03-02,Big,1,500.00,credit\n")

        assert parsed['rows'] == []
        assert parsed['errors'] == [{
            'row': 1,
            'field': 'line',
            'message': 'Too many columns; quote amounts that contain commas',
        }]

    @pytest.mark.parametrize('type_text', ['500.00', 'pending', 'Credited'])
    def test_unknown_type_rejected(self, type_text):
        parsed = parse_statement_csv(f"2024-03-02,Big,1,{type_text}\n")

        assert parsed['rows'] == []
        assert parsed['errors'][0]['field'] == 'type'

    @pytest.mark.parametrize('type_text, expected', [
        ('DR', 'debit'),
        ('CR', 'credit'),
        ('ATM Withdrawal', 'debit'),
        ('Bank charge', 'debit'),
        ('Refund', 'credit'),
    ])
    def test_type_words(self, type_text, expected):
        parsed = parse_statement_csv(f"2024-03-02,Line,10,{type_text}\n")

        assert parsed['rows'][0]['transaction_type'] == expected

    @pytest.mark.django_db
    def test_bad_type_fails_import(self, account):
        with pytest.raises(StatementParseError) as exc_info:
            import_statement(account=account, content="2024-03-02,Big,1,500.00\n")

        assert exc_info.value.errors[0]['field'] == 'type'


@pytest.mark.django_db
class TestImportStatement:

    def test_creates_statement_and_lines(self, statement, account):
        assert statement.account == account
        assert statement.opening_balance == Decimal('1000.00')
        assert statement.closing_balance == Decimal('1400.00')
        assert statement.period_start == date(2024, 3, 2)
        assert statement.period_end == date(2024, 3, 5)
        assert statement.statement_date == date(2024, 3, 5)
        assert statement.file_name == 'march.csv'
        assert statement.status == StatementStatus.PENDING
        assert statement.bank_transactions.count() == 2
        assert set(statement.bank_transactions.values_list('match_status', flat=True)) == {'unmatched'}

    def test_overrides_win(self, account):
        statement = import_statement(
            account=account,
            content="Opening balance: 10.00\n2024-03-02,Fee,-5\n",
            overrides={'opening_balance': Decimal('99.00'), 'period_start': date(2024, 3, 1), 'notes': ''},
        )

        assert statement.opening_balance == Decimal('99.00')
        assert statement.period_start == date(2024, 3, 1)

    def test_all_or_nothing(self, account):
        with pytest.raises(StatementParseError) as exc_info:
            import_statement(account=account, content="2024-03-02,Fee,-5\nbad,Row,1\n")

        assert exc_info.value.errors[0]['row'] == 2
        assert BankTransaction.objects.count() == 0

    def test_empty_statement(self, account):
        with pytest.raises(StatementParseError):
            import_statement(account=account, content="Opening balance: 10.00\n")


# =============================================================================
# Matching Tests
# =============================================================================

class TestMatchConfidence:

    @pytest.mark.parametrize('days,expected', [
        (0, Decimal('1.00')),
        (1, Decimal('0.93')),
        (7, Decimal('0.50')),
        (10, Decimal('0.50')),
    ])
    def test_confidence(self, days, expected):
        assert match_confidence(days) == expected


@pytest.mark.django_db
class TestAutoMatch:

    def test_matches_amount_direction_and_date(self, statement, account, matching_records):
        matched = auto_match_statement(statement_id=statement.id, account=account)

        assert matched == 2
        purchase = statement.bank_transactions.get(description='POS Purchase Shoprite')
        assert purchase.matched_transaction == matching_records['purchase']
        assert purchase.match_status == MatchStatus.MATCHED
        assert purchase.match_confidence == Decimal('0.93')

    def test_wrong_direction_not_matched(self, statement, account, record):
        record('Refund', '100.00', 'income', date(2024, 3, 2))

        assert auto_match_statement(statement_id=statement.id, account=account) == 0

    def test_outside_window_not_matched(self, statement, account, record):
        record('Groceries', '100.00', 'expense', date(2024, 3, 20))

        assert auto_match_statement(statement_id=statement.id, account=account) == 0

    def test_transaction_used_once(self, account, record):
        statement = import_statement(
            account=account,
            content="2024-03-02,Fee,-10\n2024-03-03,Fee,-10\n",
        )
        record('Bank fee', '10.00', 'expense', date(2024, 3, 2))

        assert auto_match_statement(statement_id=statement.id, account=account) == 1

    def test_closest_date_wins(self, statement, account, record):
        far = record('Groceries', '100.00', 'expense', date(2024, 3, 8))
        near = record('Groceries', '100.00', 'expense', date(2024, 3, 1))

        auto_match_statement(statement_id=statement.id, account=account)

        purchase = statement.bank_transactions.get(description='POS Purchase Shoprite')
        assert purchase.matched_transaction == near
        assert purchase.matched_transaction != far

    def test_foreign_statement(self, statement, other_account):
        with pytest.raises(StatementNotFoundError):
            auto_match_statement(statement_id=statement.id, account=other_account)


@pytest.mark.django_db
class TestCandidates:

    def test_amount_or_date(self, statement, record):
        same_amount = record('Groceries', '100.00', 'expense', date(2024, 1, 1))
        near_date = record('Lunch', '35.00', 'expense', date(2024, 3, 4))
        record('Rent', '900.00', 'expense', date(2024, 5, 1))
        line = statement.bank_transactions.get(description='POS Purchase Shoprite')

        candidates = find_match_candidates(bank_transaction=line)

        assert candidates == [same_amount, near_date]

    def test_skips_transactions_linked_elsewhere(self, statement, account, matching_records):
        purchase = statement.bank_transactions.get(description='POS Purchase Shoprite')
        transfer = statement.bank_transactions.get(description='Transfer from Ada')
        manual_match(
            bank_transaction_id=transfer.id,
            transaction_id=matching_records['purchase'].id,
            account=account,
        )

        candidates = find_match_candidates(bank_transaction=purchase)

        assert matching_records['purchase'] not in candidates

    @pytest.mark.parametrize('day, included', [
        (date(2024, 2, 24), True),
        (date(2024, 2, 23), False),
        (date(2024, 3, 9), True),
        (date(2024, 3, 10), False),
    ])
    def test_date_window_edges(self, statement, record, day, included):
        """Lines dated 2024-03-02 take candidates up to seven days either side."""
        candidate = record('Lunch', '35.00', 'expense', day)
        line = statement.bank_transactions.get(description='POS Purchase Shoprite')

        assert (candidate in find_match_candidates(bank_transaction=line)) is included

    @pytest.mark.parametrize('amount, included', [
        ('100.00', True),
        ('100.01', False),
        ('99.99', False),
    ])
    def test_amount_tolerance_edges(self, statement, record, amount, included):
        """Away from the date window only amounts under a cent apart qualify."""
        candidate = record('Groceries', amount, 'expense', date(2024, 6, 1))
        line = statement.bank_transactions.get(description='POS Purchase Shoprite')

        assert (candidate in find_match_candidates(bank_transaction=line)) is included

    def test_capped_at_ten(self, statement, record):
        for offset in range(12):
            record(f'Groceries {offset}', '100.00', 'expense', date(2024, 6, 1 + offset))
        line = statement.bank_transactions.get(description='POS Purchase Shoprite')

        candidates = find_match_candidates(bank_transaction=line)

        assert len(candidates) == 10
        assert [candidate.date for candidate in candidates] == [date(2024, 6, 1 + n) for n in range(10)]

    def test_direction_ignored(self, statement, record):
        """A debit line still lists income of the same amount."""
        income = record('Refund from Shoprite', '100.00', 'income', date(2024, 3, 2))
        line = statement.bank_transactions.get(description='POS Purchase Shoprite')

        assert find_match_candidates(bank_transaction=line) == [income]


@pytest.mark.django_db
class TestManualMatching:

    def test_manual_match(self, statement, account, matching_records):
        line = statement.bank_transactions.get(description='Transfer from Ada')

        line = manual_match(
            bank_transaction_id=line.id,
            transaction_id=matching_records['transfer'].id,
            account=account,
        )

        assert line.match_status == MatchStatus.MANUAL_MATCH
        assert line.match_confidence == Decimal('1.00')

    def test_target_used_elsewhere(self, statement, account, matching_records):
        purchase = statement.bank_transactions.get(description='POS Purchase Shoprite')
        transfer = statement.bank_transactions.get(description='Transfer from Ada')
        manual_match(bank_transaction_id=purchase.id, transaction_id=matching_records['purchase'].id, account=account)

        with pytest.raises(AlreadyMatchedError):
            manual_match(bank_transaction_id=transfer.id, transaction_id=matching_records['purchase'].id, account=account)

    def test_foreign_target(self, statement, account, other_account):
        foreign = Transaction.objects.create(
            account=other_account,
            date=date(2024, 3, 5),
            description='Theirs',
            category='General',
            amount=Decimal('500.00'),
            type='income',
            payment_source='Cash',
        )
        line = statement.bank_transactions.first()

        with pytest.raises(MatchTargetNotFoundError):
            manual_match(bank_transaction_id=line.id, transaction_id=foreign.id, account=account)

    def test_unmatch_and_ignore(self, statement, account, matching_records):
        auto_match_statement(statement_id=statement.id, account=account)
        line = statement.bank_transactions.get(description='Transfer from Ada')

        line = unmatch(bank_transaction_id=line.id, account=account)
        assert line.match_status == MatchStatus.UNMATCHED
        assert line.matched_transaction is None

        line = ignore(bank_transaction_id=line.id, account=account)
        assert line.match_status == MatchStatus.IGNORED


@pytest.mark.django_db
class TestReconciliationSummary:

    def test_balanced_after_matching(self, statement, account, matching_records):
        auto_match_statement(statement_id=statement.id, account=account)

        summary = reconciliation_summary(statement)

        assert summary['matched_transactions'] == 2
        assert summary['unmatched_transactions'] == 0
        assert summary['app_balance'] == Decimal('1400.00')
        assert summary['discrepancy_amount'] == Decimal('0.00')
        assert summary['has_discrepancy'] is False

    def test_unmatched_leaves_difference(self, statement):
        summary = reconciliation_summary(statement)

        assert summary['app_balance'] == Decimal('1000.00')
        assert summary['discrepancy_amount'] == Decimal('400.00')
        assert summary['has_discrepancy'] is True


# =============================================================================
# Session Tests
# =============================================================================

@pytest.mark.django_db
class TestSessions:

    def test_reconciled(self, statement, account, user, matching_records):
        auto_match_statement(statement_id=statement.id, account=account)
        session = start_session(statement_id=statement.id, account=account, user=user)

        session = complete_session(session_id=session.id, account=account, user=user, notes='March done')

        statement.refresh_from_db()
        assert session.status == SessionStatus.COMPLETED
        assert session.discrepancies.count() == 0
        assert statement.status == StatementStatus.RECONCILED
        assert statement.reconciled_by == user

    def test_discrepancies_recorded(self, statement, account, user, record):
        transfer = record('Payment from Ada', '500.00', 'income', date(2024, 3, 5))
        record('Fuel', '70.00', 'expense', date(2024, 3, 4))
        line = statement.bank_transactions.get(description='Transfer from Ada')
        manual_match(bank_transaction_id=line.id, transaction_id=transfer.id, account=account)

        session = start_session(statement_id=statement.id, account=account, user=user)
        session = complete_session(session_id=session.id, account=account, user=user)

        types = sorted(session.discrepancies.values_list('discrepancy_type', flat=True))
        assert types == [DiscrepancyType.MISSING_APP_TRANSACTION, DiscrepancyType.MISSING_BANK_TRANSACTION]
        statement.refresh_from_db()
        assert statement.status == StatementStatus.DISCREPANCY

    def test_amount_and_date_mismatch(self, statement, account, user, record):
        wrong = record('Payment from Ada', '450.00', 'income', date(2024, 2, 20))
        line = statement.bank_transactions.get(description='Transfer from Ada')
        manual_match(bank_transaction_id=line.id, transaction_id=wrong.id, account=account)
        purchase = statement.bank_transactions.get(description='POS Purchase Shoprite')
        ignore(bank_transaction_id=purchase.id, account=account)

        session = start_session(statement_id=statement.id, account=account, user=user)
        session = complete_session(session_id=session.id, account=account, user=user)

        types = set(session.discrepancies.values_list('discrepancy_type', flat=True))
        assert types == {DiscrepancyType.AMOUNT_MISMATCH, DiscrepancyType.DATE_MISMATCH}

    def test_one_open_session(self, statement, account, user):
        start_session(statement_id=statement.id, account=account, user=user)

        with pytest.raises(SessionStateError):
            start_session(statement_id=statement.id, account=account, user=user)

    def test_abandon_then_restart(self, statement, account, user):
        session = start_session(statement_id=statement.id, account=account, user=user)
        abandon_session(session_id=session.id, account=account)

        statement.refresh_from_db()
        assert statement.status == StatementStatus.PENDING
        assert start_session(statement_id=statement.id, account=account, user=user)

    def test_cannot_complete_twice(self, statement, account, user):
        session = start_session(statement_id=statement.id, account=account, user=user)
        complete_session(session_id=session.id, account=account, user=user)

        with pytest.raises(SessionStateError):
            complete_session(session_id=session.id, account=account, user=user)
