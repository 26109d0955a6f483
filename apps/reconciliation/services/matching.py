"""
Matching bank statement lines to recorded transactions.

A bank credit corresponds to an income transaction and a debit to an
expense. Candidate lists are deliberately loose (same amount OR close
date) so a user can pick by hand; automatic matching requires amount,
direction and date to agree.
"""

import logging
from datetime import timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import List
from uuid import UUID

from django.db import transaction
from django.db.models import Q, Sum

from apps.reconciliation.models import (
    BankStatement,
    BankTransaction,
    BankTransactionType,
    MatchStatus,
)
from apps.transactions.models import Transaction, TransactionType

from .exceptions import (
    AlreadyMatchedError,
    BankTransactionNotFoundError,
    MatchTargetNotFoundError,
    StatementNotFoundError,
)

logger = logging.getLogger(__name__)

AMOUNT_TOLERANCE = Decimal('0.01')
DATE_WINDOW_DAYS = 7
CONFIDENCE_FLOOR = Decimal('0.5')
CANDIDATE_LIMIT = 10

MATCHED_STATUSES = (MatchStatus.MATCHED, MatchStatus.MANUAL_MATCH)

DIRECTION = {
    BankTransactionType.CREDIT: TransactionType.INCOME,
    BankTransactionType.DEBIT: TransactionType.EXPENSE,
}


def get_statement(*, statement_id: UUID, account, lock: bool = False) -> BankStatement:
    queryset = BankStatement.objects.all()
    if lock:
        queryset = queryset.select_for_update()
    try:
        return queryset.get(id=statement_id, account=account)
    except BankStatement.DoesNotExist:
        raise StatementNotFoundError(f"Statement with ID {statement_id} not found")


def _get_bank_transaction(bank_transaction_id: UUID, account) -> BankTransaction:
    try:
        return (
            BankTransaction.objects
            .select_for_update()
            .get(id=bank_transaction_id, account=account)
        )
    except BankTransaction.DoesNotExist:
        raise BankTransactionNotFoundError(f"Bank transaction with ID {bank_transaction_id} not found")


def _linked_transaction_ids(exclude_bank_transaction=None):
    linked = BankTransaction.objects.filter(matched_transaction__isnull=False)
    if exclude_bank_transaction is not None:
        linked = linked.exclude(pk=exclude_bank_transaction.pk)
    return linked.values('matched_transaction_id')


def match_confidence(days_apart: int) -> Decimal:
    """1.0 on the same day, falling to a floor of 0.5 at a week apart."""
    confidence = Decimal(1) - Decimal(days_apart) / Decimal(DATE_WINDOW_DAYS * 2)
    return max(CONFIDENCE_FLOOR, confidence).quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)


def find_match_candidates(*, bank_transaction: BankTransaction, limit: int = CANDIDATE_LIMIT) -> List[Transaction]:
    """
    Recorded transactions that could correspond to ``bank_transaction``.

    A transaction qualifies when its amount is within 0.01 of the bank
    amount or its date is within 7 days of the bank date. Transactions
    already linked to another bank line are skipped. Closest amount comes
    first, then closest date.
    """
    amount = bank_transaction.amount
    day = bank_transaction.transaction_date
    window = timedelta(days=DATE_WINDOW_DAYS)

    queryset = (
        Transaction.objects
        .filter(account_id=bank_transaction.account_id)
        .filter(
            Q(amount__gt=amount - AMOUNT_TOLERANCE, amount__lt=amount + AMOUNT_TOLERANCE)
            | Q(date__gte=day - window, date__lte=day + window)
        )
        .exclude(id__in=_linked_transaction_ids(exclude_bank_transaction=bank_transaction))
    )

    candidates = sorted(
        queryset,
        key=lambda txn: (abs(txn.amount - amount), abs((txn.date - day).days), txn.created_at),
    )
    return candidates[:limit]


@transaction.atomic
def auto_match_statement(*, statement_id: UUID, account) -> int:
    """
    Link unmatched statement lines to recorded transactions.

    A line matches a transaction with the same amount (within 0.01), the
    corresponding type and a date at most 7 days away that no other line
    uses. The closest date wins.

    Returns:
        Number of lines matched in this run
    """
    statement = get_statement(statement_id=statement_id, account=account, lock=True)
    window = timedelta(days=DATE_WINDOW_DAYS)
    used = set(
        BankTransaction.objects
        .filter(matched_transaction__isnull=False)
        .values_list('matched_transaction_id', flat=True)
    )

    matched = 0
    lines = statement.bank_transactions.select_for_update().filter(match_status=MatchStatus.UNMATCHED)
    for line in lines:
        day = line.transaction_date
        options = [
            txn for txn in Transaction.objects.filter(
                account=account,
                type=DIRECTION[line.transaction_type],
                amount__gt=line.amount - AMOUNT_TOLERANCE,
                amount__lt=line.amount + AMOUNT_TOLERANCE,
                date__gte=day - window,
                date__lte=day + window,
            )
            if txn.id not in used
        ]
        if not options:
            continue

        best = min(options, key=lambda txn: (abs((txn.date - day).days), txn.created_at))
        line.matched_transaction = best
        line.match_status = MatchStatus.MATCHED
        line.match_confidence = match_confidence(abs((best.date - day).days))
        line.save(update_fields=['matched_transaction', 'match_status', 'match_confidence'])
        used.add(best.id)
        matched += 1

    logger.info("Auto-matched %d line(s) on statement %s", matched, statement.id)
    return matched


@transaction.atomic
def manual_match(*, bank_transaction_id: UUID, transaction_id: UUID, account) -> BankTransaction:
    """
    Link a statement line to a transaction chosen by the user.

    Raises:
        BankTransactionNotFoundError: If the line is not in the account
        MatchTargetNotFoundError: If the transaction is not in the account
        AlreadyMatchedError: If another line already uses the transaction
    """
    line = _get_bank_transaction(bank_transaction_id, account)
    try:
        target = Transaction.objects.get(id=transaction_id, account=account)
    except Transaction.DoesNotExist:
        raise MatchTargetNotFoundError(f"Transaction with ID {transaction_id} not found")

    if BankTransaction.objects.filter(matched_transaction=target).exclude(pk=line.pk).exists():
        raise AlreadyMatchedError("Transaction is already matched to another bank transaction")

    line.matched_transaction = target
    line.match_status = MatchStatus.MANUAL_MATCH
    line.match_confidence = Decimal('1.00')
    line.save(update_fields=['matched_transaction', 'match_status', 'match_confidence'])
    return line


@transaction.atomic
def unmatch(*, bank_transaction_id: UUID, account) -> BankTransaction:
    """Clear a line's match."""
    line = _get_bank_transaction(bank_transaction_id, account)
    line.matched_transaction = None
    line.match_status = MatchStatus.UNMATCHED
    line.match_confidence = Decimal('0.00')
    line.save(update_fields=['matched_transaction', 'match_status', 'match_confidence'])
    return line


@transaction.atomic
def ignore(*, bank_transaction_id: UUID, account) -> BankTransaction:
    """Exclude a line (fees, transfers between own accounts) from matching."""
    line = _get_bank_transaction(bank_transaction_id, account)
    line.matched_transaction = None
    line.match_status = MatchStatus.IGNORED
    line.match_confidence = Decimal('0.00')
    line.save(update_fields=['matched_transaction', 'match_status', 'match_confidence'])
    return line


def reconciliation_summary(statement: BankStatement) -> dict:
    """
    Counts and balances for a statement.

    The app balance is the opening balance moved by every matched
    transaction; any difference from the closing balance above 0.01 is a
    discrepancy.
    """
    lines = statement.bank_transactions.all()
    counts = {
        status: lines.filter(match_status=status).count()
        for status in MatchStatus.values
    }

    matched = Transaction.objects.filter(
        bank_matches__statement=statement,
        bank_matches__match_status__in=MATCHED_STATUSES,
    )
    income = matched.filter(type=TransactionType.INCOME).aggregate(total=Sum('amount'))['total'] or Decimal('0.00')
    expense = matched.filter(type=TransactionType.EXPENSE).aggregate(total=Sum('amount'))['total'] or Decimal('0.00')

    app_balance = statement.opening_balance + income - expense
    discrepancy = statement.closing_balance - app_balance

    return {
        'total_bank_transactions': sum(counts.values()),
        'matched_transactions': counts[MatchStatus.MATCHED] + counts[MatchStatus.MANUAL_MATCH],
        'unmatched_transactions': counts[MatchStatus.UNMATCHED],
        'ignored_transactions': counts[MatchStatus.IGNORED],
        'bank_balance': statement.closing_balance,
        'app_balance': app_balance,
        'discrepancy_amount': discrepancy,
        'has_discrepancy': abs(discrepancy) > AMOUNT_TOLERANCE,
    }
