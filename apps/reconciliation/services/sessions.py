"""
Reconciliation sessions.

A session is one pass over a statement. Completing it freezes the counts,
records every difference found as a ReconciliationDiscrepancy and marks
the statement reconciled or in discrepancy.
"""

import logging
from uuid import UUID

from django.db import transaction
from django.utils import timezone

from apps.reconciliation.models import (
    BankTransaction,
    DiscrepancyType,
    MatchStatus,
    ReconciliationDiscrepancy,
    ReconciliationSession,
    SessionStatus,
    StatementStatus,
)
from apps.transactions.models import Transaction

from .exceptions import SessionNotFoundError, SessionStateError
from .matching import (
    AMOUNT_TOLERANCE,
    DATE_WINDOW_DAYS,
    MATCHED_STATUSES,
    get_statement,
    reconciliation_summary,
)

logger = logging.getLogger(__name__)


def _get_session(session_id: UUID, account) -> ReconciliationSession:
    try:
        return (
            ReconciliationSession.objects
            .select_for_update()
            .select_related('statement')
            .get(id=session_id, account=account)
        )
    except ReconciliationSession.DoesNotExist:
        raise SessionNotFoundError(f"Session with ID {session_id} not found")


@transaction.atomic
def start_session(*, statement_id: UUID, account, user) -> ReconciliationSession:
    """
    Open a session on a statement.

    Raises:
        StatementNotFoundError: If the statement is not in the account
        SessionStateError: If the statement already has a session in progress
    """
    statement = get_statement(statement_id=statement_id, account=account, lock=True)
    if statement.sessions.filter(status=SessionStatus.IN_PROGRESS).exists():
        raise SessionStateError("This statement already has a reconciliation in progress")

    summary = reconciliation_summary(statement)
    session = ReconciliationSession.objects.create(
        statement=statement,
        account=account,
        total_transactions=summary['total_bank_transactions'],
        matched_transactions=summary['matched_transactions'],
        unmatched_transactions=summary['unmatched_transactions'],
        discrepancy_amount=summary['discrepancy_amount'],
        created_by=user,
    )
    logger.info("Started reconciliation session %s on statement %s", session.id, statement.id)
    return session


def _collect_discrepancies(session: ReconciliationSession):
    statement = session.statement
    found = []

    for line in statement.bank_transactions.select_related('matched_transaction'):
        if line.match_status == MatchStatus.UNMATCHED:
            found.append(ReconciliationDiscrepancy(
                session=session,
                discrepancy_type=DiscrepancyType.MISSING_APP_TRANSACTION,
                bank_transaction=line,
                expected_amount=line.amount,
                description=f"No recorded transaction for '{line.description}' on {line.transaction_date}"[:255],
            ))
            continue

        if line.match_status not in MATCHED_STATUSES or line.matched_transaction is None:
            continue

        recorded = line.matched_transaction
        if abs(recorded.amount - line.amount) > AMOUNT_TOLERANCE:
            found.append(ReconciliationDiscrepancy(
                session=session,
                discrepancy_type=DiscrepancyType.AMOUNT_MISMATCH,
                bank_transaction=line,
                transaction=recorded,
                expected_amount=line.amount,
                actual_amount=recorded.amount,
                description=f"Bank shows {line.amount}, recorded {recorded.amount}",
            ))
        if abs((recorded.date - line.transaction_date).days) > DATE_WINDOW_DAYS:
            found.append(ReconciliationDiscrepancy(
                session=session,
                discrepancy_type=DiscrepancyType.DATE_MISMATCH,
                bank_transaction=line,
                transaction=recorded,
                description=f"Bank date {line.transaction_date}, recorded {recorded.date}",
            ))

    # Recorded in the period but absent from the statement
    linked = BankTransaction.objects.filter(
        matched_transaction__isnull=False
    ).values('matched_transaction_id')
    missing_from_bank = Transaction.objects.filter(
        account=session.account,
        date__gte=statement.period_start,
        date__lte=statement.period_end,
    ).exclude(id__in=linked)
    for recorded in missing_from_bank:
        found.append(ReconciliationDiscrepancy(
            session=session,
            discrepancy_type=DiscrepancyType.MISSING_BANK_TRANSACTION,
            transaction=recorded,
            actual_amount=recorded.amount,
            description=f"'{recorded.description}' on {recorded.date} is not on the statement"[:255],
        ))

    return found


@transaction.atomic
def complete_session(*, session_id: UUID, account, user, notes: str = '') -> ReconciliationSession:
    """
    Finish a session and settle the statement's status.

    The statement is ``reconciled`` when every line is matched or ignored
    and the balances agree, otherwise ``discrepancy``.

    Raises:
        SessionNotFoundError: If the session is not in the account
        SessionStateError: If the session is not in progress
    """
    session = _get_session(session_id, account)
    if session.status != SessionStatus.IN_PROGRESS:
        raise SessionStateError(f"Session is already {session.status}")

    statement = session.statement
    summary = reconciliation_summary(statement)

    discrepancies = _collect_discrepancies(session)
    ReconciliationDiscrepancy.objects.bulk_create(discrepancies)

    now = timezone.now()
    session.status = SessionStatus.COMPLETED
    session.total_transactions = summary['total_bank_transactions']
    session.matched_transactions = summary['matched_transactions']
    session.unmatched_transactions = summary['unmatched_transactions']
    session.discrepancy_amount = summary['discrepancy_amount']
    session.notes = notes
    session.completed_at = now
    session.save()

    balanced = not summary['has_discrepancy'] and summary['unmatched_transactions'] == 0
    statement.status = StatementStatus.RECONCILED if balanced else StatementStatus.DISCREPANCY
    statement.reconciled_at = now
    statement.reconciled_by = user
    statement.save(update_fields=['status', 'reconciled_at', 'reconciled_by', 'updated_at'])

    logger.info(
        "Completed session %s: statement %s is %s with %d discrepancy record(s)",
        session.id, statement.id, statement.status, len(discrepancies)
    )
    return session


@transaction.atomic
def abandon_session(*, session_id: UUID, account) -> ReconciliationSession:
    """
    Close a session without touching the statement.

    Raises:
        SessionNotFoundError: If the session is not in the account
        SessionStateError: If the session is not in progress
    """
    session = _get_session(session_id, account)
    if session.status != SessionStatus.IN_PROGRESS:
        raise SessionStateError(f"Session is already {session.status}")

    session.status = SessionStatus.ABANDONED
    session.completed_at = timezone.now()
    session.save(update_fields=['status', 'completed_at'])
    return session
