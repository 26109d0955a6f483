"""Transaction queries and receipt storage."""

from datetime import date
from decimal import Decimal
from typing import Optional

from django.db import transaction
from django.db.models import Count, Q, Sum

from apps.transactions.models import Transaction, TransactionType

from .exceptions import TransactionNotFoundError


def summarize_transactions(
    *,
    account,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None
) -> dict:
    """
    Total income, total expense and net for an account over a date range.

    Returns:
        Dict with total_income, total_expense, net, count
    """
    queryset = Transaction.objects.filter(account=account)
    if date_from:
        queryset = queryset.filter(date__gte=date_from)
    if date_to:
        queryset = queryset.filter(date__lte=date_to)

    totals = queryset.aggregate(
        total_income=Sum('amount', filter=Q(type=TransactionType.INCOME)),
        total_expense=Sum('amount', filter=Q(type=TransactionType.EXPENSE)),
        count=Count('id'),
    )
    income = totals['total_income'] or Decimal('0.00')
    expense = totals['total_expense'] or Decimal('0.00')

    return {
        'total_income': income,
        'total_expense': expense,
        'net': income - expense,
        'count': totals['count'],
    }


@transaction.atomic
def attach_receipt(*, transaction_id, account, receipt) -> Transaction:
    """
    Store an uploaded receipt file on a transaction, replacing any old one.

    Raises:
        TransactionNotFoundError: If the transaction is not in the account
    """
    try:
        txn = Transaction.objects.select_for_update().get(id=transaction_id, account=account)
    except Transaction.DoesNotExist:
        raise TransactionNotFoundError(f"Transaction with ID {transaction_id} not found")

    if txn.receipt:
        txn.receipt.delete(save=False)

    txn.receipt = receipt
    txn.save(update_fields=['receipt', 'updated_at'])
    return txn
