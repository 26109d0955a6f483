"""
Budget management service.

Spent/remaining figures and rolling a recurring budget into its next period.
"""

import calendar
import logging
from datetime import date, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Tuple
from uuid import UUID

from django.db import transaction

from apps.budgets.models import Budget, RecurringType

from .exceptions import BudgetNotFoundError, BudgetNotRecurringError

logger = logging.getLogger(__name__)

MONTHS_PER_STEP = {
    RecurringType.MONTHLY: 1,
    RecurringType.QUARTERLY: 3,
    RecurringType.YEARLY: 12,
}


def _add_months(day: date, months: int) -> date:
    """Shift by whole months, clamping to the last day of short months."""
    month_index = day.month - 1 + months
    year = day.year + month_index // 12
    month = month_index % 12 + 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last_day))


def next_period(*, end_date: date, recurring_type: str) -> Tuple[date, date]:
    """
    Return (start, end) of the period following one that ends on ``end_date``.

    The next period starts the day after ``end_date`` and covers one
    recurrence step, ending the day before the following step begins.
    A monthly budget for 1-31 January rolls to 1-28 (or 29) February.
    """
    start = end_date + timedelta(days=1)
    if recurring_type == RecurringType.WEEKLY:
        return start, start + timedelta(days=6)

    months = MONTHS_PER_STEP[recurring_type]
    return start, _add_months(start, months) - timedelta(days=1)


def budget_progress(budget: Budget, spent=None) -> dict:
    """
    Spent, remaining and percent used for a budget.

    ``spent`` may be passed in when it was already annotated on a queryset.
    """
    if spent is None:
        spent = budget.get_spent()
    remaining = budget.amount - spent
    if budget.amount > 0:
        percent = (spent / budget.amount * 100).quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)
    else:
        percent = Decimal('0.00')

    return {
        'spent': spent,
        'remaining': remaining,
        'percent_used': percent,
        'is_over_budget': spent > budget.amount,
    }


@transaction.atomic
def create_next_recurring_budget(*, budget_id: UUID, account) -> Budget:
    """
    Create the budget for the period after ``budget``.

    Copies name, amount, categories and recurrence, and links the new budget
    back through ``parent_budget``. Calling it twice for the same budget
    returns the budget created the first time.

    Raises:
        BudgetNotFoundError: If the budget is not in the account
        BudgetNotRecurringError: If the budget does not repeat
    """
    try:
        budget = Budget.objects.select_for_update().get(id=budget_id, account=account)
    except Budget.DoesNotExist:
        raise BudgetNotFoundError(f"Budget with ID {budget_id} not found")

    if not budget.is_recurring or not budget.recurring_type:
        raise BudgetNotRecurringError("Only recurring budgets have a next period")

    start, end = next_period(end_date=budget.end_date, recurring_type=budget.recurring_type)

    existing = budget.child_budgets.filter(start_date=start).first()
    if existing is not None:
        return existing

    child = Budget.objects.create(
        account=budget.account,
        name=budget.name,
        amount=budget.amount,
        start_date=start,
        end_date=end,
        is_recurring=True,
        recurring_type=budget.recurring_type,
        parent_budget=budget,
    )
    child.categories.set(budget.categories.all())

    logger.info("Rolled budget %s into %s (%s - %s)", budget.id, child.id, start, end)
    return child
