"""
Reports Module
==============

Read-only financial reports built from an account's transactions and
invoices.

Classes:
    ReportQueries: Static methods for each report.

Key Features:
    - Profit and loss by category
    - Cash flow with opening / closing balance and monthly breakdown
    - Expense analysis by category and payment source
    - Weekly summary used for the Monday email

Example:
    Building a P&L for March::

        from apps.reports.reports import ReportQueries

        report = ReportQueries.profit_and_loss(
            account=account,
            start_date=date(2024, 3, 1),
            end_date=date(2024, 3, 31),
        )
        print(f"Net profit: {report['net_profit']}")

Note:
    Nothing here writes to the database. All methods return plain
    dictionaries and lists, ready for the response serializers.
"""

from datetime import date, timedelta
from decimal import Decimal, ROUND_HALF_UP

from django.db.models import Count, DecimalField, Q, Sum
from django.db.models.functions import Coalesce, TruncMonth

from apps.invoices.models import Invoice, InvoiceStatus
from apps.transactions.models import Transaction, TransactionType

ZERO = Decimal('0.00')
TOP_CATEGORY_LIMIT = 3


def _percent(part, whole) -> Decimal:
    if not whole:
        return ZERO
    return (Decimal(part) / Decimal(whole) * 100).quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)


def _sum(queryset) -> Decimal:
    return queryset.aggregate(
        total=Coalesce(Sum('amount'), ZERO, output_field=DecimalField())
    )['total']


def _by_field(queryset, field):
    """Totals and counts grouped by ``field``, largest total first."""
    rows = (
        queryset.order_by()
        .values(field)
        .annotate(total=Sum('amount'), count=Count('id'))
        .order_by('-total', field)
    )
    return [
        {'name': row[field] or 'Uncategorized', 'total': row['total'], 'count': row['count']}
        for row in rows
    ]


class ReportQueries:
    """
    Aggregate queries behind the reports endpoints.

    Methods:
        profit_and_loss: Income and expenses by category with net profit.
        cash_flow: Money in and out, monthly, between two balances.
        expense_report: Where the money went.
        weekly_summary: Last seven days at a glance.

    Note:
        ``start_date`` and ``end_date`` are inclusive.
    """

    @staticmethod
    def profit_and_loss(account, start_date, end_date):
        """
        Profit and loss statement for a period.

        Args:
            account (Account): Account to report on.
            start_date (date): First day of the period.
            end_date (date): Last day of the period.

        Returns:
            dict: A dictionary containing:
                - income_by_category (list): ``{name, total, count}`` rows.
                - expenses_by_category (list): ``{name, total, count}`` rows.
                - total_income (Decimal): Sum of income.
                - total_expenses (Decimal): Sum of expenses.
                - net_profit (Decimal): Income minus expenses.
                - profit_margin (Decimal): Net profit as % of income,
                  0 when there is no income.
                - period_start / period_end (date): The period.
        """
        transactions = Transaction.objects.filter(
            account=account,
            date__gte=start_date,
            date__lte=end_date,
        )
        income = transactions.filter(type=TransactionType.INCOME)
        expenses = transactions.filter(type=TransactionType.EXPENSE)

        total_income = _sum(income)
        total_expenses = _sum(expenses)
        net_profit = total_income - total_expenses

        return {
            'income_by_category': _by_field(income, 'category'),
            'expenses_by_category': _by_field(expenses, 'category'),
            'total_income': total_income,
            'total_expenses': total_expenses,
            'net_profit': net_profit,
            'profit_margin': _percent(net_profit, total_income),
            'period_start': start_date,
            'period_end': end_date,
        }

    @staticmethod
    def cash_flow(account, start_date, end_date):
        """
        Cash flow statement for a period.

        The starting balance is the net of every transaction before
        ``start_date``; the ending balance adds the period's net flow.

        Returns:
            dict: A dictionary containing:
                - starting_balance (Decimal)
                - cash_in_by_category / cash_out_by_category (list)
                - total_cash_in / total_cash_out / net_cash_flow (Decimal)
                - monthly (list): ``{month: 'YYYY-MM', cash_in, cash_out,
                  net_flow}`` for each month with activity, oldest first.
                - ending_balance (Decimal)
                - period_start / period_end (date)
        """
        all_transactions = Transaction.objects.filter(account=account)

        before = all_transactions.filter(date__lt=start_date)
        starting_balance = (
            _sum(before.filter(type=TransactionType.INCOME))
            - _sum(before.filter(type=TransactionType.EXPENSE))
        )

        period = all_transactions.filter(date__gte=start_date, date__lte=end_date)
        cash_in = period.filter(type=TransactionType.INCOME)
        cash_out = period.filter(type=TransactionType.EXPENSE)
        total_cash_in = _sum(cash_in)
        total_cash_out = _sum(cash_out)
        net_cash_flow = total_cash_in - total_cash_out

        monthly_rows = (
            period.order_by()
            .annotate(month=TruncMonth('date'))
            .values('month')
            .annotate(
                cash_in=Coalesce(
                    Sum('amount', filter=Q(type=TransactionType.INCOME)),
                    ZERO,
                    output_field=DecimalField(),
                ),
                cash_out=Coalesce(
                    Sum('amount', filter=Q(type=TransactionType.EXPENSE)),
                    ZERO,
                    output_field=DecimalField(),
                ),
            )
            .order_by('month')
        )
        monthly = [
            {
                'month': row['month'].strftime('%Y-%m'),
                'cash_in': row['cash_in'],
                'cash_out': row['cash_out'],
                'net_flow': row['cash_in'] - row['cash_out'],
            }
            for row in monthly_rows
        ]

        return {
            'starting_balance': starting_balance,
            'cash_in_by_category': _by_field(cash_in, 'category'),
            'cash_out_by_category': _by_field(cash_out, 'category'),
            'total_cash_in': total_cash_in,
            'total_cash_out': total_cash_out,
            'net_cash_flow': net_cash_flow,
            'monthly': monthly,
            'ending_balance': starting_balance + net_cash_flow,
            'period_start': start_date,
            'period_end': end_date,
        }

    @staticmethod
    def expense_report(account, start_date, end_date):
        """
        Expense breakdown for a period.

        Returns:
            dict: A dictionary containing:
                - total_expenses (Decimal)
                - count (int): Number of expense transactions.
                - average (Decimal): Mean expense, 0 when there are none.
                - by_category (list): ``{name, total, count, percentage}``.
                - by_payment_source (list): ``{name, total, count, percentage}``.
                - period_start / period_end (date)
        """
        expenses = Transaction.objects.filter(
            account=account,
            type=TransactionType.EXPENSE,
            date__gte=start_date,
            date__lte=end_date,
        )
        total = _sum(expenses)
        count = expenses.count()

        by_category = _by_field(expenses, 'category')
        by_source = _by_field(expenses, 'payment_source')
        for row in by_category + by_source:
            row['percentage'] = _percent(row['total'], total)

        average = (total / count).quantize(Decimal('0.01'), rounding=ROUND_HALF_UP) if count else ZERO

        return {
            'total_expenses': total,
            'count': count,
            'average': average,
            'by_category': by_category,
            'by_payment_source': by_source,
            'period_start': start_date,
            'period_end': end_date,
        }

    @staticmethod
    def weekly_summary(account, end_date=None):
        """
        The seven days ending on ``end_date`` (default today).

        Returns:
            dict: A dictionary containing:
                - week_start / week_end (date)
                - total_income / total_expenses / net_cash_flow (Decimal)
                - transaction_count (int)
                - top_categories (list): Up to three expense categories,
                  ``{name, total, percentage}``.
                - overdue_invoices (int): Open invoices past due on
                  ``end_date``.
        """
        end_date = end_date or date.today()
        start_date = end_date - timedelta(days=6)

        week = Transaction.objects.filter(
            account=account,
            date__gte=start_date,
            date__lte=end_date,
        )
        expenses = week.filter(type=TransactionType.EXPENSE)
        total_income = _sum(week.filter(type=TransactionType.INCOME))
        total_expenses = _sum(expenses)

        top_categories = [
            {
                'name': row['name'],
                'total': row['total'],
                'percentage': _percent(row['total'], total_expenses),
            }
            for row in _by_field(expenses, 'category')[:TOP_CATEGORY_LIMIT]
        ]

        overdue_invoices = Invoice.objects.filter(
            account=account,
            status__in=[InvoiceStatus.SENT, InvoiceStatus.OVERDUE],
            due_date__lt=end_date,
        ).count()

        return {
            'week_start': start_date,
            'week_end': end_date,
            'total_income': total_income,
            'total_expenses': total_expenses,
            'net_cash_flow': total_income - total_expenses,
            'transaction_count': week.count(),
            'top_categories': top_categories,
            'overdue_invoices': overdue_invoices,
        }
