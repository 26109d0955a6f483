"""Weekly summary email."""

import logging

from django.conf import settings
from django.core.mail import send_mail

from .reports import ReportQueries

logger = logging.getLogger(__name__)


def _signed(amount, currency):
    sign = '+' if amount >= 0 else '-'
    return f"{sign}{currency} {abs(amount):,.2f}"


def build_weekly_summary_body(account, summary):
    currency = account.currency
    owner = account.owner
    lines = [
        f"Hi {owner.get_display_name()},",
        "",
        f"Here is how {account.name} did from {summary['week_start']:%d %b} to {summary['week_end']:%d %b %Y}:",
        "",
        f"Income: {currency} {summary['total_income']:,.2f}",
        f"Expenses: {currency} {summary['total_expenses']:,.2f}",
        f"Net cash flow: {_signed(summary['net_cash_flow'], currency)}",
        f"Transactions: {summary['transaction_count']}",
    ]
    if summary['top_categories']:
        lines += ["", "Top spending:"]
        for category in summary['top_categories']:
            lines.append(
                f"  {category['name']}: {currency} {category['total']:,.2f} ({category['percentage']}%)"
            )
    if summary['overdue_invoices']:
        lines += ["", f"You have {summary['overdue_invoices']} overdue invoice(s)."]
    lines += ["", f"Open your dashboard: {settings.FRONTEND_URL}/dashboard"]
    return "\n".join(lines)


def send_weekly_summary(account, end_date=None):
    """
    Email the week's summary to the account owner.

    Returns:
        The summary dict that was sent
    """
    summary = ReportQueries.weekly_summary(account, end_date=end_date)
    send_mail(
        subject=f"Your weekly summary for {account.name}",
        message=build_weekly_summary_body(account, summary),
        from_email=settings.DEFAULT_FROM_EMAIL,
        recipient_list=[account.owner.email],
    )
    logger.info("Sent weekly summary for account %s to %s", account.id, account.owner.email)
    return summary
