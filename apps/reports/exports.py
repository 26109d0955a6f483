"""
Report Exports
==============

Downloadable versions of the profit and loss, cash flow and expense
reports.

Classes:
    ReportExporter: Flattens a report into table rows and renders them
        as CSV or PDF.

Example:
    Exporting March's expenses as a PDF::

        from apps.reports.exports import ReportExporter

        content = ReportExporter.export(
            account, 'expenses', date(2024, 3, 1), date(2024, 3, 31), 'pdf'
        )

Note:
    Every export has the same shape: a title, the period, a header row and
    one row per line. Amounts are written with two decimals and no currency
    symbol in CSV so spreadsheets can sum them.
"""

import csv
import io
from datetime import date
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from apps.transactions.models import Transaction, TransactionType

from .reports import ReportQueries

REPORT_TYPES = ('profit-loss', 'cash-flow', 'expenses')

CONTENT_TYPES = {
    'csv': 'text/csv',
    'pdf': 'application/pdf',
}


def _money(amount) -> str:
    return f"{amount:.2f}"


class ReportExporter:
    """
    Build report exports.

    Methods:
        profit_and_loss_rows: Revenue and expense lines with totals.
        cash_flow_rows: Cash in and out lines between the two balances.
        expense_rows: Every expense in the period.
        export: Run a report and render it in the requested format.
    """

    @staticmethod
    def profit_and_loss_rows(report):
        headers = ['Type', 'Category', 'Count', 'Amount']
        rows = [
            ['Revenue', row['name'], row['count'], _money(row['total'])]
            for row in report['income_by_category']
        ]
        rows += [
            ['Expense', row['name'], row['count'], _money(row['total'])]
            for row in report['expenses_by_category']
        ]
        rows += [
            ['Total', 'Revenue', '', _money(report['total_income'])],
            ['Total', 'Expenses', '', _money(report['total_expenses'])],
            ['Total', 'Net profit', '', _money(report['net_profit'])],
        ]
        return headers, rows

    @staticmethod
    def cash_flow_rows(report):
        headers = ['Type', 'Category', 'Count', 'Amount']
        rows = [['Balance', 'Starting balance', '', _money(report['starting_balance'])]]
        rows += [
            ['Cash In', row['name'], row['count'], _money(row['total'])]
            for row in report['cash_in_by_category']
        ]
        rows += [
            ['Cash Out', row['name'], row['count'], _money(row['total'])]
            for row in report['cash_out_by_category']
        ]
        rows += [
            ['Total', 'Net cash flow', '', _money(report['net_cash_flow'])],
            ['Balance', 'Ending balance', '', _money(report['ending_balance'])],
        ]
        return headers, rows

    @staticmethod
    def expense_rows(account, start_date, end_date):
        headers = ['Date', 'Category', 'Description', 'Amount', 'Payment Source']
        expenses = Transaction.objects.filter(
            account=account,
            type=TransactionType.EXPENSE,
            date__gte=start_date,
            date__lte=end_date,
        ).order_by('date', 'created_at')
        rows = [
            [
                expense.date.isoformat(),
                expense.category or 'Uncategorized',
                expense.description,
                _money(expense.amount),
                expense.payment_source,
            ]
            for expense in expenses
        ]
        return headers, rows

    @staticmethod
    def to_csv(headers, rows) -> bytes:
        output = io.StringIO()
        writer = csv.writer(output)
        writer.writerow(headers)
        writer.writerows(rows)
        return output.getvalue().encode('utf-8')

    @staticmethod
    def to_pdf(title, subtitle, headers, rows) -> bytes:
        output = io.BytesIO()
        doc = SimpleDocTemplate(
            output,
            pagesize=A4,
            leftMargin=36,
            rightMargin=36,
            topMargin=36,
            bottomMargin=36,
            title=title,
        )
        styles = getSampleStyleSheet()

        table = Table([headers] + [[str(value) for value in row] for row in rows], repeatRows=1, hAlign='LEFT')
        table.setStyle(TableStyle([
            ('BACKGROUND', (0, 0), (-1, 0), colors.whitesmoke),
            ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
            ('GRID', (0, 0), (-1, -1), 0.25, colors.grey),
            ('FONTSIZE', (0, 0), (-1, -1), 8),
            ('VALIGN', (0, 0), (-1, -1), 'TOP'),
        ]))

        doc.build([
            Paragraph(escape(title), styles['Title']),
            Paragraph(escape(subtitle), styles['Normal']),
            Spacer(1, 12),
            table,
        ])
        return output.getvalue()

    @classmethod
    def export(cls, account, report_type, start_date, end_date, file_format):
        """
        Run ``report_type`` for the period and render it.

        Args:
            account (Account): Account to report on.
            report_type (str): One of ``REPORT_TYPES``.
            start_date (date): First day of the period.
            end_date (date): Last day of the period.
            file_format (str): ``'csv'`` or ``'pdf'``.

        Returns:
            bytes: The rendered file.
        """
        if report_type == 'profit-loss':
            headers, rows = cls.profit_and_loss_rows(
                ReportQueries.profit_and_loss(account, start_date, end_date)
            )
        elif report_type == 'cash-flow':
            headers, rows = cls.cash_flow_rows(
                ReportQueries.cash_flow(account, start_date, end_date)
            )
        elif report_type == 'expenses':
            headers, rows = cls.expense_rows(account, start_date, end_date)
        else:
            raise ValueError(f"Unknown report type: {report_type}")

        if file_format == 'csv':
            return cls.to_csv(headers, rows)

        title = f"{report_type.replace('-', ' ').title()} Report: {account.name}"
        subtitle = (
            f"{start_date:%d %b %Y} to {end_date:%d %b %Y} ({account.currency}). "
            f"Generated on {date.today():%d %b %Y}"
        )
        return cls.to_pdf(title, subtitle, headers, rows)

    @staticmethod
    def file_name(report_type, start_date, end_date, file_format) -> str:
        return f"{report_type}-report-{start_date.isoformat()}-to-{end_date.isoformat()}.{file_format}"
