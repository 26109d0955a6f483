"""
Flag sent invoices past their due date as overdue.

Meant to run daily from cron.

Usage:
    python manage.py mark_overdue_invoices
    python manage.py mark_overdue_invoices --dry-run
"""

from datetime import date

from django.core.management.base import BaseCommand

from apps.invoices.models import Invoice, InvoiceStatus
from apps.invoices.services import mark_overdue_invoices


class Command(BaseCommand):
    help = 'Mark sent invoices past their due date as overdue'

    def add_arguments(self, parser):
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Show what would be updated without making changes',
        )

    def handle(self, *args, **options):
        today = date.today()
        due = Invoice.objects.filter(
            status=InvoiceStatus.SENT,
            due_date__lt=today,
        ).select_related('client')

        count = due.count()
        if count == 0:
            self.stdout.write(self.style.SUCCESS('No invoices are overdue.'))
            return

        self.stdout.write(f'\nFound {count} overdue invoice(s):\n')
        for invoice in due:
            self.stdout.write(
                f'  - {invoice.invoice_number} | {invoice.client.name} | {invoice.total} | Due: {invoice.due_date}'
            )

        if options['dry_run']:
            self.stdout.write(self.style.WARNING('\n--dry-run mode: No changes made.'))
            return

        updated = mark_overdue_invoices(today=today)
        self.stdout.write(self.style.SUCCESS(f'\nMarked {updated} invoice(s) overdue.'))
