"""
Email every account owner their weekly summary.

Meant to run from cron on Monday mornings.

Usage:
    python manage.py send_weekly_summaries
    python manage.py send_weekly_summaries --dry-run
"""

from smtplib import SMTPException

from django.core.management.base import BaseCommand

from apps.accounts.models import Account
from apps.reports.emails import send_weekly_summary


class Command(BaseCommand):
    help = 'Send the weekly summary email for every account'

    def add_arguments(self, parser):
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='List the accounts that would be emailed without sending',
        )

    def handle(self, *args, **options):
        accounts = Account.objects.select_related('owner').filter(owner__is_active=True)

        count = accounts.count()
        if count == 0:
            self.stdout.write(self.style.SUCCESS('No accounts to email.'))
            return

        if options['dry_run']:
            for account in accounts:
                self.stdout.write(f'  - {account.name} -> {account.owner.email}')
            self.stdout.write(self.style.WARNING(f'\n--dry-run mode: {count} email(s) not sent.'))
            return

        sent = 0
        failed = 0
        for account in accounts:
            try:
                send_weekly_summary(account)
                sent += 1
            except (SMTPException, OSError) as e:
                failed += 1
                self.stderr.write(f'  ! {account.name} ({account.owner.email}): {e}')

        self.stdout.write(self.style.SUCCESS(f'\nSent {sent} weekly summary email(s).'))
        if failed:
            self.stdout.write(self.style.WARNING(f'{failed} email(s) failed.'))
