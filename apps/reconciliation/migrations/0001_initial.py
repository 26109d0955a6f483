import uuid
from decimal import Decimal
import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('accounts', '0001_initial'),
        ('transactions', '0002_transaction_budget'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='BankStatement',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('statement_date', models.DateField()),
                ('opening_balance', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=16)),
                ('closing_balance', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=16)),
                ('period_start', models.DateField()),
                ('period_end', models.DateField()),
                ('file_name', models.CharField(blank=True, max_length=255)),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('reconciled', 'Reconciled'), ('discrepancy', 'Discrepancy')], default='pending', max_length=20)),
                ('reconciled_at', models.DateTimeField(blank=True, null=True)),
                ('notes', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('account', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='bank_statements', to='accounts.account')),
                ('reconciled_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='reconciled_statements', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'bank_statements',
                'ordering': ['-statement_date', '-created_at'],
                'indexes': [models.Index(fields=['account', 'statement_date'], name='statements_account_date_idx')],
            },
        ),
        migrations.CreateModel(
            name='BankTransaction',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('transaction_date', models.DateField()),
                ('description', models.CharField(max_length=255)),
                ('amount', models.DecimalField(decimal_places=2, max_digits=14)),
                ('transaction_type', models.CharField(choices=[('debit', 'Debit'), ('credit', 'Credit')], max_length=10)),
                ('reference_number', models.CharField(blank=True, max_length=100)),
                ('balance_after', models.DecimalField(blank=True, decimal_places=2, max_digits=16, null=True)),
                ('category_suggested', models.CharField(blank=True, max_length=100)),
                ('match_confidence', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=3, validators=[django.core.validators.MinValueValidator(Decimal('0')), django.core.validators.MaxValueValidator(Decimal('1'))])),
                ('match_status', models.CharField(choices=[('unmatched', 'Unmatched'), ('matched', 'Matched'), ('manual_match', 'Manual match'), ('ignored', 'Ignored')], default='unmatched', max_length=20)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('account', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='bank_transactions', to='accounts.account')),
                ('matched_transaction', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='bank_matches', to='transactions.transaction')),
                ('statement', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='bank_transactions', to='reconciliation.bankstatement')),
            ],
            options={
                'db_table': 'bank_transactions',
                'ordering': ['transaction_date', 'created_at'],
                'indexes': [
                    models.Index(fields=['statement', 'match_status'], name='bank_txn_statement_status_idx'),
                    models.Index(fields=['account', 'transaction_date'], name='bank_txn_account_date_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='ReconciliationSession',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('status', models.CharField(choices=[('in_progress', 'In progress'), ('completed', 'Completed'), ('abandoned', 'Abandoned')], default='in_progress', max_length=20)),
                ('total_transactions', models.PositiveIntegerField(default=0)),
                ('matched_transactions', models.PositiveIntegerField(default=0)),
                ('unmatched_transactions', models.PositiveIntegerField(default=0)),
                ('discrepancy_amount', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=16)),
                ('notes', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('completed_at', models.DateTimeField(blank=True, null=True)),
                ('account', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='reconciliation_sessions', to='accounts.account')),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='reconciliation_sessions', to=settings.AUTH_USER_MODEL)),
                ('statement', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='sessions', to='reconciliation.bankstatement')),
            ],
            options={
                'db_table': 'reconciliation_sessions',
                'ordering': ['-created_at'],
                'constraints': [models.UniqueConstraint(condition=models.Q(('status', 'in_progress')), fields=('statement',), name='one_open_session_per_statement')],
            },
        ),
        migrations.CreateModel(
            name='ReconciliationDiscrepancy',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('discrepancy_type', models.CharField(choices=[('missing_bank_transaction', 'Missing bank transaction'), ('missing_app_transaction', 'Missing app transaction'), ('amount_mismatch', 'Amount mismatch'), ('date_mismatch', 'Date mismatch')], max_length=30)),
                ('expected_amount', models.DecimalField(blank=True, decimal_places=2, max_digits=14, null=True)),
                ('actual_amount', models.DecimalField(blank=True, decimal_places=2, max_digits=14, null=True)),
                ('description', models.CharField(max_length=255)),
                ('is_resolved', models.BooleanField(default=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('bank_transaction', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.CASCADE, related_name='discrepancies', to='reconciliation.banktransaction')),
                ('session', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='discrepancies', to='reconciliation.reconciliationsession')),
                ('transaction', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='reconciliation_discrepancies', to='transactions.transaction')),
            ],
            options={
                'db_table': 'reconciliation_discrepancies',
                'ordering': ['created_at'],
                'verbose_name_plural': 'reconciliation discrepancies',
            },
        ),
    ]
