import uuid
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='TaxSettings',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('business_type', models.CharField(choices=[('individual', 'Individual / sole proprietor'), ('small_company', 'Small company'), ('company', 'Company')], default='individual', max_length=20)),
                ('is_professional_service', models.BooleanField(default=False)),
                ('tax_id', models.CharField(blank=True, max_length=50)),
                ('vat_registered', models.BooleanField(default=False)),
                ('filing_status', models.CharField(blank=True, max_length=50)),
                ('last_filing_date', models.DateField(blank=True, null=True)),
                ('tax_year', models.PositiveIntegerField(blank=True, null=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('user', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='tax_settings', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'tax_settings',
                'verbose_name_plural': 'tax settings',
            },
        ),
    ]
