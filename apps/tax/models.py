from django.db import models
import uuid


class BusinessType(models.TextChoices):
    INDIVIDUAL = 'individual', 'Individual / sole proprietor'
    SMALL_COMPANY = 'small_company', 'Small company'
    COMPANY = 'company', 'Company'


class TaxSettings(models.Model):
    """How a user's business is taxed."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.OneToOneField(
        'users.User',
        on_delete=models.CASCADE,
        related_name='tax_settings'
    )
    business_type = models.CharField(
        max_length=20,
        choices=BusinessType.choices,
        default=BusinessType.INDIVIDUAL
    )
    is_professional_service = models.BooleanField(default=False)
    tax_id = models.CharField(max_length=50, blank=True)
    vat_registered = models.BooleanField(default=False)
    filing_status = models.CharField(max_length=50, blank=True)
    last_filing_date = models.DateField(null=True, blank=True)
    tax_year = models.PositiveIntegerField(null=True, blank=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'tax_settings'
        verbose_name_plural = 'tax settings'

    def __str__(self):
        return f"Tax settings for {self.user.email}"

    @property
    def is_company(self):
        return self.business_type in (BusinessType.SMALL_COMPANY, BusinessType.COMPANY)
