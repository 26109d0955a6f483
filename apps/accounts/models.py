# ==========================================
# apps/accounts/models.py
# ==========================================

from django.core.validators import MinLengthValidator
from django.db import models
import uuid


class Account(models.Model):
    """Tenant scope. Every financial record belongs to exactly one account."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=200, validators=[MinLengthValidator(2)])
    description = models.TextField(blank=True)
    owner = models.ForeignKey('users.User', on_delete=models.CASCADE, related_name='accounts')
    currency = models.CharField(max_length=3, default='NGN')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'accounts'
        indexes = [
            models.Index(fields=['owner', 'created_at'], name='accounts_owner_created_idx'),
        ]
        ordering = ['created_at']

    def __str__(self):
        return self.name

    def is_owned_by(self, user):
        return self.owner_id == user.id
