from rest_framework import serializers
from .models import Account


class AccountSerializer(serializers.ModelSerializer):
    """Full account representation."""

    is_current = serializers.SerializerMethodField()

    class Meta:
        model = Account
        fields = [
            'id',
            'name',
            'description',
            'currency',
            'is_current',
            'created_at',
            'updated_at',
        ]
        read_only_fields = ['id', 'created_at', 'updated_at']

    def get_is_current(self, obj) -> bool:
        request = self.context.get('request')
        if request is None:
            return False
        current_id = (request.user.preferences or {}).get('current_account_id')
        return current_id == str(obj.id)


class AccountCreateSerializer(serializers.Serializer):
    """Validate input for creating or updating an account."""

    name = serializers.CharField(min_length=2, max_length=200)
    description = serializers.CharField(required=False, allow_blank=True, default='')
    currency = serializers.RegexField(
        r'^[A-Z]{3}$',
        required=False,
        error_messages={'invalid': 'Currency must be a 3-letter ISO code.'}
    )
