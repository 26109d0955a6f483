from decimal import Decimal

from rest_framework import serializers

from .models import Category, Transaction, TransactionType


DATE_INPUT_FORMATS = ['%Y-%m-%d', '%Y/%m/%d', '%d/%m/%Y']

ORDERING_FIELDS = ['date', 'amount', 'description', 'category', 'created_at']


# =============================================================================
# Input Serializers
# =============================================================================

class TransactionFilterSerializer(serializers.Serializer):
    """
    Validate query parameters for transaction filtering.

    Query Parameters:
        type (str): income or expense
        category (str): Exact category name (case-insensitive)
        payment_source (str): Exact payment source (case-insensitive)
        budget (UUID): Only transactions linked to this budget
        tax_deductible (bool): Filter by deductibility
        date_from (date): On or after this date
        date_to (date): On or before this date
        search (str): Matches description, category or notes
        ordering (str): One of ORDERING_FIELDS, '-' prefix for descending
    """

    type = serializers.ChoiceField(choices=TransactionType.choices, required=False)
    category = serializers.CharField(required=False)
    payment_source = serializers.CharField(required=False)
    budget = serializers.UUIDField(required=False)
    tax_deductible = serializers.BooleanField(required=False, allow_null=True, default=None)
    date_from = serializers.DateField(required=False)
    date_to = serializers.DateField(required=False)
    search = serializers.CharField(required=False, allow_blank=True)
    ordering = serializers.ChoiceField(
        choices=ORDERING_FIELDS + [f'-{field}' for field in ORDERING_FIELDS],
        required=False
    )

    def validate(self, attrs):
        """Validate date range."""
        date_from = attrs.get('date_from')
        date_to = attrs.get('date_to')

        if date_from and date_to and date_from > date_to:
            raise serializers.ValidationError({
                'date_to': 'End date must be after start date'
            })

        return attrs


class DateRangeQuerySerializer(serializers.Serializer):
    date_from = serializers.DateField(required=False)
    date_to = serializers.DateField(required=False)

    def validate(self, attrs):
        if attrs.get('date_from') and attrs.get('date_to') and attrs['date_from'] > attrs['date_to']:
            raise serializers.ValidationError({
                'date_to': 'End date must be after start date'
            })
        return attrs


class TransactionImportRowSerializer(serializers.Serializer):
    """One row of a bulk CSV upload, after header normalisation."""

    date = serializers.DateField(input_formats=DATE_INPUT_FORMATS)
    description = serializers.CharField(min_length=2, max_length=255)
    category = serializers.CharField(max_length=100)
    amount = serializers.DecimalField(
        max_digits=14,
        decimal_places=2,
        min_value=Decimal('0.01')
    )
    type = serializers.ChoiceField(choices=TransactionType.choices)
    payment_source = serializers.CharField(max_length=100)
    notes = serializers.CharField(required=False, allow_blank=True, default='')


class BulkUploadSerializer(serializers.Serializer):
    """Either a CSV file upload or the CSV text itself."""

    file = serializers.FileField(required=False)
    content = serializers.CharField(required=False, trim_whitespace=False)

    def validate(self, attrs):
        if not attrs.get('file') and not attrs.get('content'):
            raise serializers.ValidationError('Provide a CSV file or CSV content.')
        return attrs


class ReceiptUploadSerializer(serializers.Serializer):
    receipt = serializers.FileField()


# =============================================================================
# Output Serializers
# =============================================================================

class CategorySerializer(serializers.ModelSerializer):

    class Meta:
        model = Category
        fields = ['id', 'name', 'type', 'color', 'icon', 'created_at']
        read_only_fields = ['id', 'created_at']
        # Uniqueness is checked against the active account in validate()
        validators = []

    def validate_name(self, value):
        value = value.strip()
        if len(value) < 2:
            raise serializers.ValidationError('Name must be at least 2 characters.')
        return value

    def validate(self, attrs):
        account = self.context.get('account')
        name = attrs.get('name', getattr(self.instance, 'name', None))
        category_type = attrs.get('type', getattr(self.instance, 'type', None))

        duplicates = Category.objects.filter(
            account=account,
            name__iexact=name,
            type=category_type,
        )
        if self.instance is not None:
            duplicates = duplicates.exclude(pk=self.instance.pk)
        if account is not None and duplicates.exists():
            raise serializers.ValidationError({
                'name': f'A {category_type} category with this name already exists.'
            })
        return attrs


class TransactionSerializer(serializers.ModelSerializer):
    """Full transaction representation used for CRUD."""

    budget_name = serializers.CharField(source='budget.name', read_only=True, default=None)
    created_by_name = serializers.SerializerMethodField()

    class Meta:
        model = Transaction
        fields = [
            'id',
            'date',
            'description',
            'category',
            'amount',
            'type',
            'payment_source',
            'notes',
            'budget',
            'budget_name',
            'tax_deductible',
            'tax_category',
            'business_purpose',
            'receipt',
            'mileage',
            'created_by',
            'created_by_name',
            'created_at',
            'updated_at',
        ]
        read_only_fields = ['id', 'receipt', 'created_by', 'created_at', 'updated_at']

    def get_created_by_name(self, obj):
        if obj.created_by is None:
            return None
        return obj.created_by.get_display_name()

    def validate_description(self, value):
        value = value.strip()
        if len(value) < 2:
            raise serializers.ValidationError('Description must be at least 2 characters.')
        return value

    def validate_payment_source(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError('Payment source is required.')
        return value

    def validate_budget(self, value):
        """Budgets from other accounts cannot be linked."""
        account = self.context.get('account')
        if value is not None and account is not None and value.account_id != account.id:
            raise serializers.ValidationError('Budget not found.')
        return value


class TransactionSummarySerializer(serializers.Serializer):
    total_income = serializers.DecimalField(max_digits=16, decimal_places=2)
    total_expense = serializers.DecimalField(max_digits=16, decimal_places=2)
    net = serializers.DecimalField(max_digits=16, decimal_places=2)
    count = serializers.IntegerField()


class RowErrorSerializer(serializers.Serializer):
    row = serializers.IntegerField()
    field = serializers.CharField()
    message = serializers.CharField()
