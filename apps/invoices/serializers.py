from decimal import Decimal

from rest_framework import serializers

from .models import Client, Invoice, InvoiceItem, InvoiceSettings, InvoiceStatus
from .services import due_status_text, is_overdue


# =============================================================================
# Input Serializers
# =============================================================================

class InvoiceFilterSerializer(serializers.Serializer):
    """
    Validate query parameters for invoice filtering.

    Query Parameters:
        status (str): Invoice status
        client (UUID): Only this client's invoices
        date_from (date): Invoice date on or after
        date_to (date): Invoice date on or before
        search (str): Matches invoice number or client name
    """

    status = serializers.ChoiceField(choices=InvoiceStatus.choices, required=False)
    client = serializers.UUIDField(required=False)
    date_from = serializers.DateField(required=False)
    date_to = serializers.DateField(required=False)
    search = serializers.CharField(required=False, allow_blank=True)

    def validate(self, attrs):
        if attrs.get('date_from') and attrs.get('date_to') and attrs['date_from'] > attrs['date_to']:
            raise serializers.ValidationError({
                'date_to': 'End date must be after start date'
            })
        return attrs


class InvoiceItemInputSerializer(serializers.Serializer):
    description = serializers.CharField(max_length=255)
    quantity = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0.01'))
    unit_price = serializers.DecimalField(max_digits=14, decimal_places=2, min_value=Decimal('0'))

    def validate_description(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError('Description is required.')
        return value


class InvoiceWriteSerializer(serializers.Serializer):
    """Payload for creating or editing an invoice."""

    client = serializers.PrimaryKeyRelatedField(queryset=Client.objects.all())
    invoice_date = serializers.DateField()
    due_date = serializers.DateField()
    items = InvoiceItemInputSerializer(many=True)
    tax_rate = serializers.DecimalField(
        max_digits=5,
        decimal_places=2,
        min_value=Decimal('0'),
        max_value=Decimal('100'),
        default=Decimal('0')
    )
    notes = serializers.CharField(required=False, allow_blank=True, default='')
    terms = serializers.CharField(required=False, allow_blank=True, default='')
    status = serializers.ChoiceField(
        choices=[InvoiceStatus.DRAFT, InvoiceStatus.SENT],
        default=InvoiceStatus.DRAFT
    )

    def validate_client(self, value):
        account = self.context.get('account')
        if account is not None and value.account_id != account.id:
            raise serializers.ValidationError('Client not found.')
        return value

    def validate_items(self, value):
        if not value:
            raise serializers.ValidationError('Add at least one item.')
        return value

    def validate(self, attrs):
        invoice_date = attrs.get('invoice_date', getattr(self.instance, 'invoice_date', None))
        due_date = attrs.get('due_date', getattr(self.instance, 'due_date', None))
        if invoice_date and due_date and due_date < invoice_date:
            raise serializers.ValidationError({
                'due_date': 'Due date cannot be before invoice date.'
            })
        return attrs


class InvoiceStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=InvoiceStatus.choices)
    payment_source = serializers.CharField(required=False, default='Bank Transfer')


class MarkPaidSerializer(serializers.Serializer):
    payment_source = serializers.CharField(max_length=100, default='Bank Transfer')
    paid_date = serializers.DateField(required=False)


class SendInvoiceSerializer(serializers.Serializer):
    recipient = serializers.EmailField(required=False)
    message = serializers.CharField(required=False, allow_blank=True, default='')


# =============================================================================
# Output Serializers
# =============================================================================

class ClientSerializer(serializers.ModelSerializer):

    class Meta:
        model = Client
        fields = [
            'id',
            'name',
            'email',
            'phone',
            'address',
            'city',
            'state',
            'postal_code',
            'country',
            'tax_id',
            'notes',
            'created_at',
            'updated_at',
        ]
        read_only_fields = ['id', 'created_at', 'updated_at']

    def validate_name(self, value):
        value = value.strip()
        if len(value) < 2:
            raise serializers.ValidationError('Name must be at least 2 characters.')
        return value


class InvoiceItemSerializer(serializers.ModelSerializer):

    class Meta:
        model = InvoiceItem
        fields = ['id', 'description', 'quantity', 'unit_price', 'amount', 'position']
        read_only_fields = fields


class InvoiceSerializer(serializers.ModelSerializer):
    """Invoice with client, items and due status."""

    client = ClientSerializer(read_only=True)
    items = InvoiceItemSerializer(many=True, read_only=True)
    is_overdue = serializers.SerializerMethodField()
    due_status = serializers.SerializerMethodField()

    class Meta:
        model = Invoice
        fields = [
            'id',
            'invoice_number',
            'client',
            'invoice_date',
            'due_date',
            'status',
            'subtotal',
            'tax_rate',
            'tax_amount',
            'total',
            'notes',
            'terms',
            'paid_date',
            'transaction',
            'sent_at',
            'share_token',
            'items',
            'is_overdue',
            'due_status',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields

    def get_is_overdue(self, obj):
        return is_overdue(obj)

    def get_due_status(self, obj):
        return due_status_text(obj.due_date, status=obj.status)


class InvoiceListSerializer(serializers.ModelSerializer):
    client_name = serializers.CharField(source='client.name', read_only=True)
    due_status = serializers.SerializerMethodField()

    class Meta:
        model = Invoice
        fields = [
            'id',
            'invoice_number',
            'client',
            'client_name',
            'invoice_date',
            'due_date',
            'status',
            'total',
            'due_status',
        ]
        read_only_fields = fields

    def get_due_status(self, obj):
        return due_status_text(obj.due_date, status=obj.status)


class InvoiceSettingsSerializer(serializers.ModelSerializer):

    class Meta:
        model = InvoiceSettings
        fields = [
            'business_name',
            'email',
            'phone',
            'address',
            'city',
            'state',
            'postal_code',
            'country',
            'tax_id',
            'website',
            'logo_url',
            'default_payment_terms',
            'default_notes',
            'invoice_prefix',
            'bank_name',
            'account_name',
            'account_number',
            'updated_at',
        ]
        read_only_fields = ['updated_at']

    def validate_invoice_prefix(self, value):
        value = value.strip().upper()
        if not value.isalnum():
            raise serializers.ValidationError('Prefix may only contain letters and digits.')
        return value


class BusinessDetailsSerializer(serializers.ModelSerializer):
    """Settings fields safe to show on a shared invoice."""

    class Meta:
        model = InvoiceSettings
        fields = [
            'business_name',
            'email',
            'phone',
            'address',
            'city',
            'state',
            'postal_code',
            'country',
            'tax_id',
            'website',
            'logo_url',
            'bank_name',
            'account_name',
            'account_number',
        ]
        read_only_fields = fields


class PublicInvoiceSerializer(InvoiceSerializer):
    business = serializers.SerializerMethodField()
    currency = serializers.CharField(source='account.currency', read_only=True)

    class Meta(InvoiceSerializer.Meta):
        fields = [
            field for field in InvoiceSerializer.Meta.fields
            if field not in ('transaction', 'share_token')
        ] + ['business', 'currency']
        read_only_fields = fields

    def get_business(self, obj):
        invoice_settings = InvoiceSettings.objects.filter(account=obj.account).first()
        if invoice_settings is None:
            return {'business_name': obj.account.name}
        return BusinessDetailsSerializer(invoice_settings).data


class NextInvoiceNumberSerializer(serializers.Serializer):
    invoice_number = serializers.CharField()
