from rest_framework import serializers

from .models import Asset, Liability


class AssetSerializer(serializers.ModelSerializer):

    class Meta:
        model = Asset
        fields = [
            'id',
            'name',
            'description',
            'category',
            'asset_type',
            'current_value',
            'purchase_value',
            'purchase_date',
            'depreciation_rate',
            'created_at',
            'updated_at',
        ]
        read_only_fields = ['id', 'created_at', 'updated_at']

    def validate_name(self, value):
        value = value.strip()
        if len(value) < 2:
            raise serializers.ValidationError('Name must be at least 2 characters.')
        return value


class LiabilitySerializer(serializers.ModelSerializer):

    class Meta:
        model = Liability
        fields = [
            'id',
            'name',
            'description',
            'category',
            'liability_type',
            'current_balance',
            'original_amount',
            'interest_rate',
            'due_date',
            'minimum_payment',
            'created_at',
            'updated_at',
        ]
        read_only_fields = ['id', 'created_at', 'updated_at']

    def validate_name(self, value):
        value = value.strip()
        if len(value) < 2:
            raise serializers.ValidationError('Name must be at least 2 characters.')
        return value


class BalanceSheetSummarySerializer(serializers.Serializer):
    total_assets = serializers.DecimalField(max_digits=18, decimal_places=2)
    assets_by_type = serializers.DictField(
        child=serializers.DecimalField(max_digits=18, decimal_places=2)
    )
    total_liabilities = serializers.DecimalField(max_digits=18, decimal_places=2)
    liabilities_by_type = serializers.DictField(
        child=serializers.DecimalField(max_digits=18, decimal_places=2)
    )
    net_worth = serializers.DecimalField(max_digits=18, decimal_places=2)
    asset_count = serializers.IntegerField()
    liability_count = serializers.IntegerField()
