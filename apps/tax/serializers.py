from rest_framework import serializers

from .models import TaxSettings


class TaxYearQuerySerializer(serializers.Serializer):
    """Query parameters: year (defaults to the current year), tax_category."""

    year = serializers.IntegerField(required=False, min_value=2000, max_value=2100)
    tax_category = serializers.CharField(required=False, allow_blank=True)


class TaxSettingsSerializer(serializers.ModelSerializer):

    class Meta:
        model = TaxSettings
        fields = [
            'business_type',
            'is_professional_service',
            'tax_id',
            'vat_registered',
            'filing_status',
            'last_filing_date',
            'tax_year',
            'updated_at',
        ]
        read_only_fields = ['updated_at']


class TaxSummarySerializer(serializers.Serializer):
    year = serializers.IntegerField()
    business_type = serializers.CharField()
    turnover = serializers.DecimalField(max_digits=18, decimal_places=2)
    deductible_expenses = serializers.DecimalField(max_digits=18, decimal_places=2)
    taxable_income = serializers.DecimalField(max_digits=18, decimal_places=2)
    qualifies_small_business = serializers.BooleanField()
    consolidated_relief_allowance = serializers.DecimalField(max_digits=18, decimal_places=2)
    chargeable_income = serializers.DecimalField(max_digits=18, decimal_places=2)
    income_tax = serializers.DecimalField(max_digits=18, decimal_places=2)
    education_tax = serializers.DecimalField(max_digits=18, decimal_places=2)
    it_levy = serializers.DecimalField(max_digits=18, decimal_places=2)
    total_tax = serializers.DecimalField(max_digits=18, decimal_places=2)
    effective_rate = serializers.DecimalField(max_digits=7, decimal_places=2)
    vat_registered = serializers.BooleanField()
    vat_collected = serializers.DecimalField(max_digits=18, decimal_places=2)
    vat_paid = serializers.DecimalField(max_digits=18, decimal_places=2)
    net_vat = serializers.DecimalField(max_digits=18, decimal_places=2)


class DeductionCategorySerializer(serializers.Serializer):
    tax_category = serializers.CharField()
    total = serializers.DecimalField(max_digits=18, decimal_places=2)
    count = serializers.IntegerField()


class DeductionsSerializer(serializers.Serializer):
    year = serializers.IntegerField()
    total = serializers.DecimalField(max_digits=18, decimal_places=2)
    count = serializers.IntegerField()
    by_category = DeductionCategorySerializer(many=True)
