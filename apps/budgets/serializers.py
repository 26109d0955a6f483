from rest_framework import serializers

from apps.transactions.models import Category
from .models import Budget
from .services import budget_progress


class BudgetFilterSerializer(serializers.Serializer):
    """
    Validate query parameters for budget filtering.

    Query Parameters:
        active_on (date): Only budgets whose period contains this date
        is_recurring (bool): Filter by recurrence
    """

    active_on = serializers.DateField(required=False)
    is_recurring = serializers.BooleanField(required=False, allow_null=True, default=None)


class BudgetSerializer(serializers.ModelSerializer):
    """Budget with computed spending progress."""

    categories = serializers.PrimaryKeyRelatedField(
        many=True,
        queryset=Category.objects.all(),
        required=False
    )
    spent = serializers.SerializerMethodField()
    remaining = serializers.SerializerMethodField()
    percent_used = serializers.SerializerMethodField()

    class Meta:
        model = Budget
        fields = [
            'id',
            'name',
            'amount',
            'start_date',
            'end_date',
            'categories',
            'is_recurring',
            'recurring_type',
            'parent_budget',
            'spent',
            'remaining',
            'percent_used',
            'created_at',
            'updated_at',
        ]
        read_only_fields = ['id', 'parent_budget', 'created_at', 'updated_at']

    def _progress(self, obj):
        cache = self.context.setdefault('_progress', {})
        if obj.pk not in cache:
            cache[obj.pk] = budget_progress(obj, spent=getattr(obj, 'spent_total', None))
        return cache[obj.pk]

    def get_spent(self, obj):
        return str(self._progress(obj)['spent'])

    def get_remaining(self, obj):
        return str(self._progress(obj)['remaining'])

    def get_percent_used(self, obj):
        return str(self._progress(obj)['percent_used'])

    def validate_name(self, value):
        value = value.strip()
        if len(value) < 2:
            raise serializers.ValidationError('Name must be at least 2 characters.')
        return value

    def validate_categories(self, value):
        account = self.context.get('account')
        if account is not None:
            foreign = [c for c in value if c.account_id != account.id]
            if foreign:
                raise serializers.ValidationError('Category not found.')
        return value

    def validate(self, attrs):
        start_date = attrs.get('start_date', getattr(self.instance, 'start_date', None))
        end_date = attrs.get('end_date', getattr(self.instance, 'end_date', None))
        if start_date and end_date and end_date <= start_date:
            raise serializers.ValidationError({
                'end_date': 'End date must be after start date'
            })

        is_recurring = attrs.get('is_recurring', getattr(self.instance, 'is_recurring', False))
        recurring_type = attrs.get('recurring_type', getattr(self.instance, 'recurring_type', ''))
        if is_recurring and not recurring_type:
            raise serializers.ValidationError({
                'recurring_type': 'Recurring budgets need a recurring type'
            })
        if not is_recurring:
            attrs['recurring_type'] = ''

        return attrs

