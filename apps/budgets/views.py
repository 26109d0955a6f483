from decimal import Decimal

from django.db.models import DecimalField, Sum, Value
from django.db.models.functions import Coalesce
from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.pagination import PageNumberPagination

from apps.accounts.scoping import AccountScopedMixin
from apps.transactions.serializers import TransactionSerializer
from .models import Budget
from .serializers import BudgetSerializer, BudgetFilterSerializer
from .services import (
    create_next_recurring_budget,
    BudgetNotFoundError,
    BudgetNotRecurringError,
)


class BudgetPagination(PageNumberPagination):
    """Custom pagination for budgets."""
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


class BudgetViewSet(AccountScopedMixin, viewsets.ModelViewSet):
    """
    ViewSet for Budget CRUD operations.

    list: Get the active account's budgets with spent / remaining
    create: Create a budget
    retrieve / update / destroy: Manage a budget
    next: Create the next period of a recurring budget
    transactions: Transactions linked to the budget
    """

    queryset = Budget.objects.prefetch_related('categories')
    serializer_class = BudgetSerializer
    permission_classes = [IsAuthenticated]
    pagination_class = BudgetPagination

    def get_queryset(self):
        """Annotate spent totals and apply validated filters."""
        queryset = super().get_queryset().annotate(
            spent_total=Coalesce(
                Sum('transactions__amount'),
                Value(Decimal('0.00')),
                output_field=DecimalField(max_digits=16, decimal_places=2),
            )
        )
        if self.action != 'list':
            return queryset

        filter_serializer = BudgetFilterSerializer(data=self.request.query_params)
        filter_serializer.is_valid(raise_exception=True)
        params = filter_serializer.validated_data

        if 'active_on' in params:
            queryset = queryset.filter(
                start_date__lte=params['active_on'],
                end_date__gte=params['active_on'],
            )
        if params.get('is_recurring') is not None:
            queryset = queryset.filter(is_recurring=params['is_recurring'])

        return queryset

    @action(detail=True, methods=['post'])
    def next(self, request, pk=None):
        """Create the next period of a recurring budget."""
        budget = self.get_object()
        try:
            child = create_next_recurring_budget(budget_id=budget.id, account=self.get_account())
        except BudgetNotRecurringError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        except BudgetNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)

        return Response(
            BudgetSerializer(child, context=self.get_serializer_context()).data,
            status=status.HTTP_201_CREATED
        )

    @action(detail=True, methods=['get'])
    def transactions(self, request, pk=None):
        """List transactions charged to this budget."""
        budget = self.get_object()
        queryset = budget.transactions.select_related('created_by')

        page = self.paginate_queryset(queryset)
        if page is not None:
            serializer = TransactionSerializer(page, many=True)
            return self.get_paginated_response(serializer.data)

        serializer = TransactionSerializer(queryset, many=True)
        return Response(serializer.data)
