from django.db.models import Q
from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.parsers import FormParser, JSONParser, MultiPartParser
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.pagination import PageNumberPagination
from drf_spectacular.utils import extend_schema, OpenApiParameter
from drf_spectacular.types import OpenApiTypes

from apps.accounts.scoping import AccountScopedMixin
from .models import Category, Transaction
from .serializers import (
    CategorySerializer,
    TransactionSerializer,
    TransactionFilterSerializer,
    DateRangeQuerySerializer,
    BulkUploadSerializer,
    ReceiptUploadSerializer,
    TransactionSummarySerializer,
)
from .services import (
    bulk_create_transactions,
    summarize_transactions,
    attach_receipt,
    BulkUploadError,
    TransactionNotFoundError,
)


class TransactionPagination(PageNumberPagination):
    """Custom pagination for transactions."""
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


class CategoryViewSet(AccountScopedMixin, viewsets.ModelViewSet):
    """
    ViewSet for income and expense categories.

    list: Get the active account's categories (filter with ?type=)
    create: Create a category
    retrieve / update / destroy: Manage a category
    """

    queryset = Category.objects.all()
    serializer_class = CategorySerializer
    permission_classes = [IsAuthenticated]
    pagination_class = None

    def get_queryset(self):
        queryset = super().get_queryset()
        category_type = self.request.query_params.get('type')
        if category_type:
            queryset = queryset.filter(type=category_type)
        return queryset


class TransactionViewSet(AccountScopedMixin, viewsets.ModelViewSet):
    """
    ViewSet for Transaction CRUD operations.

    list: Get the active account's transactions (filterable, searchable, sortable)
    create: Record a transaction
    retrieve: Get a specific transaction
    update / partial_update: Edit a transaction
    destroy: Delete a transaction
    bulk_upload: Import many transactions from CSV
    summary: Income / expense totals for a date range
    receipt: Attach a receipt file
    """

    queryset = Transaction.objects.select_related('budget', 'created_by')
    serializer_class = TransactionSerializer
    permission_classes = [IsAuthenticated]
    pagination_class = TransactionPagination

    def get_queryset(self):
        """Filter transactions using input serializer validation."""
        queryset = super().get_queryset()
        if self.action != 'list':
            return queryset

        filter_serializer = TransactionFilterSerializer(data=self.request.query_params)
        filter_serializer.is_valid(raise_exception=True)
        params = filter_serializer.validated_data

        if 'type' in params:
            queryset = queryset.filter(type=params['type'])
        if params.get('category'):
            queryset = queryset.filter(category__iexact=params['category'])
        if params.get('payment_source'):
            queryset = queryset.filter(payment_source__iexact=params['payment_source'])
        if 'budget' in params:
            queryset = queryset.filter(budget_id=params['budget'])
        if params.get('tax_deductible') is not None:
            queryset = queryset.filter(tax_deductible=params['tax_deductible'])
        if 'date_from' in params:
            queryset = queryset.filter(date__gte=params['date_from'])
        if 'date_to' in params:
            queryset = queryset.filter(date__lte=params['date_to'])

        search = params.get('search', '').strip()
        if search:
            queryset = queryset.filter(
                Q(description__icontains=search) |
                Q(category__icontains=search) |
                Q(notes__icontains=search)
            )

        ordering = params.get('ordering')
        if ordering:
            queryset = queryset.order_by(ordering, '-created_at')

        return queryset

    def perform_create(self, serializer):
        serializer.save(account=self.get_account(), created_by=self.request.user)

    @extend_schema(
        request=BulkUploadSerializer,
        responses={201: TransactionSerializer(many=True)},
        description="Import transactions from CSV. Nothing is created if any row is invalid; "
                    "the response then lists {row, field, message} errors.",
        tags=['transactions'],
    )
    @action(
        detail=False,
        methods=['post'],
        url_path='bulk-upload',
        parser_classes=[MultiPartParser, FormParser, JSONParser],
    )
    def bulk_upload(self, request):
        """Import transactions from a CSV file or CSV text."""
        input_serializer = BulkUploadSerializer(data=request.data)
        input_serializer.is_valid(raise_exception=True)

        upload = input_serializer.validated_data.get('file')
        if upload is not None:
            try:
                content = upload.read().decode('utf-8-sig')
            except UnicodeDecodeError:
                return Response(
                    {'error': 'File must be UTF-8 encoded CSV'},
                    status=status.HTTP_400_BAD_REQUEST
                )
        else:
            content = input_serializer.validated_data['content']

        try:
            created = bulk_create_transactions(
                account=self.get_account(),
                user=request.user,
                content=content,
            )
        except BulkUploadError as e:
            return Response(
                {'error': str(e), 'errors': e.errors},
                status=status.HTTP_400_BAD_REQUEST
            )

        return Response(
            {
                'created': len(created),
                'transactions': TransactionSerializer(created, many=True).data,
            },
            status=status.HTTP_201_CREATED
        )

    @extend_schema(
        parameters=[
            OpenApiParameter('date_from', OpenApiTypes.DATE, description='Start date (YYYY-MM-DD)'),
            OpenApiParameter('date_to', OpenApiTypes.DATE, description='End date (YYYY-MM-DD)'),
        ],
        responses={200: TransactionSummarySerializer},
        tags=['transactions'],
    )
    @action(detail=False, methods=['get'])
    def summary(self, request):
        """Income, expense and net totals for the active account."""
        query_serializer = DateRangeQuerySerializer(data=request.query_params)
        query_serializer.is_valid(raise_exception=True)
        params = query_serializer.validated_data

        data = summarize_transactions(
            account=self.get_account(),
            date_from=params.get('date_from'),
            date_to=params.get('date_to'),
        )
        return Response(TransactionSummarySerializer(data).data)

    @extend_schema(
        request=ReceiptUploadSerializer,
        responses={200: TransactionSerializer},
        tags=['transactions'],
    )
    @action(detail=True, methods=['post'], parser_classes=[MultiPartParser, FormParser])
    def receipt(self, request, pk=None):
        """Attach a receipt file to a transaction."""
        input_serializer = ReceiptUploadSerializer(data=request.data)
        input_serializer.is_valid(raise_exception=True)

        txn = self.get_object()
        try:
            txn = attach_receipt(
                transaction_id=txn.id,
                account=self.get_account(),
                receipt=input_serializer.validated_data['receipt'],
            )
        except TransactionNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)

        return Response(TransactionSerializer(txn, context=self.get_serializer_context()).data)
