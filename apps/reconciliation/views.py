from rest_framework import mixins, viewsets, status
from rest_framework.decorators import action
from rest_framework.parsers import FormParser, JSONParser, MultiPartParser
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.pagination import PageNumberPagination
from drf_spectacular.utils import extend_schema

from apps.accounts.scoping import AccountScopedMixin
from apps.transactions.serializers import TransactionSerializer
from .models import BankStatement, BankTransaction, ReconciliationSession
from .serializers import (
    BankStatementSerializer,
    BankTransactionSerializer,
    BankTransactionFilterSerializer,
    StatementImportSerializer,
    ManualMatchSerializer,
    StartSessionSerializer,
    CompleteSessionSerializer,
    ReconciliationSummarySerializer,
    ReconciliationSessionSerializer,
)
from .services import (
    import_statement,
    auto_match_statement,
    find_match_candidates,
    manual_match,
    unmatch as unmatch_bank_transaction,
    ignore as ignore_bank_transaction,
    reconciliation_summary,
    start_session,
    complete_session,
    abandon_session,
    # Exceptions
    AlreadyMatchedError,
    MatchTargetNotFoundError,
    SessionStateError,
    StatementNotFoundError,
    StatementParseError,
)


class ReconciliationPagination(PageNumberPagination):
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


class BankStatementViewSet(
    AccountScopedMixin,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.DestroyModelMixin,
    viewsets.GenericViewSet,
):
    """
    Imported bank statements.

    list / retrieve / destroy: Manage statements
    upload: Import a statement CSV (POST statements/import/)
    auto_match: Match lines to recorded transactions
    summary: Counts, balances and discrepancy
    transactions: Statement lines (filter with ?match_status=)
    """

    queryset = BankStatement.objects.select_related('reconciled_by')
    serializer_class = BankStatementSerializer
    permission_classes = [IsAuthenticated]
    pagination_class = ReconciliationPagination

    @extend_schema(request=StatementImportSerializer, responses={201: BankStatementSerializer})
    @action(
        detail=False,
        methods=['post'],
        url_path='import',
        url_name='import',
        parser_classes=[MultiPartParser, FormParser, JSONParser],
    )
    def upload(self, request):
        """Create a statement and its lines from CSV."""
        input_serializer = StatementImportSerializer(data=request.data)
        input_serializer.is_valid(raise_exception=True)
        data = dict(input_serializer.validated_data)

        upload = data.pop('file', None)
        content = data.pop('content', None)
        file_name = ''
        if upload is not None:
            file_name = upload.name
            try:
                content = upload.read().decode('utf-8-sig')
            except UnicodeDecodeError:
                return Response(
                    {'error': 'File must be UTF-8 encoded CSV'},
                    status=status.HTTP_400_BAD_REQUEST
                )

        try:
            statement = import_statement(
                account=self.get_account(),
                content=content,
                file_name=file_name,
                overrides=data,
            )
        except StatementParseError as e:
            return Response(
                {'error': str(e), 'errors': e.errors},
                status=status.HTTP_400_BAD_REQUEST
            )

        return Response(BankStatementSerializer(statement).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=None, responses={200: ReconciliationSummarySerializer})
    @action(detail=True, methods=['post'])
    def auto_match(self, request, pk=None):
        """Match unmatched lines automatically; returns the count and new summary."""
        statement = self.get_object()
        matched = auto_match_statement(statement_id=statement.id, account=self.get_account())
        statement.refresh_from_db()
        data = ReconciliationSummarySerializer(reconciliation_summary(statement)).data
        return Response({'matched': matched, 'summary': data})

    @extend_schema(responses={200: ReconciliationSummarySerializer})
    @action(detail=True, methods=['get'])
    def summary(self, request, pk=None):
        statement = self.get_object()
        return Response(ReconciliationSummarySerializer(reconciliation_summary(statement)).data)

    @extend_schema(responses={200: BankTransactionSerializer(many=True)})
    @action(detail=True, methods=['get'])
    def transactions(self, request, pk=None):
        """Lines of this statement."""
        statement = self.get_object()
        filter_serializer = BankTransactionFilterSerializer(data=request.query_params)
        filter_serializer.is_valid(raise_exception=True)

        lines = statement.bank_transactions.select_related('matched_transaction')
        if 'match_status' in filter_serializer.validated_data:
            lines = lines.filter(match_status=filter_serializer.validated_data['match_status'])

        page = self.paginate_queryset(lines)
        if page is not None:
            return self.get_paginated_response(BankTransactionSerializer(page, many=True).data)
        return Response(BankTransactionSerializer(lines, many=True).data)


class BankTransactionViewSet(AccountScopedMixin, viewsets.ReadOnlyModelViewSet):
    """
    Bank statement lines of the active account.

    candidates: Recorded transactions that could match
    match: Link to a chosen transaction
    unmatch: Clear the link
    ignore: Leave the line out of matching
    """

    queryset = BankTransaction.objects.select_related('matched_transaction')
    serializer_class = BankTransactionSerializer
    permission_classes = [IsAuthenticated]
    pagination_class = ReconciliationPagination

    def get_queryset(self):
        queryset = super().get_queryset()
        match_status = self.request.query_params.get('match_status')
        if match_status:
            queryset = queryset.filter(match_status=match_status)
        statement = self.request.query_params.get('statement')
        if statement:
            queryset = queryset.filter(statement_id=statement)
        return queryset

    @extend_schema(responses={200: TransactionSerializer(many=True)})
    @action(detail=True, methods=['get'])
    def candidates(self, request, pk=None):
        """Up to ten likely matches, best first."""
        line = self.get_object()
        candidates = find_match_candidates(bank_transaction=line)
        return Response(TransactionSerializer(candidates, many=True).data)

    @extend_schema(request=ManualMatchSerializer, responses={200: BankTransactionSerializer})
    @action(detail=True, methods=['post'])
    def match(self, request, pk=None):
        input_serializer = ManualMatchSerializer(data=request.data)
        input_serializer.is_valid(raise_exception=True)

        line = self.get_object()
        try:
            line = manual_match(
                bank_transaction_id=line.id,
                transaction_id=input_serializer.validated_data['transaction'],
                account=self.get_account(),
            )
        except MatchTargetNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except AlreadyMatchedError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(BankTransactionSerializer(line).data)

    @extend_schema(request=None, responses={200: BankTransactionSerializer})
    @action(detail=True, methods=['post'])
    def unmatch(self, request, pk=None):
        line = self.get_object()
        line = unmatch_bank_transaction(bank_transaction_id=line.id, account=self.get_account())
        return Response(BankTransactionSerializer(line).data)

    @extend_schema(request=None, responses={200: BankTransactionSerializer})
    @action(detail=True, methods=['post'])
    def ignore(self, request, pk=None):
        line = self.get_object()
        line = ignore_bank_transaction(bank_transaction_id=line.id, account=self.get_account())
        return Response(BankTransactionSerializer(line).data)


class ReconciliationSessionViewSet(
    AccountScopedMixin,
    mixins.CreateModelMixin,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    """
    Reconciliation sessions.

    create: Start a session on a statement
    list / retrieve: Sessions with their discrepancies
    complete: Finish and settle the statement status
    abandon: Close without changes
    """

    queryset = ReconciliationSession.objects.prefetch_related('discrepancies')
    serializer_class = ReconciliationSessionSerializer
    permission_classes = [IsAuthenticated]
    pagination_class = ReconciliationPagination

    @extend_schema(request=StartSessionSerializer, responses={201: ReconciliationSessionSerializer})
    def create(self, request, *args, **kwargs):
        input_serializer = StartSessionSerializer(data=request.data)
        input_serializer.is_valid(raise_exception=True)

        try:
            session = start_session(
                statement_id=input_serializer.validated_data['statement'],
                account=self.get_account(),
                user=request.user,
            )
        except StatementNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except SessionStateError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(ReconciliationSessionSerializer(session).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=CompleteSessionSerializer, responses={200: ReconciliationSessionSerializer})
    @action(detail=True, methods=['post'])
    def complete(self, request, pk=None):
        input_serializer = CompleteSessionSerializer(data=request.data)
        input_serializer.is_valid(raise_exception=True)

        session = self.get_object()
        try:
            session = complete_session(
                session_id=session.id,
                account=self.get_account(),
                user=request.user,
                notes=input_serializer.validated_data['notes'],
            )
        except SessionStateError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(ReconciliationSessionSerializer(session).data)

    @extend_schema(request=None, responses={200: ReconciliationSessionSerializer})
    @action(detail=True, methods=['post'])
    def abandon(self, request, pk=None):
        session = self.get_object()
        try:
            session = abandon_session(session_id=session.id, account=self.get_account())
        except SessionStateError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(ReconciliationSessionSerializer(session).data)
