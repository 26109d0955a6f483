from django.http import Http404, HttpResponse
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema, OpenApiParameter
from drf_spectacular.types import OpenApiTypes

from apps.accounts.scoping import resolve_request_account
from .exports import CONTENT_TYPES, REPORT_TYPES, ReportExporter
from .reports import ReportQueries
from .serializers import (
    # Input serializers
    ReportPeriodQuerySerializer,
    ReportExportQuerySerializer,
    WeeklySummaryQuerySerializer,
    # Response serializers
    ProfitAndLossSerializer,
    CashFlowSerializer,
    ExpenseReportSerializer,
    WeeklySummarySerializer,
)


PERIOD_PARAMETERS = [
    OpenApiParameter('period', OpenApiTypes.STR, description='Month period (YYYY-MM)'),
    OpenApiParameter('start_date', OpenApiTypes.DATE, description='Start date (YYYY-MM-DD), default first of this month'),
    OpenApiParameter('end_date', OpenApiTypes.DATE, description='End date (YYYY-MM-DD), default end of this month'),
]


def _period(request):
    query_serializer = ReportPeriodQuerySerializer(data=request.query_params)
    query_serializer.is_valid(raise_exception=True)
    params = query_serializer.validated_data
    return params['start_date'], params['end_date']


@extend_schema(
    parameters=PERIOD_PARAMETERS,
    responses={200: ProfitAndLossSerializer},
    description="Income and expenses by category with net profit and margin.",
    tags=['reports'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def profit_and_loss(request):
    """Profit and loss statement - thin HTTP handler."""
    account = resolve_request_account(request)
    start_date, end_date = _period(request)
    data = ReportQueries.profit_and_loss(account, start_date, end_date)
    return Response(ProfitAndLossSerializer(data).data)


@extend_schema(
    parameters=PERIOD_PARAMETERS,
    responses={200: CashFlowSerializer},
    description="Cash in and out with starting, monthly and ending balances.",
    tags=['reports'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def cash_flow(request):
    """Cash flow statement - thin HTTP handler."""
    account = resolve_request_account(request)
    start_date, end_date = _period(request)
    data = ReportQueries.cash_flow(account, start_date, end_date)
    return Response(CashFlowSerializer(data).data)


@extend_schema(
    parameters=PERIOD_PARAMETERS,
    responses={200: ExpenseReportSerializer},
    description="Expenses by category and payment source.",
    tags=['reports'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def expense_report(request):
    """Expense analysis - thin HTTP handler."""
    account = resolve_request_account(request)
    start_date, end_date = _period(request)
    data = ReportQueries.expense_report(account, start_date, end_date)
    return Response(ExpenseReportSerializer(data).data)


@extend_schema(
    parameters=[
        OpenApiParameter('end_date', OpenApiTypes.DATE, description='Last day of the week (default today)'),
    ],
    responses={200: WeeklySummarySerializer},
    description="Totals, top spending categories and overdue invoices for the last seven days.",
    tags=['reports'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def weekly_summary(request):
    """Weekly summary - same data as the Monday email."""
    account = resolve_request_account(request)
    query_serializer = WeeklySummaryQuerySerializer(data=request.query_params)
    query_serializer.is_valid(raise_exception=True)
    data = ReportQueries.weekly_summary(account, end_date=query_serializer.validated_data.get('end_date'))
    return Response(WeeklySummarySerializer(data).data)


@extend_schema(
    parameters=PERIOD_PARAMETERS + [
        OpenApiParameter('file_format', OpenApiTypes.STR, enum=['pdf', 'csv'], description='File format (default pdf)'),
    ],
    responses={
        (200, 'application/pdf'): OpenApiTypes.BINARY,
        (200, 'text/csv'): OpenApiTypes.STR,
    },
    description="Download the profit-loss, cash-flow or expenses report as PDF or CSV.",
    tags=['reports'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def export_report(request, report_type):
    """Report download - thin HTTP handler."""
    if report_type not in REPORT_TYPES:
        raise Http404(f"Unknown report: {report_type}")

    account = resolve_request_account(request)
    query_serializer = ReportExportQuerySerializer(data=request.query_params)
    query_serializer.is_valid(raise_exception=True)
    params = query_serializer.validated_data
    file_format = params['file_format']

    content = ReportExporter.export(account, report_type, params['start_date'], params['end_date'], file_format)

    response = HttpResponse(content, content_type=CONTENT_TYPES[file_format])
    file_name = ReportExporter.file_name(report_type, params['start_date'], params['end_date'], file_format)
    response['Content-Disposition'] = f'attachment; filename="{file_name}"'
    return response
