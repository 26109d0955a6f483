from datetime import date

from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema, OpenApiParameter
from drf_spectacular.types import OpenApiTypes

from apps.accounts.scoping import resolve_request_account
from .serializers import (
    TaxYearQuerySerializer,
    TaxSettingsSerializer,
    TaxSummarySerializer,
    DeductionsSerializer,
)
from .services import get_tax_settings, calculate_tax_summary, deductible_expenses


YEAR_PARAMETER = OpenApiParameter('year', OpenApiTypes.INT, description='Tax year (default: current year)')


@extend_schema(methods=['GET'], responses={200: TaxSettingsSerializer}, tags=['tax'])
@extend_schema(
    methods=['PUT', 'PATCH'],
    request=TaxSettingsSerializer,
    responses={200: TaxSettingsSerializer},
    tags=['tax'],
)
@api_view(['GET', 'PUT', 'PATCH'])
@permission_classes([IsAuthenticated])
def tax_settings(request):
    """The current user's tax settings."""
    settings_obj = get_tax_settings(user=request.user)

    if request.method == 'GET':
        return Response(TaxSettingsSerializer(settings_obj).data)

    serializer = TaxSettingsSerializer(
        settings_obj,
        data=request.data,
        partial=request.method == 'PATCH'
    )
    serializer.is_valid(raise_exception=True)
    serializer.save()
    return Response(serializer.data)


@extend_schema(parameters=[YEAR_PARAMETER], responses={200: TaxSummarySerializer}, tags=['tax'])
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def tax_summary(request):
    """Estimated tax and VAT for the active account."""
    query_serializer = TaxYearQuerySerializer(data=request.query_params)
    query_serializer.is_valid(raise_exception=True)

    account = resolve_request_account(request)
    data = calculate_tax_summary(
        account=account,
        tax_settings=get_tax_settings(user=request.user),
        year=query_serializer.validated_data.get('year') or date.today().year,
    )
    return Response(TaxSummarySerializer(data).data)


@extend_schema(
    parameters=[
        YEAR_PARAMETER,
        OpenApiParameter('tax_category', OpenApiTypes.STR, description='Only this tax category'),
    ],
    responses={200: DeductionsSerializer},
    tags=['tax'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def deductions(request):
    """Tax-deductible expenses grouped by tax category."""
    query_serializer = TaxYearQuerySerializer(data=request.query_params)
    query_serializer.is_valid(raise_exception=True)
    params = query_serializer.validated_data

    account = resolve_request_account(request)
    data = deductible_expenses(
        account=account,
        year=params.get('year') or date.today().year,
        tax_category=params.get('tax_category'),
    )
    return Response(DeductionsSerializer(data).data)
