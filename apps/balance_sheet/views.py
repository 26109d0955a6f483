from rest_framework import viewsets
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.pagination import PageNumberPagination
from drf_spectacular.utils import extend_schema

from apps.accounts.scoping import AccountScopedMixin, resolve_request_account
from .models import Asset, Liability
from .serializers import AssetSerializer, LiabilitySerializer, BalanceSheetSummarySerializer
from .services import balance_sheet_summary


class BalanceSheetPagination(PageNumberPagination):
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


class AssetViewSet(AccountScopedMixin, viewsets.ModelViewSet):
    """
    Assets of the active account.

    list: Get assets (filter with ?asset_type=)
    create / retrieve / update / destroy: Manage an asset
    """

    queryset = Asset.objects.all()
    serializer_class = AssetSerializer
    permission_classes = [IsAuthenticated]
    pagination_class = BalanceSheetPagination

    def get_queryset(self):
        queryset = super().get_queryset()
        asset_type = self.request.query_params.get('asset_type')
        if asset_type:
            queryset = queryset.filter(asset_type=asset_type)
        return queryset


class LiabilityViewSet(AccountScopedMixin, viewsets.ModelViewSet):
    """
    Liabilities of the active account.

    list: Get liabilities (filter with ?liability_type=)
    create / retrieve / update / destroy: Manage a liability
    """

    queryset = Liability.objects.all()
    serializer_class = LiabilitySerializer
    permission_classes = [IsAuthenticated]
    pagination_class = BalanceSheetPagination

    def get_queryset(self):
        queryset = super().get_queryset()
        liability_type = self.request.query_params.get('liability_type')
        if liability_type:
            queryset = queryset.filter(liability_type=liability_type)
        return queryset


@extend_schema(
    responses={200: BalanceSheetSummarySerializer},
    tags=['balance-sheet'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def summary(request):
    """Total assets, total liabilities and net worth."""
    account = resolve_request_account(request)
    data = balance_sheet_summary(account=account)
    return Response(BalanceSheetSummarySerializer(data).data)
