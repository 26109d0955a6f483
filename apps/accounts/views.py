from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.pagination import PageNumberPagination

from .models import Account
from .serializers import AccountSerializer, AccountCreateSerializer
from .permissions import IsAccountOwner

from apps.accounts.services import (
    create_account,
    update_account,
    delete_account,
    switch_account,
    get_current_account,
    # Exceptions
    AccountLimitReachedError,
    AccountNotFoundError,
    InsufficientPermissionsError,
    NoActiveAccount,
)


class AccountPagination(PageNumberPagination):
    """Custom pagination for accounts."""
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


class AccountViewSet(viewsets.ModelViewSet):
    """
    ViewSet for Account CRUD operations.

    All business logic is handled by services.
    Views are thin HTTP handlers only.

    list: Get the user's accounts
    create: Create an account (free tier limited)
    retrieve: Get a specific account
    update: Update an account (owner only)
    partial_update: Partially update an account (owner only)
    destroy: Delete an account and all its data (owner only)
    switch: Make an account the current one
    current: Get the current account
    """

    serializer_class = AccountSerializer
    permission_classes = [IsAuthenticated]
    pagination_class = AccountPagination

    def get_queryset(self):
        """Return only accounts the user owns."""
        if getattr(self, 'swagger_fake_view', False):
            return Account.objects.none()
        return Account.objects.filter(owner=self.request.user)

    def get_serializer_class(self):
        if self.action in ['create', 'update', 'partial_update']:
            return AccountCreateSerializer
        return AccountSerializer

    def get_permissions(self):
        """Set permissions based on action."""
        if self.action in ['update', 'partial_update', 'destroy']:
            return [IsAuthenticated(), IsAccountOwner()]
        return [IsAuthenticated()]

    def create(self, request, *args, **kwargs):
        """Create a new account."""
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            account = create_account(
                owner=request.user,
                name=serializer.validated_data['name'],
                description=serializer.validated_data.get('description', ''),
                currency=serializer.validated_data.get('currency'),
            )
        except AccountLimitReachedError as e:
            return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)

        output_serializer = AccountSerializer(account, context={'request': request})
        return Response(output_serializer.data, status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        """Update account details."""
        partial = kwargs.pop('partial', False)
        account = self.get_object()
        serializer = self.get_serializer(data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)

        try:
            account = update_account(
                account_id=account.id,
                user=request.user,
                name=serializer.validated_data.get('name'),
                description=serializer.validated_data.get('description'),
                currency=serializer.validated_data.get('currency'),
            )
        except InsufficientPermissionsError as e:
            return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)

        output_serializer = AccountSerializer(account, context={'request': request})
        return Response(output_serializer.data)

    def destroy(self, request, *args, **kwargs):
        """Delete an account."""
        account = self.get_object()
        try:
            delete_account(account_id=account.id, user=request.user)
            return Response(status=status.HTTP_204_NO_CONTENT)
        except InsufficientPermissionsError as e:
            return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)

    @action(detail=True, methods=['post'])
    def switch(self, request, pk=None):
        """Make this account the current one."""
        try:
            account = switch_account(user=request.user, account_id=pk)
        except AccountNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)

        request.user.refresh_from_db(fields=['preferences'])
        return Response(AccountSerializer(account, context={'request': request}).data)

    @action(detail=False, methods=['get'])
    def current(self, request):
        """Get the current account."""
        account = get_current_account(user=request.user)
        if account is None:
            raise NoActiveAccount()
        return Response(AccountSerializer(account, context={'request': request}).data)
