"""
Request-level account resolution.

Every account-scoped endpoint works against one "active" account, picked in
this order:

1. ``?account=<uuid>`` query parameter
2. ``X-Account-ID`` request header
3. the user's current account (see ``get_current_account``)

ViewSets mix in ``AccountScopedMixin`` to filter their queryset to the
active account and stamp it on created objects. Function views call
``resolve_request_account`` directly.
"""

from .services import (
    get_account_for_user,
    get_current_account,
    AccountNotFoundError,
    NoActiveAccount,
    AccountNotAccessible,
)

ACCOUNT_QUERY_PARAM = 'account'
ACCOUNT_HEADER = 'X-Account-ID'


def resolve_request_account(request):
    """
    Return the active account for ``request``.

    Raises:
        AccountNotAccessible: If an explicit account id is not owned by the user
        NoActiveAccount: If the user owns no account at all
    """
    account_id = (
        request.query_params.get(ACCOUNT_QUERY_PARAM)
        or request.headers.get(ACCOUNT_HEADER)
    )
    if account_id:
        try:
            return get_account_for_user(account_id=account_id, user=request.user)
        except AccountNotFoundError:
            raise AccountNotAccessible()

    account = get_current_account(user=request.user)
    if account is None:
        raise NoActiveAccount()
    return account


class AccountScopedMixin:
    """
    Restrict a ViewSet to the request's active account.

    The resolved account is cached on the view and exposed to serializers
    as ``context['account']``.
    """

    def get_account(self):
        if not hasattr(self, '_active_account'):
            self._active_account = resolve_request_account(self.request)
        return self._active_account

    def get_queryset(self):
        # Schema generation runs without a real user
        if getattr(self, 'swagger_fake_view', False):
            return super().get_queryset().none()
        return super().get_queryset().filter(account=self.get_account())

    def get_serializer_context(self):
        context = super().get_serializer_context()
        request = context.get('request')
        if request is not None and request.user.is_authenticated:
            context['account'] = self.get_account()
        return context

    def perform_create(self, serializer):
        serializer.save(account=self.get_account())
