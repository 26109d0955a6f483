from rest_framework import permissions


class IsAccountOwner(permissions.BasePermission):
    """
    Permission: User must own the account.
    """

    message = 'Only the account owner can perform this action.'

    def has_object_permission(self, request, view, obj):
        # obj is an Account instance
        return obj.is_owned_by(request.user)
