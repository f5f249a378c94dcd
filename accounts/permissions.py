"""Custom permissions for the application"""
from rest_framework import permissions


class HasRequiredPermissions(permissions.BasePermission):
    """
    Permission to only allow users holding every Django permission listed in
    the view's `required_permissions`. Superusers always pass.
    """

    message = 'You do not have permission to perform this action.'

    def has_permission(self, request, view):
        user = request.user
        if not (user and user.is_authenticated):
            return False
        if user.is_superuser:
            return True
        required = getattr(view, 'required_permissions', None) or []
        return user.has_perms(required)
