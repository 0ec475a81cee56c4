from rest_framework.permissions import BasePermission


class IsSuperAdmin(BasePermission):
    """Allows access only to superadmins (role claim or Django superuser)"""
    message = 'Not authorized as a superadmin'

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and getattr(user, 'is_superadmin', False))
