from rest_framework import permissions


class IsManager(permissions.BasePermission):
    """
    Permission to only allow managers (gerant / superviseur)
    """
    message = 'Only managers can perform this action.'

    def has_permission(self, request, view):
        user = request.user
        if not user or not user.is_authenticated:
            return False
        return user.is_manager


class ManagerWriteMixin:
    """Read for authenticated users, write for managers"""

    write_methods = ['POST', 'PUT', 'PATCH', 'DELETE']

    def get_permissions(self):
        if self.request.method in self.write_methods:
            return [IsManager()]
        return [permissions.IsAuthenticated()]
