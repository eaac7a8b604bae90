# apps/accounts/permissions.py
from rest_framework import permissions

from .roles import has_role, User


class RolePermission(permissions.BasePermission):
    """DRF permission: authenticated user with one of ``roles`` (admin always passes)."""
    roles: tuple = ()
    message = "Недостаточно прав"

    def has_permission(self, request, view):
        user = request.user
        if not (user and user.is_authenticated):
            return False
        return has_role(user, *self.roles)


class IsAdminRole(RolePermission):
    roles = (User.ROLE_ADMIN,)
    message = "Требуется роль администратора"


class IsClient(RolePermission):
    roles = (User.ROLE_CLIENT,)
    message = "Требуется роль клиента"


class IsGruzchik(RolePermission):
    roles = (User.ROLE_GRUZCHIK,)
    message = "Требуется роль грузчика"
