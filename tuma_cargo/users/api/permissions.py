"""Role-based permission classes shared by every API module."""

from rest_framework.permissions import BasePermission

ROLE_USER = "user"
ROLE_ADMIN = "admin"
ROLE_SUPER_ADMIN = "super_admin"
ADMIN_ROLES = (ROLE_ADMIN, ROLE_SUPER_ADMIN)


def is_admin_user(user) -> bool:
    return bool(
        user
        and getattr(user, "is_authenticated", False)
        and getattr(user, "role", None) in ADMIN_ROLES,
    )


class _RolePermission(BasePermission):
    """Base helper to gate access by ``User.role``."""

    allowed_roles: tuple[str, ...] = ()

    def has_permission(self, request, view) -> bool:
        user = getattr(request, "user", None)
        if not (user and getattr(user, "is_authenticated", False)):
            return False
        return getattr(user, "role", None) in self.allowed_roles


class IsAdmin(_RolePermission):
    allowed_roles = ADMIN_ROLES


class IsSuperAdmin(_RolePermission):
    allowed_roles = (ROLE_SUPER_ADMIN,)


class IsOwnerOrAdmin(BasePermission):
    """Object-level check against ``obj.<owner_field>``."""

    owner_field = "user_id"

    def has_object_permission(self, request, view, obj) -> bool:
        user = request.user
        if is_admin_user(user):
            return True
        field = getattr(view, "owner_field", self.owner_field)
        return getattr(obj, field, None) == getattr(user, "id", None)
