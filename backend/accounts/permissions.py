from rest_framework import permissions

ADMIN_ROLES = ('admin', 'superadmin')


def can_delete(user, created_by_id) -> bool:
    """
    Admins may delete any record; everyone else only the records they created.
    """
    if not user or not user.is_authenticated:
        return False
    if getattr(user, 'role', None) in ADMIN_ROLES:
        return True
    return created_by_id is not None and created_by_id == user.pk

class IsAdminRole(permissions.BasePermission):
    """
    Custom permission to only allow admin and superadmin users to perform certain actions.
    """
    def has_permission(self, request, view):
        return request.user.is_authenticated and request.user.role in ADMIN_ROLES

class IsSuperAdmin(permissions.BasePermission):
    """
    Custom permission to only allow superadmin users to perform certain actions.
    """
    def has_permission(self, request, view):
        return request.user.is_authenticated and request.user.role == 'superadmin'

class CanManageRates(permissions.BasePermission):
    """
    Everyone signed in may read rate tables; only admins may write them.
    """
    def has_permission(self, request, view):
        if not request.user.is_authenticated:
            return False
        if request.method in permissions.SAFE_METHODS:
            return True
        return request.user.role in ADMIN_ROLES

class CanDeleteRecords(permissions.BasePermission):
    """
    Object-level delete check backed by can_delete(); other methods pass through.
    """
    def has_object_permission(self, request, view, obj):
        if request.method != 'DELETE':
            return True
        return can_delete(request.user, getattr(obj, 'created_by_id', None))
