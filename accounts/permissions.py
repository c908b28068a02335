# accounts/permissions.py
from rest_framework.permissions import BasePermission, SAFE_METHODS

from .models import User


def _has_role(user, *roles):
    return bool(user and user.is_authenticated and getattr(user, "role", None) in roles)


class IsAdmin(BasePermission):
    def has_permission(self, request, view):
        return _has_role(request.user, User.Roles.ADMIN) or bool(request.user and request.user.is_staff)


class IsStudent(BasePermission):
    """Only students sit tests; attempts are always owned by request.user."""
    def has_permission(self, request, view):
        return _has_role(request.user, User.Roles.STUDENT)


class IsAdminOrTeacher(BasePermission):
    def has_permission(self, request, view):
        return IsAdmin().has_permission(request, view) or _has_role(request.user, User.Roles.TEACHER)


class AuthorCanWriteOthersRead(BasePermission):
    """
    - Admin / Teacher: create and edit blueprints
    - Other authenticated users: read-only
    """
    def has_permission(self, request, view):
        if not (request.user and request.user.is_authenticated):
            return False
        if request.method in SAFE_METHODS:
            return True
        return IsAdminOrTeacher().has_permission(request, view)
