# tm_core/common/permissions.py

from __future__ import annotations

from rest_framework.permissions import BasePermission

# UserProfile.role values
ROLE_ADMIN = "admin"
ROLE_PATIENT = "patient"
ROLE_DOCTOR = "doctor"
ROLE_UNLISTED = "unlisted"


def profile_role(user) -> str | None:
    """
    Role of the authenticated caller's profile.
    Django superusers are treated as admin even without a profile row.
    """
    if not user or not getattr(user, "is_authenticated", False):
        return None
    if getattr(user, "is_superuser", False):
        return ROLE_ADMIN
    profile = getattr(user, "profile", None)
    return getattr(profile, "role", None)


class BaseRolePermission(BasePermission):
    """
    Role gate for a whole view.
    ADMIN bypass; otherwise the caller's role must be in allowed_roles.
    """
    message = "You do not have permission to perform this action."
    allowed_roles: frozenset[str] = frozenset()

    def has_permission(self, request, view) -> bool:
        role = profile_role(request.user)
        if role is None:
            return False
        if role == ROLE_ADMIN:
            return True
        return role in self.allowed_roles


class IsPatient(BaseRolePermission):
    message = "Only patients can perform this action."
    allowed_roles = frozenset({ROLE_PATIENT})


class IsDoctor(BaseRolePermission):
    message = "Only doctors can perform this action."
    allowed_roles = frozenset({ROLE_DOCTOR})


class IsPatientOrDoctor(BaseRolePermission):
    allowed_roles = frozenset({ROLE_PATIENT, ROLE_DOCTOR})


class IsAdminRole(BaseRolePermission):
    message = "Admin role required."
    allowed_roles = frozenset()
