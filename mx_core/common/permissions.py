# mx_core/common/permissions.py

from __future__ import annotations

from rest_framework.permissions import SAFE_METHODS, BasePermission

from mx_core.iam.constants import UserRole, UserStatus

ROLE_ADMIN = UserRole.ADMIN.value
ROLE_DOCTOR = UserRole.DOCTOR.value
ROLE_NURSE = UserRole.NURSE.value

ALL_ROLES = {ROLE_ADMIN, ROLE_DOCTOR, ROLE_NURSE}


def user_role(user) -> str | None:
    """
    Resolve the single role of an authenticated user.

    - superuser -> admin
    - otherwise UserProfile.role (inactive profiles have no role)
    """
    if not user or not getattr(user, "is_authenticated", False):
        return None

    if getattr(user, "is_superuser", False):
        return ROLE_ADMIN

    profile = getattr(user, "mx_profile", None)
    if profile is None or profile.status != UserStatus.ACTIVE:
        return None
    return profile.role


class BaseRolePermission(BasePermission):
    """
    Role-based access per ViewSet action.

    - Requires an authenticated user with an active profile.
    - Uses allowed_roles_per_action; unknown SAFE actions fall back to list/retrieve.
    - Unknown unsafe actions are denied.

    Admin has no blanket bypass: each map lists admin where allowed
    (approval actions stay doctor-only).
    """
    message = "You do not have permission to perform this action."

    allowed_roles_per_action: dict[str, set[str]] = {
        "list": ALL_ROLES,
        "retrieve": ALL_ROLES,
        "create": {ROLE_ADMIN},
        "update": {ROLE_ADMIN},
        "partial_update": {ROLE_ADMIN},
        "destroy": {ROLE_ADMIN},
    }

    def _infer_action(self, request, view) -> str | None:
        action = getattr(view, "action", None)
        if action:
            return action

        kwargs = getattr(view, "kwargs", {}) or {}
        is_detail = "pk" in kwargs or "id" in kwargs

        method = request.method.upper()
        if method in ("GET", "HEAD", "OPTIONS"):
            return "retrieve" if is_detail else "list"
        if method == "POST":
            return "create"
        if method == "PUT":
            return "update"
        if method == "PATCH":
            return "partial_update"
        if method == "DELETE":
            return "destroy"
        return None

    def has_permission(self, request, view) -> bool:
        role = user_role(request.user)
        if role is None:
            return False

        action = self._infer_action(request, view)
        allowed = self.allowed_roles_per_action.get(action)

        if allowed is None and request.method in SAFE_METHODS:
            kwargs = getattr(view, "kwargs", {}) or {}
            read_action = "retrieve" if ("pk" in kwargs or "id" in kwargs) else "list"
            allowed = self.allowed_roles_per_action.get(read_action)

        if allowed is None:
            return False
        return role in allowed

    def has_object_permission(self, request, view, obj) -> bool:
        return self.has_permission(request, view)


class SubmissionPermission(BaseRolePermission):
    """
    Nurses and doctors author submissions; admins read and correct them.
    Ownership rules (creator-or-admin) live in the submission lifecycle.
    """
    allowed_roles_per_action = {
        "list": ALL_ROLES,
        "retrieve": ALL_ROLES,
        "drafts": {ROLE_DOCTOR, ROLE_NURSE, ROLE_ADMIN},
        "rejected": {ROLE_DOCTOR, ROLE_NURSE, ROLE_ADMIN},
        "history": ALL_ROLES,
        "create": {ROLE_DOCTOR, ROLE_NURSE},
        "update": ALL_ROLES,
        "partial_update": ALL_ROLES,
        "submit": ALL_ROLES,
        "pdf": ALL_ROLES,
    }


class ApprovalPermission(BaseRolePermission):
    """Approval queue is doctor-only."""
    allowed_roles_per_action = {
        "list": {ROLE_DOCTOR},
        "rejected": {ROLE_DOCTOR},
        "approve": {ROLE_DOCTOR},
        "reject": {ROLE_DOCTOR},
    }


class ClinicPermission(BaseRolePermission):
    allowed_roles_per_action = {
        "list": {ROLE_ADMIN},
        "retrieve": {ROLE_ADMIN},
        "create": {ROLE_ADMIN},
        "update": {ROLE_ADMIN},
        "partial_update": {ROLE_ADMIN},
        "destroy": {ROLE_ADMIN},
        "doctors": {ROLE_ADMIN, ROLE_NURSE},
        "assign_doctor": {ROLE_ADMIN},
        "nurses": {ROLE_ADMIN},
    }


class UserPermission(BaseRolePermission):
    allowed_roles_per_action = {
        "list": {ROLE_ADMIN},
        "retrieve": {ROLE_ADMIN},
        "create": {ROLE_ADMIN},
        "update": {ROLE_ADMIN},
        "partial_update": {ROLE_ADMIN},
        "destroy": {ROLE_ADMIN},
        "doctors": ALL_ROLES,
    }


class PatientPermission(BaseRolePermission):
    allowed_roles_per_action = {
        "lookup": {ROLE_DOCTOR, ROLE_NURSE, ROLE_ADMIN},
    }


class AuditPermission(BaseRolePermission):
    """Audit log access"""
    allowed_roles_per_action = {
        "list": {ROLE_ADMIN},
        "retrieve": {ROLE_ADMIN},
    }
