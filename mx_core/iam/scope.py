# mx_core/iam/scope.py
from __future__ import annotations

from uuid import UUID

from rest_framework.exceptions import PermissionDenied, ValidationError

HDR_CLINIC = "X-Clinic-Id"

MISSING_SCOPE_MSG = "Missing scope header. Provide X-Clinic-Id."
INVALID_SCOPE_MSG = "Invalid scope header. X-Clinic-Id must be a valid UUID."
NOT_A_MEMBER_MSG = "You do not have access to the selected clinic."


def _get_header(request, name: str) -> str | None:
    # request.headers is case-insensitive; returns None if missing
    headers = getattr(request, "headers", None)
    if headers is None:
        return None
    return headers.get(name)


def resolve_clinic_from_headers(request) -> UUID | None:
    """
    Reads X-Clinic-Id. Returns None when absent, raises 400 when not a UUID.
    """
    raw = _get_header(request, HDR_CLINIC)
    if not raw:
        return None
    try:
        return UUID(str(raw))
    except (TypeError, ValueError):
        raise ValidationError(INVALID_SCOPE_MSG)


def require_clinic_from_headers(request) -> UUID:
    clinic_id = resolve_clinic_from_headers(request)
    if clinic_id is None:
        raise ValidationError(MISSING_SCOPE_MSG)
    return clinic_id


def assert_user_membership(user, clinic_id: UUID) -> None:
    """
    Ensures user may act inside clinic_id. Raises 403 if not.
    """
    from mx_core.iam.services.membership import is_user_member_of_clinic

    if not user or not getattr(user, "is_authenticated", False):
        raise PermissionDenied("Authentication required to set scope.")

    if not is_user_member_of_clinic(user=user, clinic_id=clinic_id):
        raise PermissionDenied(NOT_A_MEMBER_MSG)


def apply_scope_from_headers(request, user=None) -> UUID | None:
    """
    Used by CookieOrHeaderJWTAuthentication.

    If X-Clinic-Id is present: validates it, verifies membership and sets
    request.clinic_id. Otherwise returns None and does nothing.
    """
    clinic_id = resolve_clinic_from_headers(request)
    if clinic_id is None:
        return None

    u = user or getattr(request, "user", None)
    assert_user_membership(u, clinic_id)

    request.clinic_id = clinic_id
    return clinic_id
