# mx_core/common/scope.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from rest_framework.exceptions import ValidationError

from mx_core.iam.scope import HDR_CLINIC, INVALID_SCOPE_MSG, MISSING_SCOPE_MSG


@dataclass(frozen=True)
class Scope:
    clinic_id: UUID


def _parse_uuid(value) -> Optional[UUID]:
    try:
        return UUID(str(value))
    except (TypeError, ValueError):
        return None


def _get_header(request, name: str) -> Optional[str]:
    """
    request.headers is case-insensitive; fallback to META for pytest/client.
    """
    headers = getattr(request, "headers", None)
    if headers is not None:
        v = headers.get(name)
        if v:
            return v

    meta_key = "HTTP_" + name.upper().replace("-", "_")
    return request.META.get(meta_key)


def resolve_scope(request) -> Optional[Scope]:
    """
    Returns Scope when the clinic header (or middleware value) is present and valid.
    Returns None when no scope was sent. Raises 400 on a malformed UUID.
    """
    # Prefer middleware/auth-attached value if present
    attached = getattr(request, "clinic_id", None)
    if attached:
        cid = _parse_uuid(attached)
        if cid:
            return Scope(clinic_id=cid)

    raw = _get_header(request, HDR_CLINIC)
    if not raw:
        return None

    cid = _parse_uuid(raw)
    if not cid:
        raise ValidationError(INVALID_SCOPE_MSG)
    return Scope(clinic_id=cid)


def require_scope(request) -> Scope:
    """
    Views call this to obtain the active clinic.

    Does NOT check membership: membership is enforced by middleware and the
    authentication class, so this stays free of iam model imports.
    """
    scope = resolve_scope(request)
    if scope is None:
        raise ValidationError(MISSING_SCOPE_MSG)

    request.clinic_id = scope.clinic_id
    request.scope = scope
    return scope
