# mx_core/common/middleware.py
from __future__ import annotations

from typing import Optional
from uuid import UUID

from django.http import JsonResponse
from django.utils.deprecation import MiddlewareMixin

from mx_core.common.api.exceptions import build_error_envelope, ensure_request_id
from mx_core.common.scope import Scope
from mx_core.iam.scope import INVALID_SCOPE_MSG, MISSING_SCOPE_MSG, NOT_A_MEMBER_MSG


def _parse_uuid(value: str) -> Optional[UUID]:
    try:
        return UUID(str(value))
    except (TypeError, ValueError):
        return None


class RequestIdMiddleware(MiddlewareMixin):
    """Attach request.request_id early and echo it back as X-Request-Id."""

    def process_request(self, request):
        ensure_request_id(request)

    def process_response(self, request, response):
        response["X-Request-Id"] = ensure_request_id(request)
        return response


class ClinicScopeMiddleware(MiddlewareMixin):
    """
    Enforces clinic scope for API requests made with a session user.

    Behavior:
      - Enforced for both /api/v1/* and /api/* (alias).
      - Most endpoints: X-Clinic-Id is required (400 if missing).
      - /me/: header OPTIONAL, but if provided it must be valid and the user a member.
      - Auth endpoints (login/refresh/logout), /clinics/, docs, schema and admin: never scoped.
      - Invalid UUID -> 400, not a member -> 403.
      - On success -> attaches request.scope and request.clinic_id.

    JWT requests are anonymous at this point; CookieOrHeaderJWTAuthentication
    applies the same checks once the token is validated.
    """

    CLINIC_META_KEYS = ("HTTP_X_CLINIC_ID",)

    ENFORCED_PREFIXES = ("/api/v1/", "/api/")

    PUBLIC_PATH_PREFIXES = (
        "/admin/",
        "/api/docs/",
        "/api/schema/",
    )

    AUTH_PATH_SUFFIXES = (
        "/auth/login/",
        "/auth/refresh/",
        "/auth/logout/",
    )

    ALLOW_NO_SCOPE_EXACT_PATHS = (
        "/api/v1/",
        "/api/",
    )

    ALLOW_NO_SCOPE_SUFFIXES = (
        "/me/",
    )

    # Clinics are managed across the whole system, not inside one clinic
    UNSCOPED_PATH_PREFIXES = (
        "/api/v1/clinics/",
        "/api/clinics/",
    )

    def _starts_with_any(self, path: str, prefixes: tuple[str, ...]) -> bool:
        return any(path.startswith(p) for p in prefixes)

    def _endswith_any(self, path: str, suffixes: tuple[str, ...]) -> bool:
        return any(path.endswith(s) for s in suffixes)

    def _get_meta_first(self, request, keys: tuple[str, ...]) -> Optional[str]:
        for k in keys:
            v = request.META.get(k)
            if v:
                return v
        return None

    def _json_error(self, request, *, status_code: int, code: str, message: str) -> JsonResponse:
        return JsonResponse(
            build_error_envelope(request=request, code=code, message=message, details=None),
            status=status_code,
        )

    def process_request(self, request):
        request.scope = None
        request.clinic_id = None

        path = getattr(request, "path", "") or ""

        if self._starts_with_any(path, self.PUBLIC_PATH_PREFIXES):
            return None

        if not self._starts_with_any(path, self.ENFORCED_PREFIXES):
            return None

        if path in self.ALLOW_NO_SCOPE_EXACT_PATHS:
            return None

        if self._endswith_any(path, self.AUTH_PATH_SUFFIXES):
            return None

        if self._starts_with_any(path, self.UNSCOPED_PATH_PREFIXES):
            return None

        # Token users are checked by the authentication class
        user = getattr(request, "user", None)
        if not user or not user.is_authenticated:
            return None

        clinic_raw = self._get_meta_first(request, self.CLINIC_META_KEYS)

        if not clinic_raw:
            if self._endswith_any(path, self.ALLOW_NO_SCOPE_SUFFIXES):
                return None
            return self._json_error(request, status_code=400, code="validation_error", message=MISSING_SCOPE_MSG)

        clinic_id = _parse_uuid(clinic_raw)
        if not clinic_id:
            return self._json_error(request, status_code=400, code="validation_error", message=INVALID_SCOPE_MSG)

        from mx_core.iam.services.membership import is_user_member_of_clinic

        if not is_user_member_of_clinic(user=user, clinic_id=clinic_id):
            return self._json_error(request, status_code=403, code="permission_denied", message=NOT_A_MEMBER_MSG)

        request.scope = Scope(clinic_id=clinic_id)
        request.clinic_id = clinic_id
        return None
