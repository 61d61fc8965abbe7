# mx_core/audit/api/views.py
from __future__ import annotations

from uuid import UUID

from django.utils.dateparse import parse_date
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import viewsets
from rest_framework.exceptions import ValidationError

from mx_core.audit.api.serializers import AuditLogSerializer
from mx_core.audit.models import AuditLog
from mx_core.audit.selectors import list_audit_logs
from mx_core.common.api.pagination import paginate
from mx_core.common.permissions import AuditPermission
from mx_core.common.scope import require_scope
from mx_core.iam.services.membership import actor_for
from mx_core.submissions.constants import AuditEventType


def _parse_date(value: str | None, name: str):
    if not value:
        return None
    try:
        parsed = parse_date(value)
    except ValueError:
        parsed = None
    if parsed is None:
        raise ValidationError({name: "Invalid date (YYYY-MM-DD expected)."})
    return parsed


class AuditLogViewSet(viewsets.GenericViewSet):
    """
    Clinic-wide audit log for admins (scoped).
    """
    permission_classes = [AuditPermission]

    serializer_class = AuditLogSerializer
    queryset = AuditLog.objects.none()

    @extend_schema(
        tags=["Audit"],
        responses={200: AuditLogSerializer(many=True)},
        parameters=[
            OpenApiParameter("submission_id", OpenApiTypes.UUID, OpenApiParameter.QUERY, required=False),
            OpenApiParameter(
                "event_type",
                OpenApiTypes.STR,
                OpenApiParameter.QUERY,
                required=False,
                enum=AuditEventType.values,
            ),
            OpenApiParameter("user_id", OpenApiTypes.INT, OpenApiParameter.QUERY, required=False),
            OpenApiParameter("from_date", OpenApiTypes.DATE, OpenApiParameter.QUERY, required=False),
            OpenApiParameter("to_date", OpenApiTypes.DATE, OpenApiParameter.QUERY, required=False),
        ],
    )
    def list(self, request):
        scope = require_scope(request)
        actor_for(request.user, scope.clinic_id)

        params = request.query_params

        submission_id = None
        if params.get("submission_id"):
            try:
                submission_id = UUID(str(params["submission_id"]))
            except ValueError:
                raise ValidationError({"submission_id": "Invalid UUID."})

        event_type = params.get("event_type") or None
        if event_type and event_type not in AuditEventType.values:
            raise ValidationError({"event_type": "Unknown event type."})

        user_id = None
        if params.get("user_id"):
            try:
                user_id = int(params["user_id"])
            except ValueError:
                raise ValidationError({"user_id": "Invalid user id (int expected)."})

        qs = list_audit_logs(
            clinic_id=scope.clinic_id,
            submission_id=submission_id,
            event_type=event_type,
            user_id=user_id,
            from_date=_parse_date(params.get("from_date"), "from_date"),
            to_date=_parse_date(params.get("to_date"), "to_date"),
        )
        return paginate(request, qs, AuditLogSerializer)
