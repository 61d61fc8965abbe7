# mx_core/audit/selectors.py
from __future__ import annotations

from datetime import date
from uuid import UUID

from django.db.models import QuerySet

from mx_core.audit.models import AuditLog


def list_audit_logs(
    *,
    clinic_id: UUID,
    submission_id: UUID | None = None,
    event_type: str | None = None,
    user_id: int | None = None,
    from_date: date | None = None,
    to_date: date | None = None,
) -> QuerySet[AuditLog]:
    qs = AuditLog.objects.select_related("user", "user__mx_profile").filter(clinic_id=clinic_id)

    if submission_id:
        qs = qs.filter(submission_id=submission_id)
    if event_type:
        qs = qs.filter(event_type=event_type)
    if user_id is not None:
        qs = qs.filter(user_id=user_id)
    if from_date:
        qs = qs.filter(timestamp__date__gte=from_date)
    if to_date:
        qs = qs.filter(timestamp__date__lte=to_date)

    return qs.order_by("-timestamp")


def audit_trail(*, submission_id: UUID) -> QuerySet[AuditLog]:
    """Events of one submission, newest first."""
    return (
        AuditLog.objects.select_related("user", "user__mx_profile")
        .filter(submission_id=submission_id)
        .order_by("-timestamp")
    )
