# mx_core/iam/selectors.py
from __future__ import annotations

from uuid import UUID

from django.db.models import Q, QuerySet

from mx_core.iam.models import UserProfile


def clinic_users(*, clinic_id: UUID) -> QuerySet[UserProfile]:
    """
    Users working at a clinic: home clinic (admins, most nurses) or an
    active membership (doctors covering several clinics).
    """
    return (
        UserProfile.objects.select_related("user", "clinic")
        .prefetch_related("memberships__clinic")
        .filter(Q(clinic_id=clinic_id) | Q(memberships__clinic_id=clinic_id, memberships__is_active=True))
        .distinct()
        .order_by("name")
    )
