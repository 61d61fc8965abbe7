# mx_core/clinics/selectors.py
from __future__ import annotations

from uuid import UUID

from django.db.models import QuerySet

from mx_core.clinics.models import Clinic
from mx_core.iam.constants import UserRole, UserStatus
from mx_core.iam.models import ClinicMembership


def all_clinics() -> QuerySet[Clinic]:
    return Clinic.objects.all().order_by("name")


def clinic_by_id(*, clinic_id: UUID) -> Clinic:
    return Clinic.objects.get(id=clinic_id)


def clinic_members(*, clinic_id: UUID, role: str, active_only: bool = True) -> QuerySet[ClinicMembership]:
    """
    Memberships of `role` in the clinic, ordered by name.
    Used for the doctors/nurses listings and the assign-doctor picker.
    """
    qs = ClinicMembership.objects.select_related("profile", "profile__user").filter(
        clinic_id=clinic_id,
        profile__role=role,
    )
    if active_only:
        qs = qs.filter(is_active=True, profile__status=UserStatus.ACTIVE)
    return qs.order_by("profile__name")


def clinic_doctors(*, clinic_id: UUID) -> QuerySet[ClinicMembership]:
    return clinic_members(clinic_id=clinic_id, role=UserRole.DOCTOR)


def clinic_nurses(*, clinic_id: UUID) -> QuerySet[ClinicMembership]:
    return clinic_members(clinic_id=clinic_id, role=UserRole.NURSE)
