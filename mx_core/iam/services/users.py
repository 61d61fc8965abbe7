# mx_core/iam/services/users.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from django.contrib.auth import get_user_model
from django.db import transaction

from mx_core.clinics.models import Clinic
from mx_core.common.api.exceptions import ConflictError
from mx_core.common.errors import InvalidArgument
from mx_core.iam.constants import UserRole, UserStatus
from mx_core.iam.models import ClinicMembership, UserProfile
from mx_core.iam.selectors import clinic_users

logger = logging.getLogger(__name__)

STAFF_ROLES = {UserRole.DOCTOR, UserRole.NURSE}


@dataclass(frozen=True)
class UserUpdate:
    email: Optional[str] = None
    name: Optional[str] = None
    role: Optional[str] = None
    status: Optional[str] = None
    mcr_number: Optional[str] = None
    password: Optional[str] = None


def _normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def _normalize_mcr(mcr_number: str | None) -> str | None:
    return (mcr_number or "").strip().upper() or None


def _assert_unique(*, email: str | None, mcr_number: str | None, exclude_user_id: int | None = None) -> None:
    User = get_user_model()
    if email:
        qs = User.objects.filter(email__iexact=email)
        if exclude_user_id is not None:
            qs = qs.exclude(id=exclude_user_id)
        if qs.exists():
            raise ConflictError("Email already exists.")

    if mcr_number:
        qs = UserProfile.objects.filter(mcr_number=mcr_number)
        if exclude_user_id is not None:
            qs = qs.exclude(user_id=exclude_user_id)
        if qs.exists():
            raise ConflictError("MCR number already exists.")


def _lock_in_clinic(*, profile_id: UUID, clinic_id: UUID) -> UserProfile:
    if not clinic_users(clinic_id=clinic_id).filter(id=profile_id).exists():
        raise UserProfile.DoesNotExist("User not found in this clinic.")
    return UserProfile.objects.select_for_update().select_related("user").get(id=profile_id)


def _ensure_membership(profile: UserProfile, clinic_id: UUID, *, is_primary: bool) -> ClinicMembership:
    m, created = ClinicMembership.objects.get_or_create(
        clinic_id=clinic_id,
        profile=profile,
        defaults={"is_primary": is_primary, "is_active": True},
    )
    if not created and not m.is_active:
        m.is_active = True
        m.save(update_fields=["is_active"])
    return m


class UserService:
    @staticmethod
    @transaction.atomic
    def create(
        *,
        clinic_id: UUID,
        email: str,
        password: str,
        name: str,
        role: str,
        mcr_number: str | None = None,
    ) -> UserProfile:
        email = _normalize_email(email)
        mcr_number = _normalize_mcr(mcr_number)

        if role == UserRole.DOCTOR and not mcr_number:
            raise InvalidArgument("MCR number is required for doctors.")

        _assert_unique(email=email, mcr_number=mcr_number)

        User = get_user_model()
        user = User.objects.create_user(username=email, email=email, password=password)

        profile = UserProfile.objects.create(
            user=user,
            name=name,
            role=role,
            status=UserStatus.ACTIVE,
            mcr_number=mcr_number,
            clinic_id=clinic_id,
        )

        if role in STAFF_ROLES:
            _ensure_membership(profile, clinic_id, is_primary=True)

        logger.info("user %s created with role %s in clinic %s", user.id, role, clinic_id)
        return profile

    @staticmethod
    @transaction.atomic
    def update(*, clinic_id: UUID, profile_id: UUID, patch: UserUpdate) -> UserProfile:
        profile = _lock_in_clinic(profile_id=profile_id, clinic_id=clinic_id)
        user = profile.user

        email = _normalize_email(patch.email) if patch.email is not None else None
        mcr_number = _normalize_mcr(patch.mcr_number)
        _assert_unique(email=email, mcr_number=mcr_number, exclude_user_id=user.id)

        user_fields: list[str] = []
        if email:
            user.email = email
            user.username = email
            user_fields += ["email", "username"]
        if patch.password:
            user.set_password(patch.password)
            user_fields.append("password")
        if patch.status is not None:
            user.is_active = patch.status == UserStatus.ACTIVE
            user_fields.append("is_active")
        if user_fields:
            user.save(update_fields=user_fields)

        if patch.name is not None:
            profile.name = patch.name
        if patch.role is not None:
            profile.role = patch.role
        if patch.status is not None:
            profile.status = patch.status
        if patch.mcr_number is not None:
            profile.mcr_number = mcr_number

        if profile.role == UserRole.DOCTOR and not profile.mcr_number:
            raise InvalidArgument("MCR number is required for doctors.")

        profile.save()

        if profile.role in STAFF_ROLES:
            _ensure_membership(profile, clinic_id, is_primary=profile.clinic_id == clinic_id)
        return profile

    @staticmethod
    @transaction.atomic
    def remove(*, clinic_id: UUID, profile_id: UUID) -> None:
        """
        Deactivate rather than delete: submissions and audit rows keep pointing at the user.
        """
        profile = _lock_in_clinic(profile_id=profile_id, clinic_id=clinic_id)
        profile.status = UserStatus.INACTIVE
        profile.save(update_fields=["status", "updated_at"])

        profile.user.is_active = False
        profile.user.save(update_fields=["is_active"])

        ClinicMembership.objects.filter(profile=profile).update(is_active=False)
        logger.info("user %s deactivated", profile.user_id)

    @staticmethod
    @transaction.atomic
    def assign_to_clinic(*, profile_id: UUID, clinic_id: UUID, is_primary: bool = False) -> ClinicMembership:
        profile = UserProfile.objects.get(id=profile_id)
        if profile.role not in STAFF_ROLES:
            raise InvalidArgument("Only doctors and nurses can be assigned to clinics.")

        Clinic.objects.get(id=clinic_id)

        if ClinicMembership.objects.filter(profile=profile, clinic_id=clinic_id, is_active=True).exists():
            raise ConflictError("User is already assigned to this clinic.")

        if is_primary:
            ClinicMembership.objects.filter(profile=profile, is_primary=True).update(is_primary=False)

        m = _ensure_membership(profile, clinic_id, is_primary=is_primary)
        if is_primary and not m.is_primary:
            m.is_primary = True
            m.save(update_fields=["is_primary"])
        return m

    @staticmethod
    @transaction.atomic
    def set_default_doctor(*, user, clinic_id: UUID, doctor_profile_id: UUID | None) -> UserProfile:
        profile = UserProfile.objects.select_for_update().get(user_id=user.id)

        if doctor_profile_id is None:
            profile.default_doctor = None
        else:
            doctor = UserProfile.objects.filter(
                id=doctor_profile_id,
                role=UserRole.DOCTOR,
                status=UserStatus.ACTIVE,
                memberships__clinic_id=clinic_id,
                memberships__is_active=True,
            ).first()
            if doctor is None:
                raise InvalidArgument("Doctor not found or inactive in this clinic.")
            profile.default_doctor = doctor

        profile.save(update_fields=["default_doctor", "updated_at"])
        return profile
