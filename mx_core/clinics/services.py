# mx_core/clinics/services.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from django.db import transaction

from mx_core.clinics.models import Clinic
from mx_core.common.api.exceptions import ConflictError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClinicUpdate:
    name: Optional[str] = None
    hci_code: Optional[str] = None
    registration_number: Optional[str] = None
    address: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None


def _blank_to_none(value: Optional[str]) -> Optional[str]:
    value = (value or "").strip()
    return value or None


def _assert_unique(*, hci_code: Optional[str], registration_number: Optional[str], exclude_id: UUID | None = None):
    qs = Clinic.objects.all()
    if exclude_id is not None:
        qs = qs.exclude(id=exclude_id)

    if hci_code and qs.filter(hci_code=hci_code).exists():
        raise ConflictError("HCI code already exists.")
    if registration_number and qs.filter(registration_number=registration_number).exists():
        raise ConflictError("Registration number already exists.")


class ClinicService:
    @staticmethod
    @transaction.atomic
    def create(
        *,
        name: str,
        hci_code: str | None = None,
        registration_number: str | None = None,
        address: str = "",
        phone: str = "",
        email: str = "",
    ) -> Clinic:
        hci_code = _blank_to_none(hci_code)
        registration_number = _blank_to_none(registration_number)
        _assert_unique(hci_code=hci_code, registration_number=registration_number)

        clinic = Clinic(
            name=name,
            hci_code=hci_code,
            registration_number=registration_number,
            address=address or "",
            phone=phone or "",
            email=email or "",
        )
        clinic.full_clean()
        clinic.save()

        logger.info("clinic %s created (hci=%s)", clinic.id, clinic.hci_code)
        return clinic

    @staticmethod
    @transaction.atomic
    def update(*, clinic_id: UUID, patch: ClinicUpdate) -> Clinic:
        clinic = Clinic.objects.select_for_update().get(id=clinic_id)

        hci_code = _blank_to_none(patch.hci_code) if patch.hci_code is not None else None
        registration_number = (
            _blank_to_none(patch.registration_number) if patch.registration_number is not None else None
        )
        _assert_unique(hci_code=hci_code, registration_number=registration_number, exclude_id=clinic.id)

        mapping = {
            "name": patch.name,
            "address": patch.address,
            "phone": patch.phone,
            "email": patch.email,
        }
        for field, value in mapping.items():
            if value is not None:
                setattr(clinic, field, value)

        # Explicit blank clears the identifier
        if patch.hci_code is not None:
            clinic.hci_code = hci_code
        if patch.registration_number is not None:
            clinic.registration_number = registration_number

        clinic.full_clean()
        clinic.save()
        return clinic

    @staticmethod
    @transaction.atomic
    def remove(*, clinic_id: UUID) -> None:
        from mx_core.iam.models import ClinicMembership, UserProfile

        clinic = Clinic.objects.select_for_update().get(id=clinic_id)

        has_users = (
            UserProfile.objects.filter(clinic_id=clinic.id).exists()
            or ClinicMembership.objects.filter(clinic_id=clinic.id).exists()
        )
        if has_users:
            raise ConflictError(
                "Cannot delete clinic with existing users. Please reassign or remove users first."
            )

        clinic.delete()
        logger.info("clinic %s deleted", clinic_id)
