# mx_core/patients/selectors.py
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Optional
from uuid import UUID

from django.db.models import F

from mx_core.common import nric
from mx_core.submissions.models import MedicalSubmission


@dataclass(frozen=True)
class RequiredTests:
    pregnancy: bool = True
    syphilis: bool = True
    hiv: bool = False
    chest_xray: bool = False


@dataclass(frozen=True)
class PatientInfo:
    nric: str
    name: str
    gender: Optional[str] = None
    last_height: Optional[str] = None
    last_weight: Optional[str] = None
    last_exam_date: Optional[date] = None
    required_tests: RequiredTests = field(default_factory=RequiredTests)


def _flag(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in {"1", "true", "yes", "y", "on"}


def _text(value: Any) -> Optional[str]:
    if value is None or value == "":
        return None
    return str(value)


def lookup_by_nric(*, clinic_id: UUID, value: str) -> Optional[PatientInfo]:
    """
    Patient details from the most recent exam recorded for this NRIC/FIN in
    the clinic. Returns None for an invalid identifier or an unknown patient.
    """
    if not nric.validate(value):
        return None

    submission = (
        MedicalSubmission.objects.filter(clinic_id=clinic_id, patient_nric=nric.normalize(value))
        .order_by(F("examination_date").desc(nulls_last=True), "-created_at")
        .only("patient_name", "patient_nric", "examination_date", "form_data")
        .first()
    )
    if submission is None:
        return None

    form = submission.form_data or {}
    return PatientInfo(
        nric=submission.patient_nric,
        name=submission.patient_name,
        gender=_text(form.get("gender")),
        last_height=_text(form.get("height")),
        last_weight=_text(form.get("weight")),
        last_exam_date=submission.examination_date,
        required_tests=RequiredTests(
            hiv=_flag(form.get("hiv_test_required", False)),
            chest_xray=_flag(form.get("chest_xray_required", False)),
        ),
    )
