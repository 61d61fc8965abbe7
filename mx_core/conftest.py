# mx_core/conftest.py
import datetime

import pytest

from mx_core.clinics.models import Clinic
from mx_core.iam.constants import UserRole
from mx_core.submissions.services import SubmissionInput, SubmissionService
from mx_core.tests.helpers import NRIC_S, actor_of, client_for, make_staff


@pytest.fixture
def clinic(db):
    return Clinic.objects.create(name="Raffles Family Clinic", hci_code="RFC0001")


@pytest.fixture
def other_clinic(db):
    return Clinic.objects.create(name="Tampines Medical Centre", hci_code="TMC0002")


@pytest.fixture
def nurse(clinic):
    return make_staff(email="nurse@clinic.sg", name="Nurse Tan", role=UserRole.NURSE, clinic=clinic)


@pytest.fixture
def doctor(clinic):
    return make_staff(
        email="doctor@clinic.sg", name="Dr Lim", role=UserRole.DOCTOR, clinic=clinic, mcr_number="M12345A"
    )


@pytest.fixture
def second_doctor(clinic):
    return make_staff(
        email="doctor2@clinic.sg", name="Dr Ong", role=UserRole.DOCTOR, clinic=clinic, mcr_number="M12346B"
    )


@pytest.fixture
def clinic_admin(clinic):
    return make_staff(email="admin@clinic.sg", name="Admin Goh", role=UserRole.ADMIN, clinic=clinic)


@pytest.fixture
def other_doctor(other_clinic):
    return make_staff(
        email="doctor@tampines.sg", name="Dr Chua", role=UserRole.DOCTOR, clinic=other_clinic, mcr_number="M99999Z"
    )


@pytest.fixture
def nurse_client(nurse):
    return client_for(nurse)


@pytest.fixture
def doctor_client(doctor):
    return client_for(doctor)


@pytest.fixture
def clinic_admin_client(clinic_admin):
    return client_for(clinic_admin)


@pytest.fixture
def other_doctor_client(other_doctor):
    return client_for(other_doctor)


@pytest.fixture
def make_submission(clinic):
    """
    Create a submission through the service, so it carries its "created" audit row.
    """

    def _make(
        user,
        *,
        route_for_approval=True,
        as_draft=False,
        exam_type="WORK_PERMIT",
        patient_nric=NRIC_S,
        patient_name="Siti Aminah",
        form_data=None,
        assigned_doctor_id=None,
        at_clinic=None,
    ):
        return SubmissionService.create(
            actor=actor_of(user, at_clinic or clinic),
            data=SubmissionInput(
                exam_type=exam_type,
                patient_name=patient_name,
                patient_nric=patient_nric,
                patient_dob=datetime.date(1990, 5, 17),
                examination_date=datetime.date(2024, 3, 1),
                form_data=form_data or {},
                assigned_doctor_id=assigned_doctor_id,
            ),
            route_for_approval=route_for_approval,
            as_draft=as_draft,
        )

    return _make
