import pytest
from django.core.exceptions import ValidationError as DjangoValidationError

from mx_core.clinics.models import Clinic
from mx_core.clinics.services import ClinicService, ClinicUpdate
from mx_core.common.api.exceptions import ConflictError

pytestmark = pytest.mark.django_db


def test_create_clinic_blank_identifiers_become_null():
    a = ClinicService.create(name="Clinic A", hci_code="", registration_number=" ")
    b = ClinicService.create(name="Clinic B")

    assert a.hci_code is None
    assert a.registration_number is None
    assert b.hci_code is None


def test_duplicate_hci_code_conflicts(clinic):
    with pytest.raises(ConflictError):
        ClinicService.create(name="Copycat", hci_code=clinic.hci_code)


def test_bad_hci_code_is_refused():
    with pytest.raises(DjangoValidationError):
        ClinicService.create(name="Bad", hci_code="abc")


def test_update_keeps_unspecified_fields(clinic):
    updated = ClinicService.update(clinic_id=clinic.id, patch=ClinicUpdate(phone="+65 6123 4567"))

    assert updated.phone == "+65 6123 4567"
    assert updated.name == "Raffles Family Clinic"
    assert updated.hci_code == "RFC0001"


def test_update_to_taken_registration_number_conflicts(clinic, other_clinic):
    ClinicService.update(clinic_id=other_clinic.id, patch=ClinicUpdate(registration_number="REG-1"))

    with pytest.raises(ConflictError):
        ClinicService.update(clinic_id=clinic.id, patch=ClinicUpdate(registration_number="REG-1"))


def test_remove_empty_clinic():
    c = ClinicService.create(name="Empty")
    ClinicService.remove(clinic_id=c.id)
    assert not Clinic.objects.filter(id=c.id).exists()


def test_remove_clinic_with_staff_conflicts(clinic, nurse):
    with pytest.raises(ConflictError):
        ClinicService.remove(clinic_id=clinic.id)
    assert Clinic.objects.filter(id=clinic.id).exists()
