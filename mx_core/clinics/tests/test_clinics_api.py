import pytest

from mx_core.iam.models import ClinicMembership
from mx_core.tests.helpers import client_for

pytestmark = pytest.mark.django_db


def test_admin_creates_and_lists_clinics(clinic_admin_client, clinic):
    r = clinic_admin_client.post(
        "/api/v1/clinics/",
        {"name": "Bedok Clinic", "hci_code": "BDK0003", "phone": "61234567"},
        format="json",
    )
    assert r.status_code == 201, r.data
    assert r.data["hci_code"] == "BDK0003"

    r = clinic_admin_client.get("/api/v1/clinics/")
    assert r.status_code == 200
    assert {c["name"] for c in r.data["results"]} == {"Bedok Clinic", "Raffles Family Clinic"}


def test_duplicate_hci_code_is_409(clinic_admin_client, clinic):
    r = clinic_admin_client.post("/api/v1/clinics/", {"name": "Dup", "hci_code": "RFC0001"}, format="json")
    assert r.status_code == 409
    assert r.data["error"]["code"] == "conflict"


def test_malformed_hci_code_is_400(clinic_admin_client):
    r = clinic_admin_client.post("/api/v1/clinics/", {"name": "Bad", "hci_code": "rfc1"}, format="json")
    assert r.status_code == 400
    assert "hci_code" in r.data["error"]["details"]


def test_nurse_cannot_manage_clinics(nurse_client):
    r = nurse_client.post("/api/v1/clinics/", {"name": "Nope"}, format="json")
    assert r.status_code == 403


def test_delete_clinic_with_users_is_409(clinic_admin_client, clinic):
    r = clinic_admin_client.delete(f"/api/v1/clinics/{clinic.id}/")
    assert r.status_code == 409


def test_patch_clinic(clinic_admin_client, clinic):
    r = clinic_admin_client.patch(f"/api/v1/clinics/{clinic.id}/", {"address": "1 Raffles Place"}, format="json")
    assert r.status_code == 200, r.data
    assert r.data["address"] == "1 Raffles Place"


def test_assign_doctor_and_list(clinic_admin_client, other_clinic, doctor):
    r = clinic_admin_client.post(
        f"/api/v1/clinics/{other_clinic.id}/doctors/",
        {"doctor_id": str(doctor.mx_profile.id)},
        format="json",
    )
    assert r.status_code == 201, r.data
    assert r.data["user_id"] == doctor.id
    assert ClinicMembership.objects.filter(clinic=other_clinic, profile__user=doctor, is_active=True).exists()

    r = clinic_admin_client.post(
        f"/api/v1/clinics/{other_clinic.id}/doctors/",
        {"doctor_id": str(doctor.mx_profile.id)},
        format="json",
    )
    assert r.status_code == 409

    r = clinic_admin_client.get(f"/api/v1/clinics/{other_clinic.id}/doctors/")
    assert r.status_code == 200
    assert [d["mcr_number"] for d in r.data] == ["M12345A"]


def test_nurse_lists_doctors_of_own_clinic_only(nurse, doctor, clinic, other_clinic, other_doctor):
    c = client_for(nurse)

    r = c.get(f"/api/v1/clinics/{clinic.id}/doctors/")
    assert r.status_code == 200
    assert [d["name"] for d in r.data] == ["Dr Lim"]

    r = c.get(f"/api/v1/clinics/{other_clinic.id}/doctors/")
    assert r.status_code == 403


def test_nurses_listing(clinic_admin_client, clinic, nurse):
    r = clinic_admin_client.get(f"/api/v1/clinics/{clinic.id}/nurses/")
    assert r.status_code == 200
    assert [n["email"] for n in r.data] == ["nurse@clinic.sg"]


def test_unknown_clinic_is_404(clinic_admin_client):
    r = clinic_admin_client.get("/api/v1/clinics/not-a-uuid/")
    assert r.status_code == 404
