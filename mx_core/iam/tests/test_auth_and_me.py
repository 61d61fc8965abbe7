import pytest
from rest_framework.test import APIClient

from mx_core.tests.helpers import PASSWORD, scoped

pytestmark = pytest.mark.django_db


def _login(email):
    c = APIClient()
    r = c.post("/api/v1/auth/login/", {"username": email, "password": PASSWORD}, format="json")
    assert r.status_code == 200, r.data
    return c, r


def test_login_sets_http_only_cookies(nurse):
    _, r = _login("nurse@clinic.sg")

    assert r.data == {"detail": "login ok"}
    assert r.cookies["mx_access"].value
    assert r.cookies["mx_refresh"].value
    assert r.cookies["mx_access"]["httponly"]


def test_login_with_wrong_password_is_refused(nurse):
    r = APIClient().post("/api/v1/auth/login/", {"username": "nurse@clinic.sg", "password": "nope"}, format="json")
    # no authenticator on the login view, so DRF answers 403 rather than 401
    assert r.status_code in (401, 403)
    assert "error" in r.data


def test_cookie_session_reaches_scoped_endpoint(nurse, clinic):
    c, _ = _login("nurse@clinic.sg")

    r = c.get("/api/v1/submissions/", **scoped(clinic))
    assert r.status_code == 200, r.data


def test_bearer_token_is_accepted(nurse, clinic):
    _, login = _login("nurse@clinic.sg")
    token = login.cookies["mx_access"].value

    c = APIClient()
    r = c.get("/api/v1/submissions/", HTTP_AUTHORIZATION=f"Bearer {token}", **scoped(clinic))
    assert r.status_code == 200, r.data


def test_token_user_outside_clinic_is_403(nurse, other_clinic):
    c, _ = _login("nurse@clinic.sg")

    r = c.get("/api/v1/submissions/", **scoped(other_clinic))
    assert r.status_code == 403
    assert r.data["error"]["code"] == "permission_denied"


def test_token_user_bad_scope_header_is_400(nurse):
    c, _ = _login("nurse@clinic.sg")

    r = c.get("/api/v1/submissions/", HTTP_X_CLINIC_ID="clinic-1")
    assert r.status_code == 400
    assert "valid UUID" in r.data["error"]["message"]


def test_anonymous_is_401():
    r = APIClient().get("/api/v1/me/")
    assert r.status_code == 401
    assert r.data["error"]["code"] == "not_authenticated"


def test_refresh_and_logout(nurse):
    c, _ = _login("nurse@clinic.sg")

    r = c.post("/api/v1/auth/refresh/")
    assert r.status_code == 200, r.data
    assert r.cookies["mx_access"].value

    r = c.post("/api/v1/auth/logout/")
    assert r.status_code == 200
    assert r.cookies["mx_access"].value == ""


def test_me_without_scope(nurse, clinic):
    c, _ = _login("nurse@clinic.sg")

    r = c.get("/api/v1/me/")
    assert r.status_code == 200, r.data
    assert r.data["user"]["role"] == "nurse"
    assert r.data["user"]["name"] == "Nurse Tan"
    assert r.data["active_clinic_id"] is None
    assert [m["clinic_id"] for m in r.data["memberships"]] == [str(clinic.id)]


def test_me_with_scope(nurse_client, clinic):
    r = nurse_client.get("/api/v1/me/", **scoped(clinic))
    assert r.status_code == 200
    assert r.data["active_clinic_id"] == str(clinic.id)


def test_me_with_foreign_scope_is_403(nurse_client, other_clinic):
    r = nurse_client.get("/api/v1/me/", **scoped(other_clinic))
    assert r.status_code == 403


def test_set_default_doctor_is_used_for_routing(nurse_client, clinic, nurse, doctor):
    r = nurse_client.put(
        "/api/v1/me/default-doctor/",
        {"doctor_id": str(doctor.mx_profile.id)},
        format="json",
        **scoped(clinic),
    )
    assert r.status_code == 200, r.data
    assert r.data["user"]["default_doctor_id"] == str(doctor.mx_profile.id)

    r = nurse_client.post(
        "/api/v1/submissions/",
        {
            "exam_type": "WORK_PERMIT",
            "patient_name": "Ahmad",
            "patient_nric": "S1234567D",
            "patient_dob": "1988-08-08",
            "route_for_approval": True,
        },
        format="json",
        **scoped(clinic),
    )
    assert r.status_code == 201, r.data
    assert r.data["assigned_doctor_id"] == doctor.id


def test_default_doctor_must_be_a_doctor_of_the_clinic(nurse_client, clinic, other_doctor):
    r = nurse_client.put(
        "/api/v1/me/default-doctor/",
        {"doctor_id": str(other_doctor.mx_profile.id)},
        format="json",
        **scoped(clinic),
    )
    assert r.status_code == 400
