import json
import uuid

import pytest
from django.contrib.auth.models import User
from django.test import RequestFactory

from mx_core.common.middleware import ClinicScopeMiddleware


def _mw():
    return ClinicScopeMiddleware(get_response=lambda r: None)


@pytest.mark.django_db
def test_middleware_invalid_scope_returns_error_envelope():
    req = RequestFactory().get("/api/v1/submissions/", HTTP_X_CLINIC_ID="not-a-uuid")
    req.user = User.objects.create_user(username="u2", password="pass123")

    resp = _mw().process_request(req)

    assert resp is not None
    assert resp.status_code == 400
    body = json.loads(resp.content.decode("utf-8"))
    assert body["error"]["code"] == "validation_error"
    assert "Invalid scope header" in body["error"]["message"]


@pytest.mark.django_db
def test_middleware_non_member_returns_403_envelope(monkeypatch):
    monkeypatch.setattr(
        "mx_core.iam.services.membership.is_user_member_of_clinic",
        lambda **kwargs: False,
        raising=True,
    )

    req = RequestFactory().get("/api/v1/submissions/", HTTP_X_CLINIC_ID=str(uuid.uuid4()))
    req.user = User.objects.create_user(username="u3", password="pass123")

    resp = _mw().process_request(req)

    assert resp is not None
    assert resp.status_code == 403
    body = json.loads(resp.content.decode("utf-8"))
    assert body["error"]["code"] == "permission_denied"
    assert "do not have access" in body["error"]["message"].lower()


@pytest.mark.django_db
def test_middleware_member_gets_scope_attached(clinic, nurse):
    req = RequestFactory().get("/api/v1/submissions/", HTTP_X_CLINIC_ID=str(clinic.id))
    req.user = nurse

    assert _mw().process_request(req) is None
    assert req.clinic_id == clinic.id
    assert req.scope.clinic_id == clinic.id


@pytest.mark.django_db
@pytest.mark.parametrize(
    "path",
    [
        "/api/v1/auth/login/",
        "/api/v1/me/",
        "/api/v1/clinics/",
        "/api/docs/",
        "/admin/",
    ],
)
def test_unscoped_paths_pass_without_header(path):
    req = RequestFactory().get(path)
    req.user = User.objects.create_user(username="u4", password="pass123")

    assert _mw().process_request(req) is None


def test_anonymous_requests_are_left_to_authentication():
    from django.contrib.auth.models import AnonymousUser

    req = RequestFactory().get("/api/v1/submissions/")
    req.user = AnonymousUser()

    assert _mw().process_request(req) is None
