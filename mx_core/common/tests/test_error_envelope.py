import json

import pytest
from django.contrib.auth.models import User
from django.test import RequestFactory
from rest_framework.exceptions import NotFound, ValidationError

from mx_core.common.api.exceptions import api_exception_handler
from mx_core.common.errors import AuditWriteError, Forbidden, InvalidArgument, InvalidState
from mx_core.common.middleware import ClinicScopeMiddleware


def _handle(exc):
    request = RequestFactory().get("/api/v1/submissions/")
    return api_exception_handler(exc, {"request": request})


@pytest.mark.django_db
def test_middleware_missing_scope_returns_error_envelope():
    rf = RequestFactory()
    req = rf.get("/api/v1/submissions/")

    req.user = User.objects.create_user(username="u1", password="pass123")

    mw = ClinicScopeMiddleware(get_response=lambda r: None)
    resp = mw.process_request(req)

    assert resp is not None
    assert resp.status_code == 400

    body = json.loads(resp.content.decode("utf-8"))
    assert body["error"]["code"] == "validation_error"
    assert "Missing scope header" in body["error"]["message"]
    assert body["error"]["request_id"]


@pytest.mark.parametrize(
    "exc, status_code, code",
    [
        (InvalidArgument("A rejection reason is required."), 400, "validation_error"),
        (InvalidState("Submission is not pending approval."), 409, "conflict"),
        (Forbidden("Only doctors can review submissions."), 403, "permission_denied"),
        (AuditWriteError("boom"), 500, "audit_write_failed"),
        (NotFound("Submission not found."), 404, "not_found"),
    ],
)
def test_domain_errors_map_to_envelope(exc, status_code, code):
    resp = _handle(exc)

    assert resp.status_code == status_code
    assert resp.data["error"]["code"] == code
    assert resp.data["error"]["request_id"]


def test_domain_error_message_is_kept():
    resp = _handle(InvalidState("cannot edit submitted submission"))
    assert resp.data["error"]["message"] == "cannot edit submitted submission"
    assert resp.data["error"]["details"] is None


def test_field_errors_go_to_details():
    resp = _handle(ValidationError({"patient_nric": ["Invalid NRIC/FIN."]}))

    assert resp.status_code == 400
    assert resp.data["error"]["message"] == "Request failed."
    assert resp.data["error"]["details"] == {"patient_nric": ["Invalid NRIC/FIN."]}


def test_unhandled_error_is_500_envelope():
    resp = _handle(KeyError("surprise"))

    assert resp.status_code == 500
    assert resp.data["error"]["code"] == "server_error"


@pytest.mark.django_db
def test_request_id_header_matches_envelope(nurse_client):
    r = nurse_client.get("/api/v1/submissions/")

    assert r.status_code == 400
    assert r["X-Request-Id"] == r.data["error"]["request_id"]
