import pytest

from mx_core.submissions.documents import build_sections, mask_name, nric_label
from mx_core.tests.helpers import NRIC_M, scoped

pytestmark = pytest.mark.django_db


def _section(sections, title):
    return next((s for s in sections if s.title == title), None)


def _rows(section):
    return dict(section.rows)


def test_submitted_report_has_full_patient_and_declaration(make_submission, doctor):
    s = make_submission(doctor, form_data={"height": "170", "weight": "65", "remarks": "Fit for work."})

    sections = build_sections(s)

    patient = _rows(_section(sections, "Patient Information"))
    assert patient["Patient Name"] == "Siti Aminah"
    assert patient["FIN"] == s.patient_nric
    assert patient["Date of Birth"] == "17 May 1990"

    assert _rows(_section(sections, "Body Measurements"))["BMI"] == "22.5 (Normal)"
    assert _section(sections, "Remarks").paragraphs == ["Fit for work."]

    clinic = _rows(_section(sections, "Clinic and Doctor"))
    assert clinic["HCI Code"] == "RFC0001"
    assert clinic["HCI Name"] == "Raffles Family Clinic"
    assert clinic["Examining Doctor"] == "Dr Lim"
    assert clinic["MCR Number"] == "M12345A"

    declaration = _section(sections, "Declaration")
    assert "Controller" in declaration.paragraphs[1]
    assert _rows(declaration)["Prepared by"] == "Dr Lim"


def test_pending_report_masks_name_and_has_no_declaration(make_submission, nurse):
    s = make_submission(nurse, route_for_approval=True)

    sections = build_sections(s)

    assert _rows(_section(sections, "Patient Information"))["Patient Name"] == "S*** Aminah"
    assert _rows(_section(sections, "Report Information"))["Status"] == "Pending approval"
    assert _section(sections, "Declaration") is None
    assert _section(sections, "Remarks") is None


def test_ica_declaration_names_immigration(make_submission, doctor):
    s = make_submission(doctor, exam_type="PR_MEDICAL", patient_nric=NRIC_M)

    declaration = _section(build_sections(s), "Declaration")

    assert "Commissioner of Immigration" in declaration.paragraphs[1]
    assert len(declaration.paragraphs) == 3


def test_driving_exam_skips_body_measurements(make_submission, doctor):
    s = make_submission(doctor, exam_type="AGED_DRIVERS", form_data={"height": "170", "weight": "65"})

    sections = build_sections(s)

    assert _section(sections, "Body Measurements") is None
    assert "NRIC/FIN" in _rows(_section(sections, "Patient Information"))


@pytest.mark.parametrize(
    "name,expected",
    [("Maria", "M****"), ("Siti Aminah", "S*** Aminah"), ("Lee Ah Kow", "L*** A*** Kow"), ("", "")],
)
def test_mask_name(name, expected):
    assert mask_name(name) == expected


@pytest.mark.parametrize(
    "exam_type,label",
    [("SIX_MONTHLY_MDW", "FIN"), ("LTVP_MEDICAL", "FIN"), ("DRIVING_LICENCE_TP", "NRIC/FIN"), ("UNKNOWN", "NRIC")],
)
def test_nric_label(exam_type, label):
    assert nric_label(exam_type) == label


def test_pdf_download(doctor_client, clinic, make_submission, doctor):
    s = make_submission(doctor, form_data={"remarks": "Fit for work."})

    r = doctor_client.get(f"/api/v1/submissions/{s.id}/pdf/", **scoped(clinic))

    assert r.status_code == 200
    assert r["Content-Type"] == "application/pdf"
    assert r["Content-Disposition"] == f'attachment; filename="submission-{s.id}.pdf"'
    assert r.content.startswith(b"%PDF")


def test_pdf_of_pending_submission_for_creator(nurse_client, clinic, make_submission, nurse):
    s = make_submission(nurse, route_for_approval=True)

    r = nurse_client.get(f"/api/v1/submissions/{s.id}/pdf/", **scoped(clinic))

    assert r.status_code == 200
    assert r.content.startswith(b"%PDF")


def test_pdf_of_another_clinic_is_404(other_doctor_client, other_clinic, make_submission, doctor):
    s = make_submission(doctor)

    r = other_doctor_client.get(f"/api/v1/submissions/{s.id}/pdf/", **scoped(other_clinic))

    assert r.status_code == 404
    assert r.data["error"]["code"] == "not_found"


def test_pdf_unknown_submission_is_404(doctor_client, clinic):
    r = doctor_client.get("/api/v1/submissions/00000000-0000-0000-0000-000000000000/pdf/", **scoped(clinic))

    assert r.status_code == 404
