# mx_core/submissions/documents.py
"""
Printable PDF report for one medical submission.

build_sections() turns a submission into plain (title, rows) blocks and
render_pdf() draws them on a reportlab canvas, one A4 page after another.
"""
from __future__ import annotations

import io
import logging
import textwrap
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Optional

from django.utils import timezone
from reportlab.lib.pagesizes import A4
from reportlab.lib.units import cm
from reportlab.pdfgen import canvas

from mx_core.submissions.constants import ExamType, SubmissionStatus
from mx_core.submissions.models import MedicalSubmission

logger = logging.getLogger(__name__)

BRAND = "goCheckUp"

MOM_EXAMS = {ExamType.SIX_MONTHLY_MDW, ExamType.SIX_MONTHLY_FMW, ExamType.WORK_PERMIT}
ICA_EXAMS = {ExamType.PR_MEDICAL, ExamType.STUDENT_PASS_MEDICAL, ExamType.LTVP_MEDICAL}
DRIVING_EXAMS = {
    ExamType.DRIVING_LICENCE_TP,
    ExamType.DRIVING_VOCATIONAL_TP_LTA,
    ExamType.VOCATIONAL_LICENCE_LTA,
    ExamType.AGED_DRIVERS,
}
# Only the MOM worker exams record body measurements
MEASURED_EXAMS = {ExamType.SIX_MONTHLY_MDW, ExamType.WORK_PERMIT}

DECLARATION = (
    "I am authorised by the clinic to submit the results and make the "
    "declarations in this form on its behalf.",
    "By submitting this form, I understand that the information given will be "
    "submitted to the {authority} or an authorised officer who may act on the "
    "information given by me. I further declare that the information provided "
    "by me is true to the best of my knowledge and belief.",
)
ICA_CONSENT = (
    "I have obtained the consent from the patient to submit the medical exam "
    "report to the Commissioner of Immigration."
)


@dataclass
class Section:
    title: str
    rows: list[tuple[str, str]] = field(default_factory=list)
    paragraphs: list[str] = field(default_factory=list)


def exam_title(exam_type: str) -> str:
    try:
        return ExamType(exam_type).label
    except ValueError:
        return exam_type


def mask_name(name: str) -> str:
    """Hide all but the initials of every name part except the last."""
    parts = (name or "").split()
    if not parts:
        return ""
    if len(parts) == 1:
        word = parts[0]
        return word[0] + "*" * max(len(word) - 1, 3)
    masked = [p[0] + "*" * max(len(p) - 1, 3) for p in parts[:-1]]
    return " ".join(masked + [parts[-1]])


def nric_label(exam_type: str) -> str:
    if exam_type in MOM_EXAMS or exam_type in ICA_EXAMS:
        return "FIN"
    if exam_type in DRIVING_EXAMS:
        return "NRIC/FIN"
    return "NRIC"


def format_date(value: Optional[date]) -> str:
    if value is None:
        return "-"
    return value.strftime("%d %b %Y")


def format_datetime(value: Optional[datetime]) -> str:
    if value is None:
        return "N/A"
    return timezone.localtime(value).strftime("%d %b %Y, %I:%M %p")


def _person(user) -> tuple[Optional[str], Optional[str]]:
    if user is None:
        return None, None
    profile = getattr(user, "mx_profile", None)
    if profile is None:
        return user.get_username(), None
    return profile.name or user.get_username(), profile.mcr_number


def _bmi(form: dict[str, Any]) -> Optional[tuple[float, str]]:
    try:
        height = float(form["height"]) / 100
        weight = float(form["weight"])
    except (KeyError, TypeError, ValueError):
        return None
    if height <= 0:
        return None

    bmi = weight / (height * height)
    if bmi < 18.5:
        category = "Underweight"
    elif bmi < 25:
        category = "Normal"
    elif bmi < 30:
        category = "Overweight"
    else:
        category = "Obese"
    return round(bmi, 1), category


def build_sections(submission: MedicalSubmission) -> list[Section]:
    form = submission.form_data or {}
    submitted = submission.status == SubmissionStatus.SUBMITTED

    sections = [
        Section(
            "Report Information",
            rows=[
                ("Reference Number", str(submission.id)),
                ("Submission Date & Time", format_datetime(submission.submitted_date)),
                ("Status", SubmissionStatus(submission.status).label),
            ],
        )
    ]

    # Full name only once the report has gone to the agency
    patient = Section(
        "Patient Information",
        rows=[
            ("Patient Name", submission.patient_name if submitted else mask_name(submission.patient_name)),
            (nric_label(submission.exam_type), submission.patient_nric),
            ("Date of Birth", format_date(submission.patient_dob)),
        ],
    )
    if submission.examination_date:
        patient.rows.append(("Examination Date", format_date(submission.examination_date)))
    sections.append(patient)

    if submission.exam_type in MEASURED_EXAMS:
        body = Section("Body Measurements")
        if form.get("height"):
            body.rows.append(("Height", f"{form['height']} cm"))
        if form.get("weight"):
            body.rows.append(("Weight", f"{form['weight']} kg"))
        bmi = _bmi(form)
        if bmi is not None:
            body.rows.append(("BMI", f"{bmi[0]} ({bmi[1]})"))
        if form.get("bloodPressure"):
            body.rows.append(("Blood Pressure", str(form["bloodPressure"])))
        if body.rows:
            sections.append(body)

    clinic = submission.clinic
    clinic_rows = [
        ("HCI Code", clinic.hci_code),
        ("HCI Name", clinic.name),
        ("Contact Number", clinic.phone),
    ]
    doctor_name, doctor_mcr = _person(submission.approved_by or submission.assigned_doctor)
    if doctor_name:
        clinic_rows.append(("Examining Doctor", doctor_name))
    if doctor_mcr:
        clinic_rows.append(("MCR Number", doctor_mcr))
    sections.append(Section("Clinic and Doctor", rows=[(k, v) for k, v in clinic_rows if v]))

    remarks = form.get("remarks")
    if remarks:
        sections.append(Section("Remarks", paragraphs=[str(remarks)]))

    if submitted:
        ica = submission.exam_type in ICA_EXAMS
        authority = "Commissioner of Immigration" if ica else "Controller"
        declaration = Section(
            "Declaration",
            paragraphs=[DECLARATION[0], DECLARATION[1].format(authority=authority)],
        )
        if ica:
            declaration.paragraphs.append(ICA_CONSENT)

        prepared_name, prepared_mcr = _person(submission.created_by)
        if prepared_name:
            declaration.rows.append(("Prepared by", prepared_name))
        if prepared_mcr:
            declaration.rows.append(("Prepared by (MCR)", prepared_mcr))
        declaration.rows.append(("Approved on", format_datetime(submission.approved_date)))
        sections.append(declaration)

    return sections


class _Pen:
    """Top-down cursor over a canvas that starts a new page when it runs out."""

    def __init__(self, c: canvas.Canvas):
        self.c = c
        self.width, self.height = A4
        self.page = 1
        self.y = self.height - 2 * cm

    def _footer(self) -> None:
        self.c.setFont("Helvetica-Oblique", 8)
        self.c.drawCentredString(self.width / 2, 1.2 * cm, f"Page {self.page}")

    def newline(self, step: float) -> None:
        self.y -= step
        if self.y < 2.2 * cm:
            self._footer()
            self.c.showPage()
            self.page += 1
            self.y = self.height - 2 * cm

    def text(self, x: float, value: str, *, font: str = "Helvetica", size: int = 10) -> None:
        self.c.setFont(font, size)
        self.c.drawString(x, self.y, value)

    def wrapped(self, x: float, value: str, *, max_chars: int = 95, size: int = 10) -> None:
        for raw in value.splitlines() or [""]:
            for line in textwrap.wrap(raw, max_chars) or [""]:
                self.text(x, line, size=size)
                self.newline(0.5 * cm)

    def finish(self) -> None:
        self._footer()
        self.c.showPage()


def render_pdf(submission: MedicalSubmission) -> bytes:
    buffer = io.BytesIO()
    c = canvas.Canvas(buffer, pagesize=A4)
    c.setTitle(f"submission-{submission.id}")
    pen = _Pen(c)

    pen.text(2 * cm, BRAND, font="Helvetica-Bold", size=16)
    pen.newline(1.2 * cm)
    c.setFont("Helvetica-Bold", 14)
    c.drawCentredString(pen.width / 2, pen.y, exam_title(submission.exam_type))
    pen.newline(1.0 * cm)

    for section in build_sections(submission):
        pen.text(2 * cm, section.title, font="Helvetica-Bold", size=12)
        pen.newline(0.7 * cm)
        for paragraph in section.paragraphs:
            pen.wrapped(2.2 * cm, paragraph, size=9)
        for label, value in section.rows:
            pen.text(2.2 * cm, label, font="Helvetica-Bold")
            pen.text(7.5 * cm, value)
            pen.newline(0.55 * cm)
        pen.newline(0.4 * cm)

    pen.finish()
    c.save()

    content = buffer.getvalue()
    logger.info("pdf rendered for submission %s (%s bytes, %s pages)", submission.id, len(content), pen.page)
    return content
