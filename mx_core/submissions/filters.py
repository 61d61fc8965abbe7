# mx_core/submissions/filters.py
import django_filters as df

from mx_core.common import nric
from mx_core.submissions.constants import ExamType, SubmissionStatus
from mx_core.submissions.models import MedicalSubmission


class SubmissionFilter(df.FilterSet):
    status = df.ChoiceFilter(choices=SubmissionStatus.choices)
    exam_type = df.ChoiceFilter(choices=ExamType.choices)
    patient_name = df.CharFilter(field_name="patient_name", lookup_expr="icontains")
    patient_nric = df.CharFilter(method="filter_patient_nric")
    from_date = df.DateFilter(field_name="created_at", lookup_expr="date__gte")
    to_date = df.DateFilter(field_name="created_at", lookup_expr="date__lte")

    class Meta:
        model = MedicalSubmission
        fields = ["status", "exam_type", "patient_name", "patient_nric", "from_date", "to_date"]

    def filter_patient_nric(self, queryset, name, value):
        return queryset.filter(patient_nric=nric.normalize(value))


class ExamTypeFilter(df.FilterSet):
    """Worklists (drafts, rejected, approvals) only narrow by exam type."""
    exam_type = df.ChoiceFilter(choices=ExamType.choices)

    class Meta:
        model = MedicalSubmission
        fields = ["exam_type"]
