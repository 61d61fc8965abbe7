# mx_core/submissions/admin.py
from __future__ import annotations

from django.contrib import admin

from mx_core.submissions.models import MedicalSubmission


@admin.register(MedicalSubmission)
class MedicalSubmissionAdmin(admin.ModelAdmin):
    """
    Read-only: status changes must go through SubmissionService so the
    audit log stays complete.
    """
    list_display = ("patient_name", "patient_nric", "exam_type", "status", "clinic", "created_by", "created_at")
    list_filter = ("status", "exam_type", "clinic")
    search_fields = ("patient_name", "patient_nric")
    readonly_fields = [f.name for f in MedicalSubmission._meta.fields]
    ordering = ("-created_at",)

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
