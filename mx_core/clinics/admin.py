# mx_core/clinics/admin.py
from __future__ import annotations

from django.contrib import admin

from mx_core.clinics.models import Clinic


@admin.register(Clinic)
class ClinicAdmin(admin.ModelAdmin):
    list_display = ("name", "hci_code", "registration_number", "phone", "email", "updated_at")
    search_fields = ("name", "hci_code", "registration_number", "email")
    readonly_fields = ("id", "created_at", "updated_at")
    ordering = ("name",)
