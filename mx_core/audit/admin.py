from django.contrib import admin

from mx_core.audit.models import AuditLog


@admin.register(AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
    list_display = ("event_type", "submission", "user", "clinic", "timestamp")
    list_filter = ("event_type", "clinic")
    search_fields = ("submission__id", "submission__patient_nric", "user__email")
    readonly_fields = ("id", "clinic", "submission", "user", "event_type", "changes", "timestamp")
    ordering = ("-timestamp",)

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
