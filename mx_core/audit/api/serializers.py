# mx_core/audit/api/serializers.py
from rest_framework import serializers

from mx_core.audit.models import AuditLog


class AuditLogSerializer(serializers.ModelSerializer):
    user_name = serializers.SerializerMethodField()

    class Meta:
        model = AuditLog
        fields = [
            "id",
            "clinic_id",
            "submission_id",
            "user_id",
            "user_name",
            "event_type",
            "changes",
            "timestamp",
        ]
        read_only_fields = fields

    def get_user_name(self, obj) -> str | None:
        profile = getattr(obj.user, "mx_profile", None)
        return profile.name if profile is not None else obj.user.get_username()
