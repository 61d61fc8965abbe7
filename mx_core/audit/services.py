# mx_core/audit/services.py
from __future__ import annotations

from typing import Any, Dict, Optional
from uuid import UUID

from mx_core.audit.models import AuditLog


class AuditService:
    """
    Central audit writer.

    Callers run inside their own transaction; a failure here must propagate so
    the state change it describes is rolled back with it.
    """

    @staticmethod
    def log(
        *,
        clinic_id: UUID,
        submission_id: UUID,
        user_id: int,
        event_type: str,
        changes: Optional[Dict[str, Any]] = None,
    ) -> AuditLog:
        return AuditLog.objects.create(
            clinic_id=clinic_id,
            submission_id=submission_id,
            user_id=user_id,
            event_type=event_type,
            changes=changes or {},
        )
