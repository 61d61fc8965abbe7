# mx_core/iam/services/membership.py
from __future__ import annotations

from uuid import UUID

from mx_core.common.errors import Forbidden
from mx_core.iam.constants import UserRole, UserStatus
from mx_core.iam.models import ClinicMembership, UserProfile


def get_profile(user) -> UserProfile | None:
    if not user or not getattr(user, "is_authenticated", False):
        return None
    return UserProfile.objects.filter(user_id=user.id).select_related("clinic").first()


def list_user_clinics(user) -> list[dict]:
    """
    Clinic memberships for the /me response.

    Membership graph:
      auth_user -> UserProfile -> ClinicMembership -> Clinic
    An admin's home clinic (UserProfile.clinic) is listed even without a membership row.
    """
    profile = get_profile(user)
    if profile is None:
        return []

    qs = (
        ClinicMembership.objects.select_related("clinic")
        .filter(profile=profile, is_active=True)
        .order_by("-is_primary", "clinic__name")
    )

    items: list[dict] = []
    seen: set[UUID] = set()
    for m in qs:
        seen.add(m.clinic_id)
        items.append(
            {
                "clinic_id": str(m.clinic_id),
                "clinic_name": m.clinic.name,
                "hci_code": m.clinic.hci_code,
                "is_primary": bool(m.is_primary),
            }
        )

    if profile.clinic_id and profile.clinic_id not in seen:
        items.insert(
            0,
            {
                "clinic_id": str(profile.clinic_id),
                "clinic_name": profile.clinic.name,
                "hci_code": profile.clinic.hci_code,
                "is_primary": True,
            },
        )
    return items


def is_user_member_of_clinic(*, user, clinic_id: UUID) -> bool:
    """
    Validate user -> clinic access.
    This is the single source of truth used by scope enforcement.
    """
    if not user or not getattr(user, "is_authenticated", False):
        return False

    if getattr(user, "is_superuser", False):
        return True

    profile = get_profile(user)
    if profile is None or profile.status != UserStatus.ACTIVE:
        return False

    if profile.clinic_id == clinic_id:
        return True

    return ClinicMembership.objects.filter(profile=profile, clinic_id=clinic_id, is_active=True).exists()


def actor_for(user, clinic_id: UUID):
    """
    Build the lifecycle Actor for `user` acting inside `clinic_id`.
    Raises Forbidden when the user has no active role there.
    """
    from mx_core.common.permissions import user_role
    from mx_core.submissions.lifecycle import Actor

    role = user_role(user)
    if role is None:
        raise Forbidden("Your account has no active role.")

    if not is_user_member_of_clinic(user=user, clinic_id=clinic_id):
        raise Forbidden("You do not have access to the selected clinic.")

    return Actor(user_id=user.id, role=UserRole(role), clinic_id=clinic_id)
