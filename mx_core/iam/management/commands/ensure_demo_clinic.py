# mx_core/iam/management/commands/ensure_demo_clinic.py

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from django.db import transaction

from mx_core.clinics.models import Clinic
from mx_core.iam.constants import UserRole, UserStatus
from mx_core.iam.models import ClinicMembership, UserProfile

DEMO_CLINIC = {
    "name": "Demo Medical Clinic",
    "hci_code": "DEMO001",
    "registration_number": "REG-DEMO-001",
    "address": "1 Demo Street, Singapore 000001",
}

DEMO_USERS = [
    ("admin@demo.clinic", "Demo Admin", UserRole.ADMIN, None),
    ("doctor@demo.clinic", "Dr. Demo", UserRole.DOCTOR, "M00001A"),
    ("nurse@demo.clinic", "Nurse Demo", UserRole.NURSE, None),
]


class Command(BaseCommand):
    help = "Ensure a demo clinic with one admin, doctor and nurse exists (idempotent)."

    def add_arguments(self, parser):
        parser.add_argument("--password", default="password", help="Password set on newly created users.")

    @transaction.atomic
    def handle(self, *args, **options):
        clinic, clinic_created = Clinic.objects.get_or_create(
            hci_code=DEMO_CLINIC["hci_code"],
            defaults={k: v for k, v in DEMO_CLINIC.items() if k != "hci_code"},
        )

        User = get_user_model()
        created = 0
        for email, name, role, mcr in DEMO_USERS:
            user = User.objects.filter(username=email).first()
            if user is None:
                user = User.objects.create_user(username=email, email=email, password=options["password"])
                created += 1

            profile, _ = UserProfile.objects.get_or_create(
                user=user,
                defaults={
                    "name": name,
                    "role": role,
                    "status": UserStatus.ACTIVE,
                    "mcr_number": mcr,
                    "clinic": clinic,
                },
            )
            if role != UserRole.ADMIN:
                ClinicMembership.objects.get_or_create(
                    clinic=clinic,
                    profile=profile,
                    defaults={"is_primary": True, "is_active": True},
                )

        self.stdout.write(
            self.style.SUCCESS(
                f"Demo clinic ensured: {clinic.id} (new={clinic_created}). Newly created users: {created}"
            )
        )
