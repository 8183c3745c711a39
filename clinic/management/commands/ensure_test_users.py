from django.contrib.auth.hashers import make_password
from django.core.management.base import BaseCommand

from clinic.models import Profile, User

TEST_SET = [
    ("doctor1", "doctor", "Dr. Asha Menon", "General Medicine"),
    ("doctor2", "doctor", "Dr. Rahul Verma", "Cardiology"),
    ("admin1", "admin", "Clinic Administrator", ""),
]


class Command(BaseCommand):
    help = "Ensure demo staff accounts exist with password=123456 (idempotent)."

    def add_arguments(self, parser):
        parser.add_argument("--password", default="123456")

    def handle(self, *args, **opts):
        password = make_password(opts["password"])
        for username, role, full_name, specialization in TEST_SET:
            u, created = User.objects.get_or_create(
                username=username,
                defaults={"role": role, "password": password, "is_active": True},
            )
            if not created:
                # reset password, role and active flag on every run
                u.password = password
                u.role = role
                u.is_active = True
                u.save(update_fields=["password", "role", "is_active"])
            Profile.objects.update_or_create(
                user=u,
                defaults={
                    "full_name": full_name,
                    "email": f"{username}@caretag.local",
                    "specialization": specialization,
                    "verification_status": "verified",
                },
            )
            self.stdout.write(self.style.SUCCESS(f"ok: {username} ({role})"))
        self.stdout.write(self.style.SUCCESS("All test users ensured."))
