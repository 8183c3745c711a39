from datetime import timedelta

from django.utils import timezone

from clinic.models import Prescription
from clinic.services.patients import visible_patients
from clinic.services.scope import appointments_for, emergencies_for, prescriptions_for, vitals_for


def start_of_today():
    return timezone.localtime().replace(hour=0, minute=0, second=0, microsecond=0)


def dashboard_stats(user) -> dict:
    """Headline counters, computed against the database on every call."""
    return {
        'totalPatients': visible_patients(user).count(),
        'todayAppointments': appointments_for(user).filter(scheduled_at__gte=start_of_today()).count(),
        'activePrescriptions': prescriptions_for(user).filter(status=Prescription.STATUS_ACTIVE).count(),
        'activeEmergencies': emergencies_for(user).filter(resolved_at__isnull=True).count(),
    }


def recent_patients(user, limit=5):
    return visible_patients(user).order_by('-updated_at')[:limit]


def today_appointments(user):
    start = start_of_today()
    return appointments_for(user).filter(
        scheduled_at__gte=start, scheduled_at__lt=start + timedelta(days=1)
    ).order_by('scheduled_at')


def active_emergencies(user):
    return emergencies_for(user).filter(resolved_at__isnull=True).order_by('-created_at')


def recent_vitals(user, limit=10):
    return vitals_for(user).order_by('-recorded_at')[:limit]
