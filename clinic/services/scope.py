"""Per-role querysets: admins see every row, doctors their own."""
from clinic.models import (
    Appointment,
    EmergencyRecord,
    Invoice,
    LabResult,
    MedicalRecord,
    Prescription,
    PrescriptionTemplate,
    Referral,
    StaffSchedule,
    Vitals,
    WaitlistEntry,
)
from clinic.permissions import is_admin
from clinic.services.patients import visible_patients


def appointments_for(user):
    qs = Appointment.objects.select_related('patient', 'doctor')
    return qs if is_admin(user) else qs.filter(doctor=user)


def prescriptions_for(user):
    qs = Prescription.objects.select_related('patient', 'doctor')
    return qs if is_admin(user) else qs.filter(doctor=user)


def templates_for(user):
    return PrescriptionTemplate.objects.filter(doctor=user).order_by('-is_favorite', 'name')


def emergencies_for(user):
    qs = EmergencyRecord.objects.select_related('patient', 'doctor')
    return qs if is_admin(user) else qs.filter(patient__in=visible_patients(user))


def vitals_for(user):
    qs = Vitals.objects.select_related('patient')
    return qs if is_admin(user) else qs.filter(patient__in=visible_patients(user))


def records_for(user):
    qs = MedicalRecord.objects.select_related('patient', 'doctor')
    return qs if is_admin(user) else qs.filter(patient__in=visible_patients(user))


def labs_for(user):
    qs = LabResult.objects.select_related('patient')
    return qs if is_admin(user) else qs.filter(patient__in=visible_patients(user))


def invoices_for(user):
    qs = Invoice.objects.select_related('patient', 'doctor')
    return qs if is_admin(user) else qs.filter(doctor=user)


def referrals_for(user):
    qs = Referral.objects.select_related('patient', 'referring_doctor')
    return qs if is_admin(user) else qs.filter(referring_doctor=user)


def schedules_for(user):
    qs = StaffSchedule.objects.select_related('doctor')
    return qs if is_admin(user) else qs.filter(doctor=user)


def waitlist_for(user):
    qs = WaitlistEntry.objects.select_related('patient', 'doctor')
    return qs if is_admin(user) else qs.filter(doctor=user)
