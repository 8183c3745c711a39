"""
Merged, newest-first history of everything charted against a patient.

Each event carries a prefixed id (``apt-``, ``rx-``, ``vital-``, ``em-``,
``rec-``) so ids from different tables never collide on the client.
"""
from __future__ import annotations

from clinic.models import Appointment, EmergencyRecord, MedicalRecord, Prescription, Vitals


def _appointment_event(apt):
    return {
        'id': f'apt-{apt.id}',
        'type': 'appointment',
        'title': apt.reason or 'General Consultation',
        'description': f'Status: {apt.status} | Duration: {apt.duration_minutes} mins',
        'date': apt.scheduled_at,
        'status': apt.status,
    }


def _prescription_event(rx):
    meds = rx.medications if isinstance(rx.medications, list) else []
    return {
        'id': f'rx-{rx.id}',
        'type': 'prescription',
        'title': rx.diagnosis or 'Prescription',
        'description': f'{len(meds)} medication(s) | Status: {rx.status}',
        'date': rx.created_at,
        'status': rx.status,
    }


def _vitals_event(v):
    readings = []
    if v.heart_rate:
        readings.append(f'HR: {v.heart_rate}')
    if v.blood_pressure_systolic:
        readings.append(f'BP: {v.blood_pressure_systolic}/{v.blood_pressure_diastolic}')
    if v.spo2:
        readings.append(f'SpO2: {v.spo2}%')
    return {
        'id': f'vital-{v.id}',
        'type': 'vitals',
        'title': 'Vital Signs Recorded',
        'description': ' | '.join(readings) or 'Vitals recorded',
        'date': v.recorded_at,
    }


def _emergency_event(em):
    return {
        'id': f'em-{em.id}',
        'type': 'emergency',
        'title': em.description,
        'description': em.outcome or 'Emergency event',
        'date': em.created_at,
        'severity': em.severity,
    }


def _record_event(rec):
    return {
        'id': f'rec-{rec.id}',
        'type': 'record',
        'title': rec.record_type,
        'description': rec.diagnosis or rec.notes or 'Medical record',
        'date': rec.created_at,
    }


def merge_events(*, appointments=(), prescriptions=(), vitals=(), emergencies=(), records=()) -> list[dict]:
    events = [_appointment_event(a) for a in appointments]
    events += [_prescription_event(rx) for rx in prescriptions]
    events += [_vitals_event(v) for v in vitals]
    events += [_emergency_event(e) for e in emergencies]
    events += [_record_event(r) for r in records]
    events.sort(key=lambda e: e['date'], reverse=True)
    return events


def patient_timeline(patient) -> list[dict]:
    return merge_events(
        appointments=Appointment.objects.filter(patient=patient),
        prescriptions=Prescription.objects.filter(patient=patient),
        vitals=Vitals.objects.filter(patient=patient),
        emergencies=EmergencyRecord.objects.filter(patient=patient),
        records=MedicalRecord.objects.filter(patient=patient),
    )
