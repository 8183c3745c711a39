"""
Population analytics over the caller's visible patients.

Demographics cover every visible patient; appointment, prescription and
emergency breakdowns cover rows created in the last 30 days.
"""
from __future__ import annotations

from collections import Counter
from datetime import date, timedelta
from typing import Iterable, Optional

from django.utils import timezone

from clinic.services.patients import visible_patients
from clinic.services.scope import appointments_for, emergencies_for, prescriptions_for

BLOOD_GROUPS = ('A+', 'A-', 'B+', 'B-', 'AB+', 'AB-', 'O+', 'O-')
AGE_GROUPS = (
    ('0-18', 0, 18),
    ('19-35', 19, 35),
    ('36-50', 36, 50),
    ('51-65', 51, 65),
    ('65+', 66, 150),
)


def age_on(dob: date, today: date) -> int:
    return int((today - dob).days // 365.25)


def gender_distribution(patients) -> dict:
    counts = {'male': 0, 'female': 0, 'other': 0}
    for p in patients:
        gender = (p.gender or '').lower()
        if gender in ('male', 'female'):
            counts[gender] += 1
        else:
            counts['other'] += 1
    return counts


def blood_group_distribution(patients) -> list[dict]:
    counts = Counter(p.blood_group for p in patients)
    return [{'group': g, 'count': counts.get(g, 0)} for g in BLOOD_GROUPS]


def age_groups(patients, today: date) -> list[dict]:
    groups = [{'label': label, 'min': lo, 'max': hi, 'count': 0} for label, lo, hi in AGE_GROUPS]
    for p in patients:
        age = age_on(p.date_of_birth, today)
        for g in groups:
            if g['min'] <= age <= g['max']:
                g['count'] += 1
                break
    return groups


def top_terms(lists: Iterable[list], limit: int = 8) -> list[dict]:
    counts: Counter = Counter()
    for items in lists:
        counts.update(items or [])
    return [{'name': name, 'count': n} for name, n in counts.most_common(limit)]


def daily_registrations(patients, today: date, days: int = 14) -> list[dict]:
    created = Counter(timezone.localtime(p.created_at).date() for p in patients)
    out = []
    for offset in range(days - 1, -1, -1):
        day = today - timedelta(days=offset)
        out.append({'date': f'{day:%b} {day.day}', 'count': created.get(day, 0)})
    return out


def build_analytics(user, today: Optional[date] = None) -> dict:
    today = today or timezone.localdate()
    since = timezone.now() - timedelta(days=30)
    patients = list(visible_patients(user).only(
        'id', 'gender', 'blood_group', 'chronic_conditions', 'allergies', 'created_at', 'date_of_birth'
    ))
    appointments = list(appointments_for(user).filter(created_at__gte=since).values_list('status', flat=True))
    prescriptions = prescriptions_for(user).filter(created_at__gte=since).count()
    severities = list(emergencies_for(user).filter(created_at__gte=since).values_list('severity', flat=True))
    apt_counts = Counter(appointments)
    sev_counts = Counter(severities)
    return {
        'totalPatients': len(patients),
        'totalAppointments': len(appointments),
        'totalPrescriptions': prescriptions,
        'totalEmergencies': len(severities),
        'genderDistribution': gender_distribution(patients),
        'bloodGroupDistribution': blood_group_distribution(patients),
        'ageGroups': age_groups(patients, today),
        'topConditions': top_terms(p.chronic_conditions for p in patients),
        'topAllergies': top_terms(p.allergies for p in patients),
        'dailyRegistrations': daily_registrations(patients, today),
        'appointmentStatus': {
            'scheduled': apt_counts.get('scheduled', 0),
            'completed': apt_counts.get('completed', 0),
            'cancelled': apt_counts.get('cancelled', 0),
            'noShow': apt_counts.get('no_show', 0),
        },
        'emergencySeverity': {s: sev_counts.get(s, 0) for s in ('low', 'medium', 'high', 'critical')},
        'patientsWithConditions': sum(1 for p in patients if p.chronic_conditions),
        'patientsWithAllergies': sum(1 for p in patients if p.allergies),
    }
