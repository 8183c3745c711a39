import logging
import re
from typing import Optional

from django.contrib.auth import get_user_model
from django.db import IntegrityError, transaction
from django.db.models import Exists, OuterRef, Q
from django.utils import timezone
from rest_framework.exceptions import NotFound, ValidationError

from clinic.models import Appointment, Patient, Prescription
from clinic.permissions import is_admin
from clinic.services.audit import log_action

User = get_user_model()
logger = logging.getLogger(__name__)

CARETAG_PATTERN = re.compile(r'^CT-(\d{4})-(\d+)$')


def visible_patients(user):
    """Patients the user may read and chart against.

    Admins see everyone.  A doctor sees patients they are primary doctor
    for, or with whom they have at least one appointment or prescription.
    """
    qs = Patient.objects.all()
    if is_admin(user):
        return qs
    has_appointment = Appointment.objects.filter(patient=OuterRef('pk'), doctor=user)
    has_prescription = Prescription.objects.filter(patient=OuterRef('pk'), doctor=user)
    return qs.filter(Q(primary_doctor=user) | Exists(has_appointment) | Exists(has_prescription))


def get_visible_patient(user, patient_id) -> Patient:
    patient = visible_patients(user).filter(pk=patient_id).first()
    if patient is None:
        raise NotFound('Patient not found')
    return patient


def can_view_patient(user, patient_id) -> bool:
    return visible_patients(user).filter(pk=patient_id).exists()


def search_patients(qs, q: Optional[str]):
    """Case-insensitive match on name, CareTag ID, phone or email."""
    q = (q or '').strip()
    if not q:
        return qs
    return qs.filter(
        Q(full_name__icontains=q) | Q(caretag_id__icontains=q)
        | Q(phone__icontains=q) | Q(email__icontains=q)
    )


def find_by_caretag(user, caretag_id: str) -> Patient:
    tag = (caretag_id or '').strip().upper()
    if not tag:
        raise ValidationError({'caretag_id': 'CareTag ID is required'})
    patient = visible_patients(user).filter(caretag_id=tag).first()
    if patient is None:
        raise NotFound(f'No patient found with CareTag ID: {tag}')
    return patient


def next_caretag_id(year: Optional[int] = None) -> str:
    year = year or timezone.localdate().year
    prefix = f'CT-{year}-'
    highest = 0
    for tag in Patient.objects.filter(caretag_id__startswith=prefix).values_list('caretag_id', flat=True):
        m = CARETAG_PATTERN.match(tag)
        if m:
            highest = max(highest, int(m.group(2)))
    return f'{prefix}{highest + 1:04d}'


def create_patient(user, data: dict, request=None) -> Patient:
    data = dict(data)
    if not data.get('primary_doctor') and not is_admin(user):
        data['primary_doctor'] = user
    generated = not data.get('caretag_id')
    for _ in range(5):
        if generated:
            data['caretag_id'] = next_caretag_id()
        try:
            with transaction.atomic():
                patient = Patient.objects.create(**data)
            break
        except IntegrityError:
            if not generated:
                raise ValidationError({'caretag_id': 'A patient with this CareTag ID already exists'})
            logger.warning('caretag id %s collided, retrying', data['caretag_id'])
    else:
        raise ValidationError({'caretag_id': 'Could not allocate a CareTag ID'})
    log_action(user=user, action='CREATE', entity_type='patient', entity_id=patient.id,
               details={'caretag_id': patient.caretag_id, 'full_name': patient.full_name}, request=request)
    return patient
