import calendar
import logging
from datetime import date, timedelta
from typing import Optional

from django.db import transaction
from django.db.models import Q
from django.utils import timezone
from rest_framework.exceptions import ValidationError

from clinic.models import Prescription
from clinic.services.audit import log_action

logger = logging.getLogger(__name__)

RANGE_DAYS = {'week': 7, 'month': 30, 'quarter': 90}


def clean_medications(rows) -> list[dict]:
    """Drop rows without a medication name; at least one must remain."""
    meds = []
    for row in rows or []:
        name = (row.get('name') or '').strip()
        if not name:
            continue
        meds.append({
            'name': name,
            'dosage': (row.get('dosage') or '').strip(),
            'frequency': (row.get('frequency') or '').strip(),
            'duration': (row.get('duration') or '').strip(),
        })
    if not meds:
        raise ValidationError('Please add at least one medication')
    return meds


def add_months(start: date, months: int) -> date:
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    day = min(start.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def valid_until_for(months: int, today: Optional[date] = None) -> date:
    return add_months(today or timezone.localdate(), months)


def filter_prescriptions(qs, *, q: Optional[str] = None, status: Optional[str] = None, range_: Optional[str] = None):
    if q:
        qs = qs.filter(Q(patient__full_name__icontains=q) | Q(diagnosis__icontains=q))
    if status and status != 'all':
        qs = qs.filter(status=status)
    if range_ == 'today':
        start = timezone.localtime().replace(hour=0, minute=0, second=0, microsecond=0)
        qs = qs.filter(created_at__gte=start)
    elif range_ in RANGE_DAYS:
        qs = qs.filter(created_at__gte=timezone.now() - timedelta(days=RANGE_DAYS[range_]))
    return qs


@transaction.atomic
def create_prescription(doctor, data: dict, request=None) -> Prescription:
    data = dict(data)
    months = data.pop('valid_months', None) or 1
    if not data.get('valid_until'):
        data['valid_until'] = valid_until_for(months)
    data['status'] = Prescription.STATUS_ACTIVE
    rx = Prescription.objects.create(doctor=doctor, **data)
    log_action(user=doctor, action='CREATE', entity_type='prescription', entity_id=rx.id,
               details={'patient': rx.patient_id, 'medications': len(rx.medications)}, request=request)
    return rx


@transaction.atomic
def refill(rx: Prescription, user, next_reminder: Optional[date] = None, request=None) -> Prescription:
    rx = Prescription.objects.select_for_update().get(pk=rx.pk)
    if rx.status != Prescription.STATUS_ACTIVE:
        raise ValidationError('Only active prescriptions can be refilled')
    if rx.refill_count >= rx.max_refills:
        raise ValidationError('No refills remaining for this prescription')
    rx.refill_count += 1
    rx.last_refill_date = timezone.localdate()
    rx.next_refill_reminder = next_reminder
    rx.save(update_fields=['refill_count', 'last_refill_date', 'next_refill_reminder', 'updated_at'])
    log_action(user=user, action='REFILL', entity_type='prescription', entity_id=rx.id,
               details={'refill_count': rx.refill_count, 'max_refills': rx.max_refills}, request=request)
    logger.info('prescription %s refilled (%s/%s)', rx.id, rx.refill_count, rx.max_refills)
    return rx
