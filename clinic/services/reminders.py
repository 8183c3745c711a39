import logging
from datetime import timedelta

from django.utils import timezone
from rest_framework.exceptions import NotFound, PermissionDenied

from clinic.models import Appointment
from clinic.permissions import is_admin
from clinic.services.audit import log_action

logger = logging.getLogger(__name__)


def format_reminder(appointment: Appointment) -> str:
    when = timezone.localtime(appointment.scheduled_at)
    date_str = f'{when:%A, %B} {when.day}, {when.year}'
    hour = when.hour % 12 or 12
    time_str = f'{hour}:{when:%M} {"AM" if when.hour < 12 else "PM"}'
    return (
        f'Hello {appointment.patient.full_name},\n\n'
        'This is a reminder for your upcoming appointment:\n\n'
        f'Date: {date_str}\n'
        f'Time: {time_str}\n'
        f'Reason: {appointment.reason or "General Consultation"}\n\n'
        'Please arrive 10 minutes early. If you need to reschedule, contact us as soon as possible.\n\n'
        '- CareTag Medical Team'
    )


def send_reminder(user, appointment_id, reminder_type: str = 'sms', request=None) -> dict:
    """Prepare the reminder text and record it in the audit log.

    Delivery over SMS or email is left to an outside provider; the audit
    row is the record that a reminder went out.
    """
    appointment = Appointment.objects.select_related('patient').filter(pk=appointment_id).first()
    if appointment is None:
        raise NotFound('Appointment not found')
    if not is_admin(user) and appointment.doctor_id != user.id:
        raise PermissionDenied('Forbidden - You can only send reminders for your own appointments')

    message = format_reminder(appointment)
    log_action(user=user, action='REMINDER_SENT', entity_type='appointment', entity_id=appointment.id,
               details={
                   'reminder_type': reminder_type,
                   'patient_name': appointment.patient.full_name,
                   'scheduled_at': appointment.scheduled_at.isoformat(),
                   'sent_by_role': user.role,
               }, request=request)
    logger.info('reminder (%s) prepared for appointment %s', reminder_type, appointment.id)
    return {
        'success': True,
        'message': 'Reminder processed successfully',
        'details': {
            'appointmentId': appointment.id,
            'patientName': appointment.patient.full_name,
            'scheduledAt': appointment.scheduled_at.isoformat(),
            'reminderType': reminder_type,
            'text': message,
        },
    }


def upcoming_for_reminders(qs, hours: int = 24):
    now = timezone.now()
    return qs.filter(
        status=Appointment.STATUS_SCHEDULED,
        scheduled_at__gte=now,
        scheduled_at__lte=now + timedelta(hours=hours),
    ).order_by('scheduled_at')
