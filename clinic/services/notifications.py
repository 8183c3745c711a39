"""
Realtime pushes over the channel layer.

Message inserts go to the recipient's own group; clinical alerts
(emergencies, critical vitals, new appointments) go to the shared
``notifications`` group every signed-in staff member joins.
"""
import logging
from typing import Optional

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer

logger = logging.getLogger(__name__)

NOTIFICATIONS_GROUP = 'notifications'


def user_group(user_id) -> str:
    return f'messages.user.{user_id}'


def _send(group: str, event: dict) -> None:
    channel_layer = get_channel_layer()
    if channel_layer is None:
        return
    try:
        async_to_sync(channel_layer.group_send)(group, event)
    except Exception:
        # push failures are logged only
        logger.exception('channel layer push to %s failed', group)


def push_message(message) -> None:
    _send(user_group(message.recipient_id), {
        'type': 'message.new',
        'messageId': message.id,
        'senderId': message.sender_id,
        'recipientId': message.recipient_id,
        'subject': message.subject,
        'content': message.content,
        'createdAt': message.created_at.isoformat(),
    })


def critical_vitals(v) -> list[str]:
    """Human-readable list of out-of-range readings; empty when all normal."""
    findings = []
    if v.heart_rate and (v.heart_rate < 50 or v.heart_rate > 120):
        findings.append(f'HR {v.heart_rate} bpm')
    if v.spo2 and v.spo2 < 90:
        findings.append(f'SpO2 {v.spo2}%')
    if v.blood_pressure_systolic and (v.blood_pressure_systolic > 180 or v.blood_pressure_systolic < 90):
        findings.append(f'BP {v.blood_pressure_systolic}/{v.blood_pressure_diastolic}')
    return findings


def _alert(kind: str, title: str, message: str, patient) -> None:
    _send(NOTIFICATIONS_GROUP, {
        'type': 'clinic.alert',
        'kind': kind,
        'title': title,
        'message': message,
        'patientId': patient.id,
        'patientName': patient.full_name,
    })


def notify_emergency(record) -> None:
    _alert('emergency', 'Emergency Alert',
           f'{record.severity.upper()} severity emergency for {record.patient.full_name}', record.patient)


def notify_vitals(vitals) -> Optional[list[str]]:
    findings = critical_vitals(vitals)
    if findings:
        _alert('vital', 'Critical Vitals Alert',
               f"{vitals.patient.full_name}: Abnormal vital signs detected: {', '.join(findings)}", vitals.patient)
    return findings


def notify_appointment(appointment) -> None:
    _alert('appointment', 'New Appointment',
           f'Appointment scheduled with {appointment.patient.full_name}', appointment.patient)
