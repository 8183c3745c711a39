from __future__ import annotations

from datetime import datetime, time, timedelta

from django.utils import timezone
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated

from clinic.permissions import IsDoctorOrAdmin
from clinic.serializers.clinical import AppointmentListQuerySerializer, AppointmentSerializer
from clinic.services.dashboard import today_appointments
from clinic.services.notifications import notify_appointment
from clinic.services.reminders import upcoming_for_reminders
from clinic.services.scope import appointments_for
from clinic.views.common import audit, changed_fields, check_patient, get_or_404, ok


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsDoctorOrAdmin])
def appointments(request):
    if request.method == 'POST':
        s = AppointmentSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        check_patient(request, s.validated_data['patient'])
        apt = s.save(doctor=request.user)
        audit(request, 'CREATE', 'appointment', apt.id, patient=apt.patient_id,
              scheduled_at=apt.scheduled_at.isoformat())
        notify_appointment(apt)
        return ok(AppointmentSerializer(apt).data, status=201)

    q = AppointmentListQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    vd = q.validated_data
    qs = appointments_for(request.user)
    if vd.get('status') and vd['status'] != 'all':
        qs = qs.filter(status=vd['status'])
    if vd.get('date'):
        start = timezone.make_aware(datetime.combine(vd['date'], time.min))
        qs = qs.filter(scheduled_at__gte=start, scheduled_at__lt=start + timedelta(days=1))
    if vd.get('patient'):
        qs = qs.filter(patient_id=vd['patient'])
    return ok(AppointmentSerializer(qs.order_by('scheduled_at'), many=True).data)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, IsDoctorOrAdmin])
def appointment_detail(request, appointment_id: int):
    apt = get_or_404(appointments_for(request.user), appointment_id, 'Appointment not found')
    if request.method == 'GET':
        return ok(AppointmentSerializer(apt).data)

    if request.method == 'DELETE':
        audit(request, 'DELETE', 'appointment', apt.id, patient=apt.patient_id)
        apt.delete()
        return ok(None)

    s = AppointmentSerializer(apt, data=request.data, partial=request.method == 'PATCH')
    s.is_valid(raise_exception=True)
    if 'patient' in s.validated_data:
        check_patient(request, s.validated_data['patient'])
    apt = s.save()
    audit(request, 'UPDATE', 'appointment', apt.id, fields=changed_fields(s), status=apt.status)
    return ok(AppointmentSerializer(apt).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsDoctorOrAdmin])
def appointments_today(request):
    return ok(AppointmentSerializer(today_appointments(request.user), many=True).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsDoctorOrAdmin])
def upcoming_reminders(request):
    """Scheduled appointments in the next 24 hours, soonest first."""
    qs = upcoming_for_reminders(appointments_for(request.user))
    return ok(AppointmentSerializer(qs, many=True).data)
